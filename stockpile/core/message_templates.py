"""Centralized message templates for LINE replies and notifications.

All user-facing strings are defined here so wording can be changed in one
place.
"""

WELCOME = """防災備蓄管理Botへようこそ！

このBotでは、防災備蓄用食品の賞味期限を管理できます。

📋 主な機能：
・食品の登録
・賞味期限の通知
・食品一覧の表示
・数量の管理

リッチメニューから操作を選択してください。"""

HELP = """【使い方】

📝 食品を登録する
リッチメニューの「登録」ボタンから、食品の情報を入力してください。

📋 一覧を見る
リッチメニューの「一覧」ボタンで、登録済みの食品を確認できます。

🔔 通知について
毎朝、賞味期限が近い食品を通知します。
（30日前、7日前、当日）"""

USE_MENU = "リッチメニューから操作を選択してください。"
UNKNOWN_ACTION = "不明な操作です。"

# Registration flow
REGISTER_START = "カテゴリを選択してください："
REGISTER_NAME = "食品名を入力してください："
REGISTER_QUANTITY = "数量を入力してください："
REGISTER_EXPIRY = "賞味期限を入力してください（例: 2026-12-31）："
REGISTER_SUCCESS = "食品を登録しました！"
REGISTER_CANCEL = "登録をキャンセルしました。"

# Errors
ERROR_INVALID_CATEGORY = "正しいカテゴリを選択してください。"
ERROR_INVALID_DATE = "日付の形式が正しくありません。YYYY-MM-DD形式で入力してください（例: 2026-12-31）"
ERROR_PAST_DATE = "賞味期限は今日以降の日付を入力してください。"
ERROR_INVALID_QUANTITY = "数量は1から9999までの整数を入力してください。"
ERROR_EMPTY_NAME = "食品名を入力してください。"
ERROR_NAME_TOO_LONG = "食品名は100文字以内で入力してください。"
ERROR_GENERAL = "一時的なエラーが発生しました。しばらくしてから再度お試しください。"

# Stock list
LIST_EMPTY = "登録されている食品はありません。"
LIST_TITLE = "📋 備蓄食品一覧"
ITEM_NOT_FOUND = "食品が見つかりませんでした。"

# Consumption
UPDATE_SUCCESS = "数量を更新しました。"
UPDATE_DELETED = "在庫が0になったため、食品を削除しました。"

# Deletion
DELETE_SUCCESS = "食品を削除しました。"
DELETE_CANCEL = "削除をキャンセルしました。"

# Button labels
BUTTON_YES = "✅ はい"
BUTTON_NO = "❌ いいえ"
BUTTON_CONSUME = "消費"
BUTTON_DELETE = "削除"
BUTTON_SHOW_LIST = "📋 一覧を見る"

_VALIDATION_ERRORS = {
    "invalid_category": ERROR_INVALID_CATEGORY,
    "empty_name": ERROR_EMPTY_NAME,
    "name_too_long": ERROR_NAME_TOO_LONG,
    "invalid_quantity": ERROR_INVALID_QUANTITY,
    "invalid_date_format": ERROR_INVALID_DATE,
    "past_date": ERROR_PAST_DATE,
}


def validation_error(kind: str) -> str:
    return _VALIDATION_ERRORS.get(kind, ERROR_GENERAL)


def registration_confirm(*, name: str, category_label: str, quantity: int, expiry: str) -> str:
    return f"""以下の内容で登録しますか？

食品名: {name}
カテゴリ: {category_label}
数量: {quantity}個
賞味期限: {expiry}"""


def delete_confirm(*, name: str) -> str:
    return f"「{name}」を削除しますか？"


def quantity_label(quantity: int) -> str:
    return f"{quantity}個"


def expiry_notification_header(offset_days: int) -> str:
    """Build the header line of an expiry notification.

    Args:
        offset_days: Days remaining until expiry (0 means today)

    Returns:
        Header text for the notification bubble
    """
    if offset_days == 0:
        return "⚠️ 本日が賞味期限です"
    return f"🔔 賞味期限{offset_days}日前の食品"


def expiry_notification_alt_text(*, offset_days: int, item_count: int) -> str:
    return f"{expiry_notification_header(offset_days)}: {item_count}件"
