"""Builders for LINE message objects (text, quick reply, confirm template, flex)."""

from datetime import date
from typing import Any

from stockpile.core import dates, message_templates
from stockpile.core.config import Constants
from stockpile.domain import postback
from stockpile.domain.postback import PostbackActionType
from stockpile.domain.stock import CATEGORY_LABELS, CATEGORY_ORDER, Category, StockItem


Message = dict[str, Any]

COLOR_TEXT = "#111111"
COLOR_MUTED = "#666666"
COLOR_EXPIRED = "#FF0000"
COLOR_NEAR_EXPIRY = "#FF6B00"
COLOR_LIST_HEADER = "#3B82F6"
COLOR_ITEM_BACKGROUND = "#F7F7F7"
COLOR_NOTIFY_TODAY = "#EF4444"
COLOR_NOTIFY_UPCOMING = "#F59E0B"
COLOR_HEADER_TEXT = "#FFFFFF"


def text_message(text: str) -> Message:
    return {"type": "text", "text": text}


def _message_quick_reply(text: str, options: list[tuple[str, str]]) -> Message:
    """Text message with quick reply buttons that send (label, text) back as a message."""
    return {
        "type": "text",
        "text": text,
        "quickReply": {
            "items": [
                {"type": "action", "action": {"type": "message", "label": label, "text": value}}
                for label, value in options
            ]
        },
    }


def category_quick_reply() -> Message:
    options = [(CATEGORY_LABELS[category], category.value) for category in CATEGORY_ORDER]
    return _message_quick_reply(message_templates.REGISTER_START, options)


def quantity_quick_reply() -> Message:
    options = [(message_templates.quantity_label(q), str(q)) for q in Constants.QUANTITY_CHOICES]
    return _message_quick_reply(message_templates.REGISTER_QUANTITY, options)


def confirm_template(text: str, *, confirm_data: str, cancel_data: str) -> Message:
    """Two-button confirm template posting confirm_data / cancel_data."""
    return {
        "type": "template",
        "altText": text,
        "template": {
            "type": "confirm",
            "text": text,
            "actions": [
                {"type": "postback", "label": message_templates.BUTTON_YES, "data": confirm_data},
                {"type": "postback", "label": message_templates.BUTTON_NO, "data": cancel_data},
            ],
        },
    }


def registration_confirm(*, name: str, category: Category, quantity: int, expiry_date: date) -> Message:
    text = message_templates.registration_confirm(
        name=name,
        category_label=CATEGORY_LABELS[category],
        quantity=quantity,
        expiry=dates.format_date_japanese(expiry_date),
    )
    return confirm_template(
        text,
        confirm_data=postback.menu(PostbackActionType.CONFIRM),
        cancel_data=postback.menu(PostbackActionType.CANCEL),
    )


def delete_confirm(item: StockItem) -> Message:
    return confirm_template(
        message_templates.delete_confirm(name=item.name),
        confirm_data=postback.for_item(PostbackActionType.CONFIRM_DELETE, item.id),
        cancel_data=postback.for_item(PostbackActionType.CANCEL_DELETE, item.id),
    )


def _expiry_color(days_remaining: int) -> str:
    if days_remaining < 0:
        return COLOR_EXPIRED
    if days_remaining <= Constants.NEAR_EXPIRY_WARNING_DAYS:
        return COLOR_NEAR_EXPIRY
    return COLOR_TEXT


def _postback_button(label: str, data: str, *, style: str) -> dict[str, Any]:
    return {
        "type": "button",
        "action": {"type": "postback", "label": label, "data": data},
        "style": style,
        "height": "sm",
        "flex": 1,
    }


def _name_quantity_row(item: StockItem, *, weight: str | None = None, size: str = "sm") -> dict[str, Any]:
    name: dict[str, Any] = {"type": "text", "text": item.name, "size": size, "flex": 2, "wrap": True}
    if weight:
        name["weight"] = weight
    return {
        "type": "box",
        "layout": "horizontal",
        "contents": [
            name,
            {
                "type": "text",
                "text": message_templates.quantity_label(item.quantity),
                "size": "sm",
                "color": COLOR_MUTED,
                "flex": 1,
                "align": "end",
            },
        ],
    }


def _stock_item_box(item: StockItem, *, today: date) -> dict[str, Any]:
    days_remaining = dates.days_until_expiry(item.expiry_date, reference=today)
    color = _expiry_color(days_remaining)
    return {
        "type": "box",
        "layout": "vertical",
        "contents": [
            _name_quantity_row(item, weight="bold", size="md"),
            {
                "type": "box",
                "layout": "horizontal",
                "contents": [
                    {
                        "type": "text",
                        "text": dates.format_date_japanese(item.expiry_date),
                        "size": "sm",
                        "color": color,
                        "flex": 2,
                    },
                    {
                        "type": "text",
                        "text": dates.format_days_remaining(days_remaining),
                        "size": "sm",
                        "color": color,
                        "flex": 1,
                        "align": "end",
                        "weight": "bold",
                    },
                ],
            },
            {
                "type": "box",
                "layout": "horizontal",
                "contents": [
                    _postback_button(
                        message_templates.BUTTON_CONSUME,
                        postback.for_item(PostbackActionType.CONSUME, item.id),
                        style="primary",
                    ),
                    _postback_button(
                        message_templates.BUTTON_DELETE,
                        postback.for_item(PostbackActionType.DELETE, item.id),
                        style="secondary",
                    ),
                ],
                "spacing": "sm",
                "margin": "md",
            },
        ],
        "spacing": "sm",
        "margin": "lg",
        "paddingAll": "12px",
        "backgroundColor": COLOR_ITEM_BACKGROUND,
        "cornerRadius": "8px",
    }


def _header(text: str, background: str) -> dict[str, Any]:
    return {
        "type": "box",
        "layout": "vertical",
        "contents": [{"type": "text", "text": text, "weight": "bold", "size": "lg", "color": COLOR_HEADER_TEXT}],
        "backgroundColor": background,
        "paddingAll": "12px",
    }


def stock_list(grouped: dict[Category, list[StockItem]], *, today: date | None = None) -> Message:
    """Flex carousel with one bubble per non-empty category.

    An empty inventory renders a single bubble with the "no items" text.
    """
    if not any(grouped.values()):
        return {
            "type": "flex",
            "altText": message_templates.LIST_TITLE,
            "contents": {
                "type": "bubble",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "contents": [
                        {"type": "text", "text": message_templates.LIST_EMPTY, "wrap": True, "color": COLOR_MUTED}
                    ],
                },
            },
        }

    reference = today or dates.today()
    bubbles = [
        {
            "type": "bubble",
            "header": _header(CATEGORY_LABELS[category], COLOR_LIST_HEADER),
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": [_stock_item_box(item, today=reference) for item in items],
                "spacing": "md",
            },
        }
        for category, items in grouped.items()
        if items
    ]
    return {
        "type": "flex",
        "altText": message_templates.LIST_TITLE,
        "contents": {"type": "carousel", "contents": bubbles},
    }


def expiry_notification(items: list[StockItem], *, offset_days: int) -> Message:
    """Flex bubble listing one user's items that expire in offset_days days."""
    background = COLOR_NOTIFY_TODAY if offset_days == 0 else COLOR_NOTIFY_UPCOMING
    return {
        "type": "flex",
        "altText": message_templates.expiry_notification_alt_text(offset_days=offset_days, item_count=len(items)),
        "contents": {
            "type": "bubble",
            "header": _header(message_templates.expiry_notification_header(offset_days), background),
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": [{**_name_quantity_row(item), "spacing": "sm"} for item in items],
                "spacing": "md",
            },
            "footer": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "button",
                        "action": {
                            "type": "postback",
                            "label": message_templates.BUTTON_SHOW_LIST,
                            "data": postback.menu(PostbackActionType.LIST),
                        },
                        "style": "primary",
                        "height": "sm",
                    }
                ],
            },
        },
    }
