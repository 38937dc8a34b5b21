from stockpile.services import (
    inventory_service,
    item_store,
    notification_service,
    registration,
    session_store,
    validators,
)


__all__ = [
    "inventory_service",
    "item_store",
    "notification_service",
    "registration",
    "session_store",
    "validators",
]
