"""SQLite schema management (code-first approach)."""

import logging
from typing import Any

from stockpile.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "stock_items",
]


def _get_collection_schema(*, collection_name: str) -> dict[str, Any]:
    """Get the expected table definition for a collection."""
    schemas = {
        "stock_items": {
            "name": "stock_items",
            "fields": [
                ("id", "TEXT PRIMARY KEY"),
                ("user_id", "TEXT NOT NULL"),
                ("name", "TEXT NOT NULL"),
                ("category", "TEXT NOT NULL"),
                ("quantity", "INTEGER NOT NULL CHECK (quantity >= 1)"),
                ("expiry_date", "TEXT NOT NULL"),
                ("created_at", "TEXT NOT NULL"),
                ("updated_at", "TEXT NOT NULL"),
            ],
            "indexes": [
                "CREATE INDEX IF NOT EXISTS idx_stock_items_user ON stock_items (user_id)",
                "CREATE INDEX IF NOT EXISTS idx_stock_items_expiry ON stock_items (expiry_date)",
            ],
        },
    }
    return schemas[collection_name]


def _build_create_table(schema: dict[str, Any]) -> str:
    columns = ", ".join(f"{name} {definition}" for name, definition in schema["fields"])
    return f"CREATE TABLE IF NOT EXISTS {schema['name']} ({columns})"


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes that do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection_name in COLLECTIONS:
        schema = _get_collection_schema(collection_name=collection_name)
        await conn.execute(_build_create_table(schema))
        for index_sql in schema["indexes"]:
            await conn.execute(index_sql)
        logger.info("Ensured collection", extra={"collection": collection_name})

    await conn.commit()
    logger.info("Database schema initialized", extra={"collections": len(COLLECTIONS)})
