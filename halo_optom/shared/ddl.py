"""
Idempotent DDL helpers for migrations

PostgreSQL gets native enum types; other dialects (SQLite in tests) fall back to
VARCHAR columns.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)


def is_postgres(conn: Connection) -> bool:
    return conn.dialect.name == "postgresql"


def table_exists(conn: Connection, table: str) -> bool:
    return inspect(conn).has_table(table)


def column_names(conn: Connection, table: str) -> set[str]:
    if not table_exists(conn, table):
        return set()
    return {c["name"] for c in inspect(conn).get_columns(table)}


def enum_exists(conn: Connection, name: str) -> bool:
    if not is_postgres(conn):
        return False
    row = conn.execute(text("SELECT 1 FROM pg_type WHERE typname = :name"), {"name": name}).first()
    return row is not None


def enum_type(conn: Connection, name: str, values: Iterable[str], fallback: str = "VARCHAR(30)") -> str:
    """Create the enum on PostgreSQL when missing and return the column type to use"""
    if not is_postgres(conn):
        return fallback
    labels = ", ".join(f"'{v}'" for v in values)
    conn.execute(
        text(
            f"""
            DO $$ BEGIN
                CREATE TYPE "{name}" AS ENUM ({labels});
            EXCEPTION
                WHEN duplicate_object THEN null;
            END $$;
            """
        )
    )
    return f'"{name}"'


def drop_enum(conn: Connection, name: str) -> None:
    if is_postgres(conn):
        conn.execute(text(f'DROP TYPE IF EXISTS "{name}"'))


def add_column(conn: Connection, table: str, column: str, ddl: str) -> bool:
    """ALTER TABLE ... ADD COLUMN unless the column is already there"""
    if column in column_names(conn, table):
        logger.info(f"ℹ️  {table}.{column} already exists")
        return False
    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
    logger.info(f"✅ Added {table}.{column}")
    return True


def drop_column(conn: Connection, table: str, column: str) -> bool:
    if column not in column_names(conn, table):
        return False
    conn.execute(text(f"ALTER TABLE {table} DROP COLUMN {column}"))
    return True


def widen_enum(
    conn: Connection, table: str, column: str, name: str, values: Iterable[str], default: Optional[str] = None
):
    """
    Replace a PostgreSQL enum with one holding `values`.

    The type is renamed, recreated and the column cast through text; the column
    default is dropped around the cast. No-op on other dialects or when the type
    does not exist.
    """
    if not enum_exists(conn, name):
        return
    labels = ", ".join(f"'{v}'" for v in values)
    conn.execute(text(f'ALTER TABLE "{table}" ALTER COLUMN "{column}" DROP DEFAULT'))
    conn.execute(text(f'ALTER TYPE "{name}" RENAME TO "{name}_old"'))
    conn.execute(text(f'CREATE TYPE "{name}" AS ENUM ({labels})'))
    conn.execute(
        text(f'ALTER TABLE "{table}" ALTER COLUMN "{column}" TYPE "{name}" USING "{column}"::text::"{name}"')
    )
    conn.execute(text(f'DROP TYPE "{name}_old"'))
    if default:
        conn.execute(text(f"""ALTER TABLE "{table}" ALTER COLUMN "{column}" SET DEFAULT '{default}'"""))
    logger.info(f"✅ Enum {name} now holds: {labels}")
