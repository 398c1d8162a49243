"""Read table and column metadata into a SchemaSnapshot."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError

from ntier_scaffold.core.errors import SchemaConnectionError, SchemaQueryError
from ntier_scaffold.generators.ntier_gen.types import (
    ColumnDescriptor,
    SchemaSnapshot,
    TableDescriptor,
)

log = logging.getLogger(__name__)

# IsIdentity stands in for the primary key
METADATA_QUERY = """
SELECT
    TABLE_NAME,
    COLUMN_NAME,
    DATA_TYPE,
    IS_NULLABLE,
    ORDINAL_POSITION,
    COLUMNPROPERTY(object_id(TABLE_NAME), COLUMN_NAME, 'IsIdentity') AS IS_PRIMARY_KEY
FROM
    INFORMATION_SCHEMA.COLUMNS
ORDER BY
    TABLE_NAME,
    ORDINAL_POSITION
"""

REQUIRED_KEYS = ("TABLE_NAME", "COLUMN_NAME", "DATA_TYPE", "IS_NULLABLE", "IS_PRIMARY_KEY")


def read_schema(settings=None, engine: Optional[Engine] = None) -> SchemaSnapshot:
    """
    Run the metadata query and fold the result into a snapshot.

    Args:
        settings: Settings providing ``sqlalchemy_url()``; ignored if engine is given
        engine: Pre-built engine (tests, or callers managing their own pool)

    Returns:
        SchemaSnapshot of every table visible to the connection

    Raises:
        SchemaConnectionError: if the database cannot be reached
        SchemaQueryError: if the query fails or returns nothing usable
    """
    owns_engine = engine is None
    if owns_engine:
        if settings is None:
            raise ValueError("read_schema needs settings or an engine")
        try:
            engine = create_engine(settings.sqlalchemy_url())
        except (SQLAlchemyError, ImportError) as e:
            raise SchemaConnectionError(f"Cannot create database engine: {e}") from e

    try:
        try:
            conn = engine.connect()
        except (OperationalError, InterfaceError) as e:
            raise SchemaConnectionError(f"Cannot connect to database: {e}") from e

        with conn:
            try:
                result = conn.execute(text(METADATA_QUERY))
                rows = [dict(row) for row in result.mappings()]
            except SQLAlchemyError as e:
                raise SchemaQueryError(f"Metadata query failed: {e}") from e
    finally:
        if owns_engine:
            engine.dispose()

    log.info("Fetched %d column rows", len(rows))
    return fold_rows(rows)


def fold_rows(rows: Iterable[Mapping[str, Any]]) -> SchemaSnapshot:
    """Group flat INFORMATION_SCHEMA rows into tables, preserving column order."""
    rows = list(rows)
    if not rows:
        raise SchemaQueryError("Metadata query returned no columns")

    for row in rows:
        missing = [k for k in REQUIRED_KEYS if k not in row]
        if missing:
            raise SchemaQueryError(f"Metadata row is missing {', '.join(missing)}: {row!r}")

    # Arrival order is the fallback when ORDINAL_POSITION is not selected
    indexed = list(enumerate(rows))
    indexed.sort(key=lambda item: (
        str(item[1]["TABLE_NAME"]),
        _ordinal(item[1], item[0]),
        item[0],
    ))

    grouped: Dict[str, List[Mapping[str, Any]]] = {}
    for _, row in indexed:
        grouped.setdefault(str(row["TABLE_NAME"]), []).append(row)

    tables = {}
    for table_name, table_rows in grouped.items():
        tables[table_name] = _build_table(table_name, table_rows)
    return SchemaSnapshot(tables=tables)


def _ordinal(row: Mapping[str, Any], fallback: int) -> int:
    value = row.get("ORDINAL_POSITION")
    if value is None:
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SchemaQueryError(f"Invalid ORDINAL_POSITION {value!r}") from e


def _build_table(table_name: str, rows: List[Mapping[str, Any]]) -> TableDescriptor:
    columns = []
    has_key = False
    for position, row in enumerate(rows, start=1):
        is_key = bool(row["IS_PRIMARY_KEY"])
        if is_key and has_key:
            log.warning(
                "Multiple identity columns; keeping the first, ignoring %s",
                row["COLUMN_NAME"],
                extra={"table": table_name},
            )
            is_key = False
        has_key = has_key or is_key
        columns.append(ColumnDescriptor(
            name=str(row["COLUMN_NAME"]),
            source_type=str(row["DATA_TYPE"]),
            nullable=str(row["IS_NULLABLE"]).strip().upper() == "YES",
            is_primary_key=is_key,
            ordinal_position=_ordinal(row, position),
        ))
    return TableDescriptor(name=table_name, columns=tuple(columns))
