"""SQL Server to C# type mapping."""
import logging
from dataclasses import dataclass
from typing import Dict

log = logging.getLogger(__name__)

FALLBACK_TYPE = "object"
STRING_INITIALIZER = "= null!;"

TYPE_MAP: Dict[str, str] = {
    "int": "int",
    "tinyint": "byte",
    "decimal": "decimal",
    "varchar": "string",
    "nvarchar": "string",
    "char": "string",
    "bit": "bool",
    "datetime": "DateTime",
    "smalldatetime": "DateTime",
    "date": "DateTime",
}


@dataclass(frozen=True)
class TargetType:
    """C# rendering of one column."""
    type_name: str
    initializer: str
    requires_validation: bool

    @property
    def base_type(self) -> str:
        return self.type_name.rstrip("?")

    @property
    def nullable(self) -> bool:
        return self.type_name.endswith("?")


def map_type(source_type: str, nullable: bool, is_primary_key: bool = False) -> TargetType:
    """Map a SQL data type and its nullability to a C# property type.

    Unrecognized types map to ``object``.
    """
    key = (source_type or "").strip().lower()
    base = TYPE_MAP.get(key)
    if base is None:
        log.debug("Unmapped SQL type %r, falling back to %s", source_type, FALLBACK_TYPE)
        base = FALLBACK_TYPE

    type_name = f"{base}?" if nullable else base
    initializer = STRING_INITIALIZER if type_name == "string" else ""
    return TargetType(
        type_name=type_name,
        initializer=initializer,
        requires_validation=not nullable and not is_primary_key,
    )


def map_column(column) -> TargetType:
    """Shortcut for ``map_type`` on a ``ColumnDescriptor``."""
    return map_type(column.source_type, column.nullable, column.is_primary_key)
