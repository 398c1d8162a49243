"""Dataclasses for N-tier generation."""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ntier_scaffold.core.errors import MissingPrimaryKeyWarning


class Layer(str, Enum):
    ENTITY = "entity"
    ABSTRACT_DAL = "abstract_dal"
    CONCRETE_DAL = "concrete_dal"
    ABSTRACT_SERVICE = "abstract_service"
    MANAGER = "manager"
    CONTROLLER = "controller"
    MODELS = "models"
    COMPOSITION = "composition"

    def __str__(self) -> str:
        return self.value


# Layers that render per-table files, in generation order.
FILE_LAYERS: Tuple[Layer, ...] = (
    Layer.ENTITY,
    Layer.ABSTRACT_DAL,
    Layer.CONCRETE_DAL,
    Layer.ABSTRACT_SERVICE,
    Layer.MANAGER,
    Layer.CONTROLLER,
    Layer.MODELS,
)

ALL_LAYERS: Tuple[Layer, ...] = FILE_LAYERS + (Layer.COMPOSITION,)


class WritePolicy(str, Enum):
    ALWAYS_OVERWRITE = "always_overwrite"
    CREATE_IF_ABSENT = "create_if_absent"


class WriteOutcome(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ColumnDescriptor:
    """One physical column, as read from INFORMATION_SCHEMA."""
    name: str
    source_type: str
    nullable: bool
    is_primary_key: bool
    ordinal_position: int


@dataclass(frozen=True)
class TableDescriptor:
    """A table and its columns in ordinal order."""
    name: str
    columns: Tuple[ColumnDescriptor, ...]

    @property
    def primary_key(self) -> Optional[ColumnDescriptor]:
        for column in self.columns:
            if column.is_primary_key:
                return column
        return None


@dataclass(frozen=True)
class SchemaSnapshot:
    """All tables discovered in one run, keyed by table name."""
    tables: Mapping[str, TableDescriptor]

    def __post_init__(self):
        # Freeze the mapping so emitters can only read it
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    def __iter__(self):
        return iter(self.tables.values())

    def __len__(self) -> int:
        return len(self.tables)


@dataclass(frozen=True)
class GenerationOptions:
    """Values every emitter needs, threaded explicitly through the pipeline."""
    project_name: str
    include_async_queries: bool = True
    include_paginate_endpoint: bool = True
    required_message_template: str = "{column} is required."


@dataclass
class GeneratedArtifact:
    """Represents a generated file."""
    target_path: str  # Relative path from output directory
    content: str  # File contents
    write_policy: WritePolicy
    layer: Layer


@dataclass(frozen=True)
class RegistrationEntry:
    """The two composition-root lines that wire one table's DAL and service."""
    table_name: str
    dal_line: str
    service_line: str


@dataclass(frozen=True)
class ArtifactRecord:
    path: str
    layer: Layer
    outcome: WriteOutcome


@dataclass
class GenerationReport:
    """What a run did, returned by ``generate`` and ``scaffold``."""
    artifacts: List[ArtifactRecord] = field(default_factory=list)
    warnings: List[MissingPrimaryKeyWarning] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    registrations_added: List[str] = field(default_factory=list)
    composition_written: bool = False

    def record(self, path: str, layer: Layer, outcome: WriteOutcome) -> None:
        self.artifacts.append(ArtifactRecord(path=path, layer=layer, outcome=outcome))

    @property
    def written(self) -> int:
        return sum(1 for a in self.artifacts if a.outcome == WriteOutcome.WRITTEN)

    @property
    def skipped(self) -> int:
        return sum(1 for a in self.artifacts if a.outcome == WriteOutcome.SKIPPED)

    def outcomes_by_layer(self) -> Dict[Layer, List[WriteOutcome]]:
        result: Dict[Layer, List[WriteOutcome]] = {}
        for a in self.artifacts:
            result.setdefault(a.layer, []).append(a.outcome)
        return result

    def summary(self) -> str:
        return (
            f"{self.written} written, {self.skipped} skipped, "
            f"{len(self.warnings) + len(self.diagnostics)} warnings, "
            f"{len(self.registrations_added)} registrations added"
        )
