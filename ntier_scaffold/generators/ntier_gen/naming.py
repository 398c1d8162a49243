"""Identifier and path derivation for generated files."""
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict

from ntier_scaffold.generators.ntier_gen.types import Layer

ADD_MODEL = "add_model"
UPDATE_MODEL = "update_model"


@dataclass(frozen=True)
class TableNames:
    """Every name generated for one table within one project."""
    project: str
    entity: str
    abstract_dal: str
    concrete_dal: str
    service: str
    manager: str
    controller: str
    add_model: str
    update_model: str
    variable: str

    @property
    def namespaces(self) -> Dict[str, str]:
        p = self.project
        return {
            "core": f"{p}.Core",
            "core_entities": f"{p}.Core.Entities",
            "core_data_access": f"{p}.Core.DataAccess",
            "core_sqlkata": f"{p}.Core.DataAccess.SqlKata",
            "entities": f"{p}.Entities.Concrete",
            "abstract_dal": f"{p}.DataAccess.Abstract",
            "concrete_dal": f"{p}.DataAccess.Concrete.SqlKata",
            "abstract_service": f"{p}.Business.Abstract",
            "manager": f"{p}.Business.Concrete",
            "controller": f"{p}.API.Controllers",
            "models": f"{p}.Core.Models.{self.entity}",
        }

    @property
    def paths(self) -> Dict[str, str]:
        """Target paths relative to the output directory, keyed by layer value."""
        p = self.project
        t = self.entity
        paths = {
            Layer.ENTITY.value: PurePosixPath(f"{p}.Entities", "Concrete", f"{t}.cs"),
            Layer.ABSTRACT_DAL.value: PurePosixPath(f"{p}.DataAccess", "Abstract", f"{self.abstract_dal}.cs"),
            Layer.CONCRETE_DAL.value: PurePosixPath(f"{p}.DataAccess", "Concrete", "SqlKata", f"{self.concrete_dal}.cs"),
            Layer.ABSTRACT_SERVICE.value: PurePosixPath(f"{p}.Business", "Abstract", f"{self.service}.cs"),
            Layer.MANAGER.value: PurePosixPath(f"{p}.Business", "Concrete", f"{self.manager}.cs"),
            Layer.CONTROLLER.value: PurePosixPath(f"{p}.API", "Controllers", f"{self.controller}.cs"),
            ADD_MODEL: PurePosixPath(f"{p}.Core", "Models", t, f"{self.add_model}.cs"),
            UPDATE_MODEL: PurePosixPath(f"{p}.Core", "Models", t, f"{self.update_model}.cs"),
        }
        return {k: str(v) for k, v in paths.items()}


def resolve_names(table_name: str, project_name: str) -> TableNames:
    """Derive class, variable and path names for a table.

    Pure and deterministic: the same inputs always yield identical names.
    """
    if not table_name:
        raise ValueError("table_name must be a non-empty string")
    if not project_name:
        raise ValueError("project_name must be a non-empty string")

    t = table_name
    return TableNames(
        project=project_name,
        entity=t,
        abstract_dal=f"I{t}Dal",
        concrete_dal=f"SK{t}Dal",
        service=f"I{t}Service",
        manager=f"{t}Manager",
        controller=f"{t}Controller",
        add_model=f"{t}AddModel",
        update_model=f"{t}UpdateModel",
        variable=t.lower(),
    )


def composition_path(project_name: str) -> str:
    """Path of the composition root (dependency registrations)."""
    return str(PurePosixPath(f"{project_name}.API", "Program.cs"))
