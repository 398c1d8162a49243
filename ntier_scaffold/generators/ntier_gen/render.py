"""Per-layer emitters rendering C# sources through Jinja2 templates."""
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ntier_scaffold.core.errors import MissingPrimaryKeyError
from ntier_scaffold.generators.ntier_gen.naming import (
    ADD_MODEL,
    UPDATE_MODEL,
    TableNames,
)
from ntier_scaffold.generators.ntier_gen.type_map import FALLBACK_TYPE, map_column
from ntier_scaffold.generators.ntier_gen.types import (
    GeneratedArtifact,
    GenerationOptions,
    Layer,
    TableDescriptor,
    WritePolicy,
)

TEMPLATES_DIR = Path(__file__).parent / "templates"

# Route parameter type when the key column has no C# mapping
DEFAULT_KEY_TYPE = "int"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    # Generated output is C#, not HTML: escaping would corrupt generics like List<T>
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


@dataclass(frozen=True)
class ColumnView:
    """Template-facing view of a column and its mapped C# type."""
    name: str
    type_name: str
    base_type: str
    initializer: str
    is_primary_key: bool
    nullable: bool
    requires_validation: bool
    required: bool = False
    required_message: str = ""

    @property
    def suffix(self) -> str:
        return f" {self.initializer}" if self.initializer else ""


def _column_views(table: TableDescriptor, options: GenerationOptions) -> List[ColumnView]:
    views = []
    for column in table.columns:
        target = map_column(column)
        views.append(ColumnView(
            name=column.name,
            type_name=target.type_name,
            base_type=target.base_type,
            initializer=target.initializer,
            is_primary_key=column.is_primary_key,
            nullable=column.nullable,
            requires_validation=target.requires_validation,
            required_message=options.required_message_template.format(
                column=column.name, table=table.name
            ),
        ))
    return views


def _render(template_name: str, **context) -> str:
    template = get_environment().get_template(template_name)
    return template.render(**context)


def _context(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> Dict:
    return {
        "table": table,
        "names": names,
        "ns": names.namespaces,
        "options": options,
    }


def render_entity(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    """Entity class mirroring the table; regenerated on every run."""
    content = _render(
        "entity.cs.j2",
        columns=_column_views(table, options),
        **_context(table, names, options),
    )
    return GeneratedArtifact(
        target_path=names.paths[Layer.ENTITY.value],
        content=content,
        write_policy=WritePolicy.ALWAYS_OVERWRITE,
        layer=Layer.ENTITY,
    )


def _render_once(layer: Layer, template_name: str, table, names, options) -> GeneratedArtifact:
    return GeneratedArtifact(
        target_path=names.paths[layer.value],
        content=_render(template_name, **_context(table, names, options)),
        write_policy=WritePolicy.CREATE_IF_ABSENT,
        layer=layer,
    )


def render_abstract_dal(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    return _render_once(Layer.ABSTRACT_DAL, "abstract_dal.cs.j2", table, names, options)


def render_concrete_dal(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    return _render_once(Layer.CONCRETE_DAL, "concrete_dal.cs.j2", table, names, options)


def render_abstract_service(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    return _render_once(Layer.ABSTRACT_SERVICE, "abstract_service.cs.j2", table, names, options)


def render_manager(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    return _render_once(Layer.MANAGER, "manager.cs.j2", table, names, options)


def render_controller(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> GeneratedArtifact:
    """CRUD controller addressing rows by the table's primary key.

    Raises:
        MissingPrimaryKeyError: if the table has no primary-key column
    """
    pk = table.primary_key
    if pk is None:
        raise MissingPrimaryKeyError(table.name)

    columns = _column_views(table, options)
    pk_view = next(c for c in columns if c.is_primary_key)
    pk_type = pk_view.base_type if pk_view.base_type != FALLBACK_TYPE else DEFAULT_KEY_TYPE

    content = _render(
        "controller.cs.j2",
        pk=pk_view,
        pk_type=pk_type,
        assignments=[c for c in columns if not c.is_primary_key],
        **_context(table, names, options),
    )
    return GeneratedArtifact(
        target_path=names.paths[Layer.CONTROLLER.value],
        content=content,
        write_policy=WritePolicy.CREATE_IF_ABSENT,
        layer=Layer.CONTROLLER,
    )


def render_models(table: TableDescriptor, names: TableNames, options: GenerationOptions) -> List[GeneratedArtifact]:
    """Request models: Add (no key, required non-nullables) and Update (all columns)."""
    columns = _column_views(table, options)

    add_columns = [
        _with_required(c, c.requires_validation)
        for c in columns
        if not c.is_primary_key
    ]
    # Non-null key is mandatory on update
    update_columns = [
        _with_required(c, c.requires_validation or (c.is_primary_key and not c.nullable))
        for c in columns
    ]

    context = _context(table, names, options)
    return [
        GeneratedArtifact(
            target_path=names.paths[ADD_MODEL],
            content=_render("request_model.cs.j2", class_name=names.add_model, columns=add_columns, **context),
            write_policy=WritePolicy.CREATE_IF_ABSENT,
            layer=Layer.MODELS,
        ),
        GeneratedArtifact(
            target_path=names.paths[UPDATE_MODEL],
            content=_render("request_model.cs.j2", class_name=names.update_model, columns=update_columns, **context),
            write_policy=WritePolicy.CREATE_IF_ABSENT,
            layer=Layer.MODELS,
        ),
    ]


def _with_required(column: ColumnView, required: bool) -> ColumnView:
    return replace(column, required=required)


Emitter = Callable[[TableDescriptor, TableNames, GenerationOptions], List[GeneratedArtifact]]


def _single(render: Callable[..., GeneratedArtifact]) -> Emitter:
    def emit(table, names, options):
        return [render(table, names, options)]
    emit.__name__ = render.__name__
    return emit


EMITTERS: Dict[Layer, Emitter] = {
    Layer.ENTITY: _single(render_entity),
    Layer.ABSTRACT_DAL: _single(render_abstract_dal),
    Layer.CONCRETE_DAL: _single(render_concrete_dal),
    Layer.ABSTRACT_SERVICE: _single(render_abstract_service),
    Layer.MANAGER: _single(render_manager),
    Layer.CONTROLLER: _single(render_controller),
    Layer.MODELS: render_models,
}
