"""Orchestrator for N-tier code generation."""
import logging
from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy.engine import Engine

from ntier_scaffold.core.errors import (
    ArtifactReadError,
    CompositionAnchorError,
    MissingPrimaryKeyError,
    MissingPrimaryKeyWarning,
)
from ntier_scaffold.db.schema_reader import read_schema
from ntier_scaffold.generators.ntier_gen.composition import (
    GROUP_SEPARATOR,
    missing_lines,
    patch_composition,
    registration_entry,
)
from ntier_scaffold.generators.ntier_gen.naming import composition_path, resolve_names
from ntier_scaffold.generators.ntier_gen.render import EMITTERS
from ntier_scaffold.generators.ntier_gen.types import (
    ALL_LAYERS,
    FILE_LAYERS,
    GenerationOptions,
    GenerationReport,
    Layer,
    SchemaSnapshot,
)
from ntier_scaffold.generators.ntier_gen.writer import ArtifactWriter

log = logging.getLogger(__name__)


def generate(settings, engine: Optional[Engine] = None, dry_run: bool = False) -> GenerationReport:
    """
    Read the live schema and scaffold every table.

    Args:
        settings: Settings for the connection, project name and layers
        engine: Optional pre-built SQLAlchemy engine
        dry_run: Report what would be written without touching disk

    Returns:
        GenerationReport for the run

    Raises:
        SchemaConnectionError, SchemaQueryError: before anything is written
        ArtifactWriteError: on the first file that cannot be written
    """
    snapshot = read_schema(settings, engine=engine)
    log.info("Read %d tables", len(snapshot))
    return scaffold(
        snapshot,
        options=settings.options(),
        out_dir=Path(settings.output_dir),
        layers=settings.layers(),
        dry_run=dry_run,
    )


def scaffold(
    snapshot: SchemaSnapshot,
    options: GenerationOptions,
    out_dir: Path,
    layers: Iterable[Layer] = ALL_LAYERS,
    dry_run: bool = False,
) -> GenerationReport:
    """Emit the enabled layers for every table, then patch the composition root."""
    layers = set(layers)
    writer = ArtifactWriter(out_dir, dry_run=dry_run)
    report = GenerationReport()

    for table in snapshot:
        names = resolve_names(table.name, options.project_name)
        for layer in FILE_LAYERS:
            if layer not in layers:
                continue
            extra = {"table": table.name, "layer": str(layer)}
            try:
                artifacts = EMITTERS[layer](table, names, options)
            except MissingPrimaryKeyError:
                warning = MissingPrimaryKeyWarning(table.name, str(layer))
                report.warnings.append(warning)
                log.warning(str(warning), extra=extra)
                continue

            for artifact in artifacts:
                outcome = writer.write(artifact)
                report.record(artifact.target_path, layer, outcome)
                log.info("%s %s", outcome.value.capitalize(), artifact.target_path, extra=extra)

    if Layer.COMPOSITION in layers:
        register_dependencies(snapshot, options, writer, report)

    log.info("Generation finished: %s", report.summary())
    return report


def register_dependencies(
    snapshot: SchemaSnapshot,
    options: GenerationOptions,
    writer: ArtifactWriter,
    report: GenerationReport,
) -> None:
    """Read the composition root once, patch it in memory, write it at most once."""
    path = composition_path(options.project_name)
    extra = {"layer": str(Layer.COMPOSITION)}

    if not writer.resolve(path).exists():
        message = f"Composition root {path} not found. Skipping dependency registration."
        report.diagnostics.append(message)
        log.warning(message, extra=extra)
        return

    try:
        existing = writer.read_text(path)
    except ArtifactReadError as e:
        message = f"{e}. Skipping dependency registration."
        report.diagnostics.append(message)
        log.warning(message, extra=extra)
        return

    entries = [registration_entry(table.name, options.project_name) for table in snapshot]
    try:
        patched = patch_composition(existing, entries)
    except CompositionAnchorError as e:
        message = f"{e} in {path}. Skipping dependency registration."
        report.diagnostics.append(message)
        log.warning(message, extra=extra)
        return

    if patched is existing:
        log.info("All registrations already present in %s", path, extra=extra)
        return

    added = [line for line in missing_lines(existing, entries) if line != GROUP_SEPARATOR]
    writer.write_text(path, patched)
    report.registrations_added.extend(added)
    report.composition_written = True
    log.info("Added %d registrations to %s", len(added), path, extra=extra)
