"""Dependency registrations in the composition root (Program.cs)."""
import logging
from typing import Iterable, List

from ntier_scaffold.core.errors import CompositionAnchorError
from ntier_scaffold.generators.ntier_gen.naming import resolve_names
from ntier_scaffold.generators.ntier_gen.types import RegistrationEntry

log = logging.getLogger(__name__)

ANCHOR_LINE = "var builder = WebApplication.CreateBuilder(args);"
GROUP_SEPARATOR = "//"


def registration_entry(table_name: str, project_name: str) -> RegistrationEntry:
    """Build the DAL and service registration lines for a table."""
    names = resolve_names(table_name, project_name)
    return RegistrationEntry(
        table_name=table_name,
        dal_line=f"builder.Services.AddScoped<{names.abstract_dal}, {names.concrete_dal}>();",
        service_line=(
            f"builder.Services.AddScoped<{names.service}, "
            f"{names.manager}<{names.abstract_dal}>>();"
        ),
    )


def missing_lines(existing: str, entries: Iterable[RegistrationEntry]) -> List[str]:
    """Lines to inject, each table's group led by the separator."""
    lines: List[str] = []
    for entry in entries:
        missing = [
            line for line in (entry.dal_line, entry.service_line)
            if line not in existing
        ]
        if missing:
            lines.append(GROUP_SEPARATOR)
            lines.extend(missing)
    return lines


def patch_composition(existing: str, entries: Iterable[RegistrationEntry]) -> str:
    """
    Insert missing registrations directly after the anchor line.

    Args:
        existing: Current composition file content
        entries: Registrations expected to be present

    Returns:
        The patched content, or ``existing`` itself when nothing is missing

    Raises:
        CompositionAnchorError: if lines are missing but the anchor is absent
    """
    lines = missing_lines(existing, entries)
    if not lines:
        return existing

    index = existing.find(ANCHOR_LINE)
    if index == -1:
        raise CompositionAnchorError(f"Anchor line not found: {ANCHOR_LINE!r}")

    newline = "\r\n" if "\r\n" in existing else "\n"
    # Insert after the whole anchor line, trailing text included
    line_end = existing.find("\n", index)
    if line_end == -1:
        split_at = len(existing)
        injected = newline + newline.join(lines)
    else:
        split_at = line_end + 1
        injected = "".join(line + newline for line in lines)
    log.debug("Injecting %d registration lines", len(lines))
    return existing[:split_at] + injected + existing[split_at:]
