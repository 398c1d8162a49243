"""Shared fixtures for scaffold tests."""
from typing import List, Tuple

import pytest

from ntier_scaffold.generators.ntier_gen.types import (
    ColumnDescriptor,
    GenerationOptions,
    SchemaSnapshot,
    TableDescriptor,
)

PROGRAM_CS = """using Microsoft.Data.SqlClient;
using SqlKata.Execution;

var builder = WebApplication.CreateBuilder(args);


// Add services to the container.

builder.Services.AddControllers();

var app = builder.Build();

app.MapControllers();

app.Run();
"""


def make_table(name: str, columns: List[Tuple[str, str, bool, bool]]) -> TableDescriptor:
    """Build a table from (name, sql_type, nullable, is_primary_key) tuples."""
    return TableDescriptor(
        name=name,
        columns=tuple(
            ColumnDescriptor(
                name=col_name,
                source_type=sql_type,
                nullable=nullable,
                is_primary_key=is_pk,
                ordinal_position=i,
            )
            for i, (col_name, sql_type, nullable, is_pk) in enumerate(columns, start=1)
        ),
    )


@pytest.fixture
def widget_table() -> TableDescriptor:
    return make_table("Widget", [
        ("WidgetID", "int", False, True),
        ("Name", "nvarchar", False, False),
        ("Note", "nvarchar", True, False),
    ])


@pytest.fixture
def keyless_table() -> TableDescriptor:
    return make_table("AuditLog", [
        ("Message", "nvarchar", False, False),
        ("LoggedAt", "datetime", False, False),
    ])


@pytest.fixture
def options() -> GenerationOptions:
    return GenerationOptions(project_name="NTier")


@pytest.fixture
def snapshot(widget_table, keyless_table) -> SchemaSnapshot:
    return SchemaSnapshot(tables={
        keyless_table.name: keyless_table,
        widget_table.name: widget_table,
    })


@pytest.fixture
def solution_dir(tmp_path):
    """An output directory that already holds the composition root."""
    program = tmp_path / "NTier.API" / "Program.cs"
    program.parent.mkdir(parents=True)
    program.write_text(PROGRAM_CS, encoding="utf-8")
    return tmp_path


@pytest.fixture(name="make_table")
def make_table_fixture():
    return make_table


@pytest.fixture
def program_cs() -> str:
    return PROGRAM_CS
