"""Tests for the idempotent, atomic artifact writer."""
import os
from unittest.mock import patch

import pytest

from ntier_scaffold.core.errors import ArtifactReadError, ArtifactWriteError
from ntier_scaffold.generators.ntier_gen.types import (
    GeneratedArtifact,
    Layer,
    WriteOutcome,
    WritePolicy,
)
from ntier_scaffold.generators.ntier_gen.writer import ArtifactWriter


def _artifact(policy, content="// generated\n", path="NTier.Business/Concrete/WidgetManager.cs"):
    return GeneratedArtifact(target_path=path, content=content, write_policy=policy, layer=Layer.MANAGER)


def test_creates_missing_parent_directories(tmp_path):
    writer = ArtifactWriter(tmp_path)
    outcome = writer.write(_artifact(WritePolicy.CREATE_IF_ABSENT))

    target = tmp_path / "NTier.Business" / "Concrete" / "WidgetManager.cs"
    assert outcome == WriteOutcome.WRITTEN
    assert target.read_text(encoding="utf-8") == "// generated\n"


def test_create_if_absent_skips_existing_file(tmp_path):
    target = tmp_path / "NTier.Business" / "Concrete" / "WidgetManager.cs"
    target.parent.mkdir(parents=True)
    target.write_text("// hand edited\n", encoding="utf-8")

    outcome = ArtifactWriter(tmp_path).write(_artifact(WritePolicy.CREATE_IF_ABSENT))

    assert outcome == WriteOutcome.SKIPPED
    assert target.read_text(encoding="utf-8") == "// hand edited\n"


def test_always_overwrite_replaces_existing_file(tmp_path):
    target = tmp_path / "NTier.Entities" / "Concrete" / "Widget.cs"
    target.parent.mkdir(parents=True)
    target.write_text("// stale\n", encoding="utf-8")

    artifact = _artifact(WritePolicy.ALWAYS_OVERWRITE, "// fresh\n", "NTier.Entities/Concrete/Widget.cs")
    outcome = ArtifactWriter(tmp_path).write(artifact)

    assert outcome == WriteOutcome.WRITTEN
    assert target.read_text(encoding="utf-8") == "// fresh\n"


def test_failed_replace_leaves_no_file_and_no_temp(tmp_path):
    writer = ArtifactWriter(tmp_path)
    with patch("ntier_scaffold.generators.ntier_gen.writer.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(ArtifactWriteError) as exc_info:
            writer.write(_artifact(WritePolicy.CREATE_IF_ABSENT))

    target_dir = tmp_path / "NTier.Business" / "Concrete"
    assert "disk full" in str(exc_info.value)
    assert not (target_dir / "WidgetManager.cs").exists()
    assert os.listdir(target_dir) == [], "temp file was not cleaned up"


def test_failed_overwrite_keeps_previous_content(tmp_path):
    target = tmp_path / "NTier.Entities" / "Concrete" / "Widget.cs"
    target.parent.mkdir(parents=True)
    target.write_text("// previous\n", encoding="utf-8")

    artifact = _artifact(WritePolicy.ALWAYS_OVERWRITE, "// next\n", "NTier.Entities/Concrete/Widget.cs")
    with patch("ntier_scaffold.generators.ntier_gen.writer.os.replace", side_effect=OSError("busy")):
        with pytest.raises(ArtifactWriteError):
            ArtifactWriter(tmp_path).write(artifact)

    assert target.read_text(encoding="utf-8") == "// previous\n"


def test_directory_blocked_by_file_raises_write_error(tmp_path):
    (tmp_path / "NTier.Business").write_text("not a directory", encoding="utf-8")

    with pytest.raises(ArtifactWriteError) as exc_info:
        ArtifactWriter(tmp_path).write(_artifact(WritePolicy.CREATE_IF_ABSENT))
    assert exc_info.value.path == tmp_path / "NTier.Business" / "Concrete" / "WidgetManager.cs"


def test_dry_run_reports_without_writing(tmp_path):
    writer = ArtifactWriter(tmp_path, dry_run=True)
    outcome = writer.write(_artifact(WritePolicy.CREATE_IF_ABSENT))

    assert outcome == WriteOutcome.WRITTEN
    assert list(tmp_path.iterdir()) == []


def test_crlf_content_round_trips(tmp_path):
    writer = ArtifactWriter(tmp_path)
    writer.write_text("Program.cs", "line1\r\nline2\r\n")

    assert (tmp_path / "Program.cs").read_bytes() == b"line1\r\nline2\r\n"
    assert writer.read_text("Program.cs") == "line1\r\nline2\r\n"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_rewrite_keeps_existing_file_mode(tmp_path):
    program = tmp_path / "Program.cs"
    program.write_text("var app = builder.Build();\n", encoding="utf-8")
    os.chmod(program, 0o644)

    ArtifactWriter(tmp_path).write_text("Program.cs", "var app = builder.Build();\napp.Run();\n")

    assert program.stat().st_mode & 0o777 == 0o644


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_new_file_mode_follows_umask(tmp_path):
    old_umask = os.umask(0o022)
    try:
        ArtifactWriter(tmp_path).write(_artifact(WritePolicy.CREATE_IF_ABSENT))
    finally:
        os.umask(old_umask)

    target = tmp_path / "NTier.Business" / "Concrete" / "WidgetManager.cs"
    assert target.stat().st_mode & 0o777 == 0o644


def test_undecodable_file_raises_read_error(tmp_path):
    (tmp_path / "Program.cs").write_bytes("// Lütfen doldurunuz\n".encode("cp1254"))

    with pytest.raises(ArtifactReadError) as exc_info:
        ArtifactWriter(tmp_path).read_text("Program.cs")
    assert exc_info.value.path == tmp_path / "Program.cs"
    assert isinstance(exc_info.value.cause, UnicodeDecodeError)


def test_unreadable_path_raises_read_error(tmp_path):
    (tmp_path / "Program.cs").mkdir()

    with pytest.raises(ArtifactReadError):
        ArtifactWriter(tmp_path).read_text("Program.cs")
