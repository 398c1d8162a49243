"""File writer for N-tier generation."""
import logging
import os
import tempfile
from pathlib import Path

from ntier_scaffold.core.errors import ArtifactReadError, ArtifactWriteError
from ntier_scaffold.generators.ntier_gen.types import (
    GeneratedArtifact,
    WriteOutcome,
    WritePolicy,
)

log = logging.getLogger(__name__)


def _default_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ArtifactWriter:
    """Applies write policies to generated artifacts under ``out_dir``.

    Each file lands atomically: content goes to a temp file in the target
    directory and is moved into place with ``os.replace``, so a failed write
    never leaves a truncated file behind.
    """

    def __init__(self, out_dir: Path, dry_run: bool = False):
        self.out_dir = Path(out_dir)
        self.dry_run = dry_run

    def resolve(self, relative_path: str) -> Path:
        return self.out_dir / relative_path

    def write(self, artifact: GeneratedArtifact) -> WriteOutcome:
        """
        Write one artifact according to its policy.

        Args:
            artifact: The artifact to materialize

        Returns:
            WRITTEN if the file was (or, in dry-run mode, would be) written,
            SKIPPED if a create-once file already exists

        Raises:
            ArtifactWriteError: if the file system rejects the write
        """
        file_path = self.resolve(artifact.target_path)
        extra = {"layer": str(artifact.layer)}

        if artifact.write_policy == WritePolicy.CREATE_IF_ABSENT and file_path.exists():
            log.debug("Skipping existing %s", artifact.target_path, extra=extra)
            return WriteOutcome.SKIPPED

        self.write_text(artifact.target_path, artifact.content)
        log.debug("Wrote %s", artifact.target_path, extra=extra)
        return WriteOutcome.WRITTEN

    def write_text(self, relative_path: str, content: str) -> None:
        """Atomically replace ``relative_path`` with ``content``."""
        if self.dry_run:
            return

        file_path = self.resolve(relative_path)
        tmp_name = None
        try:
            # Create parent directories if needed
            file_path.parent.mkdir(parents=True, exist_ok=True)
            # mkstemp creates 0600 files; keep the target's mode, or the umask default
            mode = (
                file_path.stat().st_mode & 0o777 if file_path.exists() else _default_mode()
            )
            fd, tmp_name = tempfile.mkstemp(
                dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, file_path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ArtifactWriteError(file_path, e) from e

    def read_text(self, relative_path: str) -> str:
        """Read a UTF-8 file as-is; CRLF is preserved.

        Raises:
            ArtifactReadError: if the file cannot be opened or is not valid UTF-8
        """
        file_path = self.resolve(relative_path)
        try:
            with open(file_path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactReadError(file_path, e) from e
