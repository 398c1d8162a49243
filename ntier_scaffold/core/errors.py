"""Error taxonomy for scaffold runs.

Fatal errors derive from ``ScaffoldError`` and abort the run. Files written
before the failure stay on disk, so re-running is always safe.
"""


class ScaffoldError(Exception):
    """Base class for every error raised by the generator."""


class SchemaConnectionError(ScaffoldError):
    """The database could not be reached or rejected the credentials."""


class SchemaQueryError(ScaffoldError):
    """The metadata query failed or returned an unusable result."""


class ArtifactWriteError(ScaffoldError):
    """A generated file could not be written."""

    def __init__(self, path, cause: Exception):
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause


class MissingPrimaryKeyError(ScaffoldError):
    """A layer that addresses rows by key was asked to render a keyless table."""

    def __init__(self, table_name: str):
        super().__init__(f"No primary key found for table {table_name}")
        self.table_name = table_name


class CompositionAnchorError(ScaffoldError):
    """The composition root does not contain the anchor line."""


class MissingPrimaryKeyWarning(UserWarning):
    """Recorded when a table has no identity column; never raised by the pipeline."""

    def __init__(self, table_name: str, skipped_layer: str):
        super().__init__(
            f"No primary key found for table {table_name}. Skipping {skipped_layer} generation."
        )
        self.table_name = table_name
        self.skipped_layer = skipped_layer


class ArtifactReadError(ScaffoldError):
    """An existing file could not be read or decoded."""

    def __init__(self, path, cause: Exception):
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause
