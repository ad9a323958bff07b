"""Error taxonomy for bulk ingestion runs.

``StructuralError`` and ``PersistenceError`` abort a run; ``RowError`` (and its
``DuplicateKeyError`` subclass) only ever affect the row that raised it.
"""

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


class IngestionError(Exception):
    """Base class for ingestion failures."""


class StructuralError(IngestionError):
    """The input could not be decoded into any rows; nothing was written."""


class RowError(IngestionError):
    def __init__(self, message, *, severity=SEVERITY_ERROR, key=None):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.key = key


class DuplicateKeyError(RowError):
    """Natural-key collision during an insert-only write."""


class PersistenceError(IngestionError):
    """Storage became unavailable mid-run.

    ``report`` holds whatever was accumulated up to and including the last
    flushed sub-batch.
    """

    def __init__(self, message, report=None):
        super().__init__(message)
        self.report = report
