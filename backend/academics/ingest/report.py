"""Per-row results and the run report accumulated by the orchestrator."""
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from ..exceptions import SEVERITY_ERROR, SEVERITY_WARNING

T = TypeVar("T")


@dataclass(frozen=True)
class RowFailure:
    row: int
    message: str
    key: Optional[str] = None
    severity: str = SEVERITY_ERROR

    def as_dict(self):
        return {"row": self.row, "message": self.message, "key": self.key}


@dataclass(frozen=True)
class RowResult(Generic[T]):
    """Outcome of normalizing one decoded row: a candidate or a failure, never both."""
    row: int
    value: Optional[T] = None
    failure: Optional[RowFailure] = None

    @classmethod
    def ok(cls, row, value):
        return cls(row=row, value=value)

    @classmethod
    def fail(cls, row, message, key=None, severity=SEVERITY_ERROR):
        return cls(row=row, failure=RowFailure(row=row, message=message, key=key, severity=severity))

    @classmethod
    def warn(cls, row, message, key=None):
        return cls.fail(row, message, key=key, severity=SEVERITY_WARNING)

    @property
    def is_ok(self):
        return self.failure is None


class WriteStatus:
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass
class WriteOutcome:
    row: int
    status: str
    failure: Optional[RowFailure] = None
    # set when the storage layer itself failed; escalates after the sub-batch
    storage_error: Optional[BaseException] = None


@dataclass
class ImportReport:
    kind: str
    total_rows: int = 0
    batch_id: Optional[str] = None
    source_name: Optional[str] = None
    created_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    duplicate_count: int = 0
    errors: List[RowFailure] = field(default_factory=list)
    warnings: List[RowFailure] = field(default_factory=list)
    cancelled: bool = False
    extra: dict = field(default_factory=dict)

    @property
    def processed_count(self):
        """Rows that reached storage successfully, whether created or updated."""
        return self.created_count + self.updated_count + self.unchanged_count

    def add_failure(self, failure: RowFailure):
        if failure.severity == SEVERITY_WARNING:
            self.warnings.append(failure)
        else:
            self.errors.append(failure)

    def record(self, outcome: WriteOutcome):
        if outcome.status == WriteStatus.CREATED:
            self.created_count += 1
        elif outcome.status == WriteStatus.UPDATED:
            self.updated_count += 1
        elif outcome.status == WriteStatus.UNCHANGED:
            self.unchanged_count += 1
        elif outcome.status == WriteStatus.DUPLICATE:
            self.duplicate_count += 1
        if outcome.failure is not None:
            self.add_failure(outcome.failure)

    def finalize(self):
        self.errors.sort(key=lambda f: f.row)
        self.warnings.sort(key=lambda f: f.row)
        return self

    @property
    def status(self):
        if self.cancelled:
            return "cancelled"
        if self.errors:
            return "partial"
        return "completed"

