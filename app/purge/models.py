from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from app.database.models import StoredAsset


class OperationStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"  # already satisfied, e.g. file already absent
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one purge sub-operation."""

    target: str
    status: OperationStatus
    reason: str = ""

    @classmethod
    def ok(cls, target: str) -> OperationResult:
        return cls(target=target, status=OperationStatus.OK)

    @classmethod
    def skipped(cls, target: str, reason: str) -> OperationResult:
        return cls(target=target, status=OperationStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, target: str, reason: str) -> OperationResult:
        return cls(target=target, status=OperationStatus.FAILED, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status is OperationStatus.OK


class PurgeStatus(str, Enum):
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"


@dataclass(frozen=True)
class PurgeSet:
    """Everything owned by one user at the moment the purge began."""

    user_id: int
    assets: tuple[StoredAsset, ...] = ()


@dataclass
class PurgeReport:
    """Accumulates sub-operation results as the purge runs."""

    user_id: int
    file_results: list[OperationResult] = field(default_factory=list)
    records_deleted: int = 0
    session_result: OperationResult | None = None

    @property
    def warnings(self) -> list[OperationResult]:
        results = list(self.file_results)
        if self.session_result is not None:
            results.append(self.session_result)
        return [result for result in results if not result.is_ok]

    @property
    def status(self) -> PurgeStatus:
        if self.warnings:
            return PurgeStatus.COMPLETED_WITH_ERRORS
        return PurgeStatus.COMPLETED
