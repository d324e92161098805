"""Tagged results returned by the scheduling core and the booking service."""

from dataclasses import dataclass, field
from enum import Enum


class OperationStatus(str, Enum):
    OK = 'ok'
    NOT_ACCEPTABLE = 'not_acceptable'
    ERROR = 'error'
    NOT_FOUND = 'not_found'


class RepositoryError(Exception):
    """Storage could not be reached or returned something inconsistent."""


class LinkConflictError(RepositoryError):
    """A schedule link already exists for the same slot and date."""


@dataclass(frozen=True)
class ContinuityOutcome:
    status: OperationStatus
    slot_ids: list[int] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.OK


@dataclass(frozen=True)
class ReservationOutcome:
    status: OperationStatus
    slot_ids: list[int] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.OK


@dataclass(frozen=True)
class DeltaOutcome:
    status: OperationStatus
    for_create: list[int] = field(default_factory=list)
    for_delete: list[int] = field(default_factory=list)
    for_update: list[int] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.OK


def not_acceptable(reason: str) -> ContinuityOutcome:
    return ContinuityOutcome(status=OperationStatus.NOT_ACCEPTABLE, reason=reason)
