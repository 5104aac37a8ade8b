"""Report status state machine.

Any status may follow any other. The only guarded edge is entering
``completed`` from another status: it stamps ``completed_at`` and the award.
A report that is already completed and gets ``completed`` again keeps both.
All writers of report status go through :func:`transition` so that guard
lives in one place.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from cleancity.errors import InvalidStatusError

AWARD_POINTS = 50


class ReportStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    REJECTED = 'rejected'

    @classmethod
    def parse(cls, value) -> 'ReportStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidStatusError(value) from None


@dataclass(frozen=True)
class StatusUpdate:
    status: ReportStatus
    admin_notes: Optional[str] = None
    assigned_admin_id: Optional[int] = None

    @classmethod
    def create(cls, status, admin_notes=None, assigned_admin_id=None) -> 'StatusUpdate':
        return cls(ReportStatus.parse(status), admin_notes, assigned_admin_id)


@dataclass(frozen=True)
class Transition:
    previous: ReportStatus
    values: dict = field(default_factory=dict)
    awarded: int = 0

    @property
    def newly_completed(self) -> bool:
        return self.awarded > 0


def transition(current, update: StatusUpdate, now: datetime,
               award_points: int = AWARD_POINTS) -> Transition:
    """Compute the column values a status update writes to a report.

    ``current`` is the report's stored status. The result's ``awarded`` is
    the number of points the owner must be credited in the same write.
    """
    previous = ReportStatus.parse(current)
    values = {'status': update.status.value, 'updated_at': now}
    if update.admin_notes is not None:
        values['admin_notes'] = update.admin_notes
    if update.assigned_admin_id is not None:
        values['assigned_admin_id'] = update.assigned_admin_id

    awarded = 0
    if update.status is ReportStatus.COMPLETED and previous is not ReportStatus.COMPLETED:
        values['completed_at'] = now
        values['reward_points'] = award_points
        awarded = award_points

    return Transition(previous=previous, values=values, awarded=awarded)
