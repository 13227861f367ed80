"""
Duty Roster: Data Models.

People, duties with their recurrence rules, and the assignments that bind
one occurrence of a duty to one person. Records are soft-deleted (active
flag cleared) so historical assignments stay valid.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union


@dataclass
class Person:
    """A household member who can be assigned duties."""

    id: int
    name: str
    email: str = ""
    phone: str = ""
    active: bool = True
    created_at: str = ""


# ---------------------------------------------------------------------------
# Recurrence rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Daily:
    """Every day."""


@dataclass(frozen=True)
class WorkingDays:
    """Every day whose weekday is in *days* (0=Sunday ... 6=Saturday)."""

    days: frozenset[int]


@dataclass(frozen=True)
class Weekly:
    """The given weekdays, every week."""

    days: frozenset[int]


@dataclass(frozen=True)
class LastWeekday:
    """The last *weekday* of the month."""

    weekday: int


@dataclass(frozen=True)
class NthWeekday:
    """The *week*-th (1-4) *weekday* of the month."""

    week: int
    weekday: int


MonthlyOccurrence = Union[LastWeekday, NthWeekday]


@dataclass(frozen=True)
class Monthly:
    """Once a month; an empty selector (None) never produces occurrences."""

    occurrence: MonthlyOccurrence | None


@dataclass(frozen=True)
class Custom:
    """Assigned manually only; never generated."""


RecurrenceRule = Union[Daily, WorkingDays, Weekly, Monthly, Custom]


@dataclass
class Duty:
    """A recurring household duty."""

    id: int
    name: str                          # e.g. "Empty the dishwasher"
    recurrence: RecurrenceRule
    is_group_duty: bool = False        # everyone takes it together
    description: str = ""
    active: bool = True


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


class AssignmentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


@dataclass
class Assignment:
    """A persisted assignment of one duty occurrence to one person."""

    id: int
    duty_id: int
    person_id: int
    assigned_date: date
    due_date: date
    status: AssignmentStatus = AssignmentStatus.PENDING
    completed_at: datetime | None = None
    notes: str = ""

    @property
    def key(self) -> tuple[int, int, date]:
        return (self.duty_id, self.person_id, self.assigned_date)


@dataclass(frozen=True)
class NewAssignment:
    """A generated assignment candidate, not yet persisted."""

    duty_id: int
    person_id: int
    assigned_date: date
    due_date: date

    @property
    def key(self) -> tuple[int, int, date]:
        return (self.duty_id, self.person_id, self.assigned_date)


@dataclass
class GenerationResult:
    """Output of one generation pass over a window."""

    assignments: list[NewAssignment] = field(default_factory=list)
    skipped_duties: list[str] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.assignments)
