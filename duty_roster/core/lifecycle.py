"""
Duty Roster: Assignment lifecycle.

pending -> completed, pending -> overdue, overdue -> completed.
completed is terminal; completing it again changes nothing.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime

from duty_roster.data.models import Assignment, AssignmentStatus


def complete_assignment(
    assignment: Assignment,
    completed_at: datetime,
    notes: str | None = None,
) -> Assignment:
    """Return *assignment* marked completed (unchanged if already completed)."""
    if assignment.status is AssignmentStatus.COMPLETED:
        return assignment
    return replace(
        assignment,
        status=AssignmentStatus.COMPLETED,
        completed_at=completed_at,
        notes=notes if notes is not None else assignment.notes,
    )


def is_overdue(assignment: Assignment, today: date) -> bool:
    return (
        assignment.status is AssignmentStatus.PENDING
        and assignment.due_date < today
    )


def find_overdue(assignments: Iterable[Assignment], today: date) -> list[Assignment]:
    """Pending assignments whose due date has passed."""
    return [a for a in assignments if is_overdue(a, today)]


def mark_overdue(assignment: Assignment) -> Assignment:
    """Return *assignment* flipped to overdue; only pending ones change."""
    if assignment.status is not AssignmentStatus.PENDING:
        return assignment
    return replace(assignment, status=AssignmentStatus.OVERDUE)
