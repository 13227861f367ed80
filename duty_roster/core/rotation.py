"""
Duty Roster: Rotation assigner.

Decides who takes each occurrence of a duty. Individual duties rotate
through the roster by occurrence index within the window; individual
monthly duties rotate by calendar month; group duties go to everyone.

Rotation restarts with every window: cumulative load across weeks is not
tracked.

Pure function: no I/O.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from duty_roster.core.errors import NoEligiblePeople
from duty_roster.data.models import Duty, Monthly, Person


def order_roster(people: Sequence[Person]) -> list[Person]:
    """Stable rotation order: creation order, i.e. id ascending."""
    return sorted(people, key=lambda p: p.id)


def assign(
    duty: Duty,
    occurrence_dates: Sequence[date],
    people: Sequence[Person],
    occurrence_months: Sequence[date] | None = None,
) -> list[tuple[date, list[Person]]]:
    """Pair each occurrence date with the people who take it.

    Individual duties yield exactly one person per date; group duties
    yield the whole roster for every date.

    Args:
        duty: The duty being assigned.
        occurrence_dates: Dates the work is assigned on.
        people: The roster.
        occurrence_months: For monthly duties, the scheduled occurrence
            behind each assigned date (before any working-day fallback),
            parallel to *occurrence_dates*. Defaults to the dates themselves.

    Raises:
        NoEligiblePeople: if *people* is empty.
    """
    if not people:
        raise NoEligiblePeople(f"no active people for duty '{duty.name}'")

    roster = order_roster(people)

    if duty.is_group_duty:
        return [(d, list(roster)) for d in occurrence_dates]

    if isinstance(duty.recurrence, Monthly):
        if occurrence_months is None:
            occurrence_months = occurrence_dates
        if len(occurrence_months) != len(occurrence_dates):
            raise ValueError("occurrence_months must match occurrence_dates")
        # 0-indexed calendar month of the scheduled occurrence
        return [
            (d, [roster[(occ.month - 1) % len(roster)]])
            for d, occ in zip(occurrence_dates, occurrence_months)
        ]

    return [
        (d, [roster[i % len(roster)]]) for i, d in enumerate(occurrence_dates)
    ]
