"""
Duty Roster: Deduplication guard.

Drops candidate assignments whose (duty, person, assigned_date) already
exists, so generation can be re-run over a window without double-booking.
The caller must pass every assignment in the window as *existing*.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Protocol


class _Keyed(Protocol):
    duty_id: int
    person_id: int
    assigned_date: date


def assignment_key(a: _Keyed) -> tuple[int, int, date]:
    return (a.duty_id, a.person_id, a.assigned_date)


def filter_new(candidates: Iterable, existing: Iterable[_Keyed]) -> list:
    """Return *candidates* minus any that duplicate *existing* or each other.

    Order of the surviving candidates is preserved.
    """
    seen = {assignment_key(a) for a in existing}
    fresh = []
    for candidate in candidates:
        key = assignment_key(candidate)
        if key in seen:
            continue
        seen.add(key)
        fresh.append(candidate)
    return fresh
