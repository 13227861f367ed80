"""
Duty Roster: Calendar predicates.

Pure date questions used by the recurrence evaluator: working days,
Nth / last weekday of a month, and the working-day fallback.

Weekdays use the stored convention 0=Sunday ... 6=Saturday.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import date, timedelta

from duty_roster.core.errors import InvalidConfiguration

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

MON_TO_FRI = frozenset({MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY})

_ONE_DAY = timedelta(days=1)
_ONE_WEEK = timedelta(days=7)


def day_of_week(d: date) -> int:
    """Return the weekday of *d* with Sunday as 0."""
    return (d.weekday() + 1) % 7


def is_working_day(d: date, working_days: Collection[int] = MON_TO_FRI) -> bool:
    return day_of_week(d) in working_days


def last_working_day_on_or_before(
    d: date, working_days: Collection[int] = MON_TO_FRI,
) -> date:
    """Walk backward from *d* until a working day is reached.

    Raises InvalidConfiguration if *working_days* is empty, since no
    working day could ever be found.
    """
    if not working_days:
        raise InvalidConfiguration("working days must not be empty")

    result = d
    # At most six steps back: every weekday appears once per 7 days
    for _ in range(7):
        if is_working_day(result, working_days):
            return result
        result -= _ONE_DAY
    raise InvalidConfiguration(
        f"working days {sorted(working_days)} contain no valid weekday"
    )


def is_nth_weekday_of_month(d: date, week: int, weekday: int) -> bool:
    """True if *d* is the *week*-th (1-indexed) *weekday* of its month."""
    if day_of_week(d) != weekday:
        return False
    return (d.day - 1) // 7 + 1 == week


def is_last_weekday_of_month(d: date, weekday: int) -> bool:
    """True if *d* is a *weekday* and a week later is already next month."""
    if day_of_week(d) != weekday:
        return False
    return (d + _ONE_WEEK).month != d.month


def window_dates(window_start: date, days: int = 7) -> list[date]:
    """The consecutive dates of a generation window, starting at *window_start*."""
    return [window_start + timedelta(days=i) for i in range(days)]
