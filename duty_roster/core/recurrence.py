"""
Duty Roster: Recurrence evaluator.

Turns a duty's recurrence rule into the calendar dates, inside a 7-day
generation window, on which the duty must be assigned. Also converts the
persisted (frequency, days_of_week JSON) pair into a typed rule and back.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Collection, Iterable
from datetime import date, timedelta

from duty_roster.core.calendar_rules import (
    MON_TO_FRI,
    day_of_week,
    is_last_weekday_of_month,
    is_nth_weekday_of_month,
    is_working_day,
    last_working_day_on_or_before,
    window_dates,
)
from duty_roster.core.errors import InvalidConfiguration
from duty_roster.data.models import (
    Custom,
    Daily,
    LastWeekday,
    Monthly,
    NthWeekday,
    RecurrenceRule,
    Weekly,
    WorkingDays,
)

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7

# Persisted monthly encoding: [week, weekday] with week == -1 meaning "last"
_LAST_WEEK = -1

FREQUENCIES = ("daily", "working_days", "weekly", "monthly", "custom")


# ---------------------------------------------------------------------------
# Storage boundary
# ---------------------------------------------------------------------------


def parse_recurrence(
    frequency: str, days_of_week: str | list | None,
) -> RecurrenceRule:
    """Convert the persisted representation into a recurrence rule.

    Args:
        frequency: One of FREQUENCIES.
        days_of_week: JSON array text (or an already-decoded list). Weekday
            lists for working_days/weekly, [week, weekday] for monthly.

    Raises:
        InvalidConfiguration: on malformed JSON, an unknown frequency or
            out-of-range values. Nothing is silently defaulted except the
            Mon-Fri working-day set, which is the configuration default.
    """
    values = _decode_days(days_of_week)

    if frequency == "daily":
        return Daily()
    if frequency == "custom":
        return Custom()
    if frequency == "working_days":
        days = _weekday_set(values)
        return WorkingDays(days or MON_TO_FRI)
    if frequency == "weekly":
        return Weekly(_weekday_set(values))
    if frequency == "monthly":
        if not values:
            return Monthly(None)
        if len(values) != 2:
            raise InvalidConfiguration(
                f"monthly rule needs [week, weekday], got {values!r}"
            )
        week, weekday = values
        if week == _LAST_WEEK:
            rule: RecurrenceRule = Monthly(LastWeekday(weekday))
        else:
            rule = Monthly(NthWeekday(week, weekday))
        validate_rule(rule)
        return rule

    raise InvalidConfiguration(f"unknown frequency {frequency!r}")


def serialize_recurrence(rule: RecurrenceRule) -> tuple[str, str]:
    """Inverse of parse_recurrence: return (frequency, days_of_week JSON)."""
    if isinstance(rule, Daily):
        return "daily", "[]"
    if isinstance(rule, Custom):
        return "custom", "[]"
    if isinstance(rule, WorkingDays):
        return "working_days", json.dumps(sorted(rule.days))
    if isinstance(rule, Weekly):
        return "weekly", json.dumps(sorted(rule.days))
    if isinstance(rule, Monthly):
        occ = rule.occurrence
        if occ is None:
            return "monthly", "[]"
        if isinstance(occ, LastWeekday):
            return "monthly", json.dumps([_LAST_WEEK, occ.weekday])
        return "monthly", json.dumps([occ.week, occ.weekday])
    raise InvalidConfiguration(f"unsupported recurrence rule {rule!r}")


def _decode_days(raw: str | list | None) -> list[int]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidConfiguration(f"days_of_week is not JSON: {raw!r}") from exc
    if not isinstance(raw, list):
        raise InvalidConfiguration(f"days_of_week must be a list, got {raw!r}")
    _require_ints(raw, "days_of_week")
    return raw


def _require_ints(values: Iterable, what: str) -> None:
    # bool is an int subclass but never a valid weekday
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise InvalidConfiguration(f"{what} must hold integers, got {list(values)!r}")


def _weekday_set(values: list[int]) -> frozenset[int]:
    _require_ints(values, "weekdays")
    bad = [v for v in values if not 0 <= v <= 6]
    if bad:
        raise InvalidConfiguration(f"weekday out of range 0-6: {bad}")
    return frozenset(values)


def validate_rule(rule: RecurrenceRule) -> None:
    """Raise InvalidConfiguration if an in-memory rule has out-of-range fields."""
    if isinstance(rule, (WorkingDays, Weekly)):
        _weekday_set(list(rule.days))
    elif isinstance(rule, Monthly) and rule.occurrence is not None:
        occ = rule.occurrence
        _require_ints([occ.weekday], "monthly weekday")
        if not 0 <= occ.weekday <= 6:
            raise InvalidConfiguration(f"weekday out of range 0-6: {occ.weekday}")
        if isinstance(occ, NthWeekday):
            _require_ints([occ.week], "monthly week")
            if occ.week not in (1, 2, 3, 4):
                raise InvalidConfiguration(f"monthly week must be 1-4, got {occ.week}")
    elif not isinstance(rule, (Daily, Custom, WorkingDays, Weekly, Monthly)):
        raise InvalidConfiguration(f"unsupported recurrence rule {rule!r}")


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def occurrences_in_window(
    rule: RecurrenceRule,
    window_start: date,
    working_days: Collection[int] = MON_TO_FRI,
) -> list[date]:
    """Return the ascending, duplicate-free dates in the window for *rule*.

    The window is [window_start, window_start + 6]. Monthly occurrences that
    land on a non-working day move back to the last working day before
    them; if that falls before the window, the occurrence is dropped here
    (it belongs to the previous window's pass).
    """
    pairs = scheduled_occurrences(rule, window_start, working_days)
    return [assigned for _, assigned in pairs]


def scheduled_occurrences(
    rule: RecurrenceRule,
    window_start: date,
    working_days: Collection[int] = MON_TO_FRI,
) -> list[tuple[date, date]]:
    """Like occurrences_in_window, but as (occurrence, assigned date) pairs.

    The two dates differ only for monthly occurrences moved back by the
    working-day fallback. Pairs are ordered by assigned date.
    """
    validate_rule(rule)
    candidates = window_dates(window_start, WINDOW_DAYS)

    if isinstance(rule, Daily):
        return [(d, d) for d in candidates]
    if isinstance(rule, (WorkingDays, Weekly)):
        return [(d, d) for d in candidates if day_of_week(d) in rule.days]
    if isinstance(rule, Monthly):
        return _monthly_occurrences(rule, candidates, working_days)
    return []


def _monthly_occurrences(
    rule: Monthly,
    candidates: list[date],
    working_days: Collection[int],
) -> list[tuple[date, date]]:
    occ = rule.occurrence
    if occ is None:
        return []

    window_start = candidates[0]
    window_end = candidates[-1]
    found: dict[date, date] = {}

    for d in candidates:
        if isinstance(occ, LastWeekday):
            matches = is_last_weekday_of_month(d, occ.weekday)
        else:
            matches = is_nth_weekday_of_month(d, occ.week, occ.weekday)
        if not matches:
            continue

        adjusted = d
        if not is_working_day(d, working_days):
            adjusted = last_working_day_on_or_before(d, working_days)
            if adjusted < window_start or adjusted > window_end:
                logger.debug(
                    "Monthly occurrence %s moved to %s, outside window %s..%s",
                    d, adjusted, window_start, window_end,
                )
                continue
        found.setdefault(adjusted, d)

    return [(found[assigned], assigned) for assigned in sorted(found)]


def window_end(window_start: date) -> date:
    """Last date (inclusive) of the window starting at *window_start*."""
    return window_start + timedelta(days=WINDOW_DAYS - 1)
