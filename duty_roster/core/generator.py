"""
Duty Roster: Generation orchestrator.

Composes the recurrence evaluator, the rotation assigner and the
deduplication guard for every active duty over one window, producing the
batch of new assignments to persist.

This module is pure: callers fetch duties, people and the window's
existing assignments, and persist the result themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from datetime import date

from duty_roster.core.calendar_rules import MON_TO_FRI
from duty_roster.core.dedup import filter_new
from duty_roster.core.errors import InvalidConfiguration, NoEligiblePeople
from duty_roster.core.recurrence import scheduled_occurrences, window_end
from duty_roster.core.rotation import assign
from duty_roster.data.models import (
    Assignment,
    Duty,
    GenerationResult,
    NewAssignment,
    Person,
)

logger = logging.getLogger(__name__)


def generate(
    window_start: date,
    duties: Iterable[Duty],
    people: Sequence[Person],
    existing: Iterable[Assignment],
    working_days: Collection[int] = MON_TO_FRI,
) -> GenerationResult:
    """Compute the new assignments for the window starting at *window_start*.

    Inactive duties and people are ignored. A duty whose rule is invalid, or
    that has nobody to take it, is skipped and its name recorded in
    ``skipped_duties``; the other duties are still generated.

    Args:
        window_start: First day of the 7-day window (conventionally a Monday).
        duties: Duty definitions.
        people: The roster.
        existing: Every assignment already stored in the window.
        working_days: Weekdays (0=Sunday) used for the monthly fallback.

    Returns:
        GenerationResult with the deduplicated batch and skipped duty names.
    """
    active_people = [p for p in people if p.active]
    result = GenerationResult()
    candidates: list[NewAssignment] = []

    for duty in duties:
        if not duty.active:
            continue
        try:
            scheduled = scheduled_occurrences(duty.recurrence, window_start, working_days)
            pairs = assign(
                duty,
                [assigned for _, assigned in scheduled],
                active_people,
                occurrence_months=[occurrence for occurrence, _ in scheduled],
            )
        except (InvalidConfiguration, NoEligiblePeople) as exc:
            logger.warning("Skipping duty #%d '%s': %s", duty.id, duty.name, exc)
            result.skipped_duties.append(duty.name)
            continue

        for day, assignees in pairs:
            candidates.extend(
                NewAssignment(
                    duty_id=duty.id,
                    person_id=person.id,
                    assigned_date=day,
                    due_date=day,
                )
                for person in assignees
            )

    result.assignments = filter_new(candidates, existing)
    logger.info(
        "Generated %d new assignments for %s..%s (%d candidates, %d skipped duties)",
        result.created_count, window_start, window_end(window_start),
        len(candidates), len(result.skipped_duties),
    )
    return result
