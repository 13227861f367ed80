"""
Duty Roster: Generation service.

The I/O wrapper around the pure generator: fetch what generation needs,
run it, persist the batch. At most one run per window should execute at a
time against the same database; callers own that guarantee.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING

from duty_roster.core.calendar_rules import MON_TO_FRI
from duty_roster.core.generator import generate
from duty_roster.core.recurrence import window_end

if TYPE_CHECKING:
    from duty_roster.data.db import AssignmentDB, DutyDB, PeopleDB

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """What an operator sees after a generation run."""

    created_count: int
    skipped_duties: list[str] = field(default_factory=list)


def week_start_for(day: date) -> date:
    """Return the Monday on or before *day*."""
    return day - timedelta(days=day.weekday())


def generate_assignments(
    week_start: date,
    people_db: PeopleDB,
    duty_db: DutyDB,
    assignment_db: AssignmentDB,
    working_days: Collection[int] = MON_TO_FRI,
) -> GenerationReport:
    """Generate and store the assignments for one week.

    Running it twice for the same week stores nothing the second time.
    """
    duties, invalid_names = duty_db.load_active_duties()
    people = people_db.list_people(active_only=True)
    existing = assignment_db.list_between(week_start, window_end(week_start))

    result = generate(week_start, duties, people, existing, working_days)
    created = assignment_db.add_assignments(result.assignments)

    skipped = invalid_names + result.skipped_duties
    if skipped:
        logger.warning("Skipped duties for week of %s: %s", week_start, ", ".join(skipped))
    return GenerationReport(created_count=created, skipped_duties=skipped)
