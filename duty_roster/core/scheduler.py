"""
Duty Roster: Scheduled sweeps.

Overdue sweep: flips pending assignments whose due date has passed to
overdue and tells the assignee.

Reminders: tells people about pending assignments due a configurable
number of days ahead.

Both are idempotent batch jobs meant to be invoked on a timer by an
external caller. This module is provider-agnostic: it depends on the
NotificationPort protocol, not on a specific transport.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from duty_roster.core.errors import InvalidConfiguration

if TYPE_CHECKING:
    from duty_roster.data.db import AssignmentDB, DutyDB, PeopleDB
    from duty_roster.data.models import Assignment, Duty, Person
    from duty_roster.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Overdue sweep
# ---------------------------------------------------------------------------


async def check_overdue(
    assignment_db: AssignmentDB,
    people_db: PeopleDB,
    duty_db: DutyDB,
    notifier: NotificationPort,
    today: date | None = None,
) -> int:
    """Mark past-due pending assignments overdue and notify each assignee.

    A failed notification is logged and does not stop the sweep.

    Returns:
        Number of assignments flipped to overdue.
    """
    today = today or date.today()
    flipped = assignment_db.mark_overdue(today)
    logger.info("Overdue sweep for %s: %d assignments", today, len(flipped))

    for assignment in flipped:
        person, duty = _lookup(assignment, people_db, duty_db)
        if person is None or duty is None:
            continue
        try:
            await notifier.send_message(person, _format_overdue_message(duty, assignment))
        except Exception as exc:
            logger.error(
                "Failed to send overdue notice for assignment %d: %s",
                assignment.id, exc,
            )
    return len(flipped)


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


async def send_reminders(
    assignment_db: AssignmentDB,
    people_db: PeopleDB,
    duty_db: DutyDB,
    notifier: NotificationPort,
    today: date | None = None,
    reminder_days: int = 1,
) -> int:
    """Remind people of pending assignments due *reminder_days* from today.

    Returns:
        Number of reminders successfully sent.
    """
    today = today or date.today()
    target = today + timedelta(days=reminder_days)
    upcoming = assignment_db.list_due_on(target)
    logger.info("Found %d assignments due in %d days", len(upcoming), reminder_days)

    sent = 0
    for assignment in upcoming:
        person, duty = _lookup(assignment, people_db, duty_db)
        if person is None or duty is None:
            continue
        try:
            await notifier.send_message(person, _format_reminder_message(duty, assignment))
            sent += 1
        except Exception as exc:
            logger.error(
                "Failed to send reminder for assignment %d: %s", assignment.id, exc,
            )
    return sent


def _lookup(
    assignment: Assignment,
    people_db: PeopleDB,
    duty_db: DutyDB,
) -> tuple[Person | None, Duty | None]:
    person = people_db.get_person(assignment.person_id)
    try:
        duty = duty_db.get_duty(assignment.duty_id)
    except InvalidConfiguration as exc:
        logger.warning("Duty %d has a malformed rule: %s", assignment.duty_id, exc)
        duty = None
    if person is None or duty is None:
        logger.warning(
            "Assignment %d references a missing person or duty", assignment.id,
        )
    return person, duty


def _format_reminder_message(duty: Duty, assignment: Assignment) -> str:
    lines = [f"Reminder: *{duty.name}* is due on {assignment.due_date.isoformat()}"]
    if duty.description:
        lines.append(duty.description)
    return "\n".join(lines)


def _format_overdue_message(duty: Duty, assignment: Assignment) -> str:
    lines = [f"Overdue: *{duty.name}* was due on {assignment.due_date.isoformat()}"]
    if duty.description:
        lines.append(duty.description)
    lines.append("Please mark it done once it's finished.")
    return "\n".join(lines)
