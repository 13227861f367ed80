"""
Duty Roster: Entry Point.

    python main.py generate [--week-start YYYY-MM-DD]
    python main.py overdue
    python main.py remind

Meant to be invoked by cron (or by hand); each command is one idempotent
batch run.
"""

import argparse
import asyncio
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from duty_roster.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from duty_roster.adapters.log_notifier import LogNotifier
from duty_roster.core.scheduler import check_overdue, send_reminders
from duty_roster.core.service import generate_assignments, week_start_for
from duty_roster.data.db import AssignmentDB, DutyDB, PeopleDB


def _today() -> date:
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Household duty roster")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="create assignments for one week")
    gen.add_argument(
        "--week-start",
        type=date.fromisoformat,
        help="first day of the week (default: this week's Monday)",
    )
    sub.add_parser("overdue", help="flag past-due assignments as overdue")
    sub.add_parser("remind", help="send reminders for upcoming assignments")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    people_db = PeopleDB()
    duty_db = DutyDB()
    assignment_db = AssignmentDB()

    if args.command == "generate":
        week_start = args.week_start or week_start_for(_today())
        report = generate_assignments(
            week_start, people_db, duty_db, assignment_db,
            working_days=settings.WORKING_DAYS,
        )
        print(f"Generated {report.created_count} assignments for week of {week_start}")
        if report.skipped_duties:
            print("Skipped duties: " + ", ".join(report.skipped_duties))
    elif args.command == "overdue":
        count = asyncio.run(
            check_overdue(assignment_db, people_db, duty_db, LogNotifier(), _today())
        )
        print(f"Marked {count} assignments overdue")
    elif args.command == "remind":
        count = asyncio.run(
            send_reminders(
                assignment_db, people_db, duty_db, LogNotifier(), _today(),
                reminder_days=settings.REMINDER_DAYS,
            )
        )
        print(f"Sent {count} reminders")


if __name__ == "__main__":
    main()
