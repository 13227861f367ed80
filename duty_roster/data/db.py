"""
Duty Roster: SQLite storage.

People, duties and assignments persist in SQLite. People and duties are
soft-deleted (active = 0) so historical assignments remain valid.
Recurrence rules are stored as (frequency, days_of_week JSON) and parsed
into typed rules on the way out.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path

from duty_roster.core import lifecycle
from duty_roster.core.errors import (
    AssignmentNotFound,
    DuplicateAssignment,
    InvalidConfiguration,
)
from duty_roster.core.recurrence import parse_recurrence, serialize_recurrence
from duty_roster.data.models import (
    Assignment,
    AssignmentStatus,
    Duty,
    NewAssignment,
    Person,
    RecurrenceRule,
)

logger = logging.getLogger(__name__)


class _SQLiteStore(ABC):
    """Shared connection handling for the table classes below."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from duty_roster.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @abstractmethod
    def _init_db(self) -> None:
        """Create this store's tables and run its migrations."""


class PeopleDB(_SQLiteStore):
    """SQLite-backed storage for household members."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS people (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    name        TEXT    NOT NULL,
                    email       TEXT,
                    phone       TEXT,
                    is_active   INTEGER NOT NULL DEFAULT 1,
                    created_at  TEXT    NOT NULL
                )
            """)
        logger.debug("People table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        return Person(
            id=row["id"],
            name=row["name"],
            email=row["email"] or "",
            phone=row["phone"] or "",
            active=bool(row["is_active"]),
            created_at=row["created_at"],
        )

    def add_person(self, name: str, email: str = "", phone: str = "") -> Person:
        """Insert a new active person."""
        now = datetime.now().isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO people (name, email, phone, is_active, created_at) "
                "VALUES (?, ?, ?, 1, ?)",
                (name.strip(), email.strip(), phone.strip(), now),
            )
            person_id = cursor.lastrowid

        logger.info("Person added: #%d '%s'", person_id, name)
        return Person(
            id=person_id,
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            active=True,
            created_at=now,
        )

    def get_person(self, person_id: int) -> Person | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM people WHERE id = ?", (person_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_person(row)

    def list_people(self, active_only: bool = True) -> list[Person]:
        """List people in creation order (the rotation order)."""
        query = "SELECT * FROM people"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY id"
        with self._connect() as conn:
            rows = conn.execute(query).fetchall()
        return [self._row_to_person(r) for r in rows]

    def update_person(
        self, person_id: int, name: str, email: str = "", phone: str = "",
    ) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE people SET name = ?, email = ?, phone = ? WHERE id = ?",
                (name.strip(), email.strip(), phone.strip(), person_id),
            )
        return cursor.rowcount > 0

    def deactivate_person(self, person_id: int) -> bool:
        """Soft-delete a person (set is_active = 0)."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE people SET is_active = 0 WHERE id = ? AND is_active = 1",
                (person_id,),
            )
        deactivated = cursor.rowcount > 0
        if deactivated:
            logger.info("Person #%d soft-deleted", person_id)
        return deactivated


class DutyDB(_SQLiteStore):
    """SQLite-backed storage for duty definitions."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS duties (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    name          TEXT    NOT NULL,
                    description   TEXT,
                    frequency     TEXT    NOT NULL,
                    days_of_week  TEXT,
                    is_active     INTEGER NOT NULL DEFAULT 1,
                    created_at    TEXT    NOT NULL
                )
            """)
            # Migrate existing DBs: group duties were added later
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(duties)").fetchall()
            }
            if "is_group_duty" not in existing_cols:
                conn.execute(
                    "ALTER TABLE duties ADD COLUMN is_group_duty INTEGER NOT NULL DEFAULT 0"
                )
        logger.debug("Duties table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_duty(row: sqlite3.Row) -> Duty:
        """Build a Duty; raises InvalidConfiguration on a malformed rule."""
        return Duty(
            id=row["id"],
            name=row["name"],
            recurrence=parse_recurrence(row["frequency"], row["days_of_week"]),
            is_group_duty=bool(row["is_group_duty"]),
            description=row["description"] or "",
            active=bool(row["is_active"]),
        )

    def add_duty(
        self,
        name: str,
        recurrence: RecurrenceRule,
        is_group_duty: bool = False,
        description: str = "",
    ) -> Duty:
        """Insert a new duty. The rule is validated before anything is written."""
        frequency, days_json = serialize_recurrence(recurrence)
        # Round-trip so only rules that can be read back are ever stored
        recurrence = parse_recurrence(frequency, days_json)

        now = datetime.now().isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO duties
                    (name, description, frequency, days_of_week,
                     is_group_duty, is_active, created_at)
                VALUES (?, ?, ?, ?, ?, 1, ?)
                """,
                (name.strip(), description, frequency, days_json,
                 int(is_group_duty), now),
            )
            duty_id = cursor.lastrowid

        logger.info("Duty added: #%d '%s' (%s)", duty_id, name, frequency)
        return Duty(
            id=duty_id,
            name=name.strip(),
            recurrence=recurrence,
            is_group_duty=is_group_duty,
            description=description,
            active=True,
        )

    def get_duty(self, duty_id: int) -> Duty | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM duties WHERE id = ?", (duty_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_duty(row)

    def _fetch_rows(self, active_only: bool) -> list[sqlite3.Row]:
        query = "SELECT * FROM duties"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY id"
        with self._connect() as conn:
            return conn.execute(query).fetchall()

    def list_duties(self, active_only: bool = True) -> list[Duty]:
        """List duties whose stored rule parses; malformed rows are logged."""
        duties, _invalid = self._parse_rows(self._fetch_rows(active_only))
        return duties

    def load_active_duties(self) -> tuple[list[Duty], list[str]]:
        """Return active duties plus the names of rows with a malformed rule."""
        return self._parse_rows(self._fetch_rows(active_only=True))

    def _parse_rows(self, rows: Iterable[sqlite3.Row]) -> tuple[list[Duty], list[str]]:
        duties: list[Duty] = []
        invalid: list[str] = []
        for row in rows:
            try:
                duties.append(self._row_to_duty(row))
            except InvalidConfiguration as exc:
                logger.error("Duty #%d '%s' has a malformed rule: %s", row["id"], row["name"], exc)
                invalid.append(row["name"])
        return duties, invalid

    def update_duty(
        self,
        duty_id: int,
        name: str,
        recurrence: RecurrenceRule,
        is_group_duty: bool = False,
        description: str = "",
    ) -> bool:
        frequency, days_json = serialize_recurrence(recurrence)
        parse_recurrence(frequency, days_json)
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE duties
                SET name = ?, description = ?, frequency = ?, days_of_week = ?,
                    is_group_duty = ?
                WHERE id = ?
                """,
                (name.strip(), description, frequency, days_json,
                 int(is_group_duty), duty_id),
            )
        updated = cursor.rowcount > 0
        if updated:
            logger.info("Duty #%d updated (%s)", duty_id, frequency)
        return updated

    def deactivate_duty(self, duty_id: int) -> bool:
        """Soft-delete a duty (set is_active = 0)."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE duties SET is_active = 0 WHERE id = ? AND is_active = 1",
                (duty_id,),
            )
        deactivated = cursor.rowcount > 0
        if deactivated:
            logger.info("Duty #%d soft-deleted", duty_id)
        return deactivated


class AssignmentDB(_SQLiteStore):
    """SQLite-backed storage for assignments."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS assignments (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    duty_id        INTEGER NOT NULL,
                    person_id      INTEGER NOT NULL,
                    assigned_date  TEXT    NOT NULL,
                    due_date       TEXT    NOT NULL,
                    status         TEXT    NOT NULL DEFAULT 'pending',
                    completed_at   TEXT,
                    notes          TEXT,
                    created_at     TEXT    NOT NULL,
                    FOREIGN KEY (duty_id) REFERENCES duties (id),
                    FOREIGN KEY (person_id) REFERENCES people (id)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_assignments_assigned_date "
                "ON assignments (assigned_date)"
            )
        logger.debug("Assignments table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_assignment(row: sqlite3.Row) -> Assignment:
        completed_at = row["completed_at"]
        return Assignment(
            id=row["id"],
            duty_id=row["duty_id"],
            person_id=row["person_id"],
            assigned_date=date.fromisoformat(row["assigned_date"]),
            due_date=date.fromisoformat(row["due_date"]),
            status=AssignmentStatus(row["status"]),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
            notes=row["notes"] or "",
        )

    def add_assignments(self, batch: Iterable[NewAssignment]) -> int:
        """Insert a generated batch in one transaction. Returns rows written."""
        now = datetime.now().isoformat()
        rows = [
            (a.duty_id, a.person_id, a.assigned_date.isoformat(),
             a.due_date.isoformat(), now)
            for a in batch
        ]
        if not rows:
            return 0
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO assignments
                    (duty_id, person_id, assigned_date, due_date, status, created_at)
                VALUES (?, ?, ?, ?, 'pending', ?)
                """,
                rows,
            )
        logger.info("Stored %d assignments", len(rows))
        return len(rows)

    def add_assignment(
        self,
        duty_id: int,
        person_id: int,
        assigned_date: date,
        due_date: date | None = None,
    ) -> Assignment:
        """Insert one assignment by hand (e.g. for a custom duty).

        Raises:
            DuplicateAssignment: if this person already has this duty on
                this date.
        """
        due_date = due_date or assigned_date
        now = datetime.now().isoformat()
        with self._connect() as conn:
            self._ensure_unique(conn, duty_id, person_id, assigned_date)
            cursor = conn.execute(
                """
                INSERT INTO assignments
                    (duty_id, person_id, assigned_date, due_date, status, created_at)
                VALUES (?, ?, ?, ?, 'pending', ?)
                """,
                (duty_id, person_id, assigned_date.isoformat(),
                 due_date.isoformat(), now),
            )
            assignment_id = cursor.lastrowid
        logger.info(
            "Assignment #%d added: duty #%d -> person #%d on %s",
            assignment_id, duty_id, person_id, assigned_date,
        )
        return Assignment(
            id=assignment_id,
            duty_id=duty_id,
            person_id=person_id,
            assigned_date=assigned_date,
            due_date=due_date,
        )

    @staticmethod
    def _ensure_unique(
        conn: sqlite3.Connection,
        duty_id: int,
        person_id: int,
        assigned_date: date,
        exclude_id: int | None = None,
    ) -> None:
        row = conn.execute(
            "SELECT id FROM assignments "
            "WHERE duty_id = ? AND person_id = ? AND assigned_date = ? AND id != ?",
            (duty_id, person_id, assigned_date.isoformat(),
             -1 if exclude_id is None else exclude_id),
        ).fetchone()
        if row is not None:
            raise DuplicateAssignment(
                f"Duty {duty_id} is already assigned to person {person_id} "
                f"on {assigned_date} (assignment {row['id']})"
            )

    def get_assignment(self, assignment_id: int) -> Assignment | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM assignments WHERE id = ?", (assignment_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_assignment(row)

    def list_between(self, start: date, end: date) -> list[Assignment]:
        """Assignments whose assigned_date is in [start, end]."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM assignments WHERE assigned_date BETWEEN ? AND ? "
                "ORDER BY assigned_date, due_date, id",
                (start.isoformat(), end.isoformat()),
            ).fetchall()
        return [self._row_to_assignment(r) for r in rows]

    def list_due_on(self, day: date) -> list[Assignment]:
        """Pending assignments due exactly on *day*."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM assignments WHERE status = 'pending' AND due_date = ? "
                "ORDER BY id",
                (day.isoformat(),),
            ).fetchall()
        return [self._row_to_assignment(r) for r in rows]

    def list_overdue(self, today: date) -> list[Assignment]:
        """Pending assignments whose due date is before *today*."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM assignments WHERE status = 'pending' AND due_date < ? "
                "ORDER BY due_date, id",
                (today.isoformat(),),
            ).fetchall()
        return lifecycle.find_overdue(
            (self._row_to_assignment(r) for r in rows), today,
        )

    def mark_overdue(self, today: date) -> list[Assignment]:
        """Flip every pending, past-due assignment to overdue; return them."""
        flipped = [lifecycle.mark_overdue(a) for a in self.list_overdue(today)]
        if not flipped:
            return []
        with self._connect() as conn:
            conn.executemany(
                "UPDATE assignments SET status = ? WHERE id = ? AND status = 'pending'",
                [(a.status.value, a.id) for a in flipped],
            )
        logger.info("Marked %d assignments overdue", len(flipped))
        return flipped

    def complete(
        self,
        assignment_id: int,
        notes: str | None = None,
        completed_at: datetime | None = None,
    ) -> Assignment:
        """Mark an assignment completed. Completing twice is a no-op.

        Raises:
            AssignmentNotFound: if no assignment has this id.
        """
        current = self.get_assignment(assignment_id)
        if current is None:
            raise AssignmentNotFound(f"Assignment {assignment_id} not found")

        done = lifecycle.complete_assignment(
            current, completed_at or datetime.now(), notes,
        )
        if done is current:
            return current

        with self._connect() as conn:
            conn.execute(
                "UPDATE assignments SET status = ?, completed_at = ?, notes = ? "
                "WHERE id = ?",
                (done.status.value, done.completed_at.isoformat(), done.notes,
                 assignment_id),
            )
        logger.info("Assignment #%d completed", assignment_id)
        return done

    def reassign(
        self,
        assignment_id: int,
        person_id: int,
        assigned_date: date,
        due_date: date | None = None,
    ) -> Assignment:
        """Move an assignment to another person and/or date.

        Raises:
            AssignmentNotFound: if no assignment has this id.
            DuplicateAssignment: if the target person already has this duty
                on the target date.
        """
        due_date = due_date or assigned_date
        with self._connect() as conn:
            row = conn.execute(
                "SELECT duty_id FROM assignments WHERE id = ?", (assignment_id,)
            ).fetchone()
            if row is None:
                raise AssignmentNotFound(f"Assignment {assignment_id} not found")
            self._ensure_unique(
                conn, row["duty_id"], person_id, assigned_date,
                exclude_id=assignment_id,
            )
            cursor = conn.execute(
                "UPDATE assignments SET person_id = ?, assigned_date = ?, due_date = ? "
                "WHERE id = ?",
                (person_id, assigned_date.isoformat(), due_date.isoformat(),
                 assignment_id),
            )
        if cursor.rowcount == 0:
            raise AssignmentNotFound(f"Assignment {assignment_id} not found")
        logger.info(
            "Assignment #%d moved to person #%d on %s",
            assignment_id, person_id, assigned_date,
        )
        return self.get_assignment(assignment_id)

    def delete_assignment(self, assignment_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM assignments WHERE id = ?", (assignment_id,),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Assignment #%d deleted", assignment_id)
        return deleted

    def reset_between(self, start: date, end: date) -> int:
        """Delete every assignment in [start, end]. Returns the count."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM assignments WHERE assigned_date BETWEEN ? AND ?",
                (start.isoformat(), end.isoformat()),
            )
        logger.info("Reset %d assignments between %s and %s", cursor.rowcount, start, end)
        return cursor.rowcount
