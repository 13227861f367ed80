"""Shared test fixtures and configuration.

Sets environment defaults before any duty_roster import so
duty_roster.config loads cleanly, and provides temp-file DB fixtures plus
small rosters for the pure generation tests.
"""

import os

# Patch env vars BEFORE any duty_roster imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("WORKING_DAYS", "1,2,3,4,5")
os.environ.setdefault("REMINDER_DAYS", "1")

import pytest

from duty_roster.data.models import Person


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_roster.db")


@pytest.fixture
def people_db(tmp_db_path):
    from duty_roster.data.db import PeopleDB
    return PeopleDB(db_path=tmp_db_path)


@pytest.fixture
def duty_db(tmp_db_path):
    from duty_roster.data.db import DutyDB
    return DutyDB(db_path=tmp_db_path)


@pytest.fixture
def assignment_db(tmp_db_path):
    from duty_roster.data.db import AssignmentDB
    return AssignmentDB(db_path=tmp_db_path)


@pytest.fixture
def two_people():
    return [Person(id=1, name="Amit"), Person(id=2, name="Dana")]


@pytest.fixture
def four_people():
    return [
        Person(id=1, name="Amit"),
        Person(id=2, name="Dana"),
        Person(id=3, name="Noa"),
        Person(id=4, name="Yoni"),
    ]
