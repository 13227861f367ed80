"""Tests for duty_roster.config: Settings validation."""

import pytest
from pydantic import ValidationError

from duty_roster.config import Settings


def test_defaults():
    s = Settings()
    assert s.WORKING_DAYS == [1, 2, 3, 4, 5]
    assert s.REMINDER_DAYS == 1


def test_working_days_from_comma_list():
    assert Settings(WORKING_DAYS="0, 1,2,3,4").WORKING_DAYS == [0, 1, 2, 3, 4]


def test_working_days_deduplicated_and_sorted():
    assert Settings(WORKING_DAYS=[5, 1, 5]).WORKING_DAYS == [1, 5]


def test_empty_working_days_rejected():
    with pytest.raises(ValidationError):
        Settings(WORKING_DAYS="")


def test_out_of_range_working_day_rejected():
    with pytest.raises(ValidationError):
        Settings(WORKING_DAYS="1,7")


def test_reminder_days_parsed():
    assert Settings(REMINDER_DAYS="3").REMINDER_DAYS == 3
