"""Tests for duty_roster.core.recurrence: rule parsing and evaluation."""

from datetime import date

import pytest

from duty_roster.core.calendar_rules import (
    FRIDAY,
    MON_TO_FRI,
    MONDAY,
    SATURDAY,
    SUNDAY,
    TUESDAY,
    WEDNESDAY,
)
from duty_roster.core.errors import InvalidConfiguration
from duty_roster.core.recurrence import (
    occurrences_in_window,
    parse_recurrence,
    scheduled_occurrences,
    serialize_recurrence,
    validate_rule,
    window_end,
)
from duty_roster.data.models import (
    Custom,
    Daily,
    LastWeekday,
    Monthly,
    NthWeekday,
    Weekly,
    WorkingDays,
)

JAN_1 = date(2024, 1, 1)  # a Monday


# ---------------------------------------------------------------------------
# Storage boundary
# ---------------------------------------------------------------------------


class TestParseRecurrence:
    def test_daily(self):
        assert parse_recurrence("daily", "[]") == Daily()

    def test_custom(self):
        assert parse_recurrence("custom", None) == Custom()

    def test_weekly(self):
        assert parse_recurrence("weekly", "[1, 3, 5]") == Weekly(frozenset({1, 3, 5}))

    def test_weekly_empty_selector(self):
        assert parse_recurrence("weekly", "[]") == Weekly(frozenset())

    def test_working_days_defaults_to_mon_fri(self):
        assert parse_recurrence("working_days", "[]") == WorkingDays(MON_TO_FRI)

    def test_working_days_explicit(self):
        rule = parse_recurrence("working_days", [0, 1, 2, 3, 4])
        assert rule == WorkingDays(frozenset({0, 1, 2, 3, 4}))

    def test_monthly_last(self):
        assert parse_recurrence("monthly", "[-1, 5]") == Monthly(LastWeekday(FRIDAY))

    def test_monthly_nth(self):
        assert parse_recurrence("monthly", "[2, 2]") == Monthly(NthWeekday(2, TUESDAY))

    def test_monthly_empty_selector(self):
        assert parse_recurrence("monthly", "[]") == Monthly(None)

    def test_monthly_week_out_of_range(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("monthly", "[5, 2]")

    def test_monthly_wrong_arity(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("monthly", "[2]")

    def test_weekday_out_of_range(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("weekly", "[1, 7]")

    def test_malformed_json(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("weekly", "[1, 3,")

    def test_non_list_json(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("weekly", '{"days": [1]}')

    def test_non_integer_entries(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("weekly", '["mon"]')

    def test_unknown_frequency(self):
        with pytest.raises(InvalidConfiguration):
            parse_recurrence("yearly", "[]")


class TestSerializeRecurrence:
    def test_weekly_sorted(self):
        assert serialize_recurrence(Weekly(frozenset({5, 1, 3}))) == ("weekly", "[1, 3, 5]")

    def test_monthly_last_uses_minus_one(self):
        assert serialize_recurrence(Monthly(LastWeekday(FRIDAY))) == ("monthly", "[-1, 5]")

    def test_monthly_nth(self):
        assert serialize_recurrence(Monthly(NthWeekday(1, SUNDAY))) == ("monthly", "[1, 0]")

    def test_daily(self):
        assert serialize_recurrence(Daily()) == ("daily", "[]")


class TestValidateRule:
    def test_nth_week_zero_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            validate_rule(Monthly(NthWeekday(0, MONDAY)))

    def test_weekday_seven_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            validate_rule(Monthly(LastWeekday(7)))

    def test_valid_rule_passes(self):
        validate_rule(Weekly(frozenset({MONDAY})))

    def test_string_weekdays_are_invalid(self):
        with pytest.raises(InvalidConfiguration):
            validate_rule(Weekly(frozenset({"1"})))

    def test_bool_weekdays_are_invalid(self):
        with pytest.raises(InvalidConfiguration):
            validate_rule(WorkingDays(frozenset({True})))

    def test_string_monthly_weekday_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            validate_rule(Monthly(LastWeekday("5")))

    def test_string_weekdays_rejected_by_evaluation(self):
        with pytest.raises(InvalidConfiguration):
            occurrences_in_window(Weekly(frozenset({"1"})), JAN_1)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class TestSimpleRules:
    def test_daily_yields_seven_dates(self):
        days = occurrences_in_window(Daily(), JAN_1)
        assert len(days) == 7
        assert days == sorted(days)
        assert days[0] == JAN_1
        assert days[-1] == window_end(JAN_1)

    def test_weekly_mon_wed_fri(self):
        days = occurrences_in_window(Weekly(frozenset({MONDAY, WEDNESDAY, FRIDAY})), JAN_1)
        assert days == [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5)]

    def test_weekly_window_not_starting_monday(self):
        days = occurrences_in_window(Weekly(frozenset({MONDAY})), date(2024, 1, 3))
        assert days == [date(2024, 1, 8)]

    def test_weekly_empty_selector_yields_nothing(self):
        assert occurrences_in_window(Weekly(frozenset()), JAN_1) == []

    def test_working_days(self):
        days = occurrences_in_window(WorkingDays(MON_TO_FRI), JAN_1)
        assert days == [date(2024, 1, d) for d in range(1, 6)]

    def test_working_days_empty_set_is_not_defaulted(self):
        assert occurrences_in_window(WorkingDays(frozenset()), JAN_1) == []

    def test_custom_never_generates(self):
        assert occurrences_in_window(Custom(), JAN_1) == []


class TestMonthlyRules:
    def test_last_friday_of_january(self):
        days = occurrences_in_window(Monthly(LastWeekday(FRIDAY)), date(2024, 1, 22))
        assert days == [date(2024, 1, 26)]

    def test_last_friday_not_in_earlier_week(self):
        assert occurrences_in_window(Monthly(LastWeekday(FRIDAY)), date(2024, 1, 15)) == []

    def test_second_tuesday(self):
        days = occurrences_in_window(Monthly(NthWeekday(2, TUESDAY)), date(2024, 1, 8))
        assert days == [date(2024, 1, 9)]

    def test_window_spanning_two_months(self):
        # Jan 29 .. Feb 4: first Thursday of February is Feb 1
        days = occurrences_in_window(Monthly(NthWeekday(1, 4)), date(2024, 1, 29))
        assert days == [date(2024, 2, 1)]

    def test_last_saturday_moves_to_friday(self):
        # Last Saturday of January 2024 is the 27th
        days = occurrences_in_window(Monthly(LastWeekday(SATURDAY)), date(2024, 1, 22))
        assert days == [date(2024, 1, 26)]

    def test_first_sunday_falls_back_to_friday_in_window(self):
        # Sep 1 2024 is the first Sunday; the window Aug 26 .. Sep 1 holds Fri Aug 30
        days = occurrences_in_window(Monthly(NthWeekday(1, SUNDAY)), date(2024, 8, 26))
        assert days == [date(2024, 8, 30)]

    def test_fallback_outside_window_is_dropped(self):
        # Window Sep 1 .. Sep 7 starts on the Sunday itself; Friday is before it
        assert occurrences_in_window(Monthly(NthWeekday(1, SUNDAY)), date(2024, 9, 1)) == []

    def test_custom_working_days_change_fallback(self):
        # Weekends count as working days, so Sunday stays put
        every_day = frozenset(range(7))
        days = occurrences_in_window(
            Monthly(NthWeekday(1, SUNDAY)), date(2024, 8, 26), every_day,
        )
        assert days == [date(2024, 9, 1)]

    def test_empty_selector_yields_nothing(self):
        assert occurrences_in_window(Monthly(None), JAN_1) == []

    def test_empty_working_days_with_weekend_occurrence_raises(self):
        with pytest.raises(InvalidConfiguration):
            occurrences_in_window(
                Monthly(LastWeekday(SATURDAY)), date(2024, 1, 22), frozenset(),
            )

    def test_invalid_week_raises(self):
        with pytest.raises(InvalidConfiguration):
            occurrences_in_window(Monthly(NthWeekday(5, FRIDAY)), JAN_1)


class TestScheduledOccurrences:
    def test_fallback_keeps_scheduled_date(self):
        pairs = scheduled_occurrences(Monthly(NthWeekday(1, SUNDAY)), date(2024, 8, 26))
        assert pairs == [(date(2024, 9, 1), date(2024, 8, 30))]

    def test_non_monthly_pairs_are_identical(self):
        pairs = scheduled_occurrences(Weekly(frozenset({MONDAY, WEDNESDAY})), JAN_1)
        assert pairs == [
            (date(2024, 1, 1), date(2024, 1, 1)),
            (date(2024, 1, 3), date(2024, 1, 3)),
        ]

    def test_matches_occurrences_in_window(self):
        rule = Monthly(LastWeekday(SATURDAY))
        pairs = scheduled_occurrences(rule, date(2024, 1, 22))
        assert [assigned for _, assigned in pairs] == occurrences_in_window(
            rule, date(2024, 1, 22),
        )
