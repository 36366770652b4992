"""
Tests for the working-day calculator.

Covers:
- Weekend and holiday classification
- End/start date computation from a duration
- Shifting by N working days, including non-working origins
- Holiday inputs given as Holiday values, dates, datetimes and strings
- Calendar day classification for views
"""

from datetime import date, datetime, timezone

import pytest

from schedule_engines.holidays import get_peru_holidays
from schedule_engines.working_days import (
    add_working_days,
    calculate_end_date,
    calculate_start_date,
    count_working_days,
    days_in_range,
    holiday_dates,
    is_weekend,
    is_working_day,
    next_working_day,
    previous_working_day,
    subtract_working_days,
)
from schedule_kernel.domain.values import Holiday
from schedule_kernel.exceptions import InvalidInputError

MONDAY = date(2025, 6, 2)
FRIDAY = date(2025, 6, 6)
SATURDAY = date(2025, 6, 7)
SUNDAY = date(2025, 6, 8)
NEXT_MONDAY = date(2025, 6, 9)


class TestClassification:
    """Tests for weekend and holiday detection."""

    def test_weekend_days(self):
        assert is_weekend(SATURDAY)
        assert is_weekend(SUNDAY)
        assert not is_weekend(MONDAY)
        assert not is_weekend(FRIDAY)

    def test_weekday_is_working_without_holidays(self):
        assert is_working_day(MONDAY)
        assert is_working_day(MONDAY, holidays=())

    def test_holiday_is_not_working(self):
        assert not is_working_day(MONDAY, [Holiday(date=MONDAY, name="Feriado")])

    def test_holiday_lookup_ignores_time_of_day(self):
        """A holiday given as a datetime matches its whole calendar day."""
        holidays = [datetime(2025, 6, 2, 18, 30)]
        assert not is_working_day(MONDAY, holidays)

    def test_aware_holiday_is_read_in_business_timezone(self):
        """03:00 UTC on the 3rd is still the 2nd in Lima."""
        holidays = [datetime(2025, 6, 3, 3, 0, tzinfo=timezone.utc)]
        assert holiday_dates(holidays) == frozenset({MONDAY})

    def test_string_holidays(self):
        assert holiday_dates(["2025-06-03"]) == frozenset({date(2025, 6, 3)})

    def test_none_holidays_is_empty(self):
        assert holiday_dates(None) == frozenset()


class TestEndDate:
    """Tests for calculate_end_date."""

    def test_single_day(self):
        assert calculate_end_date(MONDAY, 1) == MONDAY

    def test_full_week(self):
        assert calculate_end_date(MONDAY, 5) == FRIDAY

    def test_crosses_weekend(self):
        assert calculate_end_date(FRIDAY, 2) == NEXT_MONDAY

    def test_weekend_start_rolls_forward(self):
        assert calculate_end_date(SATURDAY, 1) == NEXT_MONDAY
        assert calculate_end_date(SUNDAY, 3) == date(2025, 6, 11)

    def test_skips_midweek_holiday(self):
        holidays = [Holiday(date=date(2025, 6, 3), name="Feriado")]
        assert calculate_end_date(MONDAY, 5, holidays) == NEXT_MONDAY

    def test_weekend_holiday_is_skipped_once(self):
        """A holiday on a Saturday does not cost an extra working day."""
        holidays = [Holiday(date=SATURDAY, name="Feriado")]
        assert calculate_end_date(MONDAY, 6, holidays) == calculate_end_date(MONDAY, 6)
        assert calculate_end_date(MONDAY, 6, holidays) == NEXT_MONDAY

    def test_fiestas_patrias(self):
        """Friday 25 July 2025 plus one working day lands after 28-29 July."""
        holidays = get_peru_holidays(2025)
        assert calculate_end_date(date(2025, 7, 25), 2, holidays) == date(2025, 7, 30)

    def test_end_date_is_always_working_day(self):
        holidays = get_peru_holidays(2025)
        for duration in range(1, 30):
            end = calculate_end_date(date(2025, 12, 5), duration, holidays)
            assert is_working_day(end, holidays)

    @pytest.mark.parametrize("duration", [0, -1])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(InvalidInputError):
            calculate_end_date(MONDAY, duration)

    def test_boolean_duration_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_end_date(MONDAY, True)


class TestStartDate:
    """Tests for calculate_start_date."""

    def test_full_week_backward(self):
        assert calculate_start_date(FRIDAY, 5) == MONDAY

    def test_weekend_end_rolls_back(self):
        """A Sunday end with one day of work starts on the Friday before."""
        assert calculate_start_date(date(2025, 6, 1), 1) == date(2025, 5, 30)

    def test_crosses_weekend_backward(self):
        assert calculate_start_date(NEXT_MONDAY, 2) == FRIDAY

    def test_skips_holiday_backward(self):
        holidays = [Holiday(date=date(2025, 6, 5), name="Feriado")]
        assert calculate_start_date(FRIDAY, 3, holidays) == date(2025, 6, 3)

    @pytest.mark.parametrize("duration", [1, 2, 5, 9, 23])
    def test_inverse_of_end_date(self, duration):
        holidays = get_peru_holidays(2025)
        start = date(2025, 7, 21)
        end = calculate_end_date(start, duration, holidays)
        assert calculate_start_date(end, duration, holidays) == start

    def test_zero_duration_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_start_date(FRIDAY, 0)


class TestShifting:
    """Tests for add/subtract and next/previous working day."""

    def test_add_zero_from_working_day(self):
        assert add_working_days(MONDAY, 0) == MONDAY

    def test_add_zero_from_weekend_rolls_forward(self):
        assert add_working_days(SATURDAY, 0) == NEXT_MONDAY

    def test_add_across_weekend(self):
        assert add_working_days(FRIDAY, 1) == NEXT_MONDAY
        assert add_working_days(MONDAY, 10) == date(2025, 6, 16)

    def test_subtract_across_weekend(self):
        assert subtract_working_days(NEXT_MONDAY, 1) == FRIDAY

    def test_subtract_zero_from_weekend_rolls_back(self):
        assert subtract_working_days(SUNDAY, 0) == FRIDAY

    def test_negative_count_rejected(self):
        with pytest.raises(InvalidInputError):
            add_working_days(MONDAY, -1)
        with pytest.raises(InvalidInputError):
            subtract_working_days(MONDAY, -1)

    def test_next_working_day(self):
        assert next_working_day(FRIDAY) == NEXT_MONDAY
        assert next_working_day(MONDAY) == date(2025, 6, 3)

    def test_previous_working_day(self):
        assert previous_working_day(MONDAY) == date(2025, 5, 30)

    def test_next_working_day_skips_holidays(self):
        holidays = get_peru_holidays(2025)
        assert next_working_day(date(2025, 7, 25), holidays) == date(2025, 7, 30)


class TestCounting:
    """Tests for count_working_days and days_in_range."""

    def test_count_week(self):
        assert count_working_days(MONDAY, SUNDAY) == 5

    def test_count_inverted_range(self):
        assert count_working_days(FRIDAY, MONDAY) == 0

    def test_count_with_holiday(self):
        holidays = [Holiday(date=date(2025, 6, 4), name="Feriado")]
        assert count_working_days(MONDAY, FRIDAY, holidays) == 4

    def test_count_matches_end_date(self):
        holidays = get_peru_holidays(2025)
        end = calculate_end_date(date(2025, 12, 1), 17, holidays)
        assert count_working_days(date(2025, 12, 1), end, holidays) == 17

    def test_days_in_range_classification(self):
        holidays = [Holiday(date=NEXT_MONDAY, name="Feriado local")]
        days = days_in_range(FRIDAY, NEXT_MONDAY, holidays)

        assert [d.date for d in days] == [FRIDAY, SATURDAY, SUNDAY, NEXT_MONDAY]
        assert days[0].is_working
        assert days[1].is_weekend and not days[1].is_working
        assert days[3].is_holiday
        assert days[3].holiday_name == "Feriado local"
        assert not days[3].is_working
        assert days[0].holiday_name is None
