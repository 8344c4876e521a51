"""Tests for src.core.watering — schedule math, validators and Russian plurals."""

from datetime import date, datetime

import pytest

from src.core.errors import IntervalInvalid, LastWateringInFuture, TitleEmpty, TitleTooLong
from src.core.watering import (
    ALLOWED_INTERVALS,
    NO_DESCRIPTION,
    TITLE_MAX_LENGTH,
    compute_next_watering,
    format_date,
    format_interval,
    normalize_description,
    pluralize_days,
    validate_interval,
    validate_last_watering,
    validate_title,
)


class TestComputeNextWatering:
    def test_adds_interval(self):
        assert compute_next_watering(date(2024, 6, 10), 7) == date(2024, 6, 17)

    def test_crosses_month_and_year(self):
        assert compute_next_watering(date(2024, 12, 25), 10) == date(2025, 1, 4)

    def test_leap_day(self):
        assert compute_next_watering(date(2024, 2, 28), 1) == date(2024, 2, 29)

    def test_no_clamp_to_today(self):
        # A long-overdue group stays overdue until the user confirms watering
        assert compute_next_watering(date(2020, 1, 1), 3) == date(2020, 1, 4)

    @pytest.mark.parametrize("interval", ALLOWED_INTERVALS)
    def test_difference_is_interval(self, interval):
        last = date(2024, 3, 1)
        assert (compute_next_watering(last, interval) - last).days == interval


class TestValidateTitle:
    def test_strips_whitespace(self):
        assert validate_title("  Кухня  ") == "Кухня"

    def test_empty_rejected(self):
        with pytest.raises(TitleEmpty):
            validate_title("   ")

    def test_none_rejected(self):
        with pytest.raises(TitleEmpty):
            validate_title(None)

    def test_max_length_accepted(self):
        title = "а" * TITLE_MAX_LENGTH
        assert validate_title(title) == title

    def test_too_long_rejected(self):
        with pytest.raises(TitleTooLong) as exc_info:
            validate_title("а" * (TITLE_MAX_LENGTH + 1))
        assert str(TITLE_MAX_LENGTH) in str(exc_info.value)


class TestValidateInterval:
    def test_allowed(self):
        assert validate_interval(7) == 7

    @pytest.mark.parametrize("interval", [0, -1, 8, 31, 365])
    def test_not_allowed(self, interval):
        with pytest.raises(IntervalInvalid):
            validate_interval(interval)


class TestValidateLastWatering:
    def test_today_is_fine(self):
        now = datetime(2024, 6, 10, 23, 59)
        assert validate_last_watering(date(2024, 6, 10), now) == date(2024, 6, 10)

    def test_past_is_fine(self):
        assert validate_last_watering(date(2023, 1, 1), date(2024, 6, 10)) == date(2023, 1, 1)

    def test_future_rejected(self):
        with pytest.raises(LastWateringInFuture):
            validate_last_watering(date(2024, 6, 11), datetime(2024, 6, 10, 12, 0))


class TestDescriptionAndFormatting:
    def test_blank_description_becomes_placeholder(self):
        assert normalize_description("") == NO_DESCRIPTION
        assert normalize_description(None) == NO_DESCRIPTION
        assert normalize_description("  ") == NO_DESCRIPTION

    def test_description_stripped(self):
        assert normalize_description(" на подоконнике ") == "на подоконнике"

    def test_format_date(self):
        assert format_date(date(2024, 6, 1)) == "01.06.2024"

    def test_format_missing_date(self):
        assert format_date(None) == NO_DESCRIPTION

    def test_format_interval(self):
        assert format_interval(3) == "3 дня"
        assert format_interval(14) == "14 дней"
        assert format_interval(21) == "21 день"


class TestPluralizeDays:
    @pytest.mark.parametrize("n", [1, 21, 31, 101, 121])
    def test_singular(self, n):
        assert pluralize_days(n) == "день"

    @pytest.mark.parametrize("n", [2, 3, 4, 22, 24, 102, 134])
    def test_few(self, n):
        assert pluralize_days(n) == "дня"

    @pytest.mark.parametrize("n", [0, 5, 10, 11, 12, 13, 14, 19, 20, 111, 112, 114, 200])
    def test_many(self, n):
        assert pluralize_days(n) == "дней"

    def test_law_holds_for_range(self):
        for n in range(1, 201):
            if n % 10 == 1 and n % 100 != 11:
                expected = "день"
            elif n % 10 in (2, 3, 4) and n % 100 not in (12, 13, 14):
                expected = "дня"
            else:
                expected = "дней"
            assert pluralize_days(n) == expected, n
