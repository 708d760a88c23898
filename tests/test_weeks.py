"""Tests for ISO week ids and document paths."""

from datetime import date, datetime

import pytest

from chefjul.weeks import (
    get_week_id,
    is_valid_week_id,
    meal_plan_path,
    parse_week_id,
    user_path,
)


class TestGetWeekId:
    def test_mid_year(self):
        assert get_week_id(date(2025, 2, 12)) == "2025-W07"

    def test_zero_padded(self):
        assert get_week_id(date(2025, 1, 6)) == "2025-W02"

    def test_january_first_in_previous_iso_year(self):
        """Jan 1 2021 (Friday) belongs to week 53 of 2020."""
        assert get_week_id(date(2021, 1, 1)) == "2020-W53"

    def test_december_in_next_iso_year(self):
        """Dec 30 2024 (Monday) starts week 1 of 2025."""
        assert get_week_id(date(2024, 12, 30)) == "2025-W01"

    def test_accepts_datetime(self):
        assert get_week_id(datetime(2025, 2, 16, 23, 59)) == "2025-W07"


class TestParseWeekId:
    def test_returns_monday(self):
        assert parse_week_id("2025-W07") == date(2025, 2, 10)

    def test_round_trip_with_year_boundary(self):
        assert get_week_id(parse_week_id("2020-W53")) == "2020-W53"

    @pytest.mark.parametrize("week_id", ["", "2025-7", "2025-W7", "25-W07", "2025-W00", "2025-w07"])
    def test_malformed(self, week_id):
        with pytest.raises(ValueError):
            parse_week_id(week_id)

    def test_week_53_in_52_week_year(self):
        with pytest.raises(ValueError):
            parse_week_id("2025-W53")

    def test_is_valid_week_id(self):
        assert is_valid_week_id("2026-W01")
        assert not is_valid_week_id("2026-W60")


class TestPaths:
    def test_user_path(self):
        assert user_path("abc") == "users/abc"

    def test_meal_plan_path_from_id(self):
        assert meal_plan_path("abc", "2025-W07") == "users/abc/mealPlans/2025-W07"

    def test_meal_plan_path_from_date(self):
        assert meal_plan_path("abc", date(2021, 1, 1)) == "users/abc/mealPlans/2020-W53"
