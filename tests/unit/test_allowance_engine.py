"""Daily allowance redistribution."""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from components.allowance.engine import (
    EXPONENT_LIMIT,
    compute_allowances,
    date_key,
    days_in_month,
    merge_spent,
    parse_amount,
    resolve_amount,
)

APRIL = 3  # 0-based, 30 days


def _day(result, day_number):
    return result.days[day_number - 1]


class TestCalendar:

    @pytest.mark.parametrize("year, month, expected", [
        (2024, 0, 31),
        (2024, 1, 29),
        (2023, 1, 28),
        (1900, 1, 28),
        (2000, 1, 29),
        (2024, 3, 30),
        (2024, 11, 31),
    ])
    def test_days_in_month(self, year, month, expected):
        assert days_in_month(year, month) == expected

    def test_out_of_range_month_rolls_into_next_year(self):
        result = compute_allowances(2024, 12, "310", "0", {}, date(2025, 1, 1))
        assert (result.year, result.month) == (2025, 0)
        assert result.days[0].date == date(2025, 1, 1)

    def test_negative_month_rolls_into_previous_year(self):
        assert days_in_month(2024, -1) == 31
        result = compute_allowances(2024, -1, "0", "0", {}, date(2023, 12, 1))
        assert (result.year, result.month) == (2023, 11)

    def test_date_key_is_iso_with_1_based_month(self):
        assert date_key(2024, 0, 5) == "2024-01-05"
        assert date_key(2024, 11, 31) == "2024-12-31"


class TestParseAmount:

    @pytest.mark.parametrize("value, expected", [
        ("3000", Decimal("3000")),
        (" 12.50 ", Decimal("12.50")),
        (42, Decimal("42")),
        (0.1, Decimal("0.1")),
        (Decimal("7.25"), Decimal("7.25")),
        ("", Decimal("0")),
        ("   ", Decimal("0")),
        ("abc", Decimal("0")),
        ("12abc", Decimal("12")),
        ("-3.5 EUR", Decimal("-3.5")),
        (".5", Decimal("0.5")),
        ("1e3x", Decimal("1e3")),
        ("1,000", Decimal("1")),
        ("$5", Decimal("0")),
        (None, Decimal("0")),
        ("NaN", Decimal("0")),
        ("Infinity", Decimal("0")),
        (True, Decimal("0")),
    ])
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    def test_resolve_amount_prefers_edit(self):
        assert resolve_amount("2500", Decimal("3000.00")) == Decimal("2500")

    def test_resolve_amount_falls_back_on_empty_edit(self):
        assert resolve_amount("", Decimal("3000.00")) == Decimal("3000")
        assert resolve_amount(None, "120") == Decimal("120")
        assert resolve_amount(None, None) == Decimal("0")


class TestMergeSpent:

    def test_stored_entries_keyed_by_iso_date(self):
        entries = [
            SimpleNamespace(date=date(2024, 4, 1), spent=Decimal("50.00")),
            {"date": "2024-04-02", "spent": "12.5"},
        ]
        assert merge_spent(entries) == {
            "2024-04-01": Decimal("50.00"),
            "2024-04-02": Decimal("12.5"),
        }

    def test_overlay_wins_over_stored_value(self):
        entries = [SimpleNamespace(date=date(2024, 4, 1), spent=Decimal("50.00"))]
        overlay = {"2024-04-01": "75", date(2024, 4, 3): "oops"}
        merged = merge_spent(entries, overlay)
        assert merged["2024-04-01"] == Decimal("75")
        assert merged["2024-04-03"] == Decimal("0")


class TestComputeAllowances:

    def test_even_split_before_month_starts(self):
        result = compute_allowances(2024, APRIL, "3000", "0", {}, date(2024, 3, 15))
        assert result.days_count == 30
        assert result.available_money == Decimal("3000")
        assert result.base_daily_allowance == Decimal("100")
        assert result.rollover == 0
        assert all(day.allowed_spending == Decimal("100") for day in result.days)
        assert not any(day.is_past or day.is_today for day in result.days)

    def test_underspending_is_redistributed_from_today(self):
        result = compute_allowances(
            2024, APRIL, "3000", "0", {"2024-04-01": "50"}, date(2024, 4, 2)
        )
        assert result.rollover == Decimal("50")

        first, second, third = result.days[:3]
        assert first.is_past and not first.is_today
        assert first.allowed_spending == Decimal("100")
        assert first.spent == Decimal("50")

        assert second.is_today and not second.is_past
        assert second.allowed_spending == Decimal(2950) / 29
        assert round(second.allowed_spending, 2) == Decimal("101.72")

        # Later days share the same rollover over fewer days
        assert third.allowed_spending == Decimal(2850) / 28
        assert not third.is_today and not third.is_past

    def test_overspending_lowers_remaining_allowance(self):
        result = compute_allowances(
            2024, APRIL, "3000", "0", {"2024-04-01": "400"}, date(2024, 4, 2)
        )
        assert result.rollover == Decimal("-300")
        assert _day(result, 2).allowed_spending == Decimal(2600) / 29

    def test_past_days_keep_base_allowance(self):
        spent = {"2024-04-01": "10", "2024-04-02": "250", "2024-04-03": "99.99"}
        result = compute_allowances(2024, APRIL, "3000", "600", spent, date(2024, 4, 10))
        past = [day for day in result.days if day.is_past]
        assert len(past) == 9
        assert all(day.allowed_spending == result.base_daily_allowance for day in past)

    def test_rollover_is_sum_over_past_days(self):
        spent = {"2024-04-01": "10", "2024-04-02": "250", "2024-04-05": "99.99", "2024-04-20": "1000"}
        result = compute_allowances(2024, APRIL, "3000", "0", spent, date(2024, 4, 10))
        base = result.base_daily_allowance
        expected = sum(
            (base - day.spent for day in result.days if day.is_past),
            Decimal("0"),
        )
        assert result.rollover == expected
        assert result.rollover == Decimal("900") - Decimal("359.99")

    def test_future_spending_does_not_move_rollover(self):
        without = compute_allowances(2024, APRIL, "3000", "0", {}, date(2024, 4, 10))
        with_future = compute_allowances(
            2024, APRIL, "3000", "0", {"2024-04-20": "1000"}, date(2024, 4, 10)
        )
        assert with_future.rollover == without.rollover
        assert _day(with_future, 21).allowed_spending == _day(without, 21).allowed_spending
        assert _day(with_future, 20).spent == Decimal("1000")

    def test_spending_on_today_does_not_move_rollover(self):
        result = compute_allowances(
            2024, APRIL, "3000", "0", {"2024-04-01": "100", "2024-04-02": "500"}, date(2024, 4, 2)
        )
        assert result.rollover == 0
        assert _day(result, 2).spent == Decimal("500")
        assert _day(result, 2).allowed_spending == Decimal("100")

    def test_spending_on_first_day_as_today_leaves_rollover_at_zero(self):
        result = compute_allowances(
            2024, APRIL, "3000", "0", {"2024-04-01": "500"}, date(2024, 4, 1)
        )
        assert result.rollover == 0
        assert _day(result, 1).is_today
        assert _day(result, 1).allowed_spending == Decimal("100")

    def test_huge_amounts_do_not_overflow(self):
        result = compute_allowances(2024, APRIL, "1E+1000000", "0", {}, date(2024, 4, 2))
        assert result.available_money == Decimal("1E+1000000")
        assert result.rollover == result.base_daily_allowance
        assert all(day.allowed_spending > 0 for day in result.days)

    def test_amounts_with_absurd_exponents_count_as_zero(self):
        result = compute_allowances(
            2024, APRIL, f"1E+{EXPONENT_LIMIT + 1}", "1000", {"2024-04-01": Decimal(f"1E-{EXPONENT_LIMIT + 1}")},
            date(2024, 4, 2),
        )
        assert result.total_amount == 0
        assert result.available_money == Decimal("-1000")
        assert _day(result, 1).spent == 0

    def test_no_spending_rolls_over_full_base(self):
        result = compute_allowances(2024, APRIL, "3000", "0", {}, date(2024, 4, 11))
        assert result.rollover == 10 * result.base_daily_allowance

    def test_last_day_gets_base_plus_rollover(self):
        spent = {date_key(2024, APRIL, day): "80" for day in range(1, 30)}
        result = compute_allowances(2024, APRIL, "3000", "0", spent, date(2024, 4, 30))
        last = result.days[-1]
        assert last.is_today
        assert result.rollover == Decimal("29") * Decimal("20")
        assert last.allowed_spending == result.base_daily_allowance + result.rollover

    def test_savings_above_income_gives_negative_allowances(self):
        result = compute_allowances(2024, APRIL, "1000", "1200", {}, date(2024, 3, 1))
        assert result.available_money == Decimal("-200")
        assert result.base_daily_allowance < 0
        assert all(day.allowed_spending < 0 for day in result.days)

    def test_month_fully_in_the_past(self):
        spent = {"2024-04-01": "500"}
        result = compute_allowances(2024, APRIL, "3000", "0", spent, date(2024, 5, 1))
        assert all(day.is_past for day in result.days)
        assert result.rollover == Decimal("2500")

    def test_datetime_today_is_truncated_to_date(self):
        spent = {"2024-04-01": "50"}
        from_date = compute_allowances(2024, APRIL, "3000", "0", spent, date(2024, 4, 2))
        from_datetime = compute_allowances(2024, APRIL, "3000", "0", spent, datetime(2024, 4, 2, 18, 45))
        assert from_datetime == from_date
        assert _day(from_datetime, 2).is_today

    def test_unparseable_amounts_count_as_zero(self):
        result = compute_allowances(2024, APRIL, "", "abc", {"2024-04-01": "x"}, date(2024, 4, 2))
        assert result.total_amount == 0
        assert result.desired_saving == 0
        assert result.base_daily_allowance == 0
        assert result.rollover == 0
        assert _day(result, 1).spent == 0

    def test_result_is_deterministic(self):
        args = (2024, 1, "1234.56", "100.01", {"2024-02-03": "17.3"}, date(2024, 2, 14))
        assert compute_allowances(*args).model_dump() == compute_allowances(*args).model_dump()

    def test_days_are_in_calendar_order(self):
        result = compute_allowances(2024, 1, "290", "0", {}, date(2024, 2, 14))
        assert [day.date.day for day in result.days] == list(range(1, 30))
        assert [day.date_key for day in result.days][:2] == ["2024-02-01", "2024-02-02"]
