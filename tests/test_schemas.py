"""Form coercion for settings and daily entries, plus currency display."""

from __future__ import annotations

from datetime import date

import pytest

from rotamax.formatting import format_currency
from rotamax.schemas import DailyLogCreate, FuelType, Summary, UserSettingsUpdate


def test_unparseable_numbers_become_zero() -> None:
    data = UserSettingsUpdate(
        maintenance_cost="abc",
        maintenance_interval_km="",
        daily_goal=None,
    )
    assert data.maintenance_cost == 0
    assert data.maintenance_interval_km == 0
    assert data.daily_goal == 0


def test_negative_and_non_finite_numbers_become_zero() -> None:
    data = UserSettingsUpdate(maintenance_cost="-10", daily_goal="nan")
    assert data.maintenance_cost == 0
    assert data.daily_goal == 0


def test_decimal_comma_is_accepted() -> None:
    assert UserSettingsUpdate(daily_goal="150,75").daily_goal == pytest.approx(150.75)


def test_interval_truncates_to_int() -> None:
    assert UserSettingsUpdate(maintenance_interval_km="1000.9").maintenance_interval_km == 1000


@pytest.mark.parametrize("raw, expected", [("5", 5), ("6", 6), (7, 7), ("9", 7), ("x", 7), (None, 7), ("0", 7)])
def test_working_days_constrained(raw, expected) -> None:
    assert UserSettingsUpdate(working_days_per_week=raw).working_days_per_week == expected


def test_unknown_fuel_type_falls_back_to_gasoline() -> None:
    assert UserSettingsUpdate(fuel_type="diesel").fuel_type is FuelType.GASOLINE
    assert UserSettingsUpdate(fuel_type=" Alcohol ").fuel_type is FuelType.ALCOHOL


def test_empty_image_means_none() -> None:
    assert UserSettingsUpdate(profile_image="  ").profile_image is None


def test_amortized_cost() -> None:
    assert UserSettingsUpdate(maintenance_cost=700, working_days_per_week=7).amortized_maintenance_cost == 100
    assert UserSettingsUpdate(maintenance_cost=80, working_days_per_week=5).amortized_maintenance_cost == 16
    assert UserSettingsUpdate(maintenance_cost=0, working_days_per_week=6).amortized_maintenance_cost == 0


def test_daily_log_amounts_coerced() -> None:
    log = DailyLogCreate(date=date(2024, 1, 1), gross_income="185.50", fuel_cost="oops")
    assert log.gross_income == pytest.approx(185.5)
    assert log.fuel_cost == 0


def test_summary_net_and_display() -> None:
    summary = Summary(gross_total=1500, fuel_total=200.5, amortized_total=65.25)
    assert summary.net_profit == pytest.approx(1234.25)
    assert summary.display["net_profit"] == "R$ 1.234,25"


@pytest.mark.parametrize(
    "amount, expected",
    [(0, "R$ 0,00"), (185.5, "R$ 185,50"), (1234567.891, "R$ 1.234.567,89"), (-35, "-R$ 35,00")],
)
def test_format_currency(amount, expected) -> None:
    assert format_currency(amount) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("1.234,56", 1234.56), ("10abc", 10), (" 80.5 reais", 80.5), ("R$ 10", 0), ("1e3", 1000)],
)
def test_numbers_read_like_form_input(raw, expected) -> None:
    assert UserSettingsUpdate(maintenance_cost=raw).maintenance_cost == pytest.approx(expected)
