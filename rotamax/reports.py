# rotamax/reports.py
"""Weekly and monthly profit summaries.

``build_report`` is a pure function of the log sequence, the daily goal and
``today``. Logs are expected in read order (date descending, newest insertion
first); that order decides which entry of a repeated date is judged against
the goal.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Set

from rotamax import schemas


def start_of_week(day: date) -> date:
    """Monday of the ISO week containing ``day`` (Sunday belongs to the week before)."""
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


def start_of_month(day: date) -> date:
    if isinstance(day, datetime):
        day = day.date()
    return day.replace(day=1)


def net_profit(log) -> float:
    return (log.gross_income or 0.0) - (log.fuel_cost or 0.0) - (log.amortized_maintenance_cost or 0.0)


def build_report(logs: Iterable, daily_goal: float, today: Optional[date] = None) -> schemas.Report:
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    week_start = start_of_week(today)
    month_start = start_of_month(today)
    daily_goal = float(daily_goal or 0.0)

    week = {"gross": 0.0, "fuel": 0.0, "oil": 0.0}
    month = {"gross": 0.0, "fuel": 0.0, "oil": 0.0}
    days_logged: Set[date] = set()
    days_met_goal = 0

    for log in logs:
        net = net_profit(log)

        # judged once per date, by the first entry met in read order
        if log.date not in days_logged:
            if daily_goal > 0 and net >= daily_goal:
                days_met_goal += 1
            days_logged.add(log.date)

        # the two windows are independent: a week can straddle a month boundary
        if log.date >= week_start:
            week["gross"] += log.gross_income or 0.0
            week["fuel"] += log.fuel_cost or 0.0
            week["oil"] += log.amortized_maintenance_cost or 0.0
        if log.date >= month_start:
            month["gross"] += log.gross_income or 0.0
            month["fuel"] += log.fuel_cost or 0.0
            month["oil"] += log.amortized_maintenance_cost or 0.0

    return schemas.Report(
        today=today,
        week_start=week_start,
        month_start=month_start,
        daily_goal=daily_goal,
        weekly=schemas.Summary(
            gross_total=week["gross"],
            fuel_total=week["fuel"],
            amortized_total=week["oil"],
        ),
        monthly=schemas.MonthlySummary(
            gross_total=month["gross"],
            fuel_total=month["fuel"],
            amortized_total=month["oil"],
            distinct_dates_logged=len(days_logged),
            goals_met=days_met_goal,
        ),
    )
