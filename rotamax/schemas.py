# rotamax/schemas.py
from __future__ import annotations

import math
import re
from datetime import date as date_type
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from rotamax.formatting import format_currency

WORKING_DAY_CHOICES = (5, 6, 7)
DEFAULT_WORKING_DAYS = 7


# leading number, like parseFloat: "10abc" -> 10
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def to_float_or_zero(val: Any) -> float:
    """Form value -> non-negative float; anything unparseable becomes 0.

    With a decimal comma present, dots are thousands separators
    ("1.234,56" -> 1234.56).
    """
    if val is None or isinstance(val, bool):
        return 0.0
    if isinstance(val, str):
        text = val.strip()
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        match = _NUMBER_PREFIX.match(text)
        if not match:
            return 0.0
        num = float(match.group(0))
    else:
        try:
            num = float(val)
        except (TypeError, ValueError):
            return 0.0
    if not math.isfinite(num) or num < 0:
        return 0.0
    return num


def to_int_or_zero(val: Any) -> int:
    # "1000.9" -> 1000, like the number inputs of the original form
    return int(to_float_or_zero(val))


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    ALCOHOL = "alcohol"


# ---------- Settings ----------
class UserSettingsBase(BaseModel):
    display_name: str = ""
    vehicle_label: str = ""
    fuel_type: FuelType = FuelType.GASOLINE
    maintenance_cost: float = 0.0
    maintenance_interval_km: int = 0
    working_days_per_week: int = DEFAULT_WORKING_DAYS
    daily_goal: float = 0.0
    profile_image: Optional[str] = None  # data URL; None means no image

    @field_validator("display_name", "vehicle_label", mode="before")
    @classmethod
    def _text(cls, v):
        return (str(v) if v is not None else "").strip()

    @field_validator("profile_image", mode="before")
    @classmethod
    def _image(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("fuel_type", mode="before")
    @classmethod
    def _fuel(cls, v):
        if isinstance(v, FuelType):
            return v
        try:
            return FuelType(str(v).strip().lower())
        except ValueError:
            return FuelType.GASOLINE

    @field_validator("maintenance_cost", "daily_goal", mode="before")
    @classmethod
    def _money(cls, v):
        return to_float_or_zero(v)

    @field_validator("maintenance_interval_km", mode="before")
    @classmethod
    def _km(cls, v):
        return to_int_or_zero(v)

    @field_validator("working_days_per_week", mode="before")
    @classmethod
    def _days(cls, v):
        days = to_int_or_zero(v)
        return days if days in WORKING_DAY_CHOICES else DEFAULT_WORKING_DAYS

    @property
    def amortized_maintenance_cost(self) -> float:
        """Maintenance cost spread over the working days of one week."""
        if self.maintenance_cost > 0 and self.working_days_per_week > 0:
            return self.maintenance_cost / self.working_days_per_week
        return 0.0


class UserSettingsUpdate(UserSettingsBase):
    pass


class UserSettings(UserSettingsBase):
    model_config = ConfigDict(from_attributes=True)


# ---------- DailyLog ----------
class DailyLogCreate(BaseModel):
    date: date_type
    gross_income: float = 0.0
    fuel_cost: float = 0.0

    @field_validator("gross_income", "fuel_cost", mode="before")
    @classmethod
    def _money(cls, v):
        return to_float_or_zero(v)


class DailyLog(BaseModel):
    id: str
    date: date_type
    gross_income: float
    fuel_cost: float
    amortized_maintenance_cost: float
    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def net_profit(self) -> float:
        return self.gross_income - self.fuel_cost - self.amortized_maintenance_cost


# ---------- Reports ----------
class Summary(BaseModel):
    gross_total: float = 0.0
    fuel_total: float = 0.0
    amortized_total: float = 0.0

    @computed_field
    @property
    def net_profit(self) -> float:
        return self.gross_total - self.fuel_total - self.amortized_total

    @computed_field
    @property
    def display(self) -> dict[str, str]:
        return {
            "gross_total": format_currency(self.gross_total),
            "fuel_total": format_currency(self.fuel_total),
            "amortized_total": format_currency(self.amortized_total),
            "net_profit": format_currency(self.net_profit),
        }


class MonthlySummary(Summary):
    # both counters span every log ever seen, not only this month
    distinct_dates_logged: int = 0
    goals_met: int = 0


class Report(BaseModel):
    today: date_type
    week_start: date_type
    month_start: date_type
    daily_goal: float
    weekly: Summary
    monthly: MonthlySummary


# ---------- Session ----------
class SessionInfo(BaseModel):
    user_id: str
    token: Optional[str] = None  # only returned when a new anonymous user was minted
