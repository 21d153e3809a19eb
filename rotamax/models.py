# rotamax/models.py
from __future__ import annotations
import uuid
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.dialects.mysql import LONGTEXT
from sqlalchemy.orm import relationship
from rotamax.db import Base
from datetime import datetime


def _new_uid() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=_new_uid)
    token_hash = Column(String(200), nullable=False)  # bcrypt hash of the sign-in secret
    created_at = Column(DateTime, default=datetime.utcnow)

    # relationships
    settings = relationship("UserSettings", back_populates="user", uselist=False, cascade="all,delete-orphan")
    daily_logs = relationship("DailyLog", back_populates="user", cascade="all,delete-orphan")


class UserSettings(Base):
    __tablename__ = "user_settings"
    user_id = Column(String(32), ForeignKey("users.id"), primary_key=True)
    display_name = Column(String(200), default="")
    vehicle_label = Column(String(200), default="")
    fuel_type = Column(String(20), default="gasoline")
    maintenance_cost = Column(Float, default=0.0)
    maintenance_interval_km = Column(Integer, default=0)  # stored and shown only
    working_days_per_week = Column(Integer, default=7)
    daily_goal = Column(Float, default=0.0)
    profile_image = Column(Text().with_variant(LONGTEXT(), "mysql"), default="")  # data URL
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="settings")


class DailyLog(Base):
    __tablename__ = "daily_logs"
    # insertion order; breaks ties between entries sharing a date
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False, default=_new_uid)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    gross_income = Column(Float, nullable=False, default=0.0)
    fuel_cost = Column(Float, nullable=False, default=0.0)
    amortized_maintenance_cost = Column(Float, nullable=False, default=0.0)  # frozen at creation
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="daily_logs")
