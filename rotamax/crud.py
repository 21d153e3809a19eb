# rotamax/crud.py
from __future__ import annotations

from typing import Iterator, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rotamax import models, schemas
from rotamax.db import SessionLocal
from rotamax.errors import ReadFailed, WriteFailed
from rotamax.events import SnapshotHub
from rotamax.logging_utils import get_logger

LOGGER = get_logger(__name__)

SETTINGS = "settings"
LOGS = "logs"

hub = SnapshotHub()


# ---------- USER ----------
def get_user(db: Session, user_id: str):
    return db.get(models.User, user_id)


def create_user(db: Session, token_hash: str) -> models.User:
    obj = models.User(token_hash=token_hash)
    try:
        db.add(obj); db.commit(); db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Creating user failed")
        raise WriteFailed("Error creating the user.") from exc
    LOGGER.info("User %s created", obj.id)
    return obj


# ---------- SETTINGS ----------
def load_settings(db: Session, user_id: str) -> schemas.UserSettings:
    """Saved settings for the user, or defaults when nothing was saved yet."""
    try:
        obj = db.get(models.UserSettings, user_id)
    except SQLAlchemyError as exc:
        LOGGER.exception("Reading settings for %s failed", user_id)
        raise ReadFailed("Error loading settings.") from exc
    if not obj:
        return schemas.UserSettings()
    return schemas.UserSettings.model_validate(obj)


def save_settings(db: Session, user_id: str, data: schemas.UserSettingsUpdate) -> schemas.UserSettings:
    """Upsert the whole settings record in one transaction.

    ``profile_image=None`` keeps the stored image.
    """
    fields = data.model_dump(exclude={"profile_image"})
    try:
        obj = db.get(models.UserSettings, user_id)
        if not obj:
            obj = models.UserSettings(user_id=user_id)
            db.add(obj)
        for k, v in fields.items():
            setattr(obj, k, v.value if isinstance(v, schemas.FuelType) else v)
        if data.profile_image is not None:
            obj.profile_image = data.profile_image
        db.commit(); db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Saving settings for %s failed", user_id)
        raise WriteFailed(
            "Error saving the settings. Check your connection.",
            submitted=data.model_dump(mode="json", exclude={"profile_image"}),
        ) from exc
    LOGGER.info("Settings saved for %s", user_id)
    hub.notify(user_id, SETTINGS)
    return schemas.UserSettings.model_validate(obj)


def set_profile_image(db: Session, user_id: str, image: str) -> schemas.UserSettings:
    current = load_settings(db, user_id)
    update = schemas.UserSettingsUpdate(**current.model_dump(exclude={"profile_image"}), profile_image=image)
    return save_settings(db, user_id, update)


# ---------- DAILY ----------
def append_daily_log(db: Session, user_id: str, log: schemas.DailyLogCreate) -> models.DailyLog:
    """Append one entry, freezing the maintenance share from the current settings."""
    try:
        current = db.get(models.UserSettings, user_id)
        snapshot = schemas.UserSettings.model_validate(current) if current else schemas.UserSettings()
        obj = models.DailyLog(
            user_id=user_id,
            date=log.date,
            gross_income=log.gross_income,
            fuel_cost=log.fuel_cost,
            amortized_maintenance_cost=snapshot.amortized_maintenance_cost,
        )
        db.add(obj); db.commit(); db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Adding daily log for %s failed", user_id)
        raise WriteFailed(
            "Error adding the daily record. Check your connection.",
            submitted=log.model_dump(mode="json"),
        ) from exc
    LOGGER.info("Daily log %s added for %s on %s", obj.id, user_id, obj.date.isoformat())
    hub.notify(user_id, LOGS)
    return obj


class DailyLogReader:
    """Lazy, restartable view of a user's logs, newest date first.

    Each iteration runs a fresh query; entries sharing a date come newest
    insertion first.
    """

    def __init__(self, db: Session, user_id: str, batch_size: int = 200) -> None:
        self.db = db
        self.user_id = user_id
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[models.DailyLog]:
        q = (
            self.db.query(models.DailyLog)
            .filter(models.DailyLog.user_id == self.user_id)
            .order_by(models.DailyLog.date.desc(), models.DailyLog.seq.desc())
        )
        try:
            yield from q.yield_per(self.batch_size)
        except SQLAlchemyError as exc:
            LOGGER.exception("Reading daily logs for %s failed", self.user_id)
            raise ReadFailed("Error loading daily records.") from exc


def iter_daily_logs(db: Session, user_id: str) -> DailyLogReader:
    return DailyLogReader(db, user_id)


def list_daily_logs(db: Session, user_id: str) -> List[schemas.DailyLog]:
    return [schemas.DailyLog.model_validate(obj) for obj in iter_daily_logs(db, user_id)]


# ---------- SNAPSHOT LOADERS ----------
def _load_settings_snapshot(user_id: str) -> schemas.UserSettings:
    db = SessionLocal()
    try:
        return load_settings(db, user_id)
    finally:
        db.close()


def _load_logs_snapshot(user_id: str) -> List[schemas.DailyLog]:
    db = SessionLocal()
    try:
        return list_daily_logs(db, user_id)
    finally:
        db.close()


hub.register_loader(SETTINGS, _load_settings_snapshot)
hub.register_loader(LOGS, _load_logs_snapshot)
