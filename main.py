# main.py (project root)

from __future__ import annotations

import asyncio
import contextlib
from datetime import date, datetime, time as dtime
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from rotamax.config import settings
from rotamax.db import Base, SessionLocal, engine, get_db
from rotamax import auth, crud, schemas
from rotamax.errors import AuthenticationFailed, TrackerError, WriteFailed
from rotamax.images import MAX_IMAGE_BYTES, encode_profile_image
from rotamax.logging_utils import get_logger
from rotamax.reports import build_report
from rotamax.session import SessionState, TrackerSession

LOGGER = get_logger(__name__)

# ---------------- App ----------------

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Rota Max Profit Tracker", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=settings.session_key)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    body: Dict[str, object] = {"error": exc.message}
    if isinstance(exc, WriteFailed):
        body["submitted"] = exc.submitted
    return JSONResponse(body, status_code=exc.status_code)


# ---------------- Helpers ----------------

def parse_date_from_form(date_str: Optional[str], fallback_dt: Optional[datetime] = None) -> datetime:
    """Accept 'YYYY-MM-DDTHH:MM' or 'YYYY-MM-DD'."""
    if date_str:
        try:
            return datetime.fromisoformat(date_str.strip())
        except ValueError:
            pass
    return fallback_dt or datetime.now()


def parse_day_from_form(date_str: Optional[str], fallback: Optional[date] = None) -> date:
    return parse_date_from_form(date_str, datetime.combine(fallback or date.today(), dtime.min)).date()


def current_user_id(request: Request) -> str:
    uid = request.session.get("user_id")
    if not uid:
        raise AuthenticationFailed("Not signed in yet.")
    return uid


# ---------------- Health / Ping ----------------

@app.get("/__ping")
def ping() -> Dict[str, bool]:
    return {"pong": True}


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


# ---------------- Auth ----------------

@app.post("/auth/session", response_model=schemas.SessionInfo, response_model_exclude_none=True)
def auth_session(
    request: Request,
    token: str = Form(""),
    db: Session = Depends(get_db),
):
    token = token.strip()
    uid = request.session.get("user_id")
    if not token and uid:
        # already signed in: keep the same user across reloads
        user = crud.get_user(db, uid)
        if user:
            return schemas.SessionInfo(user_id=user.id)
    user, new_token = auth.sign_in(db, token or None)
    request.session["user_id"] = user.id
    return schemas.SessionInfo(user_id=user.id, token=new_token)


@app.post("/auth/logout")
def logout(request: Request) -> Dict[str, bool]:
    request.session.pop("user_id", None)
    return {"ok": True}


# ---------------- Settings ----------------

@app.get("/settings", response_model=schemas.UserSettings)
def settings_get(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    return crud.load_settings(db, user_id)


@app.post("/settings", response_model=schemas.UserSettings)
def settings_save(
    display_name: str = Form(""),
    vehicle_label: str = Form(""),
    fuel_type: str = Form("gasoline"),
    maintenance_cost: str = Form("0"),
    maintenance_interval_km: str = Form("0"),
    working_days_per_week: str = Form("7"),
    daily_goal: str = Form("0"),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    data = schemas.UserSettingsUpdate(
        display_name=display_name,
        vehicle_label=vehicle_label,
        fuel_type=fuel_type,
        maintenance_cost=maintenance_cost,
        maintenance_interval_km=maintenance_interval_km,
        working_days_per_week=working_days_per_week,
        daily_goal=daily_goal,
    )
    return crud.save_settings(db, user_id, data)


@app.post("/settings/photo", response_model=schemas.UserSettings)
async def settings_photo(
    photo: UploadFile = File(...),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    # one byte past the limit is enough to reject an oversized file
    raw = await photo.read(MAX_IMAGE_BYTES + 1)
    # rejected uploads never touch the stored image
    image = encode_profile_image(raw, photo.content_type)
    return await run_in_threadpool(crud.set_profile_image, db, user_id, image)


# ---------------- Daily Logs ----------------

@app.get("/daily", response_model=List[schemas.DailyLog])
def daily_list(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    return crud.list_daily_logs(db, user_id)


@app.get("/daily/preview")
def daily_preview(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)) -> Dict[str, object]:
    """Maintenance share the next entry will carry."""
    current = crud.load_settings(db, user_id)
    return {
        "maintenance_cost": current.maintenance_cost,
        "working_days_per_week": current.working_days_per_week,
        "amortized_maintenance_cost": current.amortized_maintenance_cost,
    }


@app.post("/daily", response_model=schemas.DailyLog, status_code=201)
def daily_create(
    date_str: Optional[str] = Form(None),
    gross_income: str = Form("0"),
    fuel_cost: str = Form("0"),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    log = schemas.DailyLogCreate(
        date=parse_day_from_form(date_str),
        gross_income=gross_income,
        fuel_cost=fuel_cost,
    )
    return crud.append_daily_log(db, user_id, log)


# ---------------- Reports ----------------

@app.get("/reports", response_model=schemas.Report)
def reports(
    today: Optional[str] = Query(None),  # YYYY-MM-DD
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    current = crud.load_settings(db, user_id)
    return build_report(crud.iter_daily_logs(db, user_id), current.daily_goal, parse_day_from_form(today))


def _user_id_for_token(token: str) -> str:
    db = SessionLocal()
    try:
        return auth.sign_in_with_token(db, token).id
    finally:
        db.close()


@app.websocket("/reports/live")
async def reports_live(websocket: WebSocket, token: Optional[str] = Query(None)):
    """Push the full tracker state on connect and after every change.

    The session cookie identifies the user; clients without one may pass
    their sign-in ``token`` as a query parameter instead.
    """
    await websocket.accept()
    tracker = TrackerSession()
    uid = websocket.session.get("user_id")
    if not uid and token:
        try:
            uid = await run_in_threadpool(_user_id_for_token, token)
        except AuthenticationFailed as exc:
            tracker.fail_authentication(exc)
            await websocket.send_json(tracker.snapshot())
            await websocket.close(code=1008)
            return
    if not uid:
        await websocket.send_json({"state": SessionState.AUTHENTICATING.value})
        await websocket.close(code=1008)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def push(changed: TrackerSession) -> None:
        # hub callbacks run on worker threads
        loop.call_soon_threadsafe(queue.put_nowait, changed.snapshot())

    tracker.on_change = push
    await run_in_threadpool(tracker.attach, uid)

    async def pump() -> None:
        while True:
            await websocket.send_json(await queue.get())

    sender = asyncio.create_task(pump())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        LOGGER.debug("Live report socket closed for %s", uid)
    finally:
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender
        tracker.detach()
