# rotamax/auth.py
"""Sign-in: a ``<user_id>.<secret>`` token, with one fallback to anonymous.

Anonymous sign-in mints a fresh user and hands its token back once; the
caller keeps it to come back as the same user later.
"""

from __future__ import annotations

import secrets
from typing import Optional, Tuple

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rotamax import crud, models
from rotamax.errors import AuthenticationFailed, TrackerError
from rotamax.logging_utils import get_logger

LOGGER = get_logger(__name__)


def bcrypt_verify(plain: str, hashed: Optional[str]) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), (hashed or "").encode("utf-8"))
    except ValueError:
        return False


def bcrypt_hash(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def sign_in_with_token(db: Session, token: str) -> models.User:
    user_id, _, secret = (token or "").strip().partition(".")
    if not user_id or not secret:
        raise AuthenticationFailed("Malformed sign-in token.")
    try:
        user = crud.get_user(db, user_id)
    except SQLAlchemyError as exc:
        raise AuthenticationFailed() from exc
    if not user or not bcrypt_verify(secret, user.token_hash):
        raise AuthenticationFailed("Invalid sign-in token.")
    return user


def sign_in_anonymously(db: Session) -> Tuple[models.User, str]:
    secret = secrets.token_urlsafe(24)
    try:
        user = crud.create_user(db, bcrypt_hash(secret))
    except TrackerError as exc:
        raise AuthenticationFailed() from exc
    return user, f"{user.id}.{secret}"


def sign_in(db: Session, token: Optional[str] = None) -> Tuple[models.User, Optional[str]]:
    """Return the signed-in user and, for a new anonymous user, its token."""
    if token:
        try:
            return sign_in_with_token(db, token), None
        except AuthenticationFailed as exc:
            LOGGER.warning("Token sign-in failed (%s); falling back to anonymous", exc.message)
    user, new_token = sign_in_anonymously(db)
    LOGGER.info("Anonymous user %s signed in", user.id)
    return user, new_token
