"""Token sign-in with the anonymous fallback."""

from __future__ import annotations

import pytest

from rotamax import auth, models
from rotamax.errors import AuthenticationFailed


def test_anonymous_sign_in_returns_token(db) -> None:
    user, token = auth.sign_in(db)

    assert token.startswith(f"{user.id}.")
    assert db.get(models.User, user.id) is not None


def test_token_sign_in_returns_same_user(db) -> None:
    user, token = auth.sign_in(db)
    again, new_token = auth.sign_in(db, token)

    assert again.id == user.id
    assert new_token is None


def test_bad_token_falls_back_to_new_anonymous_user(db) -> None:
    user, token = auth.sign_in(db)
    other, new_token = auth.sign_in(db, f"{user.id}.wrong-secret")

    assert other.id != user.id
    assert new_token is not None
    assert db.query(models.User).count() == 2


@pytest.mark.parametrize("token", ["", "no-dot", ".secret", "missing-user.secret"])
def test_token_sign_in_rejects(db, token) -> None:
    with pytest.raises(AuthenticationFailed):
        auth.sign_in_with_token(db, token)


def test_bcrypt_verify_tolerates_garbage_hash() -> None:
    assert auth.bcrypt_verify("secret", "not-a-hash") is False
    assert auth.bcrypt_verify("secret", auth.bcrypt_hash("secret")) is True
