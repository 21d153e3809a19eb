"""Database URL assembly and the missing-configuration failure."""

from __future__ import annotations

import pytest

from rotamax.config import Settings
from rotamax.errors import ConfigurationMissing


def _settings(**fields) -> Settings:
    base = {"database_url": None, "mysql_user": None, "mysql_password": None, "mysql_host": None, "mysql_db": None}
    base.update(fields)
    return Settings(_env_file=None, **base)


def test_missing_database_configuration_is_fatal() -> None:
    with pytest.raises(ConfigurationMissing):
        _settings().sqlalchemy_url


def test_partial_mysql_configuration_is_fatal() -> None:
    with pytest.raises(ConfigurationMissing):
        _settings(mysql_user="rota", mysql_host="localhost").sqlalchemy_url


def test_mysql_parts_build_url() -> None:
    config = _settings(mysql_user="rota", mysql_password="pw", mysql_host="db", mysql_db="rotamax")
    assert config.sqlalchemy_url == "mysql+mysqldb://rota:pw@db/rotamax?charset=utf8mb4"


def test_database_url_wins() -> None:
    config = _settings(database_url="sqlite:///x.db", mysql_user="rota")
    assert config.sqlalchemy_url == "sqlite:///x.db"


def test_session_key_fallbacks() -> None:
    assert _settings(secret_key=None, session_secret="alt").session_key == "alt"
    assert _settings(secret_key=None, session_secret=None).session_key == "dev-secret-change-me"
