# rotamax/config.py
from pydantic_settings import BaseSettings

from rotamax.errors import ConfigurationMissing


class Settings(BaseSettings):
    mysql_user: str | None = None
    mysql_password: str | None = None
    mysql_host: str | None = None
    mysql_db: str | None = None

    # Full URL wins over the MySQL parts (sqlite for local runs and tests)
    database_url: str | None = None

    # App secrets
    secret_key: str | None = None  # Primary secret
    session_secret: str | None = None  # Optional legacy/alt secret

    log_level: str = "INFO"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        if not all((self.mysql_user, self.mysql_password, self.mysql_host, self.mysql_db)):
            raise ConfigurationMissing(
                "Database configuration not found. Set DATABASE_URL or the MYSQL_* variables."
            )
        # Use mysqlclient (MySQLdb) driver
        return (
            f"mysql+mysqldb://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}/{self.mysql_db}?charset=utf8mb4"
        )

    @property
    def session_key(self) -> str:
        """
        Unified session secret.
        - If SECRET_KEY is set, use it.
        - Otherwise fall back to SESSION_SECRET.
        - If neither is set, fall back to a dev default.
        """
        return (
            self.secret_key
            or self.session_secret
            or "dev-secret-change-me"
        )

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
