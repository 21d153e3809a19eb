# rotamax/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from rotamax.config import settings
from rotamax.logging_utils import configure_root_logger, get_logger

configure_root_logger(settings.log_level.upper())
LOGGER = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        opts = {"connect_args": {"check_same_thread": False}}
        # keep one shared connection so an in-memory database survives across sessions
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            opts["poolclass"] = StaticPool
        return opts
    return {"pool_pre_ping": True}


# Create engine (raises ConfigurationMissing when no database is configured)
_url = settings.sqlalchemy_url
engine = create_engine(_url, future=True, **_engine_options(_url))
LOGGER.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False
)

# Base for models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
