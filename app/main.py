from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Fail fast when the client document store has no usable database URL.

    CLOUD_DATABASE_URL only counts when ENVIRONMENT selects a cloud profile,
    the same rule ``resolve_database_url`` applies.
    """

    from db.config import CLOUD_ENVIRONMENTS, load_env_files

    load_env_files()

    errors: list[str] = []

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = [os.getenv("DATABASE_URL", ""), os.getenv("LOCAL_DATABASE_URL", "")]
    if environment in CLOUD_ENVIRONMENTS:
        candidates.append(os.getenv("CLOUD_DATABASE_URL", ""))
    if not any(url.strip() for url in candidates):
        errors.append(
            "No database URL configured. Set DATABASE_URL or LOCAL_DATABASE_URL, "
            "or CLOUD_DATABASE_URL with ENVIRONMENT set to one of: "
            + ", ".join(sorted(CLOUD_ENVIRONMENTS))
            + "."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Client document store is unreachable.") from exc


def _check_schema() -> None:
    """
    Refuse to serve until the client_documents migration has been applied.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base
    from db.session import get_engine

    missing = sorted(set(Base.metadata.tables) - set(sa_inspect(get_engine()).get_table_names()))
    if missing:
        logger.critical("Missing tables %s; run 'alembic upgrade head'.", ", ".join(missing))
        raise RuntimeError(f"Client document tables not migrated: {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _check_db()
    _check_schema()
    logger.info("Client document store ready")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Client Portfolio API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import client_import_router, dashboard_router

    application.include_router(client_import_router)
    application.include_router(dashboard_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
