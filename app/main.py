from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, FastAPI

from app.circuits.workflow import CommitGuard
from app.config import REPOSITORY_BACKEND_DATABASE, AppSettings, get_settings
from app.db.session import create_app_engine, create_session_factory
from app.dependencies import get_app_settings
from app.repositories.circuits import (
    CircuitRepository,
    InMemoryCircuitRepository,
    SqlAlchemyCircuitRepository,
)
from app.repositories.demo_data import DEMO_CIRCUITS
from app.routes.circuits import router as circuits_router

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def create_app(
    settings: AppSettings | None = None,
    *,
    repository: CircuitRepository | None = None,
) -> FastAPI:
    app_settings = settings or get_settings()
    configure_logging(app_settings)

    app = FastAPI(title="Circuit Provisioning Portal", version="0.1.0")
    app.state.settings = app_settings
    app.state.circuit_repository = repository or create_circuit_repository(app_settings)
    app.state.commit_guard = CommitGuard()

    app.include_router(circuits_router)

    @app.get("/", tags=["system"], name="root")
    async def root(
        current_settings: Annotated[AppSettings, Depends(get_app_settings)],
    ) -> dict[str, str]:
        return {"service": "circuit-portal", "status": "ok", "env": current_settings.app_env}

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("app").setLevel(settings.log_level)


def create_circuit_repository(settings: AppSettings) -> CircuitRepository:
    if settings.repository_backend == REPOSITORY_BACKEND_DATABASE:
        engine = create_app_engine(settings.database_url or None)
        logger.info("using database circuit repository")
        return SqlAlchemyCircuitRepository(
            create_session_factory(engine),
            search_key=settings.search_key,
            timeout_seconds=settings.repository_timeout_seconds,
        )

    logger.info(
        "using in-memory circuit repository (demo data %s)",
        "seeded" if settings.seed_demo_data else "empty",
    )
    return InMemoryCircuitRepository(
        DEMO_CIRCUITS if settings.seed_demo_data else (),
        search_key=settings.search_key,
        latency_seconds=settings.simulated_latency_seconds,
    )


app = create_app()
