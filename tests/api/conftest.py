from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import AppSettings
from app.main import create_app
from app.repositories.circuits import InMemoryCircuitRepository
from app.repositories.demo_data import DEMO_CIRCUITS


@pytest.fixture()
def api_settings() -> AppSettings:
    return AppSettings(
        app_env="test",
        log_level="WARNING",
        repository_backend="memory",
        search_key="service_number",
        seed_demo_data=True,
        repository_timeout_seconds=2.0,
    )


@pytest.fixture()
def circuit_repository() -> InMemoryCircuitRepository:
    return InMemoryCircuitRepository(DEMO_CIRCUITS)


@pytest.fixture()
def test_app(
    api_settings: AppSettings,
    circuit_repository: InMemoryCircuitRepository,
) -> FastAPI:
    return create_app(settings=api_settings, repository=circuit_repository)


@pytest.fixture()
def client(test_app: FastAPI) -> Generator[TestClient]:
    with TestClient(test_app) as test_client:
        yield test_client
