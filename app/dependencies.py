"""Common FastAPI dependencies."""

from __future__ import annotations

from typing import cast

from fastapi import Request

from app.circuits.workflow import CommitGuard
from app.config import AppSettings
from app.repositories.circuits import CircuitRepository


def get_app_settings(request: Request) -> AppSettings:
    return cast(AppSettings, request.app.state.settings)


def get_circuit_repository(request: Request) -> CircuitRepository:
    return cast(CircuitRepository, request.app.state.circuit_repository)


def get_commit_guard(request: Request) -> CommitGuard:
    return cast(CommitGuard, request.app.state.commit_guard)
