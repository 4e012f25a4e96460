"""Application configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

import yaml

RepositoryBackend = Literal[
    "memory",
    "database",
]
REPOSITORY_BACKEND_MEMORY: RepositoryBackend = "memory"
REPOSITORY_BACKEND_DATABASE: RepositoryBackend = "database"

SearchKey = Literal[
    "service_number",
    "circuit_id",
]
SEARCH_KEY_SERVICE_NUMBER: SearchKey = "service_number"
SEARCH_KEY_CIRCUIT_ID: SearchKey = "circuit_id"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class AppSettings:
    app_env: str = "development"
    log_level: str = "INFO"
    runtime_config_path: str = "runtime-config.yaml"
    database_url: str = ""
    repository_backend: RepositoryBackend = REPOSITORY_BACKEND_MEMORY
    search_key: SearchKey = SEARCH_KEY_SERVICE_NUMBER
    seed_demo_data: bool = True
    repository_timeout_seconds: float = 10.0
    simulated_latency_seconds: float = 0.0

    @classmethod
    def from_yaml(cls, runtime_config_path: str = "runtime-config.yaml") -> AppSettings:
        normalized_path = runtime_config_path.strip() or "runtime-config.yaml"
        config = _load_runtime_config(normalized_path)

        app_cfg = cast(dict[str, Any], config.get("app", {}))
        circuits_cfg = cast(dict[str, Any], config.get("circuits", {}))

        app_env = str(app_cfg.get("env", "development")).lower()

        return cls(
            app_env=app_env,
            log_level=_resolve_log_level(app_cfg),
            runtime_config_path=normalized_path,
            database_url=os.environ.get("DATABASE_URL", str(app_cfg.get("database_url", ""))),
            repository_backend=_resolve_repository_backend(circuits_cfg),
            search_key=_resolve_search_key(circuits_cfg),
            seed_demo_data=bool(circuits_cfg.get("seed_demo_data", app_env != "production")),
            repository_timeout_seconds=_resolve_seconds(
                circuits_cfg, "repository_timeout_seconds", default=10.0, minimum=0.1
            ),
            simulated_latency_seconds=_resolve_seconds(
                circuits_cfg, "simulated_latency_seconds", default=0.0, minimum=0.0
            ),
        )

    @classmethod
    def from_env(cls, runtime_config_path: str | None = None) -> AppSettings:
        path = runtime_config_path or os.environ.get(
            "CIRCUIT_PORTAL_RUNTIME_CONFIG_PATH", "runtime-config.yaml"
        )
        return cls.from_yaml(runtime_config_path=path)


def _load_runtime_config(runtime_config_path: str) -> dict[str, Any]:
    path = Path(runtime_config_path)
    if not path.exists() or not path.is_file():
        return {}

    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(parsed, dict):
        return parsed
    return {}


def _resolve_log_level(app_cfg: dict[str, Any]) -> str:
    level = str(app_cfg.get("log_level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"unsupported app.log_level in runtime config: {level!r}; "
            f"expected one of {sorted(_LOG_LEVELS)}"
        )
    return level


def _resolve_repository_backend(circuits_cfg: dict[str, Any]) -> RepositoryBackend:
    normalized = str(
        circuits_cfg.get("repository_backend", REPOSITORY_BACKEND_MEMORY)
    ).lower()

    if normalized == REPOSITORY_BACKEND_MEMORY:
        return REPOSITORY_BACKEND_MEMORY
    if normalized == REPOSITORY_BACKEND_DATABASE:
        return REPOSITORY_BACKEND_DATABASE

    raise ValueError(
        "unsupported circuits.repository_backend in runtime config: "
        f"{normalized!r}; expected one of "
        f"{REPOSITORY_BACKEND_MEMORY!r}, {REPOSITORY_BACKEND_DATABASE!r}"
    )


def _resolve_search_key(circuits_cfg: dict[str, Any]) -> SearchKey:
    normalized = str(circuits_cfg.get("search_key", SEARCH_KEY_SERVICE_NUMBER)).lower()

    if normalized == SEARCH_KEY_SERVICE_NUMBER:
        return SEARCH_KEY_SERVICE_NUMBER
    if normalized == SEARCH_KEY_CIRCUIT_ID:
        return SEARCH_KEY_CIRCUIT_ID

    raise ValueError(
        "unsupported circuits.search_key in runtime config: "
        f"{normalized!r}; expected one of "
        f"{SEARCH_KEY_SERVICE_NUMBER!r}, {SEARCH_KEY_CIRCUIT_ID!r}"
    )


def _resolve_seconds(
    circuits_cfg: dict[str, Any],
    key: str,
    *,
    default: float,
    minimum: float,
) -> float:
    raw = circuits_cfg.get(key, default)
    try:
        seconds = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"unsupported circuits.{key} in runtime config: {raw!r}; expected a number of seconds"
        ) from exc
    return max(minimum, seconds)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings.from_env()
