"""Repository layer exports."""

from app.repositories.circuits import (
    CircuitRepository,
    InMemoryCircuitRepository,
    SqlAlchemyCircuitRepository,
    mint_service_number,
)
from app.repositories.errors import RepositoryError, RepositoryTimeoutError

__all__ = [
    "CircuitRepository",
    "InMemoryCircuitRepository",
    "RepositoryError",
    "RepositoryTimeoutError",
    "SqlAlchemyCircuitRepository",
    "mint_service_number",
]
