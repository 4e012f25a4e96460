"""Database layer exports."""

from app.db.base import Base
from app.db.models import Circuit

__all__ = [
    "Base",
    "Circuit",
]
