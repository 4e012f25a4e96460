"""SQLAlchemy ORM models for circuit provisioning records."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _text_column() -> Mapped[str]:
    return mapped_column(Text, nullable=False, default="", server_default=text("''"))


class Circuit(Base):
    __tablename__ = "circuit"
    __table_args__ = (
        Index("idx_circuit_circuit_id", "circuit_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    service_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    circuit_id: Mapped[str] = _text_column()
    client_name: Mapped[str] = _text_column()
    client_ip: Mapped[str] = _text_column()
    subnet: Mapped[str] = _text_column()
    gateway: Mapped[str] = _text_column()
    dns: Mapped[str] = _text_column()
    vlan: Mapped[str] = mapped_column(String(8), nullable=False, default="", server_default=text("''"))
    bandwidth: Mapped[str] = _text_column()
    location: Mapped[str] = _text_column()
    mux_id: Mapped[str] = _text_column()
    port_id: Mapped[str] = _text_column()
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
