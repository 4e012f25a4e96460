from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace

import pytest

from app.circuits.models import CircuitRecord
from app.circuits.workflow import NotificationLog
from app.repositories.demo_data import DEMO_CIRCUITS


@dataclass(slots=True)
class StubCircuitRepository:
    records: list[CircuitRecord] = field(default_factory=lambda: list(DEMO_CIRCUITS))
    find_error: Exception | None = None
    save_error: Exception | None = None
    find_gate: asyncio.Event | None = None
    save_gate: asyncio.Event | None = None
    saved_at: str = "2026-10-18 12:00:00"
    minted_service_number: str = "SVC-NEW000000001"
    find_calls: list[str] = field(default_factory=list)
    save_calls: list[CircuitRecord] = field(default_factory=list)

    async def find(self, identifier: str) -> CircuitRecord | None:
        self.find_calls.append(identifier)
        if self.find_gate is not None:
            await self.find_gate.wait()
        if self.find_error is not None:
            raise self.find_error
        for record in self.records:
            if record.service_number.lower() == identifier.lower():
                return record
        return None

    async def save(self, record: CircuitRecord) -> CircuitRecord:
        self.save_calls.append(record)
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.save_error is not None:
            raise self.save_error
        service_number = record.service_number or self.minted_service_number
        saved = replace(record, service_number=service_number, last_updated=self.saved_at)
        self.records = [
            saved if existing.service_number == service_number else existing
            for existing in self.records
        ]
        if saved not in self.records:
            self.records.append(saved)
        return saved


@pytest.fixture()
def stub_repository() -> StubCircuitRepository:
    return StubCircuitRepository()


@pytest.fixture()
def notification_log() -> NotificationLog:
    return NotificationLog()
