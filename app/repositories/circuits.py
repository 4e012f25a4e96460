"""Circuit repository contract and implementations."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.circuits.models import CircuitRecord, format_timestamp
from app.db.models import Circuit
from app.repositories.errors import RepositoryError, RepositoryTimeoutError

logger = logging.getLogger(__name__)

SERVICE_NUMBER_PREFIX = "SVC-"
SEARCHABLE_FIELDS = frozenset({"service_number", "circuit_id"})

type Clock = Callable[[], datetime]


class CircuitRepository(Protocol):
    async def find(self, identifier: str) -> CircuitRecord | None:
        """Return the first circuit whose search key matches ``identifier`` case-insensitively."""

    async def save(self, record: CircuitRecord) -> CircuitRecord:
        """Persist ``record`` and return it with ``last_updated`` refreshed.

        Records without a service number are new registrations and get a
        freshly minted one.
        """


def mint_service_number() -> str:
    return f"{SERVICE_NUMBER_PREFIX}{uuid.uuid4().hex[:12].upper()}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _require_searchable(search_key: str) -> str:
    if search_key not in SEARCHABLE_FIELDS:
        raise ValueError(
            f"unsupported circuit search key {search_key!r}; expected one of "
            f"{sorted(SEARCHABLE_FIELDS)}"
        )
    return search_key


class InMemoryCircuitRepository(CircuitRepository):
    def __init__(
        self,
        records: Iterable[CircuitRecord] = (),
        *,
        search_key: str = "service_number",
        latency_seconds: float = 0.0,
        clock: Clock = _utcnow,
    ) -> None:
        self._records = list(records)
        self._search_key = _require_searchable(search_key)
        self._latency_seconds = max(0.0, latency_seconds)
        self._clock = clock

    @property
    def records(self) -> tuple[CircuitRecord, ...]:
        return tuple(self._records)

    async def find(self, identifier: str) -> CircuitRecord | None:
        await self._simulate_latency()
        needle = identifier.strip().lower()
        for record in self._records:
            if record.field_value(self._search_key).lower() == needle:
                return record
        return None

    async def save(self, record: CircuitRecord) -> CircuitRecord:
        await self._simulate_latency()
        service_number = mint_service_number() if record.is_new else record.service_number
        saved = replace(
            record,
            service_number=service_number,
            last_updated=format_timestamp(self._clock()),
        )
        for index, existing in enumerate(self._records):
            if existing.service_number.lower() == service_number.lower():
                self._records[index] = saved
                break
        else:
            self._records.append(saved)
        logger.debug("saved circuit %s in memory", service_number)
        return saved

    async def _simulate_latency(self) -> None:
        if self._latency_seconds:
            await asyncio.sleep(self._latency_seconds)


class SqlAlchemyCircuitRepository(CircuitRepository):
    """Circuit repository over a SQLAlchemy session factory.

    Session work is blocking, so each call runs in a worker thread. The
    thread is always awaited to completion; a call that passes
    ``timeout_seconds`` rolls back instead of committing and surfaces as
    ``RepositoryTimeoutError``.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        search_key: str = "service_number",
        timeout_seconds: float = 10.0,
        clock: Clock = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._search_key = _require_searchable(search_key)
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    async def find(self, identifier: str) -> CircuitRecord | None:
        return await self._run("find", self._find_sync, identifier)

    async def save(self, record: CircuitRecord) -> CircuitRecord:
        return await self._run("save", self._save_sync, record)

    async def _run[T, A](
        self,
        operation: str,
        work: Callable[[A, float], T],
        argument: A,
    ) -> T:
        deadline = time.monotonic() + self._timeout_seconds
        try:
            return await asyncio.to_thread(work, argument, deadline)
        except RepositoryTimeoutError:
            logger.warning("circuit %s exceeded %ss", operation, self._timeout_seconds)
            raise
        except SQLAlchemyError as exc:
            logger.exception("circuit %s failed", operation)
            raise RepositoryError(f"circuit {operation} failed") from exc

    def _check_deadline(self, operation: str, deadline: float) -> None:
        if time.monotonic() > deadline:
            raise RepositoryTimeoutError(operation, self._timeout_seconds)

    def _find_sync(self, identifier: str, deadline: float) -> CircuitRecord | None:
        column = getattr(Circuit, self._search_key)
        statement = (
            select(Circuit)
            .where(func.lower(column) == identifier.strip().lower())
            .order_by(Circuit.created_at.asc(), Circuit.id.asc())
            .limit(1)
        )
        with self._session_factory() as session:
            row = session.execute(statement).scalar_one_or_none()
            self._check_deadline("find", deadline)
            return _to_record(row) if row is not None else None

    def _save_sync(self, record: CircuitRecord, deadline: float) -> CircuitRecord:
        now = self._clock()
        with self._session_factory() as session:
            row: Circuit | None = None
            if not record.is_new:
                row = session.execute(
                    select(Circuit).where(
                        func.lower(Circuit.service_number) == record.service_number.lower()
                    )
                ).scalar_one_or_none()
            if row is None:
                service_number = mint_service_number() if record.is_new else record.service_number
                row = Circuit(service_number=service_number)
                session.add(row)

            _apply_record(row, record)
            row.last_updated = now.replace(microsecond=0)
            # Closing the session without commit discards the pending write.
            self._check_deadline("save", deadline)
            session.commit()
            return _to_record(row)


def _apply_record(row: Circuit, record: CircuitRecord) -> None:
    row.circuit_id = record.circuit_id
    row.client_name = record.client_name
    row.client_ip = record.client_ip
    row.subnet = record.subnet
    row.gateway = record.gateway
    row.dns = record.dns
    row.vlan = record.vlan
    row.bandwidth = record.bandwidth
    row.location = record.location
    row.mux_id = record.mux_id
    row.port_id = record.port_id


def _to_record(row: Circuit) -> CircuitRecord:
    return CircuitRecord(
        service_number=row.service_number,
        circuit_id=row.circuit_id,
        client_name=row.client_name,
        client_ip=row.client_ip,
        subnet=row.subnet,
        gateway=row.gateway,
        dns=row.dns,
        vlan=row.vlan,
        bandwidth=row.bandwidth,
        location=row.location,
        mux_id=row.mux_id,
        port_id=row.port_id,
        last_updated=format_timestamp(row.last_updated) if row.last_updated else "",
    )
