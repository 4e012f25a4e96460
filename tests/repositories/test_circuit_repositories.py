from __future__ import annotations

import asyncio
import re
import time
from dataclasses import replace
from datetime import UTC, datetime

import pytest
from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from app.db.base import Base
from app.db.models import Circuit
from app.repositories.circuits import (
    InMemoryCircuitRepository,
    SqlAlchemyCircuitRepository,
    mint_service_number,
)
from app.repositories.demo_data import DEMO_CIRCUITS
from app.repositories.errors import RepositoryError, RepositoryTimeoutError

SERVICE_NUMBER_RE = re.compile(r"^SVC-[0-9A-F]{12}$")


def _fixed_clock() -> datetime:
    return datetime(2026, 10, 18, 12, 30, 45, 123456, tzinfo=UTC)


def test_mint_service_number_is_opaque_and_unique() -> None:
    minted = {mint_service_number() for _ in range(200)}

    assert len(minted) == 200
    assert all(SERVICE_NUMBER_RE.fullmatch(value) for value in minted)


def test_in_memory_find_is_case_insensitive() -> None:
    repository = InMemoryCircuitRepository(DEMO_CIRCUITS)

    found = asyncio.run(repository.find("svc002"))
    missing = asyncio.run(repository.find("svc999"))

    assert found is not None
    assert found.client_name == "TechStart Inc."
    assert missing is None


def test_in_memory_first_match_wins_for_duplicates() -> None:
    duplicate = replace(DEMO_CIRCUITS[1], service_number="svc001")
    repository = InMemoryCircuitRepository([DEMO_CIRCUITS[0], duplicate])

    found = asyncio.run(repository.find("SVC001"))

    assert found == DEMO_CIRCUITS[0]


def test_in_memory_can_search_by_circuit_id() -> None:
    repository = InMemoryCircuitRepository(DEMO_CIRCUITS, search_key="circuit_id")

    found = asyncio.run(repository.find("cir-003-chi"))

    assert found is not None
    assert found.service_number == "SVC003"


def test_unsupported_search_key_is_rejected() -> None:
    with pytest.raises(ValueError, match="search key"):
        InMemoryCircuitRepository(search_key="client_name")


def test_in_memory_save_replaces_in_place_with_read_after_write() -> None:
    repository = InMemoryCircuitRepository(DEMO_CIRCUITS, clock=_fixed_clock)
    edited = replace(DEMO_CIRCUITS[0], vlan="150")

    saved = asyncio.run(repository.save(edited))
    reloaded = asyncio.run(repository.find("SVC001"))

    assert saved.last_updated == "2026-10-18 12:30:45"
    assert reloaded == saved
    assert len(repository.records) == len(DEMO_CIRCUITS)
    assert repository.records[0].vlan == "150"


def test_in_memory_save_mints_service_number_for_new_records() -> None:
    repository = InMemoryCircuitRepository(clock=_fixed_clock)
    draft = replace(DEMO_CIRCUITS[0], service_number="", last_updated="")

    saved = asyncio.run(repository.save(draft))

    assert SERVICE_NUMBER_RE.fullmatch(saved.service_number)
    assert asyncio.run(repository.find(saved.service_number.lower())) == saved


def test_database_save_inserts_updates_and_finds_case_insensitively(
    session_factory: sessionmaker[Session],
) -> None:
    repository = SqlAlchemyCircuitRepository(session_factory, clock=_fixed_clock)

    inserted = asyncio.run(repository.save(DEMO_CIRCUITS[0]))
    updated = asyncio.run(repository.save(replace(inserted, bandwidth="1 Gbps")))
    found = asyncio.run(repository.find("svc001"))

    assert inserted.service_number == "SVC001"
    assert updated.bandwidth == "1 Gbps"
    assert updated.last_updated == "2026-10-18 12:30:45"
    assert found == updated

    with session_factory() as session:
        row_count = session.execute(select(func.count()).select_from(Circuit)).scalar_one()
    assert row_count == 1


def test_database_save_mints_service_number_for_registrations(
    session_factory: sessionmaker[Session],
) -> None:
    repository = SqlAlchemyCircuitRepository(session_factory, clock=_fixed_clock)
    draft = replace(DEMO_CIRCUITS[2], service_number="", last_updated="")

    saved = asyncio.run(repository.save(draft))

    assert SERVICE_NUMBER_RE.fullmatch(saved.service_number)
    assert saved.client_name == "Global Finance Ltd."
    assert asyncio.run(repository.find(saved.service_number)) == saved


def test_database_search_by_circuit_id(session_factory: sessionmaker[Session]) -> None:
    writer = SqlAlchemyCircuitRepository(session_factory)
    for record in DEMO_CIRCUITS:
        asyncio.run(writer.save(record))
    reader = SqlAlchemyCircuitRepository(session_factory, search_key="circuit_id")

    found = asyncio.run(reader.find("CIR-002-la"))

    assert found is not None
    assert found.service_number == "SVC002"


def test_database_errors_surface_as_repository_errors(
    db_engine: Engine,
    session_factory: sessionmaker[Session],
) -> None:
    repository = SqlAlchemyCircuitRepository(session_factory)
    Base.metadata.drop_all(db_engine)

    with pytest.raises(RepositoryError, match="circuit find failed"):
        asyncio.run(repository.find("SVC001"))


def test_slow_database_calls_time_out(session_factory: sessionmaker[Session]) -> None:
    def slow_session() -> Session:
        time.sleep(0.3)
        return session_factory()

    repository = SqlAlchemyCircuitRepository(
        slow_session,  # type: ignore[arg-type]
        timeout_seconds=0.05,
    )

    with pytest.raises(RepositoryTimeoutError) as exc_info:
        asyncio.run(repository.find("SVC001"))

    assert exc_info.value.operation == "find"


def test_timed_out_registration_leaves_no_row(session_factory: sessionmaker[Session]) -> None:
    def slow_clock() -> datetime:
        time.sleep(0.3)
        return _fixed_clock()

    repository = SqlAlchemyCircuitRepository(
        session_factory,
        timeout_seconds=0.05,
        clock=slow_clock,
    )
    draft = replace(DEMO_CIRCUITS[0], service_number="", last_updated="")

    with pytest.raises(RepositoryTimeoutError) as exc_info:
        asyncio.run(repository.save(draft))

    assert exc_info.value.operation == "save"
    with session_factory() as session:
        row_count = session.execute(select(func.count()).select_from(Circuit)).scalar_one()
    assert row_count == 0


def test_timed_out_edit_keeps_stored_values(session_factory: sessionmaker[Session]) -> None:
    asyncio.run(SqlAlchemyCircuitRepository(session_factory).save(DEMO_CIRCUITS[0]))

    def slow_clock() -> datetime:
        time.sleep(0.3)
        return _fixed_clock()

    slow_repository = SqlAlchemyCircuitRepository(
        session_factory,
        timeout_seconds=0.05,
        clock=slow_clock,
    )

    with pytest.raises(RepositoryTimeoutError):
        asyncio.run(slow_repository.save(replace(DEMO_CIRCUITS[0], vlan="999")))

    reloaded = asyncio.run(SqlAlchemyCircuitRepository(session_factory).find("SVC001"))
    assert reloaded is not None
    assert reloaded.vlan == "100"
