"""Operator CLI for seeding and inspecting circuit records."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from app.circuits.models import CIRCUIT_FIELDS, LAST_UPDATED_FORMAT
from app.config import SEARCH_KEY_CIRCUIT_ID, SEARCH_KEY_SERVICE_NUMBER, get_settings
from app.db.models import Circuit
from app.db.session import get_session_factory, session_scope
from app.repositories.circuits import SqlAlchemyCircuitRepository
from app.repositories.demo_data import DEMO_CIRCUITS
from app.repositories.errors import RepositoryError


class CliValidationError(ValueError):
    """Raised when CLI input fails validation."""


def main(
    argv: Sequence[str] | None = None,
    *,
    session_factory: sessionmaker[Session] | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    factory = session_factory or get_session_factory()

    try:
        if args.command == "seed-demo":
            return _run_seed_demo(factory)
        if args.command == "show":
            return _run_show(args, factory)
    except CliValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except RepositoryError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3

    parser.error(f"unsupported command: {args.command}")
    return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m app.cli.circuits")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed-demo", help="insert the demo circuits that are not present yet")

    show_parser = subparsers.add_parser("show", help="print one circuit record")
    show_parser.add_argument("identifier")
    show_parser.add_argument(
        "--search-key",
        choices=(SEARCH_KEY_SERVICE_NUMBER, SEARCH_KEY_CIRCUIT_ID),
    )
    return parser


def _run_seed_demo(factory: sessionmaker[Session]) -> int:
    inserted = 0
    skipped = 0
    with session_scope(factory) as db_session:
        for record in DEMO_CIRCUITS:
            existing = db_session.execute(
                select(Circuit.id).where(
                    func.lower(Circuit.service_number) == record.service_number.lower()
                )
            ).scalar_one_or_none()
            if existing is not None:
                skipped += 1
                continue
            db_session.add(
                Circuit(
                    service_number=record.service_number,
                    circuit_id=record.circuit_id,
                    client_name=record.client_name,
                    client_ip=record.client_ip,
                    subnet=record.subnet,
                    gateway=record.gateway,
                    dns=record.dns,
                    vlan=record.vlan,
                    bandwidth=record.bandwidth,
                    location=record.location,
                    mux_id=record.mux_id,
                    port_id=record.port_id,
                    last_updated=datetime.strptime(
                        record.last_updated, LAST_UPDATED_FORMAT
                    ).replace(tzinfo=UTC),
                )
            )
            inserted += 1

    print(f"seeded demo circuits inserted={inserted} skipped={skipped}")
    return 0


def _run_show(args: argparse.Namespace, factory: sessionmaker[Session]) -> int:
    identifier = args.identifier.strip()
    if not identifier:
        raise CliValidationError("identifier is required")

    settings = get_settings()
    repository = SqlAlchemyCircuitRepository(
        factory,
        search_key=args.search_key or settings.search_key,
        timeout_seconds=settings.repository_timeout_seconds,
    )
    record = asyncio.run(repository.find(identifier))
    if record is None:
        print(f"no circuit found with identifier: {identifier}", file=sys.stderr)
        return 1

    for name in CIRCUIT_FIELDS:
        print(f"{name}: {record.field_value(name)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
