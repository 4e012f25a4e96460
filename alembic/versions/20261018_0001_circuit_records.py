"""circuit records

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01

"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

_TEXT_FIELDS = (
    "circuit_id",
    "client_name",
    "client_ip",
    "subnet",
    "gateway",
    "dns",
)
_TRAILING_TEXT_FIELDS = (
    "bandwidth",
    "location",
    "mux_id",
    "port_id",
)


def _uuid_column(name: str, dialect_name: str) -> sa.Column[sa.Uuid]:
    kwargs: dict[str, object] = {"nullable": False, "primary_key": True}
    if dialect_name == "postgresql":
        kwargs["server_default"] = sa.text("gen_random_uuid()")
    return sa.Column(name, sa.Uuid(), **kwargs)


def _text_column(name: str) -> sa.Column[str]:
    return sa.Column(name, sa.Text(), nullable=False, server_default=sa.text("''"))


def upgrade() -> None:
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    if dialect_name == "postgresql":
        op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        "circuit",
        _uuid_column("id", dialect_name),
        sa.Column("service_number", sa.String(length=64), nullable=False),
        *(_text_column(name) for name in _TEXT_FIELDS),
        sa.Column("vlan", sa.String(length=8), nullable=False, server_default=sa.text("''")),
        *(_text_column(name) for name in _TRAILING_TEXT_FIELDS),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("service_number", name="uq_circuit_service_number"),
    )
    op.create_index("idx_circuit_circuit_id", "circuit", ["circuit_id"])


def downgrade() -> None:
    op.drop_index("idx_circuit_circuit_id", table_name="circuit")
    op.drop_table("circuit")
