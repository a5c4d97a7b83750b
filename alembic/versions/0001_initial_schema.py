"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "draws",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("draw_date", sa.Date(), nullable=False),
        sa.Column(
            "draw_time",
            sa.Enum("two_pm", "five_pm", "nine_pm", name="drawtime", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("winning_number", sa.String(length=16), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "active", "completed", "cancelled",
                name="drawstatus", native_enum=False, length=16,
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draws")),
        sa.UniqueConstraint("draw_date", "draw_time", name="uq_draws_date_time"),
    )
    op.create_index(op.f("ix_draws_draw_date"), "draws", ["draw_date"], unique=False)

    op.create_table(
        "prize_configurations",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("standard", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("rambolito_unique", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("rambolito_double", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("created_by", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "standard >= 0 AND rambolito_unique >= 0 AND rambolito_double >= 0",
            name=op.f("ck_prize_configurations_non_negative_multipliers"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prize_configurations")),
    )

    op.create_table(
        "tickets",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("ticket_number", sa.String(length=32), nullable=False),
        sa.Column("agent_id", ID_TYPE, nullable=False),
        sa.Column("draw_id", ID_TYPE, nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "active", "settled_win", "settled_lose", "pending_approval",
                "claimed", "cancelled",
                name="ticketstatus", native_enum=False, length=20,
            ),
            nullable=False,
        ),
        sa.Column("claimer_name", sa.String(length=100), nullable=True),
        sa.Column("claimer_phone", sa.String(length=32), nullable=True),
        sa.Column("claimer_address", sa.Text(), nullable=True),
        sa.Column("cancelled_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["draw_id"], ["draws.id"],
            name=op.f("fk_tickets_draw_id_draws"), ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tickets")),
        sa.UniqueConstraint("ticket_number", name="uq_tickets_ticket_number"),
    )
    op.create_index(op.f("ix_tickets_agent_id"), "tickets", ["agent_id"], unique=False)
    op.create_index(op.f("ix_tickets_draw_id"), "tickets", ["draw_id"], unique=False)
    op.create_index("ix_tickets_status", "tickets", ["status"], unique=False)

    op.create_table(
        "bets",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("ticket_id", ID_TYPE, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("bet_type", sa.String(length=20), nullable=False),
        sa.Column("combination", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Numeric(precision=16, scale=2), nullable=False),
        sa.CheckConstraint("amount > 0", name=op.f("ck_bets_positive_amount")),
        sa.ForeignKeyConstraint(
            ["ticket_id"], ["tickets.id"],
            name=op.f("fk_bets_ticket_id_tickets"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_bets")),
    )
    op.create_index(op.f("ix_bets_ticket_id"), "bets", ["ticket_id"], unique=False)

    op.create_table(
        "claim_records",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("ticket_id", ID_TYPE, nullable=False),
        sa.Column("payout_amount", sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_by", sa.String(length=100), nullable=True),
        sa.Column("prize_configuration_id", ID_TYPE, nullable=True),
        sa.Column(
            "ledger_status",
            sa.Enum(
                "pending", "credited", "failed",
                name="ledgerstatus", native_enum=False, length=16,
            ),
            nullable=False,
        ),
        sa.Column("ledger_reference", sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(
            ["prize_configuration_id"], ["prize_configurations.id"],
            name=op.f("fk_claim_records_prize_configuration_id_prize_configurations"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["ticket_id"], ["tickets.id"],
            name=op.f("fk_claim_records_ticket_id_tickets"), ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claim_records")),
        sa.UniqueConstraint("ticket_id", name="uq_claim_records_ticket_id"),
    )

    op.create_table(
        "claim_audit_entries",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("ticket_id", ID_TYPE, nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "ticket_settled", "claim_requested", "claim_approved",
                "claim_rejected", "claim_paid", "ledger_failed", "ticket_cancelled",
                name="claimaction", native_enum=False, length=32,
            ),
            nullable=False,
        ),
        sa.Column(
            "old_status",
            sa.Enum(
                "active", "settled_win", "settled_lose", "pending_approval",
                "claimed", "cancelled",
                name="ticketstatus", native_enum=False, length=20,
            ),
            nullable=True,
        ),
        sa.Column(
            "new_status",
            sa.Enum(
                "active", "settled_win", "settled_lose", "pending_approval",
                "claimed", "cancelled",
                name="ticketstatus", native_enum=False, length=20,
            ),
            nullable=True,
        ),
        sa.Column("performed_by", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["ticket_id"], ["tickets.id"],
            name=op.f("fk_claim_audit_entries_ticket_id_tickets"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claim_audit_entries")),
    )
    op.create_index(
        op.f("ix_claim_audit_entries_ticket_id"),
        "claim_audit_entries",
        ["ticket_id"],
        unique=False,
    )
    op.create_index(
        "ix_claim_audit_entries_action", "claim_audit_entries", ["action"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_claim_audit_entries_action", table_name="claim_audit_entries")
    op.drop_index(op.f("ix_claim_audit_entries_ticket_id"), table_name="claim_audit_entries")
    op.drop_table("claim_audit_entries")
    op.drop_table("claim_records")
    op.drop_index(op.f("ix_bets_ticket_id"), table_name="bets")
    op.drop_table("bets")
    op.drop_index("ix_tickets_status", table_name="tickets")
    op.drop_index(op.f("ix_tickets_draw_id"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_agent_id"), table_name="tickets")
    op.drop_table("tickets")
    op.drop_table("prize_configurations")
    op.drop_index(op.f("ix_draws_draw_date"), table_name="draws")
    op.drop_table("draws")
