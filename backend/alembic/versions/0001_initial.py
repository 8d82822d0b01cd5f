"""initial draft schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("clerk_id", sa.String(length=128), nullable=False),
        sa.Column("full_name", sa.String(length=140), nullable=True),
        sa.Column("username", sa.String(length=80), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_clerk_id", "users", ["clerk_id"], unique=True)
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "teams",
        sa.Column("id", sa.String(length=16), primary_key=True),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state_prov", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=True),
        sa.Column("rookie_year", sa.Integer(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_teams_number", "teams", ["number"], unique=True)
    op.create_index("ix_teams_name", "teams", ["name"])

    op.create_table(
        "draft_rooms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("turn_time_seconds", sa.Integer(), nullable=False),
        sa.Column("snake_format", sa.Boolean(), nullable=False),
        sa.Column("round_count", sa.Integer(), nullable=False),
        sa.Column("teams_to_start", sa.Integer(), nullable=False),
        sa.Column("privacy", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_draft_position", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_draft_rooms_owner_id", "draft_rooms", ["owner_id"])
    op.create_index("ix_draft_rooms_privacy", "draft_rooms", ["privacy"])
    op.create_index("ix_draft_rooms_status", "draft_rooms", ["status"])

    op.create_table(
        "draft_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draft_room_id", sa.Integer(), sa.ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("draft_position", sa.Integer(), nullable=False),
        sa.Column("is_ready", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("draft_room_id", "draft_position", name="uq_draft_participants_room_position"),
        sa.UniqueConstraint("draft_room_id", "user_id", name="uq_draft_participants_room_user"),
    )
    op.create_index("ix_draft_participants_draft_room_id", "draft_participants", ["draft_room_id"])
    op.create_index("ix_draft_participants_user_id", "draft_participants", ["user_id"])

    op.create_table(
        "draft_picks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draft_room_id", sa.Integer(), sa.ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey("draft_participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("team_id", sa.String(length=16), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("sequence_number", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("picked_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("draft_room_id", "team_id", name="uq_draft_picks_room_team"),
        sa.UniqueConstraint("draft_room_id", "sequence_number", name="uq_draft_picks_room_sequence"),
    )
    op.create_index("ix_draft_picks_draft_room_id", "draft_picks", ["draft_room_id"])
    op.create_index("ix_draft_picks_participant_id", "draft_picks", ["participant_id"])
    op.create_index("ix_draft_picks_team_id", "draft_picks", ["team_id"])

    op.create_table(
        "roster_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draft_room_id", sa.Integer(), sa.ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("team_id", sa.String(length=16), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("is_starting", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("acquisition_type", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("draft_room_id", "team_id", name="uq_roster_entries_room_team"),
    )
    op.create_index("ix_roster_entries_draft_room_id", "roster_entries", ["draft_room_id"])
    op.create_index("ix_roster_entries_user_id", "roster_entries", ["user_id"])
    op.create_index("ix_roster_entries_team_id", "roster_entries", ["team_id"])

    op.create_table(
        "matchups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draft_room_id", sa.Integer(), sa.ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False),
        sa.Column("home_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("away_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
    )
    op.create_index("ix_matchups_draft_room_id", "matchups", ["draft_room_id"])
    op.create_index("ix_matchups_year", "matchups", ["year"])


def downgrade() -> None:
    op.drop_table("matchups")
    op.drop_table("roster_entries")
    op.drop_table("draft_picks")
    op.drop_table("draft_participants")
    op.drop_table("draft_rooms")
    op.drop_table("teams")
    op.drop_table("users")
