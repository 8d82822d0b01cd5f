from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base

RoomStatus = Literal["PENDING", "ACTIVE", "COMPLETED"]
Privacy = Literal["PUBLIC", "PRIVATE"]

STATUS_PENDING: RoomStatus = "PENDING"
STATUS_ACTIVE: RoomStatus = "ACTIVE"
STATUS_COMPLETED: RoomStatus = "COMPLETED"

PRIVACY_PUBLIC: Privacy = "PUBLIC"
PRIVACY_PRIVATE: Privacy = "PRIVATE"


class DraftRoom(Base):
    __tablename__ = "draft_rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Fixed at creation.
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    turn_time_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=90)
    snake_format: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    round_count: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    # Consumed by roster lineup rules, not by the draft itself.
    teams_to_start: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    privacy: Mapped[str] = mapped_column(String(10), nullable=False, default=PRIVACY_PUBLIC, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_PENDING, index=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Next draft position handed out by join. The owner holds position 1, so this starts at 2.
    next_draft_position: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner: Mapped["User"] = relationship("User", back_populates="owned_rooms")
    participants: Mapped[list["DraftParticipant"]] = relationship(
        "DraftParticipant",
        back_populates="draft_room",
        cascade="all, delete-orphan",
        order_by="DraftParticipant.draft_position",
    )
    picks: Mapped[list["DraftPick"]] = relationship(
        "DraftPick",
        back_populates="draft_room",
        cascade="all, delete-orphan",
        order_by="DraftPick.sequence_number",
    )
    roster_entries: Mapped[list["RosterEntry"]] = relationship(
        "RosterEntry", back_populates="draft_room", cascade="all, delete-orphan"
    )
    matchups: Mapped[list["Matchup"]] = relationship("Matchup", back_populates="draft_room", cascade="all, delete-orphan")
