from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base


class RosterEntry(Base):
    __tablename__ = "roster_entries"
    __table_args__ = (
        # A team sits on at most one roster per room.
        UniqueConstraint("draft_room_id", "team_id", name="uq_roster_entries_room_team"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    draft_room_id: Mapped[int] = mapped_column(ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)

    is_starting: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    acquisition_type: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    draft_room: Mapped["DraftRoom"] = relationship("DraftRoom", back_populates="roster_entries")
    team: Mapped["Team"] = relationship("Team")
