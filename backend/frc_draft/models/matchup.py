from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base


class Matchup(Base):
    """One weekly pairing in a room's season schedule. A NULL away user is a bye week."""

    __tablename__ = "matchups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    draft_room_id: Mapped[int] = mapped_column(ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week: Mapped[int] = mapped_column(Integer, nullable=False)

    home_user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    away_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    draft_room: Mapped["DraftRoom"] = relationship("DraftRoom", back_populates="matchups")
    home_user: Mapped["User"] = relationship("User", foreign_keys=[home_user_id])
    away_user: Mapped["User | None"] = relationship("User", foreign_keys=[away_user_id])
