from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base


class DraftParticipant(Base):
    __tablename__ = "draft_participants"
    __table_args__ = (
        UniqueConstraint("draft_room_id", "draft_position", name="uq_draft_participants_room_position"),
        UniqueConstraint("draft_room_id", "user_id", name="uq_draft_participants_room_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    draft_room_id: Mapped[int] = mapped_column(ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # 1-based turn order. Assigned once at join time, never reused within a room.
    draft_position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    draft_room: Mapped["DraftRoom"] = relationship("DraftRoom", back_populates="participants")
    user: Mapped["User"] = relationship("User", back_populates="participations")
