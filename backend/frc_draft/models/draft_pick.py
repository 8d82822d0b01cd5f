from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base


class DraftPick(Base):
    __tablename__ = "draft_picks"
    __table_args__ = (
        # Backstops for the per-room serialization in the draft service.
        UniqueConstraint("draft_room_id", "team_id", name="uq_draft_picks_room_team"),
        UniqueConstraint("draft_room_id", "sequence_number", name="uq_draft_picks_room_sequence"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    draft_room_id: Mapped[int] = mapped_column(ForeignKey("draft_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("draft_participants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)

    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # Set by the service (not server_default) so the advisory turn timer and ordering agree across backends.
    picked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    draft_room: Mapped["DraftRoom"] = relationship("DraftRoom", back_populates="picks")
    participant: Mapped["DraftParticipant"] = relationship("DraftParticipant")
    team: Mapped["Team"] = relationship("Team")
