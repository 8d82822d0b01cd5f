from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from frc_draft.models.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    clerk_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)

    # Name from identity provider. Used for display only.
    full_name: Mapped[str | None] = mapped_column(String(140), nullable=True)
    username: Mapped[str | None] = mapped_column(String(80), nullable=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owned_rooms: Mapped[list["DraftRoom"]] = relationship("DraftRoom", back_populates="owner")
    participations: Mapped[list["DraftParticipant"]] = relationship("DraftParticipant", back_populates="user")

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email or "Unknown"
