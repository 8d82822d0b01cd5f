from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from frc_draft.schemas.base import ORMBaseModel
from frc_draft.schemas.user import UserBrief


class DraftRoomCreate(ORMBaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    capacity: int = Field(default=8, ge=2, le=32)
    turn_time_seconds: int = Field(default=90, ge=30, le=300)
    snake_format: bool = True
    round_count: int = Field(default=5, ge=1, le=20)
    teams_to_start: int = Field(default=3, ge=1, le=15)
    privacy: Literal["PUBLIC", "PRIVATE"] = "PUBLIC"

    @field_validator("capacity")
    @classmethod
    def _capacity_even(cls, v: int) -> int:
        if v % 2:
            raise ValueError("capacity must be an even number")
        return v

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("room name is required")
        return v


class ParticipantOut(ORMBaseModel):
    id: int
    draft_room_id: int
    user_id: uuid.UUID
    draft_position: int
    is_ready: bool
    user: UserBrief | None = None


class DraftRoomOut(ORMBaseModel):
    id: int
    name: str
    description: str | None = None
    owner_id: uuid.UUID
    capacity: int
    turn_time_seconds: int
    snake_format: bool
    round_count: int
    teams_to_start: int
    privacy: str
    status: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    next_draft_position: int
    created_at: datetime

    owner: UserBrief | None = None
    participants: list[ParticipantOut] = Field(default_factory=list)


class DraftRoomSummaryOut(ORMBaseModel):
    """Listing row: room settings plus counts, without nested participants."""

    id: int
    name: str
    description: str | None = None
    owner_id: uuid.UUID
    capacity: int
    turn_time_seconds: int
    snake_format: bool
    round_count: int
    privacy: str
    status: str
    created_at: datetime

    owner: UserBrief | None = None
    participant_count: int = 0
    pick_count: int = 0
    has_space: bool = False
