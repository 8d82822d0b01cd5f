from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from frc_draft.schemas.base import ORMBaseModel
from frc_draft.schemas.draft_room import DraftRoomOut, ParticipantOut
from frc_draft.schemas.team import TeamBrief


class PickCreate(ORMBaseModel):
    team_id: str = Field(min_length=1, max_length=16)


class PickOut(ORMBaseModel):
    id: int
    draft_room_id: int
    participant_id: int
    team_id: str
    sequence_number: int
    round_number: int
    picked_at: datetime


class PickDetailOut(PickOut):
    team: TeamBrief | None = None
    participant: ParticipantOut | None = None


class PickResultOut(ORMBaseModel):
    pick: PickOut
    sequence_number: int
    round_number: int
    draft_completed: bool


class CurrentTurnOut(ORMBaseModel):
    participant: ParticipantOut
    round_number: int
    pick_number: int


class DraftStateOut(ORMBaseModel):
    room: DraftRoomOut
    participants: list[ParticipantOut]
    picks: list[PickDetailOut]
    available_teams: list[TeamBrief]
    current_turn: CurrentTurnOut | None = None
    is_my_turn: bool
    time_remaining: int


class RosterEntryOut(ORMBaseModel):
    id: int
    draft_room_id: int
    user_id: uuid.UUID
    team_id: str
    is_starting: bool
    acquisition_type: str
    acquired_at: datetime
    team: TeamBrief | None = None


class LineupUpdate(ORMBaseModel):
    starting_team_ids: list[str] = Field(default_factory=list, max_length=15)


class MatchupOut(ORMBaseModel):
    id: int
    draft_room_id: int
    year: int
    week: int
    home_user_id: uuid.UUID
    away_user_id: uuid.UUID | None = None
