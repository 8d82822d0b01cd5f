from frc_draft.schemas.draft import (
    CurrentTurnOut,
    DraftStateOut,
    LineupUpdate,
    MatchupOut,
    PickCreate,
    PickDetailOut,
    PickOut,
    PickResultOut,
    RosterEntryOut,
)
from frc_draft.schemas.draft_room import DraftRoomCreate, DraftRoomOut, DraftRoomSummaryOut, ParticipantOut
from frc_draft.schemas.team import TeamBrief, TeamOut
from frc_draft.schemas.user import UserBrief, UserOut

__all__ = [
    "CurrentTurnOut",
    "DraftRoomCreate",
    "DraftRoomOut",
    "DraftRoomSummaryOut",
    "DraftStateOut",
    "LineupUpdate",
    "MatchupOut",
    "ParticipantOut",
    "PickCreate",
    "PickDetailOut",
    "PickOut",
    "PickResultOut",
    "RosterEntryOut",
    "TeamBrief",
    "TeamOut",
    "UserBrief",
    "UserOut",
]
