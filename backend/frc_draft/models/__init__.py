from frc_draft.models.base import Base
from frc_draft.models.draft_participant import DraftParticipant
from frc_draft.models.draft_pick import DraftPick
from frc_draft.models.draft_room import DraftRoom
from frc_draft.models.matchup import Matchup
from frc_draft.models.roster_entry import RosterEntry
from frc_draft.models.team import Team
from frc_draft.models.user import User

__all__ = [
    "Base",
    "DraftParticipant",
    "DraftPick",
    "DraftRoom",
    "Matchup",
    "RosterEntry",
    "Team",
    "User",
]
