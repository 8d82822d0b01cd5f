from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from frc_draft.models import DraftRoom, RosterEntry, Team
from frc_draft.models.draft_room import STATUS_COMPLETED
from frc_draft.services.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError


class RosterRegistry:
    """Teams held by each user in a room. Drafted teams land here in a non-starting state."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_to_roster(
        self,
        user_id: uuid.UUID,
        room_id: int,
        team_id: str,
        *,
        acquisition_type: str = "draft",
    ) -> RosterEntry:
        """Set-insert: adding a team that is already on this user's roster returns the existing entry."""
        existing = await self._entry_for_team(room_id, team_id)
        if existing is not None:
            if existing.user_id != user_id:
                raise ConflictError("team already on another roster")
            return existing

        entry = RosterEntry(
            draft_room_id=room_id,
            user_id=user_id,
            team_id=team_id,
            is_starting=False,
            acquisition_type=acquisition_type,
            acquired_at=datetime.now(timezone.utc),
        )
        self.db.add(entry)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with an identical insert.
            await self.db.rollback()
            existing = await self._entry_for_team(room_id, team_id)
            if existing is None or existing.user_id != user_id:
                raise ConflictError("team already on another roster")
            return existing
        return entry

    async def get_roster(self, room_id: int, user_id: uuid.UUID) -> Sequence[RosterEntry]:
        stmt = (
            select(RosterEntry)
            .join(Team, Team.id == RosterEntry.team_id)
            .where(RosterEntry.draft_room_id == room_id, RosterEntry.user_id == user_id)
            .options(joinedload(RosterEntry.team))
            .order_by(Team.number)
        )
        return (await self.db.execute(stmt)).scalars().all()

    async def update_starting_lineup(
        self, room_id: int, user_id: uuid.UUID, starting_team_ids: Sequence[str]
    ) -> Sequence[RosterEntry]:
        room = await self.db.get(DraftRoom, room_id)
        if room is None:
            raise NotFoundError("room not found")
        if room.status != STATUS_COMPLETED:
            raise InvalidStateError("lineups can only be set after the draft completes")

        wanted = set(starting_team_ids)
        if len(wanted) > room.teams_to_start:
            raise ConflictError(f"at most {room.teams_to_start} teams can start")

        entries = await self.get_roster(room_id, user_id)
        owned = {e.team_id for e in entries}
        missing = wanted - owned
        if missing:
            raise ForbiddenError(f"not on your roster: {', '.join(sorted(missing))}")

        for entry in entries:
            entry.is_starting = entry.team_id in wanted
        await self.db.commit()
        return entries

    async def _entry_for_team(self, room_id: int, team_id: str) -> RosterEntry | None:
        stmt = select(RosterEntry).where(RosterEntry.draft_room_id == room_id, RosterEntry.team_id == team_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()
