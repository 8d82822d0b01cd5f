from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from frc_draft.models import DraftParticipant, Matchup

logger = logging.getLogger("frc_draft.schedule")

Pairing = tuple[uuid.UUID, uuid.UUID | None]


def round_robin_weeks(user_ids: Sequence[uuid.UUID], total_weeks: int) -> list[list[Pairing]]:
    """
    Weekly pairings using the circle method.

    The first slot stays fixed while the others rotate one step per week, so every pair meets once
    per n-1 weeks. Odd fields get a None slot, and whoever draws it has a bye (away=None).
    Seasons longer than one full cycle start the cycle again.
    """
    slots: list[uuid.UUID | None] = list(user_ids)
    if len(slots) < 2:
        return []
    if len(slots) % 2:
        slots.append(None)

    n = len(slots)
    cycle = n - 1
    weeks: list[list[Pairing]] = []
    for week_idx in range(total_weeks):
        shift = week_idx % cycle
        rest = slots[1:]
        rotated = [slots[0]] + rest[-shift:] + rest[:-shift] if shift else list(slots)
        pairings: list[Pairing] = []
        for i in range(n // 2):
            a, b = rotated[i], rotated[n - 1 - i]
            # Alternate home side each week so the fixed slot isn't always home.
            if week_idx % 2:
                a, b = b, a
            if a is None:
                pairings.append((b, None))
            else:
                pairings.append((a, b))
        weeks.append(pairings)
    return weeks


class ScheduleGenerator:
    """Builds a room's season of weekly matchups once its participant set is final."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def generate_season_schedule(self, room_id: int, year: int, total_weeks: int) -> int:
        """Create the schedule unless one already exists for (room, year). Returns matchups created."""
        already = (
            await self.db.execute(
                select(Matchup.id).where(Matchup.draft_room_id == room_id, Matchup.year == year).limit(1)
            )
        ).scalar_one_or_none()
        if already is not None:
            logger.info("schedule exists room_id=%s year=%s; skipping", room_id, year)
            return 0

        user_ids = (
            await self.db.execute(
                select(DraftParticipant.user_id)
                .where(DraftParticipant.draft_room_id == room_id)
                .order_by(DraftParticipant.draft_position)
            )
        ).scalars().all()

        created = 0
        for week_idx, pairings in enumerate(round_robin_weeks(user_ids, total_weeks)):
            for home, away in pairings:
                self.db.add(
                    Matchup(draft_room_id=room_id, year=year, week=week_idx + 1, home_user_id=home, away_user_id=away)
                )
                created += 1
        await self.db.commit()
        logger.info("schedule created room_id=%s year=%s weeks=%s matchups=%s", room_id, year, total_weeks, created)
        return created

    async def list_matchups(self, room_id: int) -> Sequence[Matchup]:
        stmt = (
            select(Matchup)
            .where(Matchup.draft_room_id == room_id)
            .options(joinedload(Matchup.home_user), joinedload(Matchup.away_user))
            .order_by(Matchup.year, Matchup.week, Matchup.id)
        )
        return (await self.db.execute(stmt)).scalars().all()
