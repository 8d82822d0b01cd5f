from __future__ import annotations

from collections.abc import Collection, Sequence

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from frc_draft.models import Team


class TeamCatalog:
    """Read-only lookups against the draftable team catalog."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, team_id: str) -> bool:
        found = (await self.db.execute(select(Team.id).where(Team.id == team_id))).scalar_one_or_none()
        return found is not None

    async def get(self, team_id: str) -> Team | None:
        return await self.db.get(Team, team_id)

    async def list_available(self, exclude: Collection[str], limit: int) -> Sequence[Team]:
        """Undrafted teams ordered by team number, capped at `limit`."""
        stmt = select(Team).order_by(Team.number).limit(limit)
        if exclude:
            stmt = stmt.where(Team.id.not_in(list(exclude)))
        return (await self.db.execute(stmt)).scalars().all()

    async def search(self, q: str | None, *, limit: int, offset: int) -> Sequence[Team]:
        stmt = select(Team).order_by(Team.number).limit(limit).offset(offset)
        q_norm = (q or "").strip()
        if q_norm:
            # Numeric searches match team numbers as substrings ("25" finds 254 and 1325).
            like = f"%{q_norm}%"
            stmt = stmt.where(or_(func.lower(Team.name).like(like.lower()), cast(Team.number, String).like(like)))
        return (await self.db.execute(stmt)).scalars().all()
