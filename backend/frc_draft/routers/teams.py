from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from frc_draft.database import get_db
from frc_draft.models import Team
from frc_draft.schemas.team import TeamOut
from frc_draft.services.errors import NotFoundError
from frc_draft.services.team_catalog import TeamCatalog

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=list[TeamOut])
async def list_teams(
    q: str | None = Query(default=None, description="Search by team number or name"),
    limit: int = Query(default=24, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[Team]:
    return list(await TeamCatalog(db).search(q, limit=limit, offset=offset))


@router.get("/{team_id}", response_model=TeamOut)
async def get_team(team_id: str, db: AsyncSession = Depends(get_db)) -> Team:
    team = await TeamCatalog(db).get(team_id)
    if team is None:
        raise NotFoundError("team not found")
    return team
