from __future__ import annotations

from frc_draft.schemas.base import ORMBaseModel


class TeamOut(ORMBaseModel):
    id: str
    number: int
    name: str
    city: str | None = None
    state_prov: str | None = None
    country: str | None = None
    rookie_year: int | None = None
    website: str | None = None


class TeamBrief(ORMBaseModel):
    id: str
    number: int
    name: str
