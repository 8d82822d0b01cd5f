from __future__ import annotations

import uuid
from datetime import datetime

from frc_draft.schemas.base import ORMBaseModel


class UserOut(ORMBaseModel):
    id: uuid.UUID
    clerk_id: str
    full_name: str | None = None
    username: str | None = None
    email: str | None = None
    created_at: datetime


class UserBrief(ORMBaseModel):
    """Display info only; never used for authorization."""

    id: uuid.UUID
    display_name: str
    email: str | None = None
