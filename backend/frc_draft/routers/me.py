from __future__ import annotations

from fastapi import APIRouter, Depends

from frc_draft.models import User
from frc_draft.schemas.user import UserOut
from frc_draft.services.auth import get_current_user

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserOut)
async def get_me(user: User = Depends(get_current_user)) -> User:
    return user
