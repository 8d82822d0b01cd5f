from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from frc_draft.database import get_db
from frc_draft.models import DraftParticipant, DraftPick, DraftRoom, Matchup, RosterEntry, User
from frc_draft.schemas.draft import (
    DraftStateOut,
    LineupUpdate,
    MatchupOut,
    PickCreate,
    PickDetailOut,
    PickResultOut,
    RosterEntryOut,
)
from frc_draft.schemas.draft_room import DraftRoomCreate, DraftRoomOut, DraftRoomSummaryOut, ParticipantOut
from frc_draft.services.auth import get_current_user
from frc_draft.services.draft_service import DraftService, get_draft_service
from frc_draft.services.rosters import RosterRegistry
from frc_draft.services.schedule import ScheduleGenerator
from frc_draft.websocket.draft_manager import draft_hub

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.post("", response_model=DraftRoomOut)
async def create_room(
    payload: DraftRoomCreate,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> DraftRoom:
    return await service.create_room(user.id, payload)


@router.get("/mine", response_model=list[DraftRoomSummaryOut])
async def list_my_rooms(
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> list[DraftRoom]:
    return await service.list_user_rooms(user.id)


@router.get("/public", response_model=list[DraftRoomSummaryOut])
async def list_public_rooms(
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> list[DraftRoom]:
    """Public rooms still waiting for players that the caller has not joined."""
    return await service.list_public_rooms(user.id)


@router.get("/{room_id}", response_model=DraftRoomOut)
async def get_room(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> DraftRoom:
    return await service.get_room(room_id, user.id)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> Response:
    await service.delete_room(room_id, user.id)
    await draft_hub.broadcast(room_id, {"type": "room_deleted", "room_id": room_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{room_id}/join", response_model=ParticipantOut)
async def join_room(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> DraftParticipant:
    participant = await service.join_room(room_id, user.id)
    await draft_hub.broadcast(
        room_id,
        {
            "type": "participant_joined",
            "room_id": room_id,
            "participant": ParticipantOut.model_validate(participant).model_dump(mode="json"),
        },
    )
    return participant


@router.post("/{room_id}/start", response_model=DraftRoomOut)
async def start_draft(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> DraftRoom:
    room = await service.start_draft(room_id, user.id)
    await draft_hub.broadcast(
        room_id,
        {"type": "draft_started", "room_id": room_id, "start_time": room.start_time.isoformat()},
    )
    return room


@router.post("/{room_id}/picks", response_model=PickResultOut)
async def make_pick(
    room_id: int,
    payload: PickCreate,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> PickResultOut:
    result = await service.make_pick(room_id, user.id, payload.team_id)
    out = PickResultOut.model_validate(result)
    await draft_hub.broadcast(room_id, {"type": "pick_made", "room_id": room_id, **out.model_dump(mode="json")})
    if result.draft_completed:
        await draft_hub.broadcast(room_id, {"type": "draft_completed", "room_id": room_id})
    return out


@router.get("/{room_id}/picks", response_model=list[PickDetailOut])
async def list_picks(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> list[DraftPick]:
    return list(await service.list_picks(room_id, user.id))


@router.get("/{room_id}/state", response_model=DraftStateOut)
async def get_draft_state(
    room_id: int,
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> DraftStateOut:
    return DraftStateOut.model_validate(await service.get_draft_state(room_id, user.id))


@router.get("/{room_id}/roster", response_model=list[RosterEntryOut])
async def get_my_roster(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> list[RosterEntry]:
    await service.get_room(room_id, user.id)
    return list(await RosterRegistry(db).get_roster(room_id, user.id))


@router.put("/{room_id}/roster/lineup", response_model=list[RosterEntryOut])
async def update_lineup(
    room_id: int,
    payload: LineupUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[RosterEntry]:
    return list(await RosterRegistry(db).update_starting_lineup(room_id, user.id, payload.starting_team_ids))


@router.get("/{room_id}/matchups", response_model=list[MatchupOut])
async def list_matchups(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    service: DraftService = Depends(get_draft_service),
    user: User = Depends(get_current_user),
) -> list[Matchup]:
    await service.get_room(room_id, user.id)
    return list(await ScheduleGenerator(db).list_matchups(room_id))
