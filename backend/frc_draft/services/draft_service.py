"""
Live draft coordinator.

Reads the room, its participants and the pick ledger, validates an action against them and
commits the result. Joins and pick commits for one room are serialized (RoomLocks in-process,
SELECT ... FOR UPDATE across processes, unique constraints as the last line). Roster hand-off and
season-schedule generation run after the commit, outside the room lock, in their own sessions.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload, selectinload

from frc_draft.config import settings
from frc_draft.database import SessionLocal, get_db
from frc_draft.models import DraftParticipant, DraftPick, DraftRoom, Matchup, RosterEntry, Team
from frc_draft.models.draft_room import (
    PRIVACY_PRIVATE,
    PRIVACY_PUBLIC,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PENDING,
)
from frc_draft.schemas.draft_room import DraftRoomCreate
from frc_draft.services.errors import (
    CapacityError,
    ConflictError,
    DraftError,
    ForbiddenError,
    InsufficientParticipantsError,
    InvalidStateError,
    NotFoundError,
)
from frc_draft.services.room_locks import RoomLocks, room_locks
from frc_draft.services.rosters import RosterRegistry
from frc_draft.services.schedule import ScheduleGenerator
from frc_draft.services.team_catalog import TeamCatalog
from frc_draft.services.turns import resolve_current_turn

logger = logging.getLogger("frc_draft.draft")

MIN_PARTICIPANTS_TO_START = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def compute_time_remaining(turn_time_seconds: int, turn_started_at: datetime | None, now: datetime) -> int:
    """Advisory seconds left in the current turn. Nothing enforces it."""
    if turn_started_at is None:
        return turn_time_seconds
    elapsed = int((_as_utc(now) - _as_utc(turn_started_at)).total_seconds())
    return max(0, turn_time_seconds - elapsed)


@dataclass
class PickResult:
    pick: DraftPick
    sequence_number: int
    round_number: int
    draft_completed: bool


@dataclass
class CurrentTurn:
    participant: DraftParticipant
    round_number: int
    pick_number: int


@dataclass
class DraftState:
    room: DraftRoom
    participants: Sequence[DraftParticipant]
    picks: Sequence[DraftPick]
    available_teams: Sequence[Team]
    current_turn: CurrentTurn | None
    is_my_turn: bool
    time_remaining: int


class DraftService:
    def __init__(
        self,
        db: AsyncSession,
        *,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
        roster_factory: Callable[[AsyncSession], RosterRegistry] = RosterRegistry,
        schedule_factory: Callable[[AsyncSession], ScheduleGenerator] = ScheduleGenerator,
        locks: RoomLocks = room_locks,
    ) -> None:
        self.db = db
        self.catalog = TeamCatalog(db)
        self.session_factory = session_factory
        self.roster_factory = roster_factory
        self.schedule_factory = schedule_factory
        self.locks = locks

    # --- room lifecycle -------------------------------------------------------------------------

    async def create_room(self, owner_id: uuid.UUID, payload: DraftRoomCreate) -> DraftRoom:
        now = _utcnow()
        room = DraftRoom(
            name=payload.name.strip(),
            description=payload.description,
            owner_id=owner_id,
            capacity=payload.capacity,
            turn_time_seconds=payload.turn_time_seconds,
            snake_format=payload.snake_format,
            round_count=payload.round_count,
            teams_to_start=payload.teams_to_start,
            privacy=payload.privacy,
            status=STATUS_PENDING,
            next_draft_position=2,
            updated_at=now,
        )
        self.db.add(room)
        await self.db.flush()
        # The owner always drafts first.
        self.db.add(DraftParticipant(draft_room_id=room.id, user_id=owner_id, draft_position=1, is_ready=True))
        await self.db.commit()
        logger.info("room created room_id=%s owner_id=%s capacity=%s", room.id, owner_id, room.capacity)
        return await self.get_room(room.id, owner_id)

    async def get_room(self, room_id: int, requester_id: uuid.UUID) -> DraftRoom:
        room = await self._room(room_id)
        self._check_visible(room, room.participants, requester_id)
        return room

    async def join_room(self, room_id: int, user_id: uuid.UUID) -> DraftParticipant:
        async with self.locks.hold(room_id):
            try:
                room = await self._lock_room(room_id)
                if room.status != STATUS_PENDING:
                    raise InvalidStateError("can only join draft rooms that are pending")
                if room.privacy == PRIVACY_PRIVATE and room.owner_id != user_id:
                    raise ForbiddenError("this is a private draft room")

                participants = await self._participants(room_id)
                if any(p.user_id == user_id for p in participants):
                    raise ConflictError("already a participant in this draft")
                if len(participants) >= room.capacity:
                    raise CapacityError("draft room is full")

                # Claim the position on the room row first; the participant insert follows.
                position = room.next_draft_position
                room.next_draft_position = position + 1
                room.updated_at = _utcnow()
                await self.db.flush()

                taken = (
                    await self.db.execute(
                        select(DraftParticipant.id).where(
                            DraftParticipant.draft_room_id == room_id,
                            DraftParticipant.draft_position == position,
                        )
                    )
                ).scalar_one_or_none()
                if taken is not None:
                    raise ConflictError(f"draft position {position} is already taken in this room")

                participant = DraftParticipant(
                    draft_room_id=room_id, user_id=user_id, draft_position=position, is_ready=False
                )
                self.db.add(participant)
                try:
                    await self.db.commit()
                except IntegrityError as e:
                    await self.db.rollback()
                    # Postgres names the constraint; SQLite names the columns.
                    reason = str(e.orig)
                    if "uq_draft_participants_room_user" in reason or "draft_participants.user_id" in reason:
                        raise ConflictError("already a participant in this draft") from e
                    raise ConflictError(f"draft position {position} is already taken in this room") from e
            except DraftError:
                await self.db.rollback()
                raise

        logger.info("participant joined room_id=%s user_id=%s position=%s", room_id, user_id, position)
        stmt = (
            select(DraftParticipant)
            .where(DraftParticipant.id == participant.id)
            .options(joinedload(DraftParticipant.user))
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def start_draft(self, room_id: int, requester_id: uuid.UUID) -> DraftRoom:
        async with self.locks.hold(room_id):
            try:
                room = await self._lock_room(room_id)
                if room.owner_id != requester_id:
                    raise ForbiddenError("only the owner can start the draft")
                if room.status != STATUS_PENDING:
                    raise InvalidStateError("draft can only be started from PENDING")
                participant_count = len(await self._participants(room_id))
                if participant_count < MIN_PARTICIPANTS_TO_START:
                    raise InsufficientParticipantsError(
                        f"at least {MIN_PARTICIPANTS_TO_START} participants are required to start a draft"
                    )

                now = _utcnow()
                room.status = STATUS_ACTIVE
                room.start_time = now
                room.updated_at = now
                await self.db.commit()
            except DraftError:
                await self.db.rollback()
                raise

        logger.info("draft started room_id=%s participants=%s", room_id, participant_count)
        return await self.get_room(room_id, requester_id)

    async def delete_room(self, room_id: int, requester_id: uuid.UUID) -> None:
        async with self.locks.hold(room_id):
            try:
                room = await self._lock_room(room_id)
                if room.owner_id != requester_id:
                    raise ForbiddenError("only the owner can delete the draft room")
            except DraftError:
                await self.db.rollback()
                raise

            for model in (Matchup, RosterEntry, DraftPick, DraftParticipant):
                await self.db.execute(delete(model).where(model.draft_room_id == room_id))
            await self.db.execute(delete(DraftRoom).where(DraftRoom.id == room_id))
            await self.db.commit()
        logger.info("room deleted room_id=%s", room_id)

    # --- picks ----------------------------------------------------------------------------------

    async def make_pick(self, room_id: int, requester_id: uuid.UUID, team_id: str) -> PickResult:
        async with self.locks.hold(room_id):
            try:
                room = await self._lock_room(room_id)
                if room.status != STATUS_ACTIVE:
                    raise InvalidStateError("draft not active")

                participants = await self._participants(room_id)
                me = next((p for p in participants if p.user_id == requester_id), None)
                if me is None:
                    raise ForbiddenError("not a participant")

                pick_count = await self._pick_count(room_id)
                turn = resolve_current_turn(len(participants), pick_count, room.snake_format)
                if participants[turn.participant_index].id != me.id:
                    raise ForbiddenError("not your turn")

                drafted = (
                    await self.db.execute(
                        select(DraftPick.id).where(DraftPick.draft_room_id == room_id, DraftPick.team_id == team_id)
                    )
                ).scalar_one_or_none()
                if drafted is not None:
                    raise ConflictError("team already drafted")
                if not await self.catalog.exists(team_id):
                    raise NotFoundError("team not found")

                now = _utcnow()
                pick = DraftPick(
                    draft_room_id=room_id,
                    participant_id=me.id,
                    team_id=team_id,
                    sequence_number=turn.pick_number,
                    round_number=turn.round_number,
                    picked_at=now,
                )
                self.db.add(pick)

                completed = turn.pick_number == len(participants) * room.round_count
                if completed:
                    room.status = STATUS_COMPLETED
                    room.end_time = now
                room.updated_at = now
                await self._commit_or_conflict("pick conflicted with a concurrent pick")
            except DraftError:
                await self.db.rollback()
                raise

        logger.info(
            "pick committed room_id=%s seq=%s round=%s team_id=%s participant_id=%s",
            room_id,
            pick.sequence_number,
            pick.round_number,
            team_id,
            me.id,
        )

        await self._register_roster(requester_id, room_id, team_id)
        if completed:
            logger.info("draft completed room_id=%s total_picks=%s", room_id, pick.sequence_number)
            await self.on_draft_completed(room)

        return PickResult(
            pick=pick,
            sequence_number=pick.sequence_number,
            round_number=pick.round_number,
            draft_completed=completed,
        )

    async def list_picks(self, room_id: int, requester_id: uuid.UUID) -> Sequence[DraftPick]:
        await self.get_room(room_id, requester_id)
        return await self._picks(room_id)

    async def on_draft_completed(self, room: DraftRoom) -> None:
        """
        Hand the finished room to season-schedule generation.

        Runs after the completing pick is committed. Failures are logged and never reach the
        caller: the pick stands either way.
        """
        try:
            async with self.session_factory() as side_db:
                await self.schedule_factory(side_db).generate_season_schedule(
                    room.id, settings.season_year, settings.season_total_weeks
                )
        except Exception:
            logger.exception("post-draft schedule generation failed room_id=%s", room.id)

    # --- read path ------------------------------------------------------------------------------

    async def get_draft_state(self, room_id: int, requester_id: uuid.UUID) -> DraftState:
        room = await self.get_room(room_id, requester_id)
        participants = list(room.participants)
        picks = await self._picks(room_id)

        available = await self.catalog.list_available(
            {p.team_id for p in picks}, settings.available_teams_limit
        )

        current_turn: CurrentTurn | None = None
        if participants and room.status != STATUS_COMPLETED:
            turn = resolve_current_turn(len(participants), len(picks), room.snake_format)
            current_turn = CurrentTurn(
                participant=participants[turn.participant_index],
                round_number=turn.round_number,
                pick_number=turn.pick_number,
            )

        is_active = room.status == STATUS_ACTIVE
        is_my_turn = bool(is_active and current_turn and current_turn.participant.user_id == requester_id)
        time_remaining = 0
        if is_active:
            turn_started_at = picks[-1].picked_at if picks else room.start_time
            time_remaining = compute_time_remaining(room.turn_time_seconds, turn_started_at, _utcnow())

        return DraftState(
            room=room,
            participants=participants,
            picks=picks,
            available_teams=available,
            current_turn=current_turn,
            is_my_turn=is_my_turn,
            time_remaining=time_remaining,
        )

    async def list_user_rooms(self, user_id: uuid.UUID) -> list[DraftRoom]:
        mine = select(DraftParticipant.draft_room_id).where(DraftParticipant.user_id == user_id)
        stmt = self._rooms_with_counts().where(or_(DraftRoom.owner_id == user_id, DraftRoom.id.in_(mine)))
        stmt = stmt.order_by(DraftRoom.created_at.desc(), DraftRoom.id.desc())
        return await self._attach_counts(stmt)

    async def list_public_rooms(self, user_id: uuid.UUID) -> list[DraftRoom]:
        mine = select(DraftParticipant.draft_room_id).where(DraftParticipant.user_id == user_id)
        stmt = self._rooms_with_counts().where(
            DraftRoom.privacy == PRIVACY_PUBLIC,
            DraftRoom.status == STATUS_PENDING,
            DraftRoom.id.not_in(mine),
        )
        stmt = stmt.order_by(DraftRoom.created_at.desc(), DraftRoom.id.desc())
        return await self._attach_counts(stmt)

    # --- helpers --------------------------------------------------------------------------------

    async def _lock_room(self, room_id: int) -> DraftRoom:
        stmt = (
            select(DraftRoom)
            .where(DraftRoom.id == room_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        room = (await self.db.execute(stmt)).scalar_one_or_none()
        if room is None:
            raise NotFoundError("room not found")
        return room

    async def _room(self, room_id: int) -> DraftRoom:
        """Room with owner and participants (ordered by draft position, users loaded)."""
        stmt = (
            select(DraftRoom)
            .where(DraftRoom.id == room_id)
            .options(
                joinedload(DraftRoom.owner),
                selectinload(DraftRoom.participants).joinedload(DraftParticipant.user),
            )
            .execution_options(populate_existing=True)
        )
        room = (await self.db.execute(stmt)).unique().scalar_one_or_none()
        if room is None:
            raise NotFoundError("room not found")
        return room

    async def _participants(self, room_id: int) -> list[DraftParticipant]:
        stmt = (
            select(DraftParticipant)
            .where(DraftParticipant.draft_room_id == room_id)
            .order_by(DraftParticipant.draft_position)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def _picks(self, room_id: int) -> list[DraftPick]:
        stmt = (
            select(DraftPick)
            .where(DraftPick.draft_room_id == room_id)
            .options(
                joinedload(DraftPick.team),
                joinedload(DraftPick.participant).joinedload(DraftParticipant.user),
            )
            .order_by(DraftPick.sequence_number)
            .execution_options(populate_existing=True)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def _pick_count(self, room_id: int) -> int:
        stmt = select(func.count(DraftPick.id)).where(DraftPick.draft_room_id == room_id)
        return int((await self.db.execute(stmt)).scalar_one())

    async def _commit_or_conflict(self, message: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(message) from e

    async def _register_roster(self, user_id: uuid.UUID, room_id: int, team_id: str) -> None:
        try:
            async with self.session_factory() as side_db:
                await self.roster_factory(side_db).add_to_roster(user_id, room_id, team_id)
        except Exception:
            logger.exception("roster hand-off failed room_id=%s user_id=%s team_id=%s", room_id, user_id, team_id)

    @staticmethod
    def _check_visible(room: DraftRoom, participants: Sequence[DraftParticipant], requester_id: uuid.UUID) -> None:
        if room.privacy != PRIVACY_PRIVATE or room.owner_id == requester_id:
            return
        if not any(p.user_id == requester_id for p in participants):
            raise ForbiddenError("this is a private draft room")

    @staticmethod
    def _rooms_with_counts():
        participant_count = (
            select(func.count(DraftParticipant.id))
            .where(DraftParticipant.draft_room_id == DraftRoom.id)
            .correlate(DraftRoom)
            .scalar_subquery()
        )
        pick_count = (
            select(func.count(DraftPick.id))
            .where(DraftPick.draft_room_id == DraftRoom.id)
            .correlate(DraftRoom)
            .scalar_subquery()
        )
        return select(DraftRoom, participant_count.label("participant_count"), pick_count.label("pick_count")).options(
            joinedload(DraftRoom.owner)
        )

    async def _attach_counts(self, stmt) -> list[DraftRoom]:
        rows = (await self.db.execute(stmt)).unique().all()
        out: list[DraftRoom] = []
        for room, participant_count, pick_count in rows:
            # Computed fields for Pydantic serialization (from_attributes=True).
            setattr(room, "participant_count", int(participant_count or 0))
            setattr(room, "pick_count", int(pick_count or 0))
            setattr(room, "has_space", int(participant_count or 0) < room.capacity)
            out.append(room)
        return out


def get_draft_service(db: AsyncSession = Depends(get_db)) -> DraftService:
    return DraftService(db)
