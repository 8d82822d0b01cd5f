"""Tests for draft rooms: lifecycle, picks, completion and read paths."""
import asyncio

import pytest
from sqlalchemy import func, select, update

from conftest import bearer
from frc_draft.config import settings
from frc_draft.database import SessionLocal
from frc_draft.models import DraftParticipant, DraftPick, DraftRoom, Matchup, RosterEntry
from frc_draft.services.draft_service import DraftService
from frc_draft.services.rosters import RosterRegistry
from frc_draft.services.schedule import ScheduleGenerator


async def _pick(client, room_id, user, team_id):
    return await client.post(f"/api/drafts/{room_id}/picks", json={"team_id": team_id}, headers=bearer(user))


async def _count(model, room_id) -> int:
    async with SessionLocal() as db:
        stmt = select(func.count(model.id)).where(model.draft_room_id == room_id)
        return (await db.execute(stmt)).scalar_one()


# --- rooms ------------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_room_seats_owner_first(client, make_room):
    """The owner is participant #1, already ready, and the next joiner gets position 2."""
    room = await make_room("owner")
    assert room["status"] == "PENDING"
    assert room["next_draft_position"] == 2
    assert len(room["participants"]) == 1
    owner = room["participants"][0]
    assert owner["draft_position"] == 1
    assert owner["is_ready"] is True
    assert owner["user_id"] == room["owner_id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"name": "Odd", "capacity": 3},
        {"name": "   "},
        {"name": "Fast", "turn_time_seconds": 10},
        {"name": "Long", "round_count": 0},
        {"name": "Secret", "privacy": "HIDDEN"},
    ],
)
async def test_create_room_validation(client, body):
    """Bad room settings are rejected before anything is written."""
    r = await client.post("/api/drafts", json=body, headers=bearer("owner"))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_join_assigns_sequential_positions(client, make_room):
    """Joiners get 2, 3, ... in arrival order and the counter keeps up."""
    room = await make_room("owner", ("p2", "p3"))
    r = await client.get(f"/api/drafts/{room['id']}", headers=bearer("owner"))
    assert r.status_code == 200
    data = r.json()
    assert [p["draft_position"] for p in data["participants"]] == [1, 2, 3]
    assert data["next_draft_position"] == 4


@pytest.mark.asyncio
async def test_join_rejections(client, make_room):
    """Duplicate, full, private, started and missing rooms each fail with their own error."""
    room = await make_room("owner", ("p2",), capacity=2)
    rid = room["id"]

    r = await client.post(f"/api/drafts/{rid}/join", headers=bearer("p2"))
    assert r.status_code == 409
    assert r.json()["detail"] == "already a participant in this draft"

    r = await client.post(f"/api/drafts/{rid}/join", headers=bearer("p3"))
    assert r.status_code == 409
    assert r.json()["code"] == "capacity"
    assert await _count(DraftParticipant, rid) == 2
    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.json()["next_draft_position"] == 3

    private = await make_room("owner", privacy="PRIVATE")
    r = await client.post(f"/api/drafts/{private['id']}/join", headers=bearer("p2"))
    assert r.status_code == 403

    r = await client.post(f"/api/drafts/{rid}/start", headers=bearer("owner"))
    assert r.status_code == 200
    r = await client.post(f"/api/drafts/{rid}/join", headers=bearer("p3"))
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_state"

    r = await client.post("/api/drafts/9999/join", headers=bearer("p3"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_join_position_collision_is_rolled_back(client, make_room):
    """If the counter points at a taken position the join fails and nothing changes."""
    room = await make_room("owner")
    rid = room["id"]
    async with SessionLocal() as db:
        await db.execute(update(DraftRoom).where(DraftRoom.id == rid).values(next_draft_position=1))
        await db.commit()

    r = await client.post(f"/api/drafts/{rid}/join", headers=bearer("p2"))
    assert r.status_code == 409
    assert r.json()["code"] == "conflict"

    assert await _count(DraftParticipant, rid) == 1
    async with SessionLocal() as db:
        fresh = await db.get(DraftRoom, rid)
        assert fresh.next_draft_position == 1


@pytest.mark.asyncio
async def test_join_race_for_same_user_reports_already_joined(client, make_room, monkeypatch):
    """When the seat-list check misses an existing seat, the unique user constraint still says "already joined"."""
    room = await make_room("owner", ("p2",))
    rid = room["id"]

    async def no_seats(self, room_id):
        return []

    monkeypatch.setattr(DraftService, "_participants", no_seats)

    r = await client.post(f"/api/drafts/{rid}/join", headers=bearer("p2"))
    assert r.status_code == 409
    assert r.json() == {"detail": "already a participant in this draft", "code": "conflict"}

    assert await _count(DraftParticipant, rid) == 2
    async with SessionLocal() as db:
        fresh = await db.get(DraftRoom, rid)
        assert fresh.next_draft_position == 3


@pytest.mark.asyncio
async def test_start_rules(client, make_room):
    """Only the owner starts, only from PENDING, and never alone."""
    room = await make_room("owner")
    rid = room["id"]

    r = await client.post(f"/api/drafts/{rid}/start", headers=bearer("owner"))
    assert r.status_code == 409
    assert r.json()["code"] == "insufficient_participants"
    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.json()["status"] == "PENDING"

    await client.post(f"/api/drafts/{rid}/join", headers=bearer("p2"))
    r = await client.post(f"/api/drafts/{rid}/start", headers=bearer("p2"))
    assert r.status_code == 403

    r = await client.post(f"/api/drafts/{rid}/start", headers=bearer("owner"))
    assert r.status_code == 200
    assert r.json()["status"] == "ACTIVE"
    assert r.json()["start_time"] is not None

    r = await client.post(f"/api/drafts/{rid}/start", headers=bearer("owner"))
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_state"


# --- picks ------------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_snake_draft_turn_order(client, started_room):
    """Four players, snake: 1-2-3-4 then 4 opens round two, and drafted teams stay drafted."""
    room = await started_room("owner", ("p2", "p3", "p4"), capacity=4, round_count=2)
    rid = room["id"]

    for user, team in [("owner", "frc118"), ("p2", "frc148"), ("p3", "frc330"), ("p4", "frc971")]:
        r = await _pick(client, rid, user, team)
        assert r.status_code == 200, r.text

    r = await _pick(client, rid, "owner", "frc254")
    assert r.status_code == 403
    assert r.json()["detail"] == "not your turn"

    r = await _pick(client, rid, "p4", "frc254")
    assert r.status_code == 200
    body = r.json()
    assert body["sequence_number"] == 5
    assert body["round_number"] == 2
    assert body["draft_completed"] is False

    r = await _pick(client, rid, "p3", "frc254")
    assert r.status_code == 409
    assert r.json()["detail"] == "team already drafted"

    r = await client.get(f"/api/drafts/{rid}/picks", headers=bearer("owner"))
    assert [p["sequence_number"] for p in r.json()] == [1, 2, 3, 4, 5]
    assert [p["team"]["number"] for p in r.json()] == [118, 148, 330, 971, 254]


@pytest.mark.asyncio
async def test_linear_draft_turn_order(client, started_room):
    """Linear drafts restart at position 1 every round."""
    room = await started_room("owner", ("p2",), capacity=2, round_count=2, snake_format=False)
    rid = room["id"]
    for user, team in [("owner", "frc118"), ("p2", "frc148")]:
        assert (await _pick(client, rid, user, team)).status_code == 200
    r = await _pick(client, rid, "p2", "frc254")
    assert r.status_code == 403
    r = await _pick(client, rid, "owner", "frc254")
    assert r.status_code == 200
    assert r.json()["round_number"] == 2


@pytest.mark.asyncio
async def test_rejected_picks_write_nothing(client, make_room, started_room):
    """Every rejected pick leaves the ledger untouched."""
    pending = await make_room("owner", ("p2",))
    r = await _pick(client, pending["id"], "owner", "frc254")
    assert r.status_code == 409
    assert r.json()["detail"] == "draft not active"

    room = await started_room("owner", ("p2",), capacity=2)
    rid = room["id"]

    r = await _pick(client, rid, "stranger", "frc254")
    assert r.status_code == 403
    assert r.json()["detail"] == "not a participant"

    r = await _pick(client, rid, "owner", "frc99999")
    assert r.status_code == 404

    r = await _pick(client, rid, "p2", "frc254")
    assert r.status_code == 403

    assert await _count(DraftPick, rid) == 0
    assert await _count(DraftPick, pending["id"]) == 0


@pytest.mark.asyncio
async def test_room_below_capacity_completes_after_each_seat_drafts(client, started_room):
    """Completion counts seated participants, not capacity: two of four seats, two rounds, four picks."""
    room = await started_room("owner", ("p2",), capacity=4, round_count=2)
    rid = room["id"]

    for user, team in [("owner", "frc118"), ("p2", "frc148"), ("p2", "frc254")]:
        r = await _pick(client, rid, user, team)
        assert r.json()["draft_completed"] is False

    r = await _pick(client, rid, "owner", "frc330")
    assert r.status_code == 200
    assert r.json()["sequence_number"] == 4
    assert r.json()["draft_completed"] is True

    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.json()["status"] == "COMPLETED"


@pytest.mark.asyncio
async def test_completion_generates_schedule_once(client, started_room, monkeypatch):
    """The final pick completes the room, fills rosters and builds the season exactly once."""
    calls = []
    original = ScheduleGenerator.generate_season_schedule

    async def counting(self, room_id, year, total_weeks):
        calls.append((room_id, year, total_weeks))
        return await original(self, room_id, year, total_weeks)

    monkeypatch.setattr(ScheduleGenerator, "generate_season_schedule", counting)

    room = await started_room("owner", ("p2",), capacity=2, round_count=1)
    rid = room["id"]

    r = await _pick(client, rid, "owner", "frc254")
    assert r.json()["draft_completed"] is False
    assert calls == []

    r = await _pick(client, rid, "p2", "frc1114")
    assert r.status_code == 200
    assert r.json()["draft_completed"] is True
    assert calls == [(rid, settings.season_year, settings.season_total_weeks)]

    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.json()["status"] == "COMPLETED"
    assert r.json()["end_time"] is not None

    r = await _pick(client, rid, "owner", "frc118")
    assert r.status_code == 409
    assert r.json()["detail"] == "draft not active"
    assert len(calls) == 1

    r = await client.get(f"/api/drafts/{rid}/matchups", headers=bearer("owner"))
    matchups = r.json()
    assert len(matchups) == settings.season_total_weeks
    assert [m["week"] for m in matchups] == list(range(1, settings.season_total_weeks + 1))
    assert all(m["away_user_id"] is not None for m in matchups)

    r = await client.get(f"/api/drafts/{rid}/roster", headers=bearer("p2"))
    assert [e["team_id"] for e in r.json()] == ["frc1114"]
    assert r.json()[0]["is_starting"] is False

    r = await client.get(f"/api/drafts/{rid}/state", headers=bearer("owner"))
    state = r.json()
    assert state["current_turn"] is None
    assert state["is_my_turn"] is False
    assert state["time_remaining"] == 0


@pytest.mark.asyncio
async def test_schedule_failure_does_not_fail_the_pick(client, started_room, monkeypatch):
    """A broken schedule generator is logged; the completing pick still stands."""

    async def boom(self, room_id, year, total_weeks):
        raise RuntimeError("schedule store unavailable")

    monkeypatch.setattr(ScheduleGenerator, "generate_season_schedule", boom)

    room = await started_room("owner", ("p2",), capacity=2, round_count=1)
    rid = room["id"]
    await _pick(client, rid, "owner", "frc254")
    r = await _pick(client, rid, "p2", "frc1114")
    assert r.status_code == 200
    assert r.json()["draft_completed"] is True

    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.json()["status"] == "COMPLETED"
    r = await client.get(f"/api/drafts/{rid}/matchups", headers=bearer("owner"))
    assert r.json() == []


@pytest.mark.asyncio
async def test_roster_failure_does_not_fail_the_pick(client, started_room, monkeypatch):
    """Roster hand-off errors are logged, not surfaced."""

    async def boom(self, user_id, room_id, team_id, *, acquisition_type="draft"):
        raise RuntimeError("roster store unavailable")

    monkeypatch.setattr(RosterRegistry, "add_to_roster", boom)

    room = await started_room("owner", ("p2",), capacity=2)
    r = await _pick(client, room["id"], "owner", "frc254")
    assert r.status_code == 200
    assert await _count(DraftPick, room["id"]) == 1


# --- concurrency ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_concurrent_picks_commit_once(client, started_room):
    """Two simultaneous picks for the same turn: one wins, sequence numbers stay gapless."""
    room = await started_room("owner", ("p2",), capacity=2, round_count=2, snake_format=False)
    rid = room["id"]

    results = await asyncio.gather(
        _pick(client, rid, "owner", "frc254"),
        _pick(client, rid, "owner", "frc1114"),
    )
    assert sorted(r.status_code for r in results) == [200, 403]

    r = await client.get(f"/api/drafts/{rid}/picks", headers=bearer("owner"))
    picks = r.json()
    assert [p["sequence_number"] for p in picks] == list(range(1, len(picks) + 1))
    assert len({p["team_id"] for p in picks}) == len(picks)
    assert picks[0]["participant"]["draft_position"] == 1


@pytest.mark.asyncio
async def test_concurrent_same_team_picks_never_double_draft(client, started_room):
    """Racing picks for one team leave it on a single roster."""
    room = await started_room("owner", ("p2",), capacity=2, round_count=2, snake_format=False)
    rid = room["id"]
    assert (await _pick(client, rid, "owner", "frc118")).status_code == 200

    results = await asyncio.gather(*[_pick(client, rid, "p2", "frc254") for _ in range(3)])
    assert sorted(r.status_code for r in results) == [200, 403, 403]

    async with SessionLocal() as db:
        drafted = (
            await db.execute(
                select(func.count(DraftPick.id)).where(DraftPick.draft_room_id == rid, DraftPick.team_id == "frc254")
            )
        ).scalar_one()
    assert drafted == 1


@pytest.mark.asyncio
async def test_concurrent_joins_respect_capacity(client, make_room):
    """Five racing joiners for three open seats: three get unique positions, two are turned away."""
    room = await make_room("owner", capacity=4)
    rid = room["id"]
    joiners = [f"racer{i}" for i in range(5)]
    for user in joiners:
        await client.get("/api/me", headers=bearer(user))

    results = await asyncio.gather(
        *[client.post(f"/api/drafts/{rid}/join", headers=bearer(user)) for user in joiners]
    )
    assert sorted(r.status_code for r in results) == [200, 200, 200, 409, 409]
    assert all(r.json()["code"] == "capacity" for r in results if r.status_code == 409)

    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    positions = [p["draft_position"] for p in r.json()["participants"]]
    assert positions == [1, 2, 3, 4]


# --- state ------------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_state_reports_turn_and_available_teams(client, started_room, monkeypatch):
    """State names whose turn it is and hides drafted teams from the pool."""
    room = await started_room("owner", ("p2",), capacity=2)
    rid = room["id"]
    await _pick(client, rid, "owner", "frc118")

    r = await client.get(f"/api/drafts/{rid}/state", headers=bearer("p2"))
    assert r.status_code == 200
    state = r.json()
    assert state["room"]["status"] == "ACTIVE"
    assert state["current_turn"]["participant"]["draft_position"] == 2
    assert state["current_turn"]["pick_number"] == 2
    assert state["current_turn"]["round_number"] == 1
    assert state["is_my_turn"] is True
    assert 0 < state["time_remaining"] <= room["turn_time_seconds"]
    assert [p["team_id"] for p in state["picks"]] == ["frc118"]
    available = [t["id"] for t in state["available_teams"]]
    assert "frc118" not in available
    assert available[0] == "frc148"

    r = await client.get(f"/api/drafts/{rid}/state", headers=bearer("owner"))
    assert r.json()["is_my_turn"] is False

    monkeypatch.setattr(settings, "available_teams_limit", 3)
    r = await client.get(f"/api/drafts/{rid}/state", headers=bearer("owner"))
    assert len(r.json()["available_teams"]) == 3


@pytest.mark.asyncio
async def test_state_reads_are_stable(client, started_room):
    """With no writes in between, two reads agree on turn, picks and participants."""
    room = await started_room("owner", ("p2", "p3", "p4"), capacity=4)
    rid = room["id"]
    await _pick(client, rid, "owner", "frc254")

    first = (await client.get(f"/api/drafts/{rid}/state", headers=bearer("p3"))).json()
    second = (await client.get(f"/api/drafts/{rid}/state", headers=bearer("p3"))).json()
    for key in ("current_turn", "picks", "participants", "available_teams", "is_my_turn"):
        assert first[key] == second[key]


@pytest.mark.asyncio
async def test_pending_state_has_no_clock(client, make_room):
    """Before the draft starts the first seat is up but no time is running."""
    room = await make_room("owner", ("p2",))
    state = (await client.get(f"/api/drafts/{room['id']}/state", headers=bearer("owner"))).json()
    assert state["current_turn"]["participant"]["draft_position"] == 1
    assert state["is_my_turn"] is False
    assert state["time_remaining"] == 0


# --- visibility, deletion, listings -----------------------------------------------------------


@pytest.mark.asyncio
async def test_private_room_hidden_from_outsiders(client, make_room):
    """Outsiders can't read a private room; the owner can."""
    room = await make_room("owner", privacy="PRIVATE")
    rid = room["id"]
    for path in ("", "/state", "/picks", "/roster", "/matchups"):
        r = await client.get(f"/api/drafts/{rid}{path}", headers=bearer("stranger"))
        assert r.status_code == 403, path
    r = await client.get(f"/api/drafts/{rid}/state", headers=bearer("owner"))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_delete_room(client, started_room):
    """Only the owner deletes, and everything the finished draft produced goes with it."""
    room = await started_room("owner", ("p2",), capacity=2, round_count=1)
    rid = room["id"]
    await _pick(client, rid, "owner", "frc254")
    await _pick(client, rid, "p2", "frc1114")
    assert await _count(RosterEntry, rid) == 2
    assert await _count(Matchup, rid) > 0

    r = await client.delete(f"/api/drafts/{rid}", headers=bearer("p2"))
    assert r.status_code == 403

    r = await client.delete(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.status_code == 204
    r = await client.get(f"/api/drafts/{rid}", headers=bearer("owner"))
    assert r.status_code == 404
    assert await _count(DraftPick, rid) == 0
    assert await _count(DraftParticipant, rid) == 0
    assert await _count(RosterEntry, rid) == 0
    assert await _count(Matchup, rid) == 0


@pytest.mark.asyncio
async def test_public_and_mine_listings(client, make_room):
    """Public lists joinable rooms the caller isn't in; mine lists rooms they own or joined."""
    public = await make_room("owner", name="Open Draft")
    await make_room("owner", name="Friends Only", privacy="PRIVATE")

    r = await client.get("/api/drafts/public", headers=bearer("p2"))
    assert [row["name"] for row in r.json()] == ["Open Draft"]
    assert r.json()[0]["participant_count"] == 1
    assert r.json()[0]["has_space"] is True

    await client.post(f"/api/drafts/{public['id']}/join", headers=bearer("p2"))
    r = await client.get("/api/drafts/public", headers=bearer("p2"))
    assert r.json() == []

    r = await client.get("/api/drafts/mine", headers=bearer("p2"))
    assert [row["id"] for row in r.json()] == [public["id"]]
    assert r.json()[0]["participant_count"] == 2

    r = await client.get("/api/drafts/mine", headers=bearer("owner"))
    assert len(r.json()) == 2
