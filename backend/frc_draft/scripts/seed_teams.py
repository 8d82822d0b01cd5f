"""
Load the draftable team catalog from a local JSON file.

    python -m frc_draft.scripts.seed_teams teams.json

The file holds a list of team objects, either in The Blue Alliance "simple team" shape
(key, team_number, nickname, city, state_prov, country, rookie_year, website) or in this
app's own shape (id, number, name, ...). Rows are upserted by team key.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from frc_draft.database import SessionLocal
from frc_draft.models import Team

logger = logging.getLogger("frc_draft.seed")

UPDATABLE_FIELDS = ("number", "name", "city", "state_prov", "country", "rookie_year", "website")


def normalize_team(raw: dict[str, Any]) -> dict[str, Any] | None:
    number = raw.get("number", raw.get("team_number"))
    try:
        number = int(number)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None

    key = str(raw.get("id") or raw.get("key") or f"frc{number}").strip().lower()
    name = (raw.get("name") or raw.get("nickname") or "").strip() or f"Team {number}"
    rookie_year = raw.get("rookie_year")
    return {
        "id": key,
        "number": number,
        "name": name[:255],
        "city": raw.get("city") or None,
        "state_prov": raw.get("state_prov") or None,
        "country": raw.get("country") or None,
        "rookie_year": int(rookie_year) if rookie_year else None,
        "website": raw.get("website") or None,
    }


def load_team_rows(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("teams") or []
    # Last row wins for duplicate keys; Postgres rejects duplicates inside one ON CONFLICT insert.
    by_key: dict[str, dict[str, Any]] = {}
    skipped = 0
    for raw in data:
        row = normalize_team(raw) if isinstance(raw, dict) else None
        if row is None:
            skipped += 1
            continue
        by_key[row["id"]] = row
    if skipped:
        logger.warning("skipped %s team rows without a usable team number", skipped)
    return list(by_key.values())


def _chunk(seq: Sequence, n: int) -> list[Sequence]:
    return [seq[i : i + n] for i in range(0, len(seq), n)]


async def upsert_teams(session: AsyncSession, rows: Sequence[dict[str, Any]], *, chunk_size: int = 500) -> int:
    if not rows:
        return 0
    insert = sqlite_insert if session.bind.dialect.name == "sqlite" else pg_insert
    for batch in _chunk(list(rows), max(1, chunk_size)):
        stmt = insert(Team).values(list(batch))
        stmt = stmt.on_conflict_do_update(
            index_elements=[Team.id],
            set_={field: getattr(stmt.excluded, field) for field in UPDATABLE_FIELDS},
        )
        await session.execute(stmt)
    await session.commit()
    return len(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description="Upsert the FRC team catalog from a JSON file.")
    parser.add_argument("path", type=Path, help="JSON file with a list of teams")
    parser.add_argument("--chunk-size", type=int, default=500, help="Rows per INSERT statement (default: 500)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    async def _run() -> None:
        rows = load_team_rows(args.path)
        async with SessionLocal() as session:
            n = await upsert_teams(session, rows, chunk_size=args.chunk_size)
        print(f"Upserted teams: {n}")

    asyncio.run(_run())


if __name__ == "__main__":
    main()
