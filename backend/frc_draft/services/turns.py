from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TurnSlot:
    participant_index: int  # 0-based index into participants ordered by draft position
    round_number: int  # 1-based
    pick_number: int  # 1-based pick number within the room


def round_for_pick(pick_number: int, participant_count: int) -> int:
    """Round of the 1-based `pick_number` when `participant_count` teams draft each round."""
    if participant_count < 1:
        raise ValueError("participant_count must be >= 1")
    if pick_number < 1:
        raise ValueError("pick_number must be >= 1")
    return (pick_number - 1) // participant_count + 1


def resolve_current_turn(participant_count: int, pick_count: int, snake_format: bool) -> TurnSlot:
    """
    Whose turn is it after `pick_count` committed picks.

    Linear order repeats 1..n every round. Snake order reverses on even rounds:
    1..n, n..1, 1..n, ...

    This is the only place turn order is computed; both pick validation and
    state reads go through it.
    """
    if pick_count < 0:
        raise ValueError("pick_count must be >= 0")
    pick_number = pick_count + 1
    round_number = round_for_pick(pick_number, participant_count)
    within = (pick_number - 1) % participant_count
    if snake_format and round_number % 2 == 0:
        index = (participant_count - 1) - within
    else:
        index = within
    return TurnSlot(participant_index=index, round_number=round_number, pick_number=pick_number)
