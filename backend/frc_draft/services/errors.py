"""
Typed draft failures.

Every expected, user-facing outcome of a draft operation is raised as a DraftError subclass.
The API layer renders them as {"detail": message, "code": code} with the class's HTTP status.
"""

from __future__ import annotations


class DraftError(Exception):
    status_code: int = 400
    code: str = "draft_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DraftError):
    status_code = 404
    code = "not_found"


class InvalidStateError(DraftError):
    """Operation attempted against a room in the wrong lifecycle status."""

    status_code = 409
    code = "invalid_state"


class ForbiddenError(DraftError):
    status_code = 403
    code = "forbidden"


class ConflictError(DraftError):
    """A uniqueness or ordering invariant would be violated."""

    status_code = 409
    code = "conflict"


class InsufficientParticipantsError(DraftError):
    status_code = 409
    code = "insufficient_participants"


class CapacityError(DraftError):
    status_code = 409
    code = "capacity"
