# app/core/exceptions.py


class MealAttendError(Exception):
    """Base exception for domain failures surfaced to HTTP callers."""


class AllocationFailed(MealAttendError):
    """The ID counter transaction could not complete. Safe to retry."""

    def __init__(self, id_type: str):
        self.id_type = id_type
        super().__init__(f"Could not allocate the next {id_type} identifier")


class Unauthorized(MealAttendError):
    """Actor lacks the capability or role-assignment right for an action."""


class Unauthenticated(MealAttendError):
    """No valid actor could be resolved from the request."""
