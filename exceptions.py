"""
Exceptions raised by the coaching actions.

Every action failure is one of these. The API layer turns them into the
``{"success": false, "message": ...}`` envelope with the matching status code.
"""

from typing import Optional


class CoachingError(Exception):
    """Base exception for all action failures."""

    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class NotAuthenticatedError(CoachingError):
    """No resolvable user behind the request."""

    status_code = 401
    default_message = "Not authenticated."


class ForbiddenError(CoachingError):
    """The user does not own the resource it is acting on."""

    status_code = 403
    default_message = "You do not have permission to do this."


class NotFoundError(CoachingError):
    status_code = 404
    default_message = "Not found."


class ConflictError(CoachingError):
    """The write would duplicate an existing row."""

    status_code = 409
    default_message = "Already exists."


class ValidationError(CoachingError):
    """Rejected input, raised before any mutation."""

    status_code = 422
    default_message = "Invalid input."

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)
