"""Error taxonomy shared by the generation endpoints and the wizard client.

Every failure a user action can hit maps onto one of four conditions:

- ``Unauthenticated``: no active session; the action is blocked before dispatch
- ``GenerationFailed``: the generation endpoint (or the LLM behind it) failed
- ``MalformedResponse``: a response body did not decode into the expected shape
- ``PersistenceFailed``: a storage read or write did not complete

All of them derive from ``GenerationError`` so callers that convert failures
into notifications can catch a single type.
"""

from typing import Optional

__all__ = [
    "GenerationError",
    "Unauthenticated",
    "GenerationFailed",
    "MalformedResponse",
    "PersistenceFailed",
    "InvalidTransition",
    "ERROR_CODE_HEADER",
]

# Response header naming the failure class of a 502 from a generation endpoint
ERROR_CODE_HEADER = "X-Error-Code"


class GenerationError(Exception):
    """Base class for failures surfaced to the user as a notification."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.user_message)


class Unauthenticated(GenerationError):
    user_message = "Please log in to continue."


class GenerationFailed(GenerationError):
    """The generation endpoint returned a non-success status."""

    user_message = "Generation failed. Please try again."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.status = status
        self.detail = detail
        if message is None:
            message = (
                f"Generation failed with upstream status {status}"
                if status is not None
                else "Generation request could not be completed"
            )
        super().__init__(message)


class MalformedResponse(GenerationError):
    """A response body was not valid JSON or did not match the expected model."""

    user_message = "The AI returned an unexpected format. Please try again."
    code = "MALFORMED_RESPONSE"


class PersistenceFailed(GenerationError):
    """A storage operation did not complete (or targeted a row the user does not own)."""

    user_message = "Your change could not be saved."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.status = status
        self.detail = detail
        super().__init__(message)


class InvalidTransition(ValueError):
    """A wizard action was invoked from a state that does not allow it."""
