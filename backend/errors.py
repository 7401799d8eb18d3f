"""Error kinds raised by the matching engine.

The request layer maps each kind to its own HTTP status; none of them are
retried since they all describe bad caller input or caller identity.
"""


class TeeMatchError(Exception):
    """Base class for errors surfaced to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TeeMatchError):
    """Malformed or missing input (empty message, unknown direction, bad date)."""


class NotFoundError(TeeMatchError):
    """Reference to a user, match or course that does not exist."""


class AuthorizationError(TeeMatchError):
    """Caller is not allowed to act on the resource."""


class NotAuthenticatedError(AuthorizationError):
    """No authenticated user on the request."""
