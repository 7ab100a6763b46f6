"""Typed failures surfaced by the voting engine."""


class MovieMatchError(Exception):
    """Base class for errors returned to callers."""

    code = "ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, object]:
        """Return the JSON body used by the HTTP layer."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "retryable": self.retryable,
            }
        }


class NotFoundError(MovieMatchError):
    """A room, candidate or membership row does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class UnauthorizedError(MovieMatchError):
    """The caller is not an active member of the room."""

    code = "UNAUTHORIZED"
    status_code = 403


class InvalidStateError(MovieMatchError):
    """The room is not in a state that allows the operation."""

    code = "INVALID_STATE"
    status_code = 409


class TransientStoreError(MovieMatchError):
    """The durable store failed for infrastructural reasons."""

    code = "STORE_UNAVAILABLE"
    status_code = 503
    retryable = True


class CircuitOpenError(Exception):
    """The catalog source is short-circuited; never leaves the catalog layer."""
