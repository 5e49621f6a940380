"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to. The message is what the
client sees, so StorageError messages stay generic; details go to the log.
"""


class HarmWatchError(Exception):
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"success": False, "error": self.message}


class ValidationError(HarmWatchError):
    """Missing or invalid input."""

    http_status = 400


class AuthError(HarmWatchError):
    """Missing, invalid or expired credentials."""

    http_status = 401


class ForbiddenError(HarmWatchError):
    """Authenticated, but not allowed to touch the resource."""

    http_status = 403


class NotFoundError(HarmWatchError):
    http_status = 404


class ConflictError(HarmWatchError):
    # duplicate unique field; reported as a plain bad request
    http_status = 400


class StorageError(HarmWatchError):
    """A collection could not be persisted."""

    http_status = 500
