"""
auth/errors.py -- Error taxonomy for the auth core.

Each error carries the HTTP status the API layer should answer with. The
API registers a single exception handler for AuthError that renders
{"error": message} -- routes and the service just raise.

Invalid credentials and invalid OTP codes are NOT errors; they are normal
results (False) surfaced as success:false responses.
"""


class AuthError(Exception):
    status_code: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class StoreError(AuthError):
    """Backing persistence failed. The raw driver message is passed through."""

    status_code = 500


class NotVerified(AuthError):
    status_code = 400
    default_message = "Email not verified"


class Unauthenticated(AuthError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AuthError):
    status_code = 403
    default_message = "Admin access required"


class NotFound(AuthError):
    status_code = 404
    default_message = "User not found"
