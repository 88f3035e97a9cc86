"""
NITC Blogs — Operational error taxonomy

Every expected business-rule failure is raised as an AppError subclass and
formatted at a single boundary (see nitc_blogs.api.errors). Anything that is
not an AppError is treated as a programming/infrastructure error.
"""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong"
    is_operational: bool = True

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def status(self) -> str:
        return "fail" if str(self.status_code).startswith("4") else "error"

    @property
    def kind(self) -> str:
        return type(self).__name__


# ── 400: client input / account state ────────────────────────────────────────

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input data."


class DuplicateUser(AppError):
    status_code = 400
    default_message = "User already exists!"


class DuplicateFieldValue(AppError):
    status_code = 400
    default_message = "Duplicate field value. Please use another value!"


class AlreadyVerified(AppError):
    status_code = 400
    default_message = "Your account is already verified. Please login to continue"


class InvalidOrExpiredToken(AppError):
    status_code = 400
    default_message = "Token is invalid or has expired"


# ── 404: missing entities ────────────────────────────────────────────────────

class NotFound(AppError):
    status_code = 404
    default_message = "No document found with that ID"


class UserNotRegistered(NotFound):
    """Login against an unknown email. Reported as 400 on the login surface."""

    status_code = 400
    default_message = "User doesn't exist. Please signup to continue"


# ── 401: authentication ──────────────────────────────────────────────────────

class NotVerified(AppError):
    status_code = 401
    default_message = "Your account has not been verified. Please verify account to login"


class IncorrectPassword(AppError):
    status_code = 401
    default_message = "Incorrect password"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "You are not logged in! Please log in to get access."


class InvalidToken(AppError):
    status_code = 401
    default_message = "Invalid token. Please log in again!"


class TokenExpired(InvalidToken):
    default_message = "Your token has expired! Please log in again."


class UserNoLongerExists(AppError):
    status_code = 401
    default_message = "The user belonging to this token does no longer exist."


class StalePasswordChange(AppError):
    status_code = 401
    default_message = "User recently changed password! Please log in again."


# ── 403: authorization ───────────────────────────────────────────────────────

class Forbidden(AppError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


# ── 500: delivery ────────────────────────────────────────────────────────────

class EmailDeliveryFailed(AppError):
    status_code = 500
    default_message = "There was an error sending the email. Try again later!"
