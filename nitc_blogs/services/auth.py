"""
NITC Blogs — Auth service

Signup confirmation, login, forgot/reset password and session resolution.

User state machine:
  Unverified ──confirm_signup──▶ Verified
  NoPendingReset ──forgot_password──▶ ResetPending ──reset_password──▶ NoPendingReset

Password hashing runs in a worker thread so bcrypt never blocks the loop.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from nitc_blogs.core.clock import Clock, utcnow
from nitc_blogs.core.config import Settings
from nitc_blogs.core.errors import (
    AlreadyVerified,
    DuplicateUser,
    EmailDeliveryFailed,
    IncorrectPassword,
    InvalidOrExpiredToken,
    NotFound,
    NotVerified,
    StalePasswordChange,
    UserNoLongerExists,
    UserNotRegistered,
    ValidationError,
)
from nitc_blogs.core.security import PasswordHasher, SessionIssuer, changed_password_after
from nitc_blogs.core.tokens import TokenGenerator
from nitc_blogs.db.users import UserRepository
from nitc_blogs.models.user import User
from nitc_blogs.services.email import EmailDeliveryError, Mailer, Recipient

logger = logging.getLogger(__name__)

# passwordChangedAt is back-dated so a session minted right after the change
# (same second) is not considered stale.
PASSWORD_CHANGE_SKEW = timedelta(seconds=1)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


@dataclass(frozen=True)
class AuthComponents:
    """Process-wide, immutable collaborators built once at startup."""

    hasher: PasswordHasher
    sessions: SessionIssuer
    signup_tokens: TokenGenerator
    reset_tokens: TokenGenerator
    mailer: Mailer
    clock: Clock = utcnow


class AuthService:
    def __init__(self, users: UserRepository, components: AuthComponents, settings: Settings):
        self.users = users
        self.hasher = components.hasher
        self.sessions = components.sessions
        self.signup_tokens = components.signup_tokens
        self.reset_tokens = components.reset_tokens
        self.mailer = components.mailer
        self._clock = components.clock
        self._email_pattern = re.compile(
            rf"^[a-zA-Z0-9_\-.]+@{re.escape(settings.EMAIL_DOMAIN.lower())}$"
        )
        self._domain = settings.EMAIL_DOMAIN
        self._min_password_length = settings.PASSWORD_MIN_LENGTH

    # ─── Credentials ─────────────────────────────────────────────────────────

    def normalize_email(self, email: str) -> str:
        email = email.strip().lower()
        if not self._email_pattern.match(email):
            raise ValidationError(f"Invalid input data. Your email must be a valid @{self._domain} email")
        return email

    def _check_new_password(self, password: str, password_confirm: str) -> None:
        if len(password) < self._min_password_length:
            raise ValidationError(
                f"Invalid input data. Password must be at least {self._min_password_length} characters"
            )
        if password != password_confirm:
            raise ValidationError("Invalid input data. Passwords are not the same!")

    async def verify_password(self, plain: str, user: User) -> bool:
        return await asyncio.to_thread(self.hasher.verify, plain, user.password_hash)

    async def set_password(self, user: User, plain: str, *, initial: bool = False) -> None:
        """The only place a password hash is produced.

        Stamps ``password_changed_at`` for every change after the initial one,
        which invalidates all sessions issued before it.
        """
        user.password_hash = await asyncio.to_thread(self.hasher.hash, plain)
        if not initial:
            user.password_changed_at = self._clock() - PASSWORD_CHANGE_SKEW

    # ─── Signup ──────────────────────────────────────────────────────────────

    async def signup(self, name: str, email: str, password: str, password_confirm: str) -> None:
        email = self.normalize_email(email)
        self._check_new_password(password, password_confirm)
        if await self.users.email_registered(email):
            raise DuplicateUser()

        user = User(name=name.strip(), email=email, is_verified=False)
        await self.set_password(user, password, initial=True)
        try:
            await self._send_signup_token(user)
        except IntegrityError:
            await self.users.db.rollback()
            raise DuplicateUser()
        logger.info("User %s signed up", user.id)

    async def resend_signup_token(self, email: str) -> None:
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFound("There is no user with this email address.")
        if user.is_verified:
            raise AlreadyVerified()
        await self._send_signup_token(user)

    async def _send_signup_token(self, user: User) -> None:
        issued = self.signup_tokens.issue()
        user.signup_token = issued.digest
        user.signup_token_expires = issued.expires_at
        await self.users.save(user)

        try:
            await self.mailer.send_signup(Recipient(user.email, user.name), issued.raw)
        except EmailDeliveryError:
            logger.exception("Signup email for user %s could not be delivered", user.id)
            user.clear_signup_token()
            await self.users.save(user)
            raise EmailDeliveryFailed()

    async def confirm_signup(self, raw_token: str) -> User:
        digest = self.signup_tokens.digest(raw_token)
        user = await self.users.get_by_signup_token(digest, self._clock())
        if user is None:
            raise InvalidOrExpiredToken("Your token has either expired or is invalid! Please signup again.")

        user.is_verified = True
        user.clear_signup_token()
        await self.users.save(user)
        logger.info("User %s confirmed signup", user.id)
        return user

    # ─── Login ───────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> LoginResult:
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = await self.users.get_by_email(email)
        if user is None:
            raise UserNotRegistered()
        if not user.is_verified:
            raise NotVerified()
        if not await self.verify_password(password, user):
            raise IncorrectPassword()

        logger.info("User %s logged in", user.id)
        return LoginResult(token=self.sessions.issue(user.id), user=user)

    async def update_password(
        self, user: User, current: str, password: str, password_confirm: str
    ) -> LoginResult:
        if not await self.verify_password(current, user):
            raise IncorrectPassword("Your current password is wrong.")
        self._check_new_password(password, password_confirm)

        await self.set_password(user, password)
        await self.users.save(user)
        logger.info("User %s updated their password", user.id)
        return LoginResult(token=self.sessions.issue(user.id), user=user)

    # ─── Password reset ──────────────────────────────────────────────────────

    async def forgot_password(self, email: str) -> None:
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFound("There is no user with this email address.")
        if not user.is_verified:
            raise NotVerified("Your account is not verified. Please verify account to continue.")

        issued = self.reset_tokens.issue()
        user.password_reset_token = issued.digest
        user.password_reset_expires = issued.expires_at
        await self.users.save(user)

        try:
            await self.mailer.send_password_reset(Recipient(user.email, user.name), issued.raw)
        except EmailDeliveryError:
            logger.exception("Password reset email for user %s could not be delivered", user.id)
            user.clear_password_reset_token()
            await self.users.save(user)
            raise EmailDeliveryFailed()

    async def reset_password(self, raw_token: str, password: str, password_confirm: str) -> None:
        digest = self.reset_tokens.digest(raw_token)
        user = await self.users.get_by_reset_token(digest, self._clock())
        if user is None:
            raise InvalidOrExpiredToken()
        self._check_new_password(password, password_confirm)

        await self.set_password(user, password)
        user.clear_password_reset_token()
        await self.users.save(user)
        logger.info("User %s reset their password", user.id)

    # ─── Sessions ────────────────────────────────────────────────────────────

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to a live user, rejecting stale sessions."""
        claim = self.sessions.verify(token)

        user = await self.users.get(claim.user_id)
        if user is None:
            raise UserNoLongerExists()
        if changed_password_after(user.password_changed_at, claim.issued_at):
            raise StalePasswordChange()
        return user

    async def deactivate(self, user: User) -> None:
        user.active = False
        await self.users.save(user)
        logger.info("User %s deactivated their account", user.id)
