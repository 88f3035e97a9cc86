"""
NITC Blogs — Credential hashing and session token utilities
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from nitc_blogs.core.clock import Clock, as_utc, utcnow
from nitc_blogs.core.errors import InvalidToken, TokenExpired


# ─── Password Hashing ─────────────────────────────────────────────────────────

class PasswordHasher:
    """bcrypt with a fixed work factor. Plaintext never leaves these calls."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(plain, hashed)
        except ValueError:
            return False


# ─── Session Tokens (JWT) ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class SessionClaim:
    user_id: str
    issued_at: int  # seconds since epoch


class SessionIssuer:
    """Mints and verifies stateless bearer tokens carrying ``{id, iat, exp}``."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=1),
        clock: Clock = utcnow,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "id": user_id,
            "iat": int(now.timestamp()),
            "exp": now + self.ttl,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaim:
        """Decode and validate a token. Raises InvalidToken / TokenExpired."""
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise TokenExpired()
        except JWTError:
            raise InvalidToken()

        user_id = claims.get("id")
        issued_at = claims.get("iat")
        if not isinstance(user_id, str) or not isinstance(issued_at, int):
            raise InvalidToken()
        return SessionClaim(user_id=user_id, issued_at=issued_at)


def changed_password_after(password_changed_at: datetime | None, issued_at: int) -> bool:
    """True when the password was changed after a session was issued."""
    if password_changed_at is None:
        return False
    return issued_at < int(as_utc(password_changed_at).timestamp())
