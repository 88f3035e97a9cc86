"""
NITC Blogs — Single-use, time-boxed tokens (signup confirmation, password reset)

Only the SHA-256 digest of a token is ever persisted. The raw value leaves
the process in the outbound email and comes back in the confirmation URL.
"""
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from nitc_blogs.core.clock import Clock, utcnow

TOKEN_BYTES = 32


@dataclass(frozen=True)
class IssuedToken:
    raw: str
    digest: str
    expires_at: datetime


def digest_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class TokenGenerator:
    """Issues independent random tokens with a fixed time-to-live."""

    def __init__(self, ttl: timedelta, clock: Clock = utcnow):
        self.ttl = ttl
        self._clock = clock

    def issue(self) -> IssuedToken:
        raw = secrets.token_hex(TOKEN_BYTES)
        return IssuedToken(raw=raw, digest=digest_token(raw), expires_at=self._clock() + self.ttl)

    @staticmethod
    def digest(raw: str) -> str:
        return digest_token(raw)
