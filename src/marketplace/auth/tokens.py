"""Session token issuance and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the user id in `sub` plus `iat`/`exp`, signed with HS256 and the
configured secret. Nothing is stored server-side, so a token is valid
until it expires — there is no refresh and no revocation; a new token
requires logging in again.

Expiry is checked against an injectable clock rather than PyJWT's own
wall clock, which lets tests pin time exactly at the 7-day boundary.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

Clock = Callable[[], datetime]

DEFAULT_LIFETIME = timedelta(days=7)


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    issued_at: datetime
    expires_at: datetime


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed, time-limited session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = DEFAULT_LIFETIME,
        clock: Optional[Clock] = None,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock or utc_now

    def issue(self, user_id: int) -> str:
        issued_at = self._clock()
        expires_at = issued_at + self.lifetime
        payload = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature, structure and expiry.

        Returns the claims on success. Raises TokenError on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "iat", "exp"],
                    # Time claims are checked below against our clock
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            user_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            raise TokenError("Invalid token: malformed claims")

        if self._clock() >= expires_at:
            raise TokenError("Token has expired")

        return TokenClaims(user_id=user_id, issued_at=issued_at, expires_at=expires_at)
