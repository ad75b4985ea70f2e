"""
JWT bearer token adapter - Implements AuthTokenCodec protocol.

Administrator tokens are HS256-signed JWTs carrying the admin id, username
and role, with an ``exp`` claim set at issuance.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from graduation.domain.exceptions import Unauthorized


class JwtTokenCodec:
    """
    Implements AuthTokenCodec protocol via PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=8)) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    def encode(self, claims: dict[str, Any]) -> str:
        payload = dict(claims)
        payload["exp"] = datetime.now(timezone.utc) + self._ttl
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired") from None
        except jwt.PyJWTError:
            raise Unauthorized("Invalid token") from None
