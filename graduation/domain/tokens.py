"""
Stage token issuer.

Stage tokens are opaque capabilities: 32 random bytes, hex-encoded. They are
never checked for uniqueness; a collision at 256 bits is not a practical
concern. Expiry follows one of two policies:

- fixed:   every token expires at the same configured deadline, which must
           lie in the future when the issuer is built
- rolling: every token expires a fixed number of hours after issuance
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

TOKEN_BYTES = 32


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IssuedToken(NamedTuple):
    token: str
    expiry: datetime


@dataclass
class TokenIssuer:
    """Issues stage tokens under a fixed-deadline or rolling-window policy."""

    mode: str = "rolling"
    fixed_expiry: datetime | None = None
    rolling_hours: int = 48
    clock: Callable[[], datetime] = field(default=utc_now)

    def __post_init__(self) -> None:
        if self.mode not in ("fixed", "rolling"):
            raise ValueError(f"Unknown token expiry mode: {self.mode}")
        if self.mode == "fixed":
            if self.fixed_expiry is None:
                raise ValueError("Fixed token expiry mode requires a deadline")
            if self.fixed_expiry.tzinfo is None:
                raise ValueError("Fixed token deadline must be timezone-aware")
            if self.fixed_expiry <= self.clock():
                raise ValueError(
                    f"Fixed token deadline {self.fixed_expiry.isoformat()} has passed; "
                    "every issued link would already be expired"
                )
        if self.mode == "rolling" and self.rolling_hours <= 0:
            raise ValueError("Rolling token window must be positive")

    def issue(self) -> IssuedToken:
        return IssuedToken(secrets.token_hex(TOKEN_BYTES), self.expiry())

    def expiry(self) -> datetime:
        if self.mode == "fixed":
            return self.fixed_expiry
        return self.clock() + timedelta(hours=self.rolling_hours)
