"""Bearer session state and the expiry policy applied to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# ``expires_in_access`` values at or above this are unix timestamps, not
# durations (one billion seconds is roughly 31 years).
EPOCH_THRESHOLD = 1_000_000_000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Session:
    """A bearer token together with the window in which it may be used.

    Sessions are never patched in place: a refresh produces a new instance
    which replaces the previous one wholesale.
    """

    token: str = field(repr=False)
    issued_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("session token must not be empty")
        if self.expires_at <= self.issued_at:
            raise ValueError(
                f"session expiry {self.expires_at.isoformat()} is not after "
                f"issue time {self.issued_at.isoformat()}"
            )

    def is_expired(
        self, now: datetime | None = None, *, margin: timedelta = timedelta(0)
    ) -> bool:
        """Return True once ``now`` has reached ``expires_at - margin``."""
        current = now or utcnow()
        return current >= self.expires_at - margin

    def remaining(self, now: datetime | None = None) -> timedelta:
        current = now or utcnow()
        return max(self.expires_at - current, timedelta(0))


def expiry_from_field(value: float, issued_at: datetime) -> datetime:
    """Turn an ``expires_in_access`` value into an absolute instant."""
    if value >= EPOCH_THRESHOLD:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return issued_at + timedelta(seconds=value)


def resolve_expiry(
    issued_at: datetime,
    *,
    expires_in: float | None = None,
    claim_expiry: datetime | None = None,
) -> datetime | None:
    """Pick the expiry instant from whichever lifetime sources are present.

    When both the response field and the token's ``exp`` claim are
    available the earlier instant wins.
    """
    candidates: list[datetime] = []
    if expires_in is not None:
        candidates.append(expiry_from_field(expires_in, issued_at))
    if claim_expiry is not None:
        candidates.append(claim_expiry)
    if not candidates:
        return None
    return min(candidates)


__all__ = [
    "EPOCH_THRESHOLD",
    "Session",
    "expiry_from_field",
    "resolve_expiry",
    "utcnow",
]
