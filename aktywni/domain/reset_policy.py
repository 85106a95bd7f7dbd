from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from aktywni.core.timeutil import to_utc


@dataclass(frozen=True, slots=True)
class ResetTokenPolicy:
    """Defines the lifetime of a password reset token.

    Semantics:
    - A token issued at ``now`` expires at ``now + ttl``.
    - A token is usable while ``now <= expires_at``.
    - A missing or unparsable expiry counts as expired.

    Naive timestamps are read as UTC (SQLite drops tzinfo on the way back).
    """

    ttl: timedelta

    @classmethod
    def from_minutes(cls, minutes: int) -> ResetTokenPolicy:
        return cls(ttl=timedelta(minutes=minutes))

    def expires_at(self, now: datetime) -> datetime:
        return now + self.ttl

    def is_expired(self, expires_at: datetime | str | None, now: datetime) -> bool:
        expires = _coerce_utc(expires_at)
        if expires is None:
            return True
        return expires < now


def _coerce_utc(value: datetime | str | None) -> datetime | None:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    return to_utc(value)
