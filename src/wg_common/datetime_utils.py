"""UTC clock helpers. Stored timestamps are aware UTC; event payloads carry epoch ms."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def epoch_ms(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for `moment` (default: now)."""
    return int((moment or utc_now()).timestamp() * 1000)
