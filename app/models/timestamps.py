from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo on the way back, so none is stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
