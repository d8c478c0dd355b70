from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp for DateTime(timezone=True) columns."""
    return datetime.now(timezone.utc)
