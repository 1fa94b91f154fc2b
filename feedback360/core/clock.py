from datetime import datetime, timezone


def utcnow() -> datetime:
    # Columns are naive UTC so PostgreSQL and SQLite round-trip the same value
    return datetime.now(timezone.utc).replace(tzinfo=None)
