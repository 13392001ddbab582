from datetime import datetime, timezone


def to_utc_naive(value) -> datetime:
    """Parse an ISO-8601 string or datetime into a naive UTC datetime.

    Naive input is taken to be UTC already. A trailing ``Z`` is accepted on
    every supported Python version.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
