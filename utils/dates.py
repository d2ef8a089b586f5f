import datetime


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form mongoengine hands back from DateTimeField."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def parse_datetime(value):
    """
    Accept a datetime or an ISO-8601 string (trailing Z allowed) and return
    naive UTC. Returns None for blank input, raises ValueError for garbage.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed


def iso(value):
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat() + "Z"
