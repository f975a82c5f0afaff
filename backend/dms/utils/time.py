from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def humanize_timestamp(value: str, now: datetime | None = None) -> str:
    """Render a stored timestamp the way document lists show it."""
    moment = parse_timestamp(value)
    now = now or datetime.now(timezone.utc)
    days = (now - moment).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days <= 7:
        return f"{days} days ago"
    return moment.strftime("%m/%d/%Y")
