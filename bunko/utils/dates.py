from datetime import datetime, timezone


def _as_utc(value):
    # SQLite hands DateTime columns back without tzinfo; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def relative_date(value, now=None):
    """Human-readable age of a timestamp: "Today", "3 days ago", "2 months ago"."""
    if value is None:
        return ""
    value = _as_utc(value)
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    days = (now - value).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks != 1 else ''} ago"
    if days < 365:
        months = days // 30
        return f"{months} month{'s' if months != 1 else ''} ago"
    return value.strftime("%Y-%m-%d")
