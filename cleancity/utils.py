from datetime import datetime, timezone

def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def normalize_email(email: str) -> str:
    return (email or '').strip().lower()

def same_city(a, b) -> bool:
    if a is None or b is None:
        return False
    return a.lower() == b.lower()

def isoformat(value):
    return value.isoformat() if value else None
