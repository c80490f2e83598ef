import uuid
from datetime import datetime, timezone


def id_generator():
    """Return a factory producing UUID4 string identifiers."""
    def generate() -> str:
        return str(uuid.uuid4())
    return generate


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
