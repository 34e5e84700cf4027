import uuid
from datetime import datetime, timezone
from enum import Enum

def generate_id():
    return str(uuid.uuid4())

def utcnow():
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """sqlite hands back naive datetimes; everything stored here is UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def row_to_dict(row):
    if row is None:
        return None
    data = {}
    for c in row.__table__.columns:
        value = getattr(row, c.name)
        if isinstance(value, Enum):
            value = value.value
        data[c.name] = value
    return data
