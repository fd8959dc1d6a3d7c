from datetime import datetime, timezone
from typing import Any, Optional
import json
import re
import secrets
import uuid

from classroom.core.errors import ValidationError

# Ambiguous characters (0/O, 1/I) are left out of join codes
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6

def generate_uuid() -> str:
    return str(uuid.uuid4())

def get_utc_now() -> datetime:
    """Get current UTC datetime, naive, the way it is stored in the database"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def to_naive_utc(dt: datetime) -> datetime:
    """Normalize an incoming datetime to naive UTC; naive input is taken as UTC"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)

def as_utc(dt: datetime) -> datetime:
    """Attach the UTC timezone to a naive datetime read back from the database"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def generate_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))

def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename by removing invalid characters

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Drop any directory component sent by the client
    filename = filename.replace("\\", "/").split("/")[-1]
    # Remove invalid characters
    filename = re.sub(r'[<>:"|?*]', '', filename)
    # Remove control characters
    filename = "".join(char for char in filename if ord(char) >= 32)
    return filename.strip()

def percentage(part: int, whole: int) -> int:
    """Rounded percentage, 0 when there is nothing to divide by"""
    if whole <= 0:
        return 0
    return round(part / whole * 100)

def load_json_field(value: Optional[str], error_message: str) -> Any:
    """
    Decode a JSON encoded multipart form field

    Returns:
        The decoded value, or None for a missing or blank field
    Raises:
        ValidationError if the field is not valid JSON
    """
    if value is None or not value.strip():
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        raise ValidationError(error_message)
