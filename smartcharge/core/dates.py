from datetime import datetime, timezone
from typing import Optional

from smartcharge.core.errors import ValidationError

def utcnow() -> datetime:
    """Naive UTC timestamp; the store keeps naive UTC datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_iso_datetime(value, message: str = "Invalid date") -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or plain date into naive UTC.

    Empty values return ``None``; anything unparsable raises ValidationError.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(message)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
