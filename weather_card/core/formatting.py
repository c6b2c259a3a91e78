"""Clock formatting for sunrise and sunset times."""

from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from weather_card.config import settings


def resolve_timezone(tz: Union[str, tzinfo, None] = None) -> Optional[tzinfo]:
    """Turn an IANA name into a tzinfo. ``None`` falls back to the configured zone."""
    if tz is None:
        tz = settings.display_timezone
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def format_clock(epoch_seconds: int, tz: Union[str, tzinfo, None] = None) -> str:
    """Format epoch seconds as ``HH:mm``.

    Uses the host local zone when neither ``tz`` nor ``display_timezone`` is set.
    """
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    zone = resolve_timezone(tz)
    local = moment.astimezone(zone) if zone else moment.astimezone()
    return local.strftime("%H:%M")
