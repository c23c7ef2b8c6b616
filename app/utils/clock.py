"""Wall-clock access in the deployment's reference timezone."""
from datetime import datetime, timezone, tzinfo

from app.config import settings


class Clock:
    """
    Source of the current time.

    Every call to now() reads the system clock again, so callers that
    need "now" at two decision points get two readings.
    """

    def __init__(self, tz: tzinfo):
        self.tz = tz

    def now(self) -> datetime:
        """
        Return the current time as an aware datetime in the reference zone.

        Truncated to milliseconds, the precision MongoDB stores.
        """
        now = datetime.now(self.tz)
        return now.replace(microsecond=now.microsecond // 1000 * 1000)

    def localize(self, value: datetime) -> datetime:
        """Convert a stored datetime to the reference zone."""
        return to_local(value, self.tz)


def to_local(value: datetime, tz: tzinfo) -> datetime:
    """
    Convert a datetime to the given zone.

    Naive values are assumed to be UTC, which is how MongoDB stores them.

    Example:
        >>> from zoneinfo import ZoneInfo
        >>> to_local(datetime(2024, 1, 1, 12, 0), ZoneInfo("Europe/Madrid")).hour
        13
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def get_clock() -> Clock:
    """Dependency returning a clock for the configured timezone."""
    return Clock(settings.tzinfo)
