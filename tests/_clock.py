from datetime import datetime, timedelta, timezone

from api.lunch.services.clock import Clock

# 2024-01-01 is a Monday
MONDAY = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FixedClock(Clock):
    """Clock frozen at ``current`` until moved with :meth:`set`."""

    def __init__(self, current: datetime) -> None:
        super().__init__("UTC")
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, hour: int, minute: int = 0, second: int = 0, days: int = 0) -> None:
        base = MONDAY + timedelta(days=days)
        self.current = base.replace(hour=hour, minute=minute, second=second)
