import os
from datetime import datetime

import pytz

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Seoul")


def get_timezone():
    return pytz.timezone(APP_TIMEZONE)


def local_now() -> datetime:
    """Current time, timezone-aware, in the application timezone."""
    return datetime.now(get_timezone())


def month_start(now: datetime = None) -> datetime:
    """Midnight on the first day of the month containing ``now``."""
    now = now or local_now()
    return get_timezone().localize(datetime(now.year, now.month, 1))


__all__ = ['APP_TIMEZONE', 'get_timezone', 'local_now', 'month_start']
