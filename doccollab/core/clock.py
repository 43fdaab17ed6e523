from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Текущее время в UTC без tzinfo (так хранятся все метки времени в БД)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
