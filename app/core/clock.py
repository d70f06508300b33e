from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Reloj de pared en UTC naive (igual que las columnas de la BD)"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


system_clock = SystemClock()


def get_clock() -> Clock:
    """Clock dependency for FastAPI"""
    return system_clock


def to_naive_utc(value: datetime) -> datetime:
    """Normalizar un datetime con zona horaria a UTC naive"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
