"""
Reglas de exclusividad de slots del carrusel.

Un slot de un mercado solo puede estar ocupado por una campaña ACTIVE o
SCHEDULED a la vez. La verificación es un barrido lineal sobre las campañas
candidatas del mismo (mercado, slot): O(n) por verificación, aceptable porque
un mercado tiene como máximo 8 slots y pocas campañas por slot.
"""

from datetime import datetime
from typing import Iterable, Optional

from app.core.exceptions import ConflictError, ValidationError


def has_date_conflict(
    start1: datetime,
    end1: Optional[datetime],
    start2: datetime,
    end2: Optional[datetime]
) -> bool:
    """
    Determina si dos ventanas se solapan. end=None significa sin término.

    Con ambas ventanas acotadas se usa semántica semiabierta: que una termine
    exactamente cuando la otra empieza no es conflicto.
    """
    if end1 is None and end2 is None:
        return True

    if end1 is None:
        return start1 <= end2

    if end2 is None:
        return end1 >= start2

    return start1 < end2 and end1 > start2


def validate_slot_range(slot: int, min_slot: int = 1, max_slot: int = 8) -> None:
    if slot < min_slot or slot > max_slot:
        raise ValidationError(f"Slot debe ser un número entre {min_slot} y {max_slot}")


def format_window(start: datetime, end: Optional[datetime]) -> str:
    end_text = end.isoformat() if end is not None else "sin fecha de término"
    return f"{start.isoformat()} hasta {end_text}"


def ensure_no_conflict(
    slot: int,
    start_date: datetime,
    end_date: Optional[datetime],
    candidates: Iterable
) -> None:
    """Lanza ConflictError con la primera campaña candidata que se solape"""
    for candidate in candidates:
        if has_date_conflict(start_date, end_date, candidate.start_date, candidate.end_date):
            raise ConflictError(
                f"Slot {slot} ya está ocupado en el período de "
                f"{format_window(candidate.start_date, candidate.end_date)}"
            )
