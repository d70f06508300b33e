"""
Errores de dominio de la API.

Los servicios lanzan estas excepciones directamente; al heredar de
HTTPException FastAPI las convierte en la respuesta adecuada sin handlers
adicionales.
"""

from typing import Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base de todos los errores de negocio"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail)


class ValidationError(AppError):
    """Entrada inválida (slot fuera de rango, datos PIX incompletos, etc.)"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Slot ocupado en una ventana de tiempo que se solapa"""
    status_code = status.HTTP_409_CONFLICT


class DependencyError(AppError):
    """Falla de un colaborador externo (almacenamiento, render de QR)"""
    status_code = status.HTTP_502_BAD_GATEWAY
