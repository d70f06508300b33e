"""
Módulo de Pagos - Configuración de pagos y PIX

Funcionalidades principales:
- Configuración de formas de pago aceptadas por mercado
- Validación de chave PIX según su tipo
- Generación del payload PIX (BR Code) con CRC16 y su imagen QR

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- pix.py: Codificador del payload EMV
- qrcode_renderer.py: Render de la imagen QR
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as payments_router
from .service import PaymentSettingsService
from .repository import PaymentSettingsRepository

__all__ = [
    "payments_router",
    "PaymentSettingsService",
    "PaymentSettingsRepository"
]
