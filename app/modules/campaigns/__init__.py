"""
Módulo de Campañas - Carrusel promocional de los mercados

Cada mercado tiene 8 slots en su carrusel. Una campaña ocupa un slot durante
una ventana de fechas y pasa por los estados DRAFT, SCHEDULED, ACTIVE y
EXPIRED.

Funcionalidades principales:
- Creación y actualización con detección de conflictos de slot
- Activación (inmediata o programada) y desactivación
- Barrido periódico de expiración
- Consulta del carrusel vigente por fechas

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- scheduling.py: Reglas de solapamiento de ventanas
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as campaigns_router
from .service import CampaignService
from .repository import CampaignRepository

__all__ = [
    "campaigns_router",
    "CampaignService",
    "CampaignRepository"
]
