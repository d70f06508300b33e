from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.clock import Clock, get_clock
from app.modules.campaigns.service import CampaignService
from app.modules.campaigns.schemas import (
    CampaignCreate, CampaignUpdate, CampaignResponse,
    CampaignStatus, ExpireCampaignsResponse
)

router = APIRouter()


def get_campaign_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
) -> CampaignService:
    return CampaignService(db, clock)

# ===== CONSULTAS PÚBLICAS =====

@router.get("/carousel", response_model=List[CampaignResponse])
async def get_active_campaigns_for_carousel(
    market_id: Optional[str] = Query(None, description="Filtrar por mercado"),
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Campañas vigentes del carrusel, ordenadas por slot.

    La vigencia se decide por fechas: una campaña SCHEDULED cuya fecha de
    inicio ya llegó aparece aunque la activación todavía no la haya movido.
    """
    return service.get_active_campaigns_for_carousel(market_id)


@router.get("/market/{market_id}", response_model=List[CampaignResponse])
async def get_campaigns_by_market(
    market_id: str,
    status: Optional[CampaignStatus] = Query(None, description="Filtrar por estado"),
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    service: CampaignService = Depends(get_campaign_service)
):
    """Listar campañas de un mercado, ordenadas por slot y fecha de inicio"""
    return service.get_campaigns_by_market(market_id, status, page, size)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    return service.get_campaign(campaign_id)

# ===== GESTIÓN =====

@router.post("/", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign_data: CampaignCreate,
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Crear campaña del carrusel

    **Validaciones:**
    - Slot dentro del rango configurado (1 a 8 por defecto)
    - Si el estado es ACTIVE o SCHEDULED, el slot no puede estar ocupado en
      una ventana que se solape (409)
    """
    return service.create_campaign(campaign_data)


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: str,
    update_data: CampaignUpdate,
    service: CampaignService = Depends(get_campaign_service)
):
    """Actualización parcial; cambios de slot o fechas vuelven a validar el slot"""
    return service.update_campaign(campaign_id, update_data)


@router.patch("/{campaign_id}/activate", response_model=CampaignResponse)
async def activate_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    """ACTIVE si ya empezó, SCHEDULED si la fecha de inicio es futura"""
    return service.activate_campaign(campaign_id)


@router.patch("/{campaign_id}/deactivate", response_model=CampaignResponse)
async def deactivate_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    return service.deactivate_campaign(campaign_id)


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    service.delete_campaign(campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/expire", response_model=ExpireCampaignsResponse)
async def expire_campaigns(
    service: CampaignService = Depends(get_campaign_service)
):
    """Ejecutar ahora el barrido de expiración (también corre periódicamente)"""
    return ExpireCampaignsResponse(expired_count=service.expire_campaigns())
