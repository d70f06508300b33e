from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from enum import Enum

from app.config.settings import settings
from app.core.clock import to_naive_utc

# ===== ENUMS =====

class CampaignStatus(str, Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"

# Estados que ocupan el slot y participan en la detección de conflictos
SLOT_BOUND_STATUSES = (CampaignStatus.ACTIVE, CampaignStatus.SCHEDULED)

# ===== REQUEST SCHEMAS =====

class CampaignCreate(BaseModel):
    """Schema para crear campaña del carrusel"""
    market_id: str = Field(..., min_length=1, description="ID del mercado")
    title: str = Field(..., min_length=1, max_length=255, description="Título de la campaña")
    image_url: str = Field(..., min_length=1, description="URL de la imagen del banner")
    slot: int = Field(
        ...,
        ge=settings.campaign_min_slot,
        le=settings.campaign_max_slot,
        description="Posición en el carrusel"
    )
    start_date: datetime = Field(..., description="Inicio de la campaña")
    end_date: Optional[datetime] = Field(None, description="Fin de la campaña (None = sin término)")
    status: CampaignStatus = Field(default=CampaignStatus.DRAFT)

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v: str):
        if not v.startswith(("http://", "https://")):
            raise ValueError('URL de la imagen inválida')
        return v

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]):
        return to_naive_utc(v) if v is not None else v

    @model_validator(mode='after')
    def validate_window(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError('La fecha de término no puede ser anterior a la de inicio')
        return self

class CampaignUpdate(BaseModel):
    """Actualización parcial: solo se aplican los campos enviados"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, min_length=1)
    slot: Optional[int] = Field(None, ge=settings.campaign_min_slot, le=settings.campaign_max_slot)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[CampaignStatus] = None

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]):
        return to_naive_utc(v) if v is not None else v

# ===== RESPONSE SCHEMAS =====

class CampaignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    market_id: str
    title: str
    image_url: str
    slot: int
    start_date: datetime
    end_date: Optional[datetime] = None
    status: CampaignStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ExpireCampaignsResponse(BaseModel):
    expired_count: int
