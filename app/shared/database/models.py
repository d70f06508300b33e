import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Index, UniqueConstraint
from sqlalchemy.sql import func
from app.config.database import Base

def generate_uuid() -> str:
    return str(uuid.uuid4())

class TimestampMixin:
    """Mixin para timestamps automáticos"""
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

# ===== CAMPAÑAS =====

class Campaign(Base, TimestampMixin):
    """Campaña promocional que ocupa un slot del carrusel de un mercado"""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    market_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    image_url = Column(Text, nullable=False)
    slot = Column(Integer, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)  # NULL = sin fecha de término
    status = Column(String(20), default="DRAFT", nullable=False, index=True)

    __table_args__ = (
        Index("ix_campaigns_market_slot_status", "market_id", "slot", "status"),
    )

class CampaignSlotLock(Base):
    """
    Fila de bloqueo por (mercado, slot).

    Se bloquea con SELECT ... FOR UPDATE dentro de la misma transacción que
    valida y escribe la campaña, para que dos requests concurrentes no puedan
    ocupar el mismo slot.
    """
    __tablename__ = "campaign_slot_locks"

    market_id = Column(String(64), primary_key=True)
    slot = Column(Integer, primary_key=True)

# ===== PAGOS =====

class PaymentSettings(Base, TimestampMixin):
    """Configuración de formas de pago de un mercado"""
    __tablename__ = "payment_settings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    market_id = Column(String(64), nullable=False)
    accepts_credit_card = Column(Boolean, default=True, nullable=False)
    accepts_debit_card = Column(Boolean, default=True, nullable=False)
    accepts_pix = Column(Boolean, default=True, nullable=False)
    accepts_cash = Column(Boolean, default=True, nullable=False)
    accepts_meal_voucher = Column(Boolean, default=False, nullable=False)  # Vale Alimentação
    accepts_food_voucher = Column(Boolean, default=False, nullable=False)  # Vale Refeição
    pix_key = Column(String(255))
    pix_key_type = Column(String(20))
    pix_merchant_name = Column(String(255))
    pix_merchant_city = Column(String(255))
    pix_merchant_zip_code = Column(String(20))
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("market_id", name="payment_settings_unique_per_market"),
    )
