import logging
import math
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.clock import Clock, system_clock
from app.core.exceptions import NotFoundError, ValidationError
from app.modules.campaigns.repository import CampaignRepository, SLOT_BOUND_VALUES
from app.modules.campaigns.scheduling import ensure_no_conflict, validate_slot_range
from app.modules.campaigns.schemas import CampaignCreate, CampaignUpdate, CampaignStatus
from app.shared.database.models import Campaign

logger = logging.getLogger(__name__)

WINDOW_FIELDS = ("slot", "start_date", "end_date")


class CampaignService:
    """
    Ciclo de vida de las campañas del carrusel:
    DRAFT -> ACTIVE/SCHEDULED (activación) -> EXPIRED (barrido periódico),
    con vuelta a DRAFT al desactivar.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.repository = CampaignRepository(db)

    # ===== CONSULTAS =====

    def get_campaign(self, campaign_id: str) -> Campaign:
        campaign = self.repository.get_campaign_by_id(campaign_id)
        if not campaign:
            raise NotFoundError("Campaña no encontrada")
        return campaign

    def get_campaigns_by_market(
        self,
        market_id: str,
        status: Optional[CampaignStatus] = None,
        page: int = 1,
        size: int = 10
    ) -> List[Campaign]:
        return self.repository.get_campaigns_by_market(
            market_id, status.value if status else None, page, size
        )

    def get_active_campaigns_for_carousel(self, market_id: Optional[str] = None) -> List[Campaign]:
        return self.repository.get_active_campaigns_for_carousel(self.clock.now(), market_id)

    # ===== ESCRITURA =====

    def create_campaign(self, campaign_data: CampaignCreate) -> Campaign:
        """Crear campaña; solo se verifica el slot si nace ACTIVE o SCHEDULED"""
        self._validate_slot(campaign_data.slot)
        self._validate_window(campaign_data.start_date, campaign_data.end_date)

        data = {
            "market_id": campaign_data.market_id,
            "title": campaign_data.title,
            "image_url": campaign_data.image_url,
            "slot": campaign_data.slot,
            "start_date": campaign_data.start_date,
            "end_date": campaign_data.end_date,
            "status": campaign_data.status.value
        }

        if campaign_data.status.value in SLOT_BOUND_VALUES:
            with self.repository.slot_reservation(campaign_data.market_id, campaign_data.slot):
                self.validate_slot_availability(
                    campaign_data.market_id,
                    campaign_data.slot,
                    campaign_data.start_date,
                    campaign_data.end_date
                )
                campaign = self.repository.create_campaign(data)
        else:
            campaign = self.repository.create_campaign(data)

        logger.info(
            f"✅ Campaña {campaign.id} creada - mercado {campaign.market_id}, "
            f"slot {campaign.slot}, estado {campaign.status}"
        )
        return campaign

    def update_campaign(self, campaign_id: str, update_data: CampaignUpdate) -> Campaign:
        campaign = self.get_campaign(campaign_id)

        changes = {
            key: value
            for key, value in update_data.model_dump(exclude_unset=True).items()
            if value is not None or key == "end_date"
        }
        if "status" in changes:
            changes["status"] = CampaignStatus(changes["status"]).value

        slot = changes.get("slot", campaign.slot)
        start_date = changes.get("start_date", campaign.start_date)
        end_date = changes["end_date"] if "end_date" in changes else campaign.end_date
        status = changes.get("status", campaign.status)

        self._validate_window(start_date, end_date)

        # Un cambio de slot o fechas se valida también en DRAFT, igual que al crear ACTIVE
        window_changed = any(field in changes for field in WINDOW_FIELDS)
        becomes_slot_bound = (
            "status" in changes
            and status in SLOT_BOUND_VALUES
            and campaign.status not in SLOT_BOUND_VALUES
        )

        if window_changed or becomes_slot_bound:
            with self.repository.slot_reservation(campaign.market_id, slot):
                self.validate_slot_availability(
                    campaign.market_id, slot, start_date, end_date, exclude_id=campaign.id
                )
                return self.repository.update_campaign(campaign, changes)

        return self.repository.update_campaign(campaign, changes)

    def activate_campaign(self, campaign_id: str) -> Campaign:
        """
        Activar campaña. Si la fecha de inicio es futura queda SCHEDULED.
        Activar una campaña ya ACTIVE no hace nada.
        """
        campaign = self.get_campaign(campaign_id)

        if campaign.status == CampaignStatus.ACTIVE.value:
            return campaign

        with self.repository.slot_reservation(campaign.market_id, campaign.slot):
            self.validate_slot_availability(
                campaign.market_id,
                campaign.slot,
                campaign.start_date,
                campaign.end_date,
                exclude_id=campaign.id
            )

            now = self.clock.now()
            new_status = CampaignStatus.ACTIVE if campaign.start_date <= now else CampaignStatus.SCHEDULED
            campaign = self.repository.update_campaign(campaign, {"status": new_status.value})

        logger.info(f"✅ Campaña {campaign.id} activada - estado {campaign.status}")
        return campaign

    def deactivate_campaign(self, campaign_id: str) -> Campaign:
        """Volver a DRAFT y liberar el slot sin importar las fechas"""
        campaign = self.get_campaign(campaign_id)
        return self.repository.update_campaign(campaign, {"status": CampaignStatus.DRAFT.value})

    def delete_campaign(self, campaign_id: str) -> None:
        campaign = self.get_campaign(campaign_id)
        self.repository.delete_campaign(campaign)
        logger.info(f"🗑️ Campaña {campaign_id} eliminada")

    def expire_campaigns(self) -> int:
        """Barrido de expiración. Idempotente: una segunda pasada devuelve 0"""
        expired_count = self.repository.expire_campaigns(self.clock.now())
        if expired_count:
            logger.info(f"⏰ {expired_count} campañas expiradas")
        return expired_count

    # ===== VALIDACIONES =====

    def validate_slot_availability(
        self,
        market_id: str,
        slot: int,
        start_date: datetime,
        end_date: Optional[datetime],
        exclude_id: Optional[str] = None
    ) -> None:
        """Verificar que ninguna campaña ACTIVE/SCHEDULED ocupe el slot en la ventana"""
        self._validate_slot(slot)
        candidates = self.repository.get_slot_candidates(market_id, slot, exclude_id)
        ensure_no_conflict(slot, start_date, end_date, candidates)

    def _validate_slot(self, slot: int) -> None:
        validate_slot_range(slot, settings.campaign_min_slot, settings.campaign_max_slot)

    def _validate_window(self, start_date: datetime, end_date: Optional[datetime]) -> None:
        if end_date is None:
            return

        if end_date < start_date:
            raise ValidationError("La fecha de término no puede ser anterior a la de inicio")

        max_days = settings.campaign_max_duration_days
        if max_days is not None:
            days = math.ceil((end_date - start_date).total_seconds() / 86400)
            if days > max_days:
                raise ValidationError(
                    f"El período de la campaña no puede exceder {max_days} días"
                )
