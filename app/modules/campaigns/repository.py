from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, asc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import DependencyError
from app.shared.database.models import Campaign, CampaignSlotLock
from app.modules.campaigns.schemas import CampaignStatus, SLOT_BOUND_STATUSES

SLOT_BOUND_VALUES = [s.value for s in SLOT_BOUND_STATUSES]

class CampaignRepository:

    def __init__(self, db: Session):
        self.db = db

    # ===== CRUD BÁSICO =====

    def create_campaign(self, campaign_data: dict) -> Campaign:
        """Crear campaña y confirmar la transacción"""
        try:
            campaign = Campaign(**campaign_data)
            self.db.add(campaign)
            self.db.commit()
            self.db.refresh(campaign)
            return campaign
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error guardando campaña: {e}") from e

    def get_campaign_by_id(self, campaign_id: str) -> Optional[Campaign]:
        return self.db.query(Campaign).filter(Campaign.id == campaign_id).first()

    def update_campaign(self, campaign: Campaign, update_data: Dict[str, Any]) -> Campaign:
        """Aplicar solo los campos recibidos"""
        try:
            for key, value in update_data.items():
                setattr(campaign, key, value)
            self.db.commit()
            self.db.refresh(campaign)
            return campaign
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error actualizando campaña: {e}") from e

    def delete_campaign(self, campaign: Campaign) -> None:
        try:
            self.db.delete(campaign)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error eliminando campaña: {e}") from e

    # ===== CONSULTAS =====

    def get_campaigns_by_market(
        self,
        market_id: str,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 10
    ) -> List[Campaign]:
        query = self.db.query(Campaign).filter(Campaign.market_id == market_id)

        if status:
            query = query.filter(Campaign.status == status)

        return query.order_by(
            asc(Campaign.slot),
            asc(Campaign.start_date)
        ).offset((page - 1) * size).limit(size).all()

    def get_active_campaigns_for_carousel(
        self,
        now: datetime,
        market_id: Optional[str] = None
    ) -> List[Campaign]:
        """Campañas vigentes según sus fechas, no solo según el estado guardado"""
        query = self.db.query(Campaign).filter(
            and_(
                Campaign.status.in_(SLOT_BOUND_VALUES),
                Campaign.start_date <= now,
                or_(
                    Campaign.end_date.is_(None),
                    Campaign.end_date >= now
                )
            )
        )

        if market_id:
            query = query.filter(Campaign.market_id == market_id)

        return query.order_by(asc(Campaign.slot)).all()

    def get_slot_candidates(
        self,
        market_id: str,
        slot: int,
        exclude_id: Optional[str] = None
    ) -> List[Campaign]:
        """Campañas ACTIVE/SCHEDULED que ocupan el (mercado, slot)"""
        query = self.db.query(Campaign).filter(
            and_(
                Campaign.market_id == market_id,
                Campaign.slot == slot,
                Campaign.status.in_(SLOT_BOUND_VALUES)
            )
        )

        if exclude_id:
            query = query.filter(Campaign.id != exclude_id)

        return query.all()

    # ===== OPERACIONES MASIVAS =====

    def expire_campaigns(self, now: datetime) -> int:
        """Pasar a EXPIRED las campañas con end_date vencida"""
        try:
            rows_updated = self.db.query(Campaign).filter(
                and_(
                    Campaign.status.in_(SLOT_BOUND_VALUES),
                    Campaign.end_date.isnot(None),
                    Campaign.end_date < now
                )
            ).update(
                {"status": CampaignStatus.EXPIRED.value},
                synchronize_session=False
            )
            self.db.commit()
            return rows_updated
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error expirando campañas: {e}") from e

    # ===== BLOQUEO POR SLOT =====

    def lock_slot(self, market_id: str, slot: int) -> CampaignSlotLock:
        """
        Bloquear la fila (mercado, slot) hasta el próximo commit/rollback.

        Debe ser lo primero que se hace en la transacción: si otro request crea
        la fila al mismo tiempo, se hace rollback y se vuelve a leer bloqueando.
        """
        lock_query = self.db.query(CampaignSlotLock).filter(
            and_(
                CampaignSlotLock.market_id == market_id,
                CampaignSlotLock.slot == slot
            )
        ).with_for_update()

        lock = lock_query.first()
        if lock is not None:
            return lock

        try:
            lock = CampaignSlotLock(market_id=market_id, slot=slot)
            self.db.add(lock)
            self.db.flush()
            return lock
        except IntegrityError:
            # Creada por un request concurrente
            self.db.rollback()
            return lock_query.one()

    @contextmanager
    def slot_reservation(self, market_id: str, slot: int):
        """
        Sección crítica de validación + escritura para un (mercado, slot).

        La escritura que se haga dentro del bloque confirma la transacción y
        libera el bloqueo; cualquier excepción hace rollback.
        """
        self.lock_slot(market_id, slot)
        try:
            yield
        except Exception:
            self.db.rollback()
            raise
