"""
Barrido periódico de expiración de campañas.

Corre dentro del proceso de la API con APScheduler. Como el barrido es
idempotente, varias réplicas pueden ejecutarlo a la vez sin efectos extra.
"""

import logging
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.config.settings import settings
from app.core.exceptions import DependencyError
from app.modules.campaigns.service import CampaignService

logger = logging.getLogger(__name__)

EXPIRE_CAMPAIGNS_JOB_ID = "expire_campaigns"


def run_campaign_expiration(session_factory: Callable[[], Session] = SessionLocal) -> int:
    """Abrir una sesión, expirar campañas vencidas y cerrar"""
    db = session_factory()
    try:
        return CampaignService(db).expire_campaigns()
    except DependencyError as e:
        logger.error(f"❌ Error en el barrido de expiración: {e.detail}")
        return 0
    finally:
        db.close()


class CampaignExpirationScheduler:
    """Manages the periodic campaign expiration sweep."""

    def __init__(self, interval_seconds: int = settings.campaign_expiration_interval_seconds):
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler()

    def start(self):
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.add_job(
            run_campaign_expiration,
            IntervalTrigger(seconds=self.interval_seconds),
            id=EXPIRE_CAMPAIGNS_JOB_ID,
            name="Expire finished campaigns",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60
        )

        self.scheduler.start()
        logger.info(f"✅ Scheduler de campañas iniciado (cada {self.interval_seconds}s)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("⏹️  Scheduler de campañas detenido")
