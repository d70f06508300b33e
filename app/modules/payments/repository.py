from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import DependencyError
from app.shared.database.models import PaymentSettings

class PaymentSettingsRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_market_id(self, market_id: str) -> Optional[PaymentSettings]:
        return self.db.query(PaymentSettings).filter(
            PaymentSettings.market_id == market_id
        ).first()

    def create(self, settings_data: Dict[str, Any]) -> PaymentSettings:
        try:
            payment_settings = PaymentSettings(**settings_data)
            self.db.add(payment_settings)
            self.db.commit()
            self.db.refresh(payment_settings)
            return payment_settings
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error guardando configuración de pagos: {e}") from e

    def update(self, payment_settings: PaymentSettings, update_data: Dict[str, Any]) -> PaymentSettings:
        try:
            for key, value in update_data.items():
                setattr(payment_settings, key, value)
            self.db.commit()
            self.db.refresh(payment_settings)
            return payment_settings
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(f"Error actualizando configuración de pagos: {e}") from e

    def upsert(self, settings_data: Dict[str, Any]) -> PaymentSettings:
        """Crear o reemplazar la configuración del mercado"""
        existing = self.get_by_market_id(settings_data["market_id"])
        if existing:
            return self.update(existing, settings_data)
        return self.create(settings_data)
