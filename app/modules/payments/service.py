import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.modules.payments.pix import build_pix_payload
from app.modules.payments.qrcode_renderer import QRCodeImageRenderer
from app.modules.payments.repository import PaymentSettingsRepository
from app.modules.payments.schemas import (
    PaymentSettingsCreate, PaymentSettingsUpdate, GeneratePixQRCodeRequest,
    AcceptedPaymentMethods, PixQRCodeResponse, PixKeyType,
    pix_configuration_error
)
from app.shared.database.models import PaymentSettings

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {
    "pix_key", "pix_key_type", "pix_merchant_name",
    "pix_merchant_city", "pix_merchant_zip_code"
}


class PaymentSettingsService:

    def __init__(self, db: Session, qr_renderer: Optional[QRCodeImageRenderer] = None):
        self.db = db
        self.repository = PaymentSettingsRepository(db)
        self.qr_renderer = qr_renderer or QRCodeImageRenderer()

    # ===== CONFIGURACIÓN =====

    def create_payment_settings(self, settings_data: PaymentSettingsCreate) -> PaymentSettings:
        if self.repository.get_by_market_id(settings_data.market_id):
            raise ConflictError("Ya existe una configuración de pagos para este mercado")
        return self.repository.create(self._to_row(settings_data))

    def get_payment_settings(self, market_id: str) -> PaymentSettings:
        payment_settings = self.repository.get_by_market_id(market_id)
        if not payment_settings:
            raise NotFoundError("Configuración de pagos no encontrada")
        return payment_settings

    def update_payment_settings(self, market_id: str, update_data: PaymentSettingsUpdate) -> PaymentSettings:
        payment_settings = self.get_payment_settings(market_id)

        changes = {
            key: value
            for key, value in update_data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if changes.get("pix_key_type") is not None:
            changes["pix_key_type"] = PixKeyType(changes["pix_key_type"]).value

        # La configuración PIX se valida con el estado final, no con el parcial
        accepts_pix = changes.get("accepts_pix", payment_settings.accepts_pix)
        pix_key = changes["pix_key"] if "pix_key" in changes else payment_settings.pix_key
        pix_key_type = changes["pix_key_type"] if "pix_key_type" in changes else payment_settings.pix_key_type

        error = pix_configuration_error(bool(accepts_pix), pix_key, pix_key_type)
        if error:
            raise ValidationError(error)

        return self.repository.update(payment_settings, changes)

    def upsert_payment_settings(self, settings_data: PaymentSettingsCreate) -> PaymentSettings:
        return self.repository.upsert(self._to_row(settings_data))

    def get_accepted_payment_methods(self, market_id: str) -> AcceptedPaymentMethods:
        payment_settings = self.repository.get_by_market_id(market_id)
        if not payment_settings or not payment_settings.is_active:
            raise NotFoundError("Configuración de pagos no encontrada o mercado inactivo")
        return AcceptedPaymentMethods.model_validate(payment_settings)

    # ===== PIX =====

    def generate_pix_qr_code(self, market_id: str, request: GeneratePixQRCodeRequest) -> PixQRCodeResponse:
        """Generar payload PIX y su imagen QR para un pago al mercado"""
        payment_settings = self.repository.get_by_market_id(market_id)

        if not payment_settings:
            raise NotFoundError("Configuración de pagos no encontrada para este mercado")

        if not payment_settings.accepts_pix:
            raise ValidationError("Este mercado no acepta pago vía PIX")

        if not payment_settings.pix_key or not payment_settings.pix_key_type:
            raise ValidationError("Chave PIX no configurada para este mercado")

        if not payment_settings.pix_merchant_name or not payment_settings.pix_merchant_city:
            raise ValidationError("Datos del receptor PIX incompletos (nombre y ciudad son obligatorios)")

        try:
            pix_payload = build_pix_payload(
                payment_settings.pix_key,
                payment_settings.pix_key_type,
                request.amount,
                payment_settings.pix_merchant_name,
                payment_settings.pix_merchant_city,
                description=request.description or None,
                reference_id=request.order_id or None
            )
        except (ValueError, ArithmeticError) as e:
            raise ValidationError(f"No fue posible generar el payload PIX: {e}") from e

        qr_code_image = self.qr_renderer.render(pix_payload.payload)

        logger.info(f"💸 QR PIX generado - mercado {market_id}, valor {pix_payload.amount}")

        return PixQRCodeResponse(
            qr_code=pix_payload.payload,
            qr_code_image=qr_code_image,
            amount=float(pix_payload.amount),
            description=pix_payload.description,
            pix_key=payment_settings.pix_key,
            pix_key_type=payment_settings.pix_key_type
        )

    def _to_row(self, settings_data: PaymentSettingsCreate) -> dict:
        data = settings_data.model_dump()
        data["pix_key_type"] = settings_data.pix_key_type.value if settings_data.pix_key_type else None
        return data
