from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.modules.payments.qrcode_renderer import QRCodeImageRenderer, get_qr_renderer
from app.modules.payments.service import PaymentSettingsService
from app.modules.payments.schemas import (
    PaymentSettingsCreate, PaymentSettingsUpdate, PaymentSettingsResponse,
    AcceptedPaymentMethods, GeneratePixQRCodeRequest, PixQRCodeResponse
)

router = APIRouter()


def get_payment_settings_service(
    db: Session = Depends(get_db),
    qr_renderer: QRCodeImageRenderer = Depends(get_qr_renderer)
) -> PaymentSettingsService:
    return PaymentSettingsService(db, qr_renderer)

# ===== RUTA PÚBLICA (CHECKOUT) =====

@router.get("/market/{market_id}/accepted-methods", response_model=AcceptedPaymentMethods)
async def get_accepted_payment_methods(
    market_id: str,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    """Formas de pago aceptadas por el mercado"""
    return service.get_accepted_payment_methods(market_id)

# ===== CONFIGURACIÓN =====

@router.get("/market/{market_id}", response_model=PaymentSettingsResponse)
async def get_payment_settings(
    market_id: str,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    return service.get_payment_settings(market_id)


@router.post("/", response_model=PaymentSettingsResponse, status_code=status.HTTP_201_CREATED)
async def create_payment_settings(
    settings_data: PaymentSettingsCreate,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    """
    Crear configuración de pagos

    **Validaciones:**
    - Si acepta PIX, la chave PIX es obligatoria
    - La chave debe tener el formato de su tipo (CPF, CNPJ, EMAIL, PHONE, RANDOM_KEY)
    """
    return service.create_payment_settings(settings_data)


@router.put("/market/{market_id}", response_model=PaymentSettingsResponse)
@router.patch("/market/{market_id}", response_model=PaymentSettingsResponse)
async def update_payment_settings(
    market_id: str,
    update_data: PaymentSettingsUpdate,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    return service.update_payment_settings(market_id, update_data)


@router.post("/upsert", response_model=PaymentSettingsResponse)
async def upsert_payment_settings(
    settings_data: PaymentSettingsCreate,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    return service.upsert_payment_settings(settings_data)

# ===== PIX =====

@router.post("/market/{market_id}/pix/qrcode", response_model=PixQRCodeResponse)
async def generate_pix_qr_code(
    market_id: str,
    request: GeneratePixQRCodeRequest,
    service: PaymentSettingsService = Depends(get_payment_settings_service)
):
    """
    Generar QR Code PIX para un pago

    **Respuesta:**
    - qr_code: payload EMV ("copia e cola")
    - qr_code_image: PNG en base64
    """
    return service.generate_pix_qr_code(market_id, request)
