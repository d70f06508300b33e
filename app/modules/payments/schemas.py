import re
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator
from enum import Enum

# ===== ENUMS =====

class PixKeyType(str, Enum):
    CPF = "CPF"
    CNPJ = "CNPJ"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    RANDOM_KEY = "RANDOM_KEY"

# Mayor monto representable en el campo 54 del BR Code
PIX_MAX_AMOUNT = Decimal("9999999999.99")

PIX_KEY_PATTERNS = {
    PixKeyType.CPF: re.compile(r"^\d{11}$"),
    PixKeyType.CNPJ: re.compile(r"^\d{14}$"),
    PixKeyType.EMAIL: re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    PixKeyType.PHONE: re.compile(r"^\+55\d{10,11}$"),
    PixKeyType.RANDOM_KEY: re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
    ),
}

def is_valid_pix_key(pix_key: str, pix_key_type: str) -> bool:
    try:
        pattern = PIX_KEY_PATTERNS[PixKeyType(pix_key_type)]
    except ValueError:
        return False
    return bool(pattern.match(pix_key))

def pix_configuration_error(
    accepts_pix: bool,
    pix_key: Optional[str],
    pix_key_type: Optional[str]
) -> Optional[str]:
    """Devuelve el mensaje de error de la configuración PIX, o None si es válida"""
    if accepts_pix and not pix_key:
        return "Si acepta PIX, es necesario configurar una chave PIX (pix_key)"
    if pix_key and not pix_key_type:
        return "Si configura una chave PIX, es necesario indicar el tipo (pix_key_type)"
    if pix_key and pix_key_type and not is_valid_pix_key(pix_key, pix_key_type):
        return "Chave PIX inválida para el tipo indicado"
    return None

# ===== REQUEST SCHEMAS =====

class PaymentSettingsCreate(BaseModel):
    """Schema para crear/upsert de la configuración de pagos de un mercado"""
    market_id: str = Field(..., min_length=1, description="ID del mercado")
    accepts_credit_card: bool = True
    accepts_debit_card: bool = True
    accepts_pix: bool = True
    accepts_cash: bool = True
    accepts_meal_voucher: bool = False
    accepts_food_voucher: bool = False
    pix_key: Optional[str] = None
    pix_key_type: Optional[PixKeyType] = None
    pix_merchant_name: Optional[str] = Field(None, max_length=255)
    pix_merchant_city: Optional[str] = Field(None, max_length=255)
    pix_merchant_zip_code: Optional[str] = Field(None, max_length=20)
    is_active: bool = True

    @model_validator(mode='after')
    def validate_pix(self):
        error = pix_configuration_error(
            self.accepts_pix,
            self.pix_key,
            self.pix_key_type.value if self.pix_key_type else None
        )
        if error:
            raise ValueError(error)
        return self

class PaymentSettingsUpdate(BaseModel):
    """Actualización parcial; la configuración PIX resultante se valida en el servicio"""
    accepts_credit_card: Optional[bool] = None
    accepts_debit_card: Optional[bool] = None
    accepts_pix: Optional[bool] = None
    accepts_cash: Optional[bool] = None
    accepts_meal_voucher: Optional[bool] = None
    accepts_food_voucher: Optional[bool] = None
    pix_key: Optional[str] = None
    pix_key_type: Optional[PixKeyType] = None
    pix_merchant_name: Optional[str] = Field(None, max_length=255)
    pix_merchant_city: Optional[str] = Field(None, max_length=255)
    pix_merchant_zip_code: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None

class GeneratePixQRCodeRequest(BaseModel):
    amount: Decimal = Field(
        ...,
        gt=0,
        le=PIX_MAX_AMOUNT,
        decimal_places=2,
        description="Valor del pago (hasta 2 decimales)"
    )
    description: Optional[str] = Field(None, max_length=40, description="Descripción del pago")
    order_id: Optional[str] = Field(None, max_length=25, description="Identificador del pedido")

# ===== RESPONSE SCHEMAS =====

class PaymentSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    market_id: str
    accepts_credit_card: bool
    accepts_debit_card: bool
    accepts_pix: bool
    accepts_cash: bool
    accepts_meal_voucher: bool
    accepts_food_voucher: bool
    pix_key: Optional[str] = None
    pix_key_type: Optional[PixKeyType] = None
    pix_merchant_name: Optional[str] = None
    pix_merchant_city: Optional[str] = None
    pix_merchant_zip_code: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AcceptedPaymentMethods(BaseModel):
    """Formas de pago aceptadas (para el checkout)"""
    model_config = ConfigDict(from_attributes=True)

    accepts_credit_card: bool
    accepts_debit_card: bool
    accepts_pix: bool
    accepts_cash: bool
    accepts_meal_voucher: bool
    accepts_food_voucher: bool

class PixQRCodeResponse(BaseModel):
    qr_code: str = Field(..., description="Payload PIX (EMV) en texto, copia e cola")
    qr_code_image: str = Field(..., description="Imagen PNG en base64 (data URL)")
    amount: float
    description: Optional[str] = None
    pix_key: str
    pix_key_type: PixKeyType
