"""
Codificador del payload PIX (BR Code, EMV QR Code "Merchant-Presented").

El payload es una secuencia de campos TLV: <id de 2 dígitos><largo de 2
dígitos><valor>, donde el largo es la cantidad de bytes UTF-8 del valor. Los
lectores PIX son parsers estrictos, así que el orden de los campos es fijo:

    00 Payload Format Indicator        "01"
    26 Merchant Account Information    { 00 GUI, 01 chave, [02 descrição], [05 referência] }
    52 Merchant Category Code          "0000"
    53 Transaction Currency            "986" (BRL)
    54 Transaction Amount              monto con 2 decimales sin el punto
    58 Country Code                    "BR"
    59 Merchant Name
    60 Merchant City
    62 Additional Data Field Template  { 05 referência } (solo con referencia)
    63 CRC16                           CRC-16/CCITT-FALSE sobre todo lo anterior + "6304"

El codificador no valida reglas de negocio (chave presente, PIX habilitado):
eso es responsabilidad del servicio que lo llama.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

PIX_GUI = "br.gov.bcb.pix"
MERCHANT_CATEGORY_CODE = "0000"
CURRENCY_BRL = "986"
COUNTRY_CODE = "BR"
MERCHANT_NAME_MAX_LENGTH = 25
AMOUNT_MAX_LENGTH = 12  # 9999999999.99 sin el punto

ID_PAYLOAD_FORMAT_INDICATOR = "00"
ID_MERCHANT_ACCOUNT_INFORMATION = "26"
ID_MERCHANT_CATEGORY_CODE = "52"
ID_TRANSACTION_CURRENCY = "53"
ID_TRANSACTION_AMOUNT = "54"
ID_COUNTRY_CODE = "58"
ID_MERCHANT_NAME = "59"
ID_MERCHANT_CITY = "60"
ID_ADDITIONAL_DATA_FIELD_TEMPLATE = "62"
ID_CRC16 = "63"

# Subcampos del Merchant Account Information
ID_MAI_GUI = "00"
ID_MAI_KEY = "01"
ID_MAI_DESCRIPTION = "02"
ID_MAI_REFERENCE = "05"

# Subcampo del Additional Data Field Template
ID_ADF_REFERENCE = "05"

CRC16_POLYNOMIAL = 0x1021
CRC16_INITIAL = 0xFFFF


@dataclass(frozen=True)
class PixPayload:
    """Payload generado; no se persiste, se entrega al render de QR"""
    payload: str
    amount: Decimal
    description: Optional[str] = None


def tlv(field_id: str, value: str) -> str:
    """Serializar un campo TLV. El largo es en bytes UTF-8, 2 dígitos"""
    length = len(value.encode("utf-8"))
    if length > 99:
        raise ValueError(f"Campo {field_id} excede 99 bytes ({length})")
    return f"{field_id}{length:02d}{value}"


def crc16_ccitt_false(data: Union[str, bytes]) -> str:
    """CRC-16/CCITT-FALSE (poly 0x1021, init 0xFFFF, sin reflexión), 4 dígitos hex"""
    if isinstance(data, str):
        data = data.encode("utf-8")

    crc = CRC16_INITIAL
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ CRC16_POLYNOMIAL
            else:
                crc <<= 1
            crc &= 0xFFFF

    return f"{crc:04X}"


def format_amount(amount: Union[Decimal, float, int, str]) -> str:
    """12.5 -> "1250": dos decimales y sin separador"""
    try:
        value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Monto inválido: {amount}") from e

    if value <= 0:
        raise ValueError(f"El monto debe ser mayor que cero: {amount}")

    text = f"{value:.2f}".replace(".", "")
    if len(text) > AMOUNT_MAX_LENGTH:
        raise ValueError(f"Monto excede {AMOUNT_MAX_LENGTH} dígitos: {amount}")
    return text


def normalize_merchant_name(name: str) -> str:
    return name[:MERCHANT_NAME_MAX_LENGTH]


def encode(
    pix_key: str,
    pix_key_type: str,
    amount: Union[Decimal, float, int, str],
    merchant_name: str,
    merchant_city: str,
    description: Optional[str] = None,
    reference_id: Optional[str] = None
) -> str:
    """
    Generar el payload PIX completo, incluido el CRC.

    pix_key_type no forma parte del payload (la chave va tal cual en el
    subcampo 01); se recibe para que la firma acompañe a la configuración.
    """
    merchant_account = tlv(ID_MAI_GUI, PIX_GUI) + tlv(ID_MAI_KEY, pix_key)
    if description:
        merchant_account += tlv(ID_MAI_DESCRIPTION, description)
    if reference_id:
        merchant_account += tlv(ID_MAI_REFERENCE, reference_id)

    fields = [
        tlv(ID_PAYLOAD_FORMAT_INDICATOR, "01"),
        tlv(ID_MERCHANT_ACCOUNT_INFORMATION, merchant_account),
        tlv(ID_MERCHANT_CATEGORY_CODE, MERCHANT_CATEGORY_CODE),
        tlv(ID_TRANSACTION_CURRENCY, CURRENCY_BRL),
        tlv(ID_TRANSACTION_AMOUNT, format_amount(amount)),
        tlv(ID_COUNTRY_CODE, COUNTRY_CODE),
        tlv(ID_MERCHANT_NAME, normalize_merchant_name(merchant_name)),
        tlv(ID_MERCHANT_CITY, merchant_city),
    ]

    if reference_id:
        fields.append(tlv(ID_ADDITIONAL_DATA_FIELD_TEMPLATE, tlv(ID_ADF_REFERENCE, reference_id)))

    payload = "".join(fields) + ID_CRC16 + "04"
    return payload + crc16_ccitt_false(payload)


def build_pix_payload(
    pix_key: str,
    pix_key_type: str,
    amount: Union[Decimal, float, int, str],
    merchant_name: str,
    merchant_city: str,
    description: Optional[str] = None,
    reference_id: Optional[str] = None
) -> PixPayload:
    payload = encode(
        pix_key, pix_key_type, amount, merchant_name, merchant_city,
        description=description, reference_id=reference_id
    )
    return PixPayload(
        payload=payload,
        amount=Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        description=description
    )

