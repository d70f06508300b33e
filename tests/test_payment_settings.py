"""Payment settings and PIX QR Code endpoints"""
import base64
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.modules.payments.pix import crc16_ccitt_false
from app.modules.payments.schemas import GeneratePixQRCodeRequest, PaymentSettingsCreate
from app.modules.payments.service import PaymentSettingsService
from app.modules.payments.qrcode_renderer import QRCodeImageRenderer
from pix_helpers import parse_tlv

BASE = "/api/v1/payment-settings"


def settings_payload(**overrides):
    payload = {
        "market_id": "M1",
        "accepts_pix": True,
        "pix_key": "12345678901",
        "pix_key_type": "CPF",
        "pix_merchant_name": "Loja Teste",
        "pix_merchant_city": "SAO PAULO",
    }
    payload.update(overrides)
    return payload


# ===== CONFIGURACIÓN =====

def test_create_payment_settings(client):
    response = client.post(f"{BASE}/", json=settings_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["pix_key_type"] == "CPF"
    assert body["accepts_cash"] is True
    assert body["accepts_meal_voucher"] is False


def test_duplicate_market_returns_409(client):
    client.post(f"{BASE}/", json=settings_payload())
    response = client.post(f"{BASE}/", json=settings_payload())
    assert response.status_code == 409


def test_pix_requires_key(client):
    response = client.post(f"{BASE}/", json=settings_payload(pix_key=None, pix_key_type=None))
    assert response.status_code == 422


def test_pix_key_requires_type(client):
    response = client.post(f"{BASE}/", json=settings_payload(pix_key_type=None))
    assert response.status_code == 422


def test_pix_key_format_is_checked_per_type(client):
    assert client.post(f"{BASE}/", json=settings_payload(pix_key="123")).status_code == 422
    assert client.post(
        f"{BASE}/", json=settings_payload(pix_key="11987654321", pix_key_type="PHONE")
    ).status_code == 422
    assert client.post(
        f"{BASE}/", json=settings_payload(pix_key="+5511987654321", pix_key_type="PHONE")
    ).status_code == 201


def test_random_key_and_email_are_accepted(client):
    random_key = client.post(f"{BASE}/", json=settings_payload(
        pix_key="123e4567-e12b-12d1-a456-426655440000", pix_key_type="RANDOM_KEY"
    ))
    email = client.post(f"{BASE}/", json=settings_payload(
        market_id="M2", pix_key="loja@example.com", pix_key_type="EMAIL"
    ))

    assert random_key.status_code == 201
    assert email.status_code == 201


def test_get_missing_settings_returns_404(client):
    assert client.get(f"{BASE}/market/unknown").status_code == 404


def test_partial_update(client):
    client.post(f"{BASE}/", json=settings_payload())

    response = client.patch(f"{BASE}/market/M1", json={"accepts_cash": False})

    assert response.status_code == 200
    assert response.json()["accepts_cash"] is False
    assert response.json()["pix_key"] == "12345678901"


def test_update_validates_resulting_pix_configuration(client):
    client.post(f"{BASE}/", json=settings_payload())

    response = client.put(f"{BASE}/market/M1", json={"pix_key_type": "CNPJ"})

    assert response.status_code == 400


def test_upsert_creates_then_replaces(client):
    created = client.post(f"{BASE}/upsert", json=settings_payload())
    replaced = client.post(f"{BASE}/upsert", json=settings_payload(accepts_debit_card=False))

    assert created.status_code == 200
    assert replaced.status_code == 200
    assert replaced.json()["id"] == created.json()["id"]
    assert replaced.json()["accepts_debit_card"] is False


def test_accepted_methods(client):
    client.post(f"{BASE}/", json=settings_payload(accepts_food_voucher=True))

    response = client.get(f"{BASE}/market/M1/accepted-methods")

    assert response.status_code == 200
    assert response.json()["accepts_food_voucher"] is True
    assert response.json()["accepts_pix"] is True


def test_accepted_methods_of_inactive_market_returns_404(client):
    client.post(f"{BASE}/", json=settings_payload(is_active=False))
    assert client.get(f"{BASE}/market/M1/accepted-methods").status_code == 404


# ===== PIX QR CODE =====

def test_generate_pix_qr_code(client, qr_renderer):
    client.post(f"{BASE}/", json=settings_payload())

    response = client.post(
        f"{BASE}/market/M1/pix/qrcode",
        json={"amount": 10.00, "description": "Pedido 42", "order_id": "PED42"}
    )

    assert response.status_code == 200
    body = response.json()
    fields = parse_tlv(body["qr_code"])
    assert body["qr_code"].startswith("00020126")
    assert fields["54"] == "1000"
    assert fields["62"] == "0505PED42"
    assert fields["63"] == crc16_ccitt_false(body["qr_code"][:-4])
    assert body["qr_code_image"] == "data:image/png;base64,ZmFrZQ=="
    assert body["amount"] == 10.0
    assert body["description"] == "Pedido 42"
    assert body["pix_key"] == "12345678901"
    assert body["pix_key_type"] == "CPF"
    assert qr_renderer.rendered == [body["qr_code"]]


def test_pix_qr_code_requires_settings(client):
    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": 10})
    assert response.status_code == 404


def test_pix_qr_code_requires_pix_enabled(client):
    client.post(f"{BASE}/", json=settings_payload(accepts_pix=False, pix_key=None, pix_key_type=None))

    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": 10})

    assert response.status_code == 400


def test_pix_qr_code_requires_merchant_data(client):
    client.post(f"{BASE}/", json=settings_payload(pix_merchant_city=None))

    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": 10})

    assert response.status_code == 400
    assert "ciudad" in response.json()["detail"]


def test_pix_qr_code_rejects_non_positive_amount(client):
    client.post(f"{BASE}/", json=settings_payload())
    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": 0})
    assert response.status_code == 422


def test_pix_qr_code_rejects_amount_above_limit(client, qr_renderer):
    client.post(f"{BASE}/", json=settings_payload())

    huge = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": "1e30"})
    over_limit = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": "10000000000"})

    assert huge.status_code == 422
    assert over_limit.status_code == 422
    assert qr_renderer.rendered == []


def test_pix_qr_code_rejects_sub_cent_amount(client, qr_renderer):
    client.post(f"{BASE}/", json=settings_payload())

    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": "0.004"})

    assert response.status_code == 422
    assert qr_renderer.rendered == []


def test_pix_qr_code_accepts_largest_amount(client):
    client.post(f"{BASE}/", json=settings_payload())

    response = client.post(f"{BASE}/market/M1/pix/qrcode", json={"amount": "9999999999.99"})

    assert response.status_code == 200
    assert parse_tlv(response.json()["qr_code"])["54"] == "999999999999"


def test_service_turns_unencodable_amount_into_validation_error(db_session, qr_renderer):
    service = PaymentSettingsService(db_session, qr_renderer)
    service.create_payment_settings(PaymentSettingsCreate(**settings_payload()))
    request = GeneratePixQRCodeRequest.model_construct(amount=Decimal("1e30"), description=None, order_id=None)

    with pytest.raises(ValidationError):
        service.generate_pix_qr_code("M1", request)

    assert qr_renderer.rendered == []


# ===== RENDER =====

def test_qr_renderer_produces_png_data_url():
    image = QRCodeImageRenderer(box_size=2, border=1).render("00020126330014br.gov.bcb.pix")

    prefix = "data:image/png;base64,"
    assert image.startswith(prefix)
    assert base64.b64decode(image[len(prefix):]).startswith(b"\x89PNG")
