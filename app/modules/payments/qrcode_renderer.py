import base64
import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from app.config.settings import settings
from app.core.exceptions import DependencyError

logger = logging.getLogger(__name__)


class QRCodeImageRenderer:
    """Convierte el texto del payload PIX en una imagen PNG en base64 (data URL)"""

    def __init__(self, box_size: int = settings.qr_code_box_size, border: int = settings.qr_code_border):
        self.box_size = box_size
        self.border = border

    def render(self, text: str) -> str:
        try:
            qr = qrcode.QRCode(
                error_correction=ERROR_CORRECT_M,
                box_size=self.box_size,
                border=self.border
            )
            qr.add_data(text)
            qr.make(fit=True)

            image = qr.make_image(fill_color="black", back_color="white")
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
        except Exception as e:
            logger.error(f"❌ Error generando imagen del QR Code: {e}")
            raise DependencyError(f"Error al generar imagen del QR Code: {e}") from e

        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"


def get_qr_renderer() -> QRCodeImageRenderer:
    """QR renderer dependency for FastAPI"""
    return QRCodeImageRenderer()
