from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # App Info
    app_name: str = "MercadoJá API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str
    auto_create_tables: bool = True

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "https://mercadoja.com.br",
    ]

    # ✅ Campañas del carrusel
    campaign_min_slot: int = 1
    campaign_max_slot: int = 8
    campaign_max_duration_days: Optional[int] = Field(
        default=None,
        description="Duración máxima de una campaña en días (None = sin límite)"
    )
    campaign_expiration_enabled: bool = True
    campaign_expiration_interval_seconds: int = Field(
        default=300,
        description="Cada cuántos segundos se ejecuta el barrido de expiración"
    )

    # ✅ PIX / QR Code
    qr_code_box_size: int = 10
    qr_code_border: int = 1

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
