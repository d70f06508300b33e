# app/api/v1/router.py
from fastapi import APIRouter

from app.config.settings import settings
from app.modules.campaigns import campaigns_router
from app.modules.payments import payments_router

# Crear router principal de la API v1
api_router = APIRouter(prefix="/api/v1")

# ==================== MÓDULOS ====================

api_router.include_router(
    campaigns_router,
    prefix="/campaigns",  # Prefijo: /api/v1/campaigns/...
    tags=["Campaigns - Carrusel"]
)

api_router.include_router(
    payments_router,
    prefix="/payment-settings",  # Prefijo: /api/v1/payment-settings/...
    tags=["Payments - PIX"]
)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "campaigns": "/api/v1/campaigns",
            "payment_settings": "/api/v1/payment-settings"
        }
    }

@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version,
        "modules": {
            "campaigns": "active",
            "payments": "active"
        }
    }
