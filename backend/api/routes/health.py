"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import Settings
from modules.ocr.interfaces import IOCRBackend
from ..dependencies import get_app_settings, get_ocr_backend

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    storage: str
    ocr: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    settings: Settings = Depends(get_app_settings),
    ocr: IOCRBackend = Depends(get_ocr_backend),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports the storage backend in use and whether extraction is possible.
    Without an OCR backend the API still serves accounts and payments, so
    the status is "degraded" rather than an error.
    """
    return ReadinessResponse(
        status="ready" if ocr.available else "degraded",
        storage=settings.storage_backend,
        ocr="available" if ocr.available else "unconfigured",
    )
