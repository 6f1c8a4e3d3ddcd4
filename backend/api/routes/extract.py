"""
Text extraction endpoint.

Order of operations: access check, OCR call, then the usage increment.
Failed extractions are not counted.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from shared.config import Settings
from shared.exceptions import ValidationError
from shared.models import AuthenticatedUser
from modules.access.interfaces import IAccessGate
from modules.access.models import AnonymousRequester, AuthenticatedRequester
from modules.ocr.interfaces import IOCRBackend
from modules.usage.interfaces import IUsageLog
from modules.usage.models import ClientIdentity, UsageLogEntry, UsageTier
from modules.usage.service import FreeUsageTracker, PremiumUsageTracker
from ..cookies import get_tracked_identity
from ..dependencies import (
    get_access_gate,
    get_app_settings,
    get_free_tracker,
    get_ocr_backend,
    get_premium_tracker,
    get_usage_log,
)
from ..middleware.auth import OptionalAuth
from ..models.usage import ExtractResponse, UsageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/extract-text", response_model=ExtractResponse)
async def extract_text(
    file: UploadFile = File(...),
    use_filtering: bool = Form(False),
    user: Optional[AuthenticatedUser] = OptionalAuth,
    identity: ClientIdentity = Depends(get_tracked_identity),
    gate: IAccessGate = Depends(get_access_gate),
    ocr: IOCRBackend = Depends(get_ocr_backend),
    free_tracker: FreeUsageTracker = Depends(get_free_tracker),
    premium_tracker: PremiumUsageTracker = Depends(get_premium_tracker),
    usage_log: IUsageLog = Depends(get_usage_log),
    settings: Settings = Depends(get_app_settings),
) -> ExtractResponse:
    """
    Extract text from an uploaded image.

    Anonymous callers are counted against the daily free quota, signed-in
    users against their monthly premium quota.
    """
    if user is not None:
        requester = AuthenticatedRequester(user_id=user.id)
    else:
        requester = AnonymousRequester(identity=identity)

    decision = await gate.evaluate(requester, ocr.available)
    decision.raise_for_verdict()

    if file.content_type and not file.content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed", code="INVALID_FILE_TYPE")
    image = await file.read()
    if not image:
        raise ValidationError("No image file provided", code="EMPTY_FILE")
    if len(image) > settings.max_upload_bytes:
        raise ValidationError(
            f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB",
            code="FILE_TOO_LARGE",
        )

    result = await ocr.extract(image, use_filtering=use_filtering)

    if decision.tier == UsageTier.PREMIUM:
        await premium_tracker.increment_monthly_usage(user.id)
        snapshot = await premium_tracker.get_monthly_usage(user.id)
        entry = UsageLogEntry(tier=UsageTier.PREMIUM, user_id=user.id)
    else:
        snapshot = await free_tracker.increment_usage(identity)
        entry = UsageLogEntry(
            tier=UsageTier.FREE,
            ip_address=identity.ip_address,
            cookie_id=identity.cookie_id,
        )

    await usage_log.record(
        entry.model_copy(
            update={"extracted_words": result.word_count, "confidence": result.confidence}
        )
    )
    logger.info(
        "Extracted %d words (%s tier, %d/%d used)",
        result.word_count, snapshot.tier.value, snapshot.count, snapshot.limit,
    )

    return ExtractResponse(
        extracted_text=result.extracted_text,
        confidence=result.confidence,
        word_count=result.word_count,
        raw_text=result.raw_text,
        usage=UsageResponse.from_snapshot(snapshot),
    )
