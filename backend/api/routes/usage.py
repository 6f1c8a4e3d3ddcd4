"""
Usage tracking endpoints.

Provides endpoints for viewing the caller's quota and, for premium users,
their extraction history.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from shared.models import AuthenticatedUser
from modules.usage.interfaces import IUsageLog
from modules.usage.models import ClientIdentity
from modules.usage.service import FreeUsageTracker, PremiumUsageTracker
from ..cookies import get_tracked_identity
from ..dependencies import (
    get_free_tracker,
    get_premium_tracker,
    get_usage_log,
)
from ..middleware.auth import OptionalAuth, RequireAuth
from ..models.usage import UsageHistoryItem, UsageHistoryResponse, UsageResponse

router = APIRouter()


@router.get("", response_model=UsageResponse)
async def get_usage(
    user: Optional[AuthenticatedUser] = OptionalAuth,
    identity: ClientIdentity = Depends(get_tracked_identity),
    free_tracker: FreeUsageTracker = Depends(get_free_tracker),
    premium_tracker: PremiumUsageTracker = Depends(get_premium_tracker),
) -> UsageResponse:
    """
    Get the caller's quota.

    Signed-in users see their monthly premium counter; anonymous visitors
    see the daily free counter and receive the tracking cookie.
    """
    if user is not None:
        snapshot = await premium_tracker.get_monthly_usage(user.id)
        return UsageResponse.from_snapshot(snapshot)

    snapshot = await free_tracker.get_current_usage(identity)
    return UsageResponse.from_snapshot(snapshot)


@router.get("/history", response_model=UsageHistoryResponse)
async def get_usage_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: AuthenticatedUser = RequireAuth,
    usage_log: IUsageLog = Depends(get_usage_log),
) -> UsageHistoryResponse:
    """
    Get the signed-in user's recent extractions, newest first.

    Requires authentication.
    """
    entries = await usage_log.list_for_user(user.id, limit=limit, offset=offset)
    return UsageHistoryResponse(
        items=[UsageHistoryItem.from_entry(e) for e in entries],
        limit=limit,
        offset=offset,
    )
