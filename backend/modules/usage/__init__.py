"""
Usage tracking module.

Daily quota for anonymous visitors, monthly quota for premium users and
the log of successful extractions.

Public API:
- IFreeUsageTracker / IPremiumUsageTracker: Tracker interfaces
- IFreeUsageStore / IUsageLog: Storage interfaces
- UsageSnapshot: Quota state returned to callers
- ClientIdentity: Anonymous visitor identity (IP + cookie)
"""

from .interfaces import (
    IFreeUsageStore,
    IUsageLog,
    IFreeUsageTracker,
    IPremiumUsageTracker,
)
from .models import (
    UsageTier,
    UsageSnapshot,
    ClientIdentity,
    FreeUsageRecord,
    UsageLogEntry,
)
from .exceptions import UsageStoreError
from .policy import (
    free_reset_due,
    premium_reset_due,
    months_elapsed,
)
from .client_identity import (
    resolve_client_ip,
    resolve_client_identity,
    generate_cookie_id,
)
from .store import (
    InMemoryFreeUsageStore,
    SupabaseFreeUsageStore,
    InMemoryUsageLog,
    SupabaseUsageLog,
)
from .service import FreeUsageTracker, PremiumUsageTracker

__all__ = [
    # Interfaces
    "IFreeUsageStore",
    "IUsageLog",
    "IFreeUsageTracker",
    "IPremiumUsageTracker",
    # Models
    "UsageTier",
    "UsageSnapshot",
    "ClientIdentity",
    "FreeUsageRecord",
    "UsageLogEntry",
    # Exceptions
    "UsageStoreError",
    # Policy
    "free_reset_due",
    "premium_reset_due",
    "months_elapsed",
    # Client identity
    "resolve_client_ip",
    "resolve_client_identity",
    "generate_cookie_id",
    # Storage
    "InMemoryFreeUsageStore",
    "SupabaseFreeUsageStore",
    "InMemoryUsageLog",
    "SupabaseUsageLog",
    # Trackers
    "FreeUsageTracker",
    "PremiumUsageTracker",
]
