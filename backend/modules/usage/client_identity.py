"""
Anonymous visitor identification.

A free visitor is identified by client IP plus a long-lived tracking
cookie. Clearing cookies or changing network yields a new identity; that
is accepted behaviour for the free tier.
"""

import uuid
from typing import Optional

from .models import ClientIdentity

UNKNOWN_IP = "unknown"


def resolve_client_ip(forwarded_for: Optional[str], client_host: Optional[str]) -> str:
    """
    Pick the client IP.

    Order: first X-Forwarded-For entry, then the socket peer, then "unknown".
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if client_host:
        return client_host
    return UNKNOWN_IP


def generate_cookie_id() -> str:
    return str(uuid.uuid4())


def resolve_client_identity(
    forwarded_for: Optional[str],
    client_host: Optional[str],
    cookie_value: Optional[str],
) -> ClientIdentity:
    """Build the identity for a request, issuing a cookie when none was sent."""
    ip_address = resolve_client_ip(forwarded_for, client_host)
    if cookie_value:
        return ClientIdentity(ip_address=ip_address, cookie_id=cookie_value)
    return ClientIdentity(
        ip_address=ip_address,
        cookie_id=generate_cookie_id(),
        cookie_issued=True,
    )
