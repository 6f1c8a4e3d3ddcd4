"""Tests for anonymous visitor identification."""

import uuid

from modules.usage.client_identity import (
    UNKNOWN_IP,
    generate_cookie_id,
    resolve_client_identity,
    resolve_client_ip,
)


class TestResolveClientIp:
    def test_prefers_first_forwarded_entry(self):
        """The left-most X-Forwarded-For entry is the client."""
        assert resolve_client_ip("203.0.113.5, 10.0.0.1", "10.0.0.2") == "203.0.113.5"

    def test_falls_back_to_peer(self):
        assert resolve_client_ip(None, "10.0.0.2") == "10.0.0.2"
        assert resolve_client_ip("", "10.0.0.2") == "10.0.0.2"

    def test_blank_forwarded_entry(self):
        assert resolve_client_ip(" , 10.0.0.1", "10.0.0.2") == "10.0.0.2"

    def test_unknown(self):
        assert resolve_client_ip(None, None) == UNKNOWN_IP


class TestResolveClientIdentity:
    def test_existing_cookie(self):
        """A sent cookie is reused and not re-issued."""
        identity = resolve_client_identity(None, "10.0.0.2", "cookie-1")

        assert identity.cookie_id == "cookie-1"
        assert identity.cookie_issued is False
        assert identity.key == "10.0.0.2_cookie-1"

    def test_issues_cookie_when_missing(self):
        identity = resolve_client_identity(None, "10.0.0.2", None)

        assert identity.cookie_issued is True
        uuid.UUID(identity.cookie_id)

    def test_generated_cookies_are_unique(self):
        assert generate_cookie_id() != generate_cookie_id()
