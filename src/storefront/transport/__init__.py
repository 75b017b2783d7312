"""Transport abstraction — pluggable access to the storefront REST API."""

from storefront.config import get_settings
from storefront.transport.port import TransportPort

_transport_instance = None


def get_transport() -> TransportPort:
    """Return the configured transport (singleton).

    Uses HttpxTransport by default. Set STOREFRONT_TRANSPORT=fake for an
    in-memory backend during development.
    """
    global _transport_instance
    if _transport_instance is None:
        settings = get_settings()
        if settings.transport == "http":
            from storefront.transport.http_adapter import HttpxTransport

            _transport_instance = HttpxTransport(settings.api_url, timeout=settings.timeout, token=settings.api_token)
        elif settings.transport == "fake":
            from storefront.transport.fake_adapter import FakeCartBackend

            _transport_instance = FakeCartBackend()
        else:
            raise ValueError(f"Unknown transport: {settings.transport}")
    return _transport_instance


def reset_transport():
    """Reset the transport singleton (useful for testing)."""
    global _transport_instance
    _transport_instance = None
