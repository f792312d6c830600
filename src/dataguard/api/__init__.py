"""HTTP API for dataguard."""

from dataguard.api.server import create_api_app

__all__ = ["create_api_app"]
