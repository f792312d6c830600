"""Command-line interface for dataguard.

Provides commands for initializing configuration, managing the policy,
negotiating from the shell and running the HTTP API.
"""

from .main import cli, main

__all__ = ["cli", "main"]
