"""Shared utilities for dataguard."""
