"""Shared modules for homelab-bridge."""

from .logging import configure_logging

__all__ = ["configure_logging"]
