"""Logging setup for the relay process."""

from .logging import configure_logging

__all__ = ["configure_logging"]
