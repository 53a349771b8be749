"""Booking API client and authentication capability."""

from .auth import TokenAuth
from .client import BackendClient

__all__ = ["BackendClient", "TokenAuth"]
