"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import bookings, health, notifications, prometheus

__all__ = ["bookings", "health", "notifications", "prometheus"]
