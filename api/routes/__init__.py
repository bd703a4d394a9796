"""API routes package"""

from . import readings, reports, auth, health

__all__ = ["readings", "reports", "auth", "health"]
