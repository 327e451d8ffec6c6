"""Database models."""

from journal.models.user import User
from journal.models.trade import Trade

__all__ = [
    "User",
    "Trade",
]
