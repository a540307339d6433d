"""Database package"""

from pricing_api.db.session import AsyncSessionLocal, engine, get_db
from pricing_api.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
