"""Database package"""

from receiptdesk.db.session import dispose_engine, get_db, get_engine, get_session_factory
from receiptdesk.models.base import Base

__all__ = ["Base", "dispose_engine", "get_db", "get_engine", "get_session_factory"]
