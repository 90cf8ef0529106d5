"""Database package."""

from channel_migrator.db.session import check_connection, close_engine, create_engine
from channel_migrator.db.store import DestinationStore

__all__ = ["create_engine", "check_connection", "close_engine", "DestinationStore"]
