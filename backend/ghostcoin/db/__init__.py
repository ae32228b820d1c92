from ghostcoin.db.base import Base
from ghostcoin.db.session import get_db, engine, SessionLocal
from ghostcoin.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
