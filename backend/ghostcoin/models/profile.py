"""Per-account metadata. user_id is the hosted auth provider's subject id."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ghostcoin.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=True)
    wallet_address = Column(String(64), nullable=True)  # payout address, user-editable
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
