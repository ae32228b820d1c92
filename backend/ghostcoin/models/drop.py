"""A location-anchored, time-bounded reward. drop_code is what the printed QR code carries; id never leaves the backend."""
from sqlalchemy import Column, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ghostcoin.db.base import Base


class Drop(Base):
    __tablename__ = "drops"

    id = Column(Integer, primary_key=True, autoincrement=True)
    drop_code = Column(String(64), nullable=False, unique=True, index=True)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    prize = Column(String(256), nullable=True)
    latitude = Column(Float, nullable=True)   # NULL = not shown on maps, still claimable by scan
    longitude = Column(Float, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)  # NULL = never expires
    min_token_required = Column(Numeric(38, 18), nullable=False, default=0, server_default="0")  # whole GHOX
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    claims = relationship("Claim", back_populates="drop", cascade="all, delete-orphan")
