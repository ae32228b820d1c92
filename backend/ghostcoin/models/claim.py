"""One account's claim on a Drop, pending admin review.

claim_key: claimant user_id under the per_user policy, '*' under first_claimant_wins.
(drop_id, claim_key) is unique so concurrent scans cannot both insert.
wallet_address: may be NULL at creation; required before the claim is marked paid.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ghostcoin.core.constants import CLAIM_KEY_CONSTRAINT
from ghostcoin.db.base import Base


class Claim(Base):
    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    drop_id = Column(Integer, ForeignKey("drops.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    wallet_address = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default="pending", server_default="pending", index=True)
    claim_key = Column(String(64), nullable=False)
    claimed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    admin_notes = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    drop = relationship("Drop", back_populates="claims")

    __table_args__ = (UniqueConstraint("drop_id", "claim_key", name=CLAIM_KEY_CONSTRAINT),)
