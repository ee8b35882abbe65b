"""
Database Models Module

This module defines the SQLAlchemy ORM model for completed PayPal captures.
Records are append-only: they are written once when a verified
PAYMENT.CAPTURE.COMPLETED webhook arrives and never updated afterwards.
"""

from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PaymentRecord(Base):
    """Model representing one completed capture."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    # Not unique: PayPal may redeliver the same capture
    order_id = Column(String(64), nullable=False, index=True)
    status = Column(String(32), nullable=True)
    amount = Column(Numeric(18, 4), nullable=False)
    currency = Column(String(3), nullable=False)
    payer_id = Column(String(64), nullable=True)
    payer_email = Column(String(255), nullable=True)
    create_time = Column(DateTime(timezone=True), nullable=True)
    update_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))

    def __repr__(self):
        return (
            f"<PaymentRecord(id={self.id}, order_id={self.order_id}, "
            f"status={self.status})>"
        )
