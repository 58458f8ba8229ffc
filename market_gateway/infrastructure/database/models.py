"""SQLAlchemy ORM models for vehicles and sale transactions"""

import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class VehicleRecord(Base):
    """Vehicle listing owned by a marketplace user"""

    __tablename__ = "vehicle"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    year = Column(Integer, nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    mileage = Column(Numeric(12, 1), nullable=False, default=0)
    status = Column(String(16), nullable=False, default="active", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="vehicle")


class TransactionRecord(Base):
    """Proposed or executed sale of one vehicle between seller and buyer"""

    __tablename__ = "vehicle_transaction"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicle.id"), nullable=False, index=True)
    seller_id = Column(Text, nullable=False, index=True)
    buyer_id = Column(Text, nullable=False, index=True)
    type = Column(String(16), nullable=False, default="sale")
    status = Column(String(16), nullable=False, default="pending", index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    payment_method = Column(String(32), nullable=False)
    inspection_id = Column(UUID(as_uuid=True), nullable=True)
    notes = Column(Text, nullable=True)

    # Payment details
    transaction_reference = Column(Text, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    down_payment = Column(Numeric(14, 2), nullable=True)
    financed_amount = Column(Numeric(14, 2), nullable=True)
    monthly_payment = Column(Numeric(14, 2), nullable=True)
    financing_term_months = Column(Integer, nullable=True)
    interest_rate = Column(Numeric(6, 3), nullable=True)
    bank_name = Column(Text, nullable=True)
    account_number = Column(Text, nullable=True)
    card_last4 = Column(String(4), nullable=True)
    card_brand = Column(Text, nullable=True)

    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    vehicle = relationship("VehicleRecord", back_populates="transactions")
