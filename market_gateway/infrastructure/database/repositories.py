"""Data access layer for vehicles and sale transactions"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from market_gateway.infrastructure.database.models import TransactionRecord, VehicleRecord
from market_gateway.domain.models import PaymentDetails, TransactionStatus, VehicleFilters, VehicleStatus

PAYMENT_DETAIL_FIELDS = (
    "transaction_reference",
    "paid_at",
    "down_payment",
    "financed_amount",
    "monthly_payment",
    "financing_term_months",
    "interest_rate",
    "bank_name",
    "account_number",
    "card_last4",
    "card_brand",
)


def payment_details_of(record: TransactionRecord) -> PaymentDetails:
    """Build the PaymentDetails value from the flattened columns"""
    return PaymentDetails(**{field: getattr(record, field) for field in PAYMENT_DETAIL_FIELDS})


class VehicleRepository:
    """Repository for vehicle listings"""

    def __init__(self, db: Session):
        self.db = db

    def create_vehicle(
        self,
        owner_id: str,
        make: str,
        model: str,
        year: int,
        price: Decimal,
        mileage: Decimal,
        now: datetime,
    ) -> VehicleRecord:
        db_vehicle = VehicleRecord(
            owner_id=owner_id,
            make=make,
            model=model,
            year=year,
            price=price,
            mileage=mileage,
            status=VehicleStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(db_vehicle)
        self.db.flush()
        return db_vehicle

    def get_by_id(self, vehicle_id: uuid.UUID) -> Optional[VehicleRecord]:
        return self.db.query(VehicleRecord).filter(VehicleRecord.id == vehicle_id).first()

    def get_by_owner(self, owner_id: str) -> List[VehicleRecord]:
        return (
            self.db.query(VehicleRecord)
            .filter(VehicleRecord.owner_id == owner_id)
            .order_by(VehicleRecord.created_at.desc())
            .all()
        )

    def list_vehicles(
        self,
        filters: VehicleFilters,
        offset: int,
        limit: int,
    ) -> Tuple[List[VehicleRecord], int]:
        """Page of vehicles matching the filters plus total count"""
        query = self.db.query(VehicleRecord)
        if filters.make:
            query = query.filter(VehicleRecord.make.ilike(f"%{filters.make}%"))
        if filters.model:
            query = query.filter(VehicleRecord.model.ilike(f"%{filters.model}%"))
        if filters.status is not None:
            query = query.filter(VehicleRecord.status == filters.status.value)
        if filters.min_price is not None:
            query = query.filter(VehicleRecord.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(VehicleRecord.price <= filters.max_price)
        if filters.min_year is not None:
            query = query.filter(VehicleRecord.year >= filters.min_year)
        if filters.max_year is not None:
            query = query.filter(VehicleRecord.year <= filters.max_year)

        sort_column = getattr(VehicleRecord, filters.sort_by)
        order = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()

        total = query.count()
        items = query.order_by(order).offset(offset).limit(limit).all()
        return items, total

    def transfer_to_buyer(
        self,
        vehicle_id: uuid.UUID,
        seller_id: str,
        buyer_id: str,
        now: datetime,
    ) -> bool:
        """
        Hand an active vehicle from seller to buyer inside the caller's open transaction.

        Returns False when the seller no longer owns the vehicle or it is not
        active, e.g. a second pending sale of an already sold vehicle.
        """
        updated = (
            self.db.query(VehicleRecord)
            .filter(
                VehicleRecord.id == vehicle_id,
                VehicleRecord.owner_id == seller_id,
                VehicleRecord.status == VehicleStatus.ACTIVE.value,
            )
            .update(
                {
                    VehicleRecord.owner_id: buyer_id,
                    VehicleRecord.status: VehicleStatus.SOLD.value,
                    VehicleRecord.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1


class TransactionRepository:
    """Repository for sale transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        vehicle_id: uuid.UUID,
        seller_id: str,
        buyer_id: str,
        amount: Decimal,
        currency: str,
        payment_method: str,
        payment_details: PaymentDetails,
        inspection_id: Optional[uuid.UUID],
        notes: Optional[str],
        now: datetime,
    ) -> TransactionRecord:
        """Persist a new pending sale"""
        db_transaction = TransactionRecord(
            vehicle_id=vehicle_id,
            seller_id=seller_id,
            buyer_id=buyer_id,
            type="sale",
            status=TransactionStatus.PENDING.value,
            amount=amount,
            currency=currency,
            payment_method=payment_method,
            inspection_id=inspection_id,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.set_payment_details(db_transaction, payment_details)
        self.db.add(db_transaction)
        self.db.flush()  # Get ID without committing
        return db_transaction

    @staticmethod
    def set_payment_details(record: TransactionRecord, details: PaymentDetails) -> None:
        for field in PAYMENT_DETAIL_FIELDS:
            setattr(record, field, getattr(details, field))

    def get_by_id(self, transaction_id: uuid.UUID) -> Optional[TransactionRecord]:
        return self.db.query(TransactionRecord).filter(TransactionRecord.id == transaction_id).first()

    def get_by_party(self, user_id: str) -> List[TransactionRecord]:
        """Transactions where the user is buyer or seller, newest first"""
        return (
            self.db.query(TransactionRecord)
            .filter(or_(TransactionRecord.seller_id == user_id, TransactionRecord.buyer_id == user_id))
            .order_by(TransactionRecord.created_at.desc())
            .all()
        )

    def get_by_vehicle(self, vehicle_id: uuid.UUID) -> List[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.vehicle_id == vehicle_id)
            .order_by(TransactionRecord.created_at.desc())
            .all()
        )

    def list_transactions(
        self,
        status: Optional[TransactionStatus],
        offset: int,
        limit: int,
    ) -> Tuple[List[TransactionRecord], int]:
        """Page of transactions plus total count for the filter"""
        query = self.db.query(TransactionRecord)
        if status is not None:
            query = query.filter(TransactionRecord.status == status.value)

        total = query.count()
        items = query.order_by(TransactionRecord.created_at.desc()).offset(offset).limit(limit).all()
        return items, total

    def mark_completed(
        self,
        transaction_id: uuid.UUID,
        transaction_reference: str,
        notes: Optional[str],
        now: datetime,
    ) -> bool:
        """
        Conditional pending → completed update.

        Returns False when the row is no longer pending, so a concurrent
        completion or cancellation cannot be overwritten.
        """
        values = {
            TransactionRecord.status: TransactionStatus.COMPLETED.value,
            TransactionRecord.completed_at: now,
            TransactionRecord.updated_at: now,
            TransactionRecord.transaction_reference: transaction_reference,
            TransactionRecord.paid_at: now,
        }
        if notes:
            values[TransactionRecord.notes] = notes
        return self._update_if_pending(transaction_id, values)

    def mark_cancelled(self, transaction_id: uuid.UUID, notes: Optional[str], now: datetime) -> bool:
        """Conditional pending → cancelled update"""
        values = {
            TransactionRecord.status: TransactionStatus.CANCELLED.value,
            TransactionRecord.cancelled_at: now,
            TransactionRecord.updated_at: now,
        }
        if notes:
            values[TransactionRecord.notes] = notes
        return self._update_if_pending(transaction_id, values)

    def _update_if_pending(self, transaction_id: uuid.UUID, values: dict) -> bool:
        updated = (
            self.db.query(TransactionRecord)
            .filter(
                TransactionRecord.id == transaction_id,
                TransactionRecord.status == TransactionStatus.PENDING.value,
            )
            .update(values, synchronize_session=False)
        )
        return updated == 1
