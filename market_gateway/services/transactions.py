"""Transaction engine - sale lifecycle, party authorization and atomic ownership transfer"""

import functools
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from market_gateway.config import settings
from market_gateway.domain.exceptions import (
    DomainException,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from market_gateway.domain.financing import apply_financing, validate_payment_details
from market_gateway.domain.lifecycle import transition
from market_gateway.domain.models import (
    CompleteTransactionCommand,
    CreateTransactionCommand,
    PaymentDetails,
    PaymentMethod,
    TransactionStatus,
    UpdateTransactionCommand,
    VehicleStatus,
)
from market_gateway.infrastructure.database.models import TransactionRecord
from market_gateway.infrastructure.database.repositories import (
    TransactionRepository,
    VehicleRepository,
    payment_details_of,
)
from market_gateway.infrastructure.database.session import unit_of_work
from market_gateway.infrastructure.observability.logging import log_transaction_event
from market_gateway.infrastructure.observability.metrics import (
    record_financing,
    record_operation,
    vehicle_sold_counter,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(value: str, field: str) -> uuid.UUID:
    """Parse an identifier or fail validation with the field name"""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationFailedError(f"invalid {field}")


def parse_payment_method(value: str) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationFailedError("invalid paymentMethod")


def instrumented(operation: str) -> Callable:
    """Count successes and failures of an engine operation by error code"""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except DomainException as e:
                record_operation(operation, e.code)
                raise
            record_operation(operation)
            return result

        return wrapper

    return decorator


class TransactionService:
    """
    Owns the Transaction state machine.

    Every operation receives the caller's user id explicitly. Status changes
    go through domain.lifecycle and are written with conditional updates so
    two racing requests cannot both move a transaction out of pending.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow, request_id: Optional[str] = None):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.vehicles = VehicleRepository(db)
        self.clock = clock
        self.request_id = request_id

    @instrumented("create")
    def create_transaction(self, command: CreateTransactionCommand, seller_id: str) -> TransactionRecord:
        """
        Open a pending sale of the seller's vehicle to a buyer.

        Checks, in order: vehicle exists, caller owns it, it is active,
        buyer is not the seller, payment details fit the method.
        """
        if command.amount is None or command.amount <= 0:
            raise ValidationFailedError("amount must be greater than 0")

        vehicle_id = parse_id(command.vehicle_id, "vehicleId")
        inspection_id = parse_id(command.inspection_id, "inspectionId") if command.inspection_id else None
        method = parse_payment_method(command.payment_method)
        currency = (command.currency or settings.default_currency).upper()

        vehicle = self.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("vehicle not found")
        if vehicle.owner_id != seller_id:
            raise ForbiddenError("you are not the owner of this vehicle")
        if vehicle.status != VehicleStatus.ACTIVE.value:
            raise ValidationFailedError("vehicle is not available for sale")
        if command.buyer_id == seller_id:
            raise ValidationFailedError("cannot create transaction with yourself")

        details = replace(command.payment_details) if command.payment_details else PaymentDetails()
        validate_payment_details(method, command.amount, details)
        if method == PaymentMethod.FINANCING:
            apply_financing(command.amount, details)

        with unit_of_work(self.db):
            record = self.transactions.create_transaction(
                vehicle_id=vehicle_id,
                seller_id=seller_id,
                buyer_id=command.buyer_id,
                amount=command.amount,
                currency=currency,
                payment_method=method.value,
                payment_details=details,
                inspection_id=inspection_id,
                notes=command.notes,
                now=self.clock(),
            )

        if method == PaymentMethod.FINANCING:
            record_financing(details.financed_amount)
        log_transaction_event(
            "created",
            str(record.id),
            seller_id,
            record.status,
            request_id=self.request_id,
            vehicle_id=str(vehicle_id),
            payment_method=method.value,
        )
        return record

    @instrumented("complete")
    def complete_transaction(
        self,
        transaction_id: str,
        command: CompleteTransactionCommand,
        caller_id: str,
    ) -> TransactionRecord:
        """
        Mark the sale completed and hand the vehicle to the buyer.

        Both writes share one database transaction: either the transaction
        is completed and the vehicle sold to the buyer, or nothing changes.
        """
        reference = (command.transaction_reference or "").strip()
        if not reference:
            raise ValidationFailedError("transactionReference is required")

        record = self._get_record(transaction_id)
        if record.seller_id != caller_id:
            raise ForbiddenError("only the seller can complete this transaction")
        transition(TransactionStatus(record.status), TransactionStatus.COMPLETED)

        txn_id, vehicle_id = record.id, record.vehicle_id
        seller_id, buyer_id = record.seller_id, record.buyer_id
        now = self.clock()
        with unit_of_work(self.db):
            # Re-checked by the store: loses to a concurrent complete/cancel
            if not self.transactions.mark_completed(txn_id, reference, command.notes, now):
                raise InvalidStateError("transaction is not pending")
            # Seller must still own an active vehicle; a sibling sale may have won
            if not self.vehicles.transfer_to_buyer(vehicle_id, seller_id, buyer_id, now):
                raise InvalidStateError("vehicle is no longer available for sale")

        vehicle_sold_counter.inc()
        log_transaction_event(
            "completed",
            str(txn_id),
            caller_id,
            TransactionStatus.COMPLETED.value,
            request_id=self.request_id,
            vehicle_id=str(vehicle_id),
            buyer_id=buyer_id,
        )
        return self._reload(record)

    @instrumented("cancel")
    def cancel_transaction(self, transaction_id: str, caller_id: str, notes: Optional[str] = None) -> TransactionRecord:
        """Abort a pending sale. Either party may cancel; the vehicle is untouched."""
        record = self._get_record(transaction_id)
        if caller_id not in (record.seller_id, record.buyer_id):
            raise ForbiddenError("you are not authorized to cancel this transaction")
        return self._cancel(record, caller_id, notes)

    @instrumented("update")
    def update_transaction(
        self,
        transaction_id: str,
        command: UpdateTransactionCommand,
        caller_id: str,
    ) -> TransactionRecord:
        """
        Edit notes and payment details.

        A status in the command is routed through the lifecycle guards:
        cancelled runs the cancel path, completing requires the complete
        operation, anything else is rejected.
        """
        record = self._get_record(transaction_id)
        if caller_id not in (record.seller_id, record.buyer_id):
            raise ForbiddenError("you are not authorized to update this transaction")

        current = TransactionStatus(record.status)
        if command.status is not None and command.status != current:
            if command.payment_details is not None:
                raise ValidationFailedError("status and paymentDetails cannot change in the same update")
            if command.status == TransactionStatus.COMPLETED:
                raise InvalidStateError("use the complete operation to complete a transaction")
            transition(current, command.status)
            return self._cancel(record, caller_id, command.notes)

        if command.payment_details is not None and current != TransactionStatus.PENDING:
            raise InvalidStateError("payment details can only change while the transaction is pending")

        with unit_of_work(self.db):
            if command.payment_details is not None:
                method = PaymentMethod(record.payment_method)
                details = replace(
                    command.payment_details,
                    transaction_reference=record.transaction_reference,
                    paid_at=record.paid_at,
                )
                validate_payment_details(method, record.amount, details)
                if method == PaymentMethod.FINANCING:
                    apply_financing(record.amount, details)
                self.transactions.set_payment_details(record, details)
            if command.notes:
                record.notes = command.notes
            record.updated_at = self.clock()

        log_transaction_event("updated", str(record.id), caller_id, record.status, request_id=self.request_id)
        return record

    def get_transaction(self, transaction_id: str) -> TransactionRecord:
        return self._get_record(transaction_id)

    def get_payment_details(self, record: TransactionRecord) -> PaymentDetails:
        return payment_details_of(record)

    def list_for_user(self, user_id: str) -> List[TransactionRecord]:
        return self.transactions.get_by_party(user_id)

    def list_for_vehicle(self, vehicle_id: str) -> List[TransactionRecord]:
        return self.transactions.get_by_vehicle(parse_id(vehicle_id, "vehicleId"))

    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[TransactionRecord], int, int, int]:
        """Returns (items, total_count, page, limit) with page/limit normalized"""
        if page < 1:
            page = 1
        if limit < 1 or limit > settings.max_page_size:
            limit = 10

        items, total = self.transactions.list_transactions(status, (page - 1) * limit, limit)
        return items, total, page, limit

    def _cancel(self, record: TransactionRecord, caller_id: str, notes: Optional[str]) -> TransactionRecord:
        transition(TransactionStatus(record.status), TransactionStatus.CANCELLED)

        with unit_of_work(self.db):
            if not self.transactions.mark_cancelled(record.id, notes, self.clock()):
                raise InvalidStateError("only pending transactions can be cancelled")

        log_transaction_event(
            "cancelled",
            str(record.id),
            caller_id,
            TransactionStatus.CANCELLED.value,
            request_id=self.request_id,
        )
        return self._reload(record)

    def _get_record(self, transaction_id: str) -> TransactionRecord:
        record = self.transactions.get_by_id(parse_id(transaction_id, "transaction ID"))
        if record is None:
            raise NotFoundError("transaction not found")
        return record

    def _reload(self, record: TransactionRecord) -> TransactionRecord:
        self.db.refresh(record)
        return record
