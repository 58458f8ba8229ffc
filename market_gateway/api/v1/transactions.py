"""/v1/transactions - sale lifecycle endpoints"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from market_gateway.api.v1.schemas import (
    PaymentDetailsSchema,
    TransactionCancelRequest,
    TransactionCompleteRequest,
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionPageResponse,
    TransactionResponse,
    TransactionUpdateRequest,
)
from market_gateway.api.dependencies import get_current_user_id, get_transaction_service
from market_gateway.domain.models import (
    CompleteTransactionCommand,
    CreateTransactionCommand,
    TransactionStatus,
    UpdateTransactionCommand,
)
from market_gateway.infrastructure.database.models import TransactionRecord
from market_gateway.infrastructure.database.repositories import payment_details_of
from market_gateway.services.transactions import TransactionService

router = APIRouter()


def to_response(record: TransactionRecord) -> TransactionResponse:
    details = payment_details_of(record)
    return TransactionResponse(
        id=str(record.id),
        vehicle_id=str(record.vehicle_id),
        seller_id=record.seller_id,
        buyer_id=record.buyer_id,
        type=record.type,
        status=TransactionStatus(record.status),
        amount=record.amount,
        currency=record.currency,
        payment_method=record.payment_method,
        payment_details=PaymentDetailsSchema(**vars(details)),
        inspection_id=str(record.inspection_id) if record.inspection_id else None,
        notes=record.notes,
        completed_at=record.completed_at,
        cancelled_at=record.cancelled_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_list_response(records: List[TransactionRecord]) -> TransactionListResponse:
    transactions = [to_response(r) for r in records]
    return TransactionListResponse(transactions=transactions, count=len(transactions))


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Open a pending sale. The caller is the seller and must own the vehicle.

    For financing, the financed amount and monthly payment are calculated
    before the transaction is stored.
    """
    command = CreateTransactionCommand(
        vehicle_id=request_body.vehicle_id,
        buyer_id=request_body.buyer_id,
        amount=request_body.amount,
        currency=request_body.currency,
        payment_method=request_body.payment_method,
        payment_details=request_body.payment_details.to_domain() if request_body.payment_details else None,
        inspection_id=request_body.inspection_id,
        notes=request_body.notes,
    )
    return to_response(service.create_transaction(command, user_id))


@router.get("/transactions", response_model=TransactionPageResponse)
def list_transactions(
    status: Optional[TransactionStatus] = Query(None, description="Filter by status"),
    page: int = Query(1),
    limit: int = Query(10),
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    """Paginated transactions, newest first"""
    records, total, page, limit = service.list_transactions(status, page, limit)
    return TransactionPageResponse(
        transactions=[to_response(r) for r in records],
        total_count=total,
        page=page,
        limit=limit,
        total_pages=(total + limit - 1) // limit,
    )


@router.get("/transactions/mine", response_model=TransactionListResponse)
def list_my_transactions(
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return to_list_response(service.list_for_user(user_id))


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return to_response(service.get_transaction(transaction_id))


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    request_body: TransactionUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    """Edit notes or payment details; a status change must be a permitted transition"""
    command = UpdateTransactionCommand(
        status=request_body.status,
        payment_details=request_body.payment_details.to_domain() if request_body.payment_details else None,
        notes=request_body.notes,
    )
    return to_response(service.update_transaction(transaction_id, command, user_id))


@router.post("/transactions/{transaction_id}/complete", response_model=TransactionResponse)
def complete_transaction(
    transaction_id: str,
    request_body: TransactionCompleteRequest,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Seller confirms payment.

    Flow:
    1. Verify caller is the seller and the transaction is pending
    2. In one database transaction, complete it and transfer the vehicle to the buyer
    """
    command = CompleteTransactionCommand(
        transaction_reference=request_body.transaction_reference,
        notes=request_body.notes,
    )
    return to_response(service.complete_transaction(transaction_id, command, user_id))


@router.post("/transactions/{transaction_id}/cancel", response_model=TransactionResponse)
def cancel_transaction(
    transaction_id: str,
    request_body: Optional[TransactionCancelRequest] = None,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    notes = request_body.notes if request_body else None
    return to_response(service.cancel_transaction(transaction_id, user_id, notes))
