"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from market_gateway.domain.models import PaymentDetails, PaymentMethod, TransactionStatus, VehicleStatus


class PaymentDetailsSchema(BaseModel):
    """Payment sub-record; required fields depend on the payment method"""

    transaction_reference: Optional[str] = None
    paid_at: Optional[datetime] = None
    down_payment: Optional[Decimal] = None
    financed_amount: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None
    financing_term_months: Optional[int] = None
    interest_rate: Optional[Decimal] = Field(None, description="Annual interest rate in percent")
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None

    def to_domain(self) -> PaymentDetails:
        # Financing results and payment proof are computed server-side
        return PaymentDetails(
            down_payment=self.down_payment,
            financing_term_months=self.financing_term_months,
            interest_rate=self.interest_rate,
            bank_name=self.bank_name,
            account_number=self.account_number,
            card_last4=self.card_last4,
            card_brand=self.card_brand,
        )


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    vehicle_id: str = Field(..., min_length=1)
    buyer_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Sale amount")
    currency: str = Field(..., min_length=3, max_length=3)
    payment_method: PaymentMethod
    payment_details: Optional[PaymentDetailsSchema] = None
    inspection_id: Optional[str] = None
    notes: Optional[str] = None


class TransactionUpdateRequest(BaseModel):
    """Request body for PUT /v1/transactions/{id}"""

    status: Optional[TransactionStatus] = None
    payment_details: Optional[PaymentDetailsSchema] = None
    notes: Optional[str] = None


class TransactionCompleteRequest(BaseModel):
    """Request body for POST /v1/transactions/{id}/complete"""

    transaction_reference: str = Field(..., min_length=1, description="Proof of payment")
    notes: Optional[str] = None


class TransactionCancelRequest(BaseModel):
    notes: Optional[str] = None


class TransactionResponse(BaseModel):
    """Transaction record"""

    id: str
    vehicle_id: str
    seller_id: str
    buyer_id: str
    type: str
    status: TransactionStatus
    amount: Decimal
    currency: str
    payment_method: PaymentMethod
    payment_details: PaymentDetailsSchema
    inspection_id: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TransactionListResponse(BaseModel):
    """Response for GET /v1/transactions/mine and /v1/vehicles/{id}/transactions"""

    transactions: List[TransactionResponse]
    count: int


class TransactionPageResponse(BaseModel):
    """Response for GET /v1/transactions"""

    transactions: List[TransactionResponse]
    total_count: int
    page: int
    limit: int
    total_pages: int


class VehicleCreateRequest(BaseModel):
    """Request body for POST /v1/vehicles"""

    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    price: Decimal = Field(..., ge=0)
    mileage: Decimal = Field(Decimal(0), ge=0)


class VehicleUpdateRequest(BaseModel):
    """Request body for PUT /v1/vehicles/{id}; omitted fields are unchanged"""

    make: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    price: Optional[Decimal] = Field(None, ge=0)
    mileage: Optional[Decimal] = Field(None, ge=0)
    status: Optional[VehicleStatus] = Field(None, description="active or archived")


class VehicleResponse(BaseModel):
    id: str
    owner_id: str
    make: str
    model: str
    year: int
    price: Decimal
    mileage: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class VehicleListResponse(BaseModel):
    """Response for GET /v1/vehicles/mine"""

    vehicles: List[VehicleResponse]
    count: int


class VehiclePageResponse(BaseModel):
    """Response for GET /v1/vehicles"""

    vehicles: List[VehicleResponse]
    total_count: int
    page: int
    limit: int
    total_pages: int


class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody
