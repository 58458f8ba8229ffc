"""Domain models - pure Python enums and dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    """Closed set of transaction states"""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"  # Reserved, no operation moves a transaction here


class TransactionType(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"
    FINANCING = "financing"


class VehicleStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    ARCHIVED = "archived"


@dataclass
class PaymentDetails:
    """Payment information attached to a transaction"""

    transaction_reference: Optional[str] = None
    paid_at: Optional[datetime] = None

    # Financing
    down_payment: Optional[Decimal] = None
    financed_amount: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None
    financing_term_months: Optional[int] = None
    interest_rate: Optional[Decimal] = None  # Annual, in percent

    # Bank transfer
    bank_name: Optional[str] = None
    account_number: Optional[str] = None

    # Card (last 4 digits only)
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None


@dataclass
class FinancingPlan:
    """Output of the financing calculator"""

    financed_amount: Decimal
    monthly_payment: Decimal
    term_months: int
    interest_rate: Decimal


@dataclass
class CreateTransactionCommand:
    """Seller's request to open a sale against one of their vehicles"""

    vehicle_id: str
    buyer_id: str
    amount: Decimal
    currency: str
    payment_method: PaymentMethod
    payment_details: Optional[PaymentDetails] = None
    inspection_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class CompleteTransactionCommand:
    transaction_reference: str  # Proof of payment
    notes: Optional[str] = None


@dataclass
class UpdateTransactionCommand:
    status: Optional[TransactionStatus] = None
    payment_details: Optional[PaymentDetails] = None
    notes: Optional[str] = None


VEHICLE_SORT_FIELDS = ("price", "year", "mileage", "created_at")


@dataclass
class VehicleFilters:
    """Listing search: substring make/model, ranges, status and sort order"""

    make: Optional[str] = None
    model: Optional[str] = None
    status: Optional[VehicleStatus] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"  # asc | desc


@dataclass
class UpdateVehicleCommand:
    """Owner edits to a listing; None leaves a field unchanged"""

    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    price: Optional[Decimal] = None
    mileage: Optional[Decimal] = None
    status: Optional[VehicleStatus] = None
