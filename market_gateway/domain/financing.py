"""Financing calculator and payment-detail rules for vehicle sales"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from market_gateway.domain.exceptions import ValidationFailedError
from market_gateway.domain.models import FinancingPlan, PaymentDetails, PaymentMethod

CENTS = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    """Round a money amount half-up to two decimal places"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_monthly_payment(principal: Decimal, monthly_rate: Decimal, term_months: int) -> Decimal:
    """
    Amortized periodic payment for a fixed-rate loan.

    Formula (r > 0):  P * r(1+r)^n / ((1+r)^n - 1)
    Zero interest:    P / n

    Args:
        principal: Amount financed after the down payment
        monthly_rate: Annual rate / 12, as a fraction (0.035 / 12 for 3.5%)
        term_months: Number of monthly payments

    Returns:
        Unrounded monthly payment
    """
    if term_months <= 0:
        raise ValidationFailedError("financing term must be greater than 0")

    if monthly_rate == 0:
        return principal / term_months

    growth = (1 + monthly_rate) ** term_months
    return principal * (monthly_rate * growth) / (growth - 1)


def calculate_financing(
    amount: Decimal,
    down_payment: Decimal,
    term_months: int,
    interest_rate: Decimal,
) -> FinancingPlan:
    """
    Compute financed principal and monthly payment for a sale.

    Example:
        amount=12000, down_payment=0, term=12, rate=0 → financed 12000, monthly 1000.00
    """
    financed_amount = amount - down_payment
    monthly_rate = interest_rate / Decimal(100) / Decimal(12)
    monthly_payment = calculate_monthly_payment(financed_amount, monthly_rate, term_months)

    return FinancingPlan(
        financed_amount=to_cents(financed_amount),
        monthly_payment=to_cents(monthly_payment),
        term_months=term_months,
        interest_rate=interest_rate,
    )


def validate_payment_details(
    method: PaymentMethod,
    amount: Decimal,
    details: Optional[PaymentDetails],
) -> None:
    """
    Enforce the sub-fields each payment method requires.

    - financing: down payment > 0 and < amount, term > 0, interest rate >= 0
    - bank_transfer: bank name present
    - card: last 4 digits, when given, are exactly four digits
    """
    details = details or PaymentDetails()

    if method == PaymentMethod.FINANCING:
        if details.down_payment is None or details.down_payment <= 0:
            raise ValidationFailedError("downPayment is required for financing")
        if details.down_payment >= amount:
            raise ValidationFailedError("downPayment must be less than total amount")
        if not details.financing_term_months or details.financing_term_months <= 0:
            raise ValidationFailedError("financingTerms is required for financing")
        if details.interest_rate is not None and details.interest_rate < 0:
            raise ValidationFailedError("interestRate cannot be negative")

    elif method == PaymentMethod.BANK_TRANSFER:
        if not details.bank_name or not details.bank_name.strip():
            raise ValidationFailedError("bankName is required for bank transfer")

    elif method == PaymentMethod.CARD:
        if details.card_last4 is not None and not (len(details.card_last4) == 4 and details.card_last4.isdigit()):
            raise ValidationFailedError("cardLast4 must be exactly 4 digits")


def apply_financing(amount: Decimal, details: PaymentDetails) -> PaymentDetails:
    """Fill financed amount and monthly payment on already-validated financing details"""
    interest_rate = details.interest_rate if details.interest_rate is not None else Decimal(0)
    plan = calculate_financing(amount, details.down_payment, details.financing_term_months, interest_rate)

    details.financed_amount = plan.financed_amount
    details.monthly_payment = plan.monthly_payment
    details.interest_rate = interest_rate
    return details
