"""Unit tests for the financing calculator and payment-detail rules"""

import pytest
from decimal import Decimal
from market_gateway.domain.exceptions import ValidationFailedError
from market_gateway.domain.financing import (
    apply_financing,
    calculate_financing,
    calculate_monthly_payment,
    validate_payment_details,
)
from market_gateway.domain.models import PaymentDetails, PaymentMethod


def amortized(principal: float, annual_rate_percent: float, months: int) -> float:
    r = annual_rate_percent / 100 / 12
    return principal * (r * (1 + r) ** months) / ((1 + r) ** months - 1)


def test_financing_with_interest():
    """30000 sale, 10000 down, 60 months at 3.5%"""
    plan = calculate_financing(Decimal("30000"), Decimal("10000"), 60, Decimal("3.5"))

    assert plan.financed_amount == Decimal("20000.00")
    assert float(plan.monthly_payment) == pytest.approx(amortized(20000, 3.5, 60), abs=0.01)
    assert plan.monthly_payment == plan.monthly_payment.quantize(Decimal("0.01"))
    assert plan.term_months == 60


def test_financing_zero_interest_divides_evenly():
    plan = calculate_financing(Decimal("12000"), Decimal("0"), 12, Decimal("0"))

    assert plan.financed_amount == Decimal("12000.00")
    assert plan.monthly_payment == Decimal("1000.00")


def test_monthly_payment_zero_rate_has_no_division_by_zero():
    assert calculate_monthly_payment(Decimal("900"), Decimal("0"), 3) == Decimal("300")


def test_monthly_payment_rejects_non_positive_term():
    with pytest.raises(ValidationFailedError):
        calculate_monthly_payment(Decimal("1000"), Decimal("0.01"), 0)


def test_interest_makes_total_exceed_principal():
    plan = calculate_financing(Decimal("30000"), Decimal("10000"), 60, Decimal("3.5"))
    assert plan.monthly_payment * 60 > plan.financed_amount


@pytest.mark.parametrize(
    "details, message",
    [
        (PaymentDetails(down_payment=Decimal("0"), financing_term_months=12), "downPayment is required"),
        (PaymentDetails(down_payment=Decimal("-5"), financing_term_months=12), "downPayment is required"),
        (PaymentDetails(down_payment=Decimal("30000"), financing_term_months=12), "less than total amount"),
        (PaymentDetails(down_payment=Decimal("5000"), financing_term_months=0), "financingTerms is required"),
        (
            PaymentDetails(down_payment=Decimal("5000"), financing_term_months=12, interest_rate=Decimal("-1")),
            "interestRate cannot be negative",
        ),
    ],
)
def test_financing_validation_rejects(details: PaymentDetails, message: str):
    with pytest.raises(ValidationFailedError, match=message):
        validate_payment_details(PaymentMethod.FINANCING, Decimal("30000"), details)


def test_financing_validation_accepts_zero_rate():
    details = PaymentDetails(down_payment=Decimal("5000"), financing_term_months=24, interest_rate=Decimal("0"))
    validate_payment_details(PaymentMethod.FINANCING, Decimal("30000"), details)


def test_financing_validation_requires_details():
    with pytest.raises(ValidationFailedError):
        validate_payment_details(PaymentMethod.FINANCING, Decimal("30000"), None)


def test_bank_transfer_requires_bank_name():
    with pytest.raises(ValidationFailedError, match="bankName"):
        validate_payment_details(PaymentMethod.BANK_TRANSFER, Decimal("100"), PaymentDetails(bank_name="  "))

    validate_payment_details(PaymentMethod.BANK_TRANSFER, Decimal("100"), PaymentDetails(bank_name="Acme Bank"))


def test_card_last4_must_be_four_digits():
    with pytest.raises(ValidationFailedError):
        validate_payment_details(PaymentMethod.CARD, Decimal("100"), PaymentDetails(card_last4="12a4"))

    validate_payment_details(PaymentMethod.CARD, Decimal("100"), PaymentDetails(card_last4="4242"))


def test_cash_needs_no_details():
    validate_payment_details(PaymentMethod.CASH, Decimal("100"), None)


def test_apply_financing_defaults_missing_rate_to_zero():
    details = PaymentDetails(down_payment=Decimal("2000"), financing_term_months=10)
    apply_financing(Decimal("12000"), details)

    assert details.interest_rate == Decimal(0)
    assert details.financed_amount == Decimal("10000.00")
    assert details.monthly_payment == Decimal("1000.00")
