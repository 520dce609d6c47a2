"""Debt calculations for construction and permanent loans."""

import logging
from dataclasses import dataclass

import numpy_financial as npf

from ..models.config import ConstructionLoanTerms, PermanentLoanTerms
from .numeric import capitalized_value

logger = logging.getLogger(__name__)


@dataclass
class ConstructionLoan:
    """Construction loan details."""

    loan_amount: float
    ltc_ratio: float
    interest_rate: float
    term_months: int
    avg_outstanding_balance: float
    interest: float  # Accrued over the construction period
    fees: float  # Origination

    @property
    def monthly_interest_only_payment(self) -> float:
        return self.loan_amount * self.interest_rate / 12


@dataclass
class PermanentLoan:
    """Permanent loan sized against stabilized value."""

    loan_amount: float
    stabilized_value: float
    ltv_ratio: float
    interest_rate: float
    amortization_years: int
    io_years: int
    annual_payment: float  # Amortizing P&I
    io_payment: float  # Interest-only payment

    def debt_service(self, year: int) -> float:
        """Annual debt service for an operating year (1-indexed)."""
        if self.loan_amount <= 0:
            return 0.0
        return self.io_payment if year <= self.io_years else self.annual_payment

    def balance_after(self, years: int) -> float:
        """Remaining balance after ``years`` of operations.

        Interest-only years do not amortize.
        """
        years_amortized = max(0, years - self.io_years)
        return calculate_loan_balance(
            original_principal=self.loan_amount,
            periodic_rate=self.interest_rate,
            payment=self.annual_payment,
            periods_elapsed=years_amortized,
        )


def size_construction_loan(
    total_cost: float,
    terms: ConstructionLoanTerms,
) -> ConstructionLoan:
    """Size construction loan based on loan-to-cost ratio.

    Interest accrues simply (no compounding) on the average outstanding
    balance:

        Interest = Loan x avg_outstanding x (rate / 12) x months

    Args:
        total_cost: Total development cost.
        terms: Construction loan terms.

    Returns:
        ConstructionLoan with amount, interest and fees. All zero if disabled.

    Example:
        >>> loan = size_construction_loan(20_000_000, ConstructionLoanTerms())
        >>> loan.loan_amount
        13000000.0
        >>> round(loan.interest)
        1326000
    """
    if not terms.enabled:
        return ConstructionLoan(
            loan_amount=0.0,
            ltc_ratio=terms.ltc,
            interest_rate=terms.rate,
            term_months=terms.construction_months,
            avg_outstanding_balance=0.0,
            interest=0.0,
            fees=0.0,
        )

    loan_amount = max(0.0, total_cost) * terms.ltc
    avg_outstanding = loan_amount * terms.avg_outstanding
    monthly_rate = max(0.0, terms.rate) / 12
    interest = avg_outstanding * monthly_rate * max(0, terms.construction_months)
    fees = loan_amount * terms.origination_fee

    return ConstructionLoan(
        loan_amount=loan_amount,
        ltc_ratio=terms.ltc,
        interest_rate=terms.rate,
        term_months=terms.construction_months,
        avg_outstanding_balance=avg_outstanding,
        interest=interest,
        fees=fees,
    )


def calculate_annual_payment(principal: float, rate: float, amortization_years: int) -> float:
    """Annual P&I payment on a fully amortizing loan.

    Payment = P x r / (1 - (1 + r)^-n)
    """
    if principal <= 0 or amortization_years <= 0:
        return 0.0
    return float(-npf.pmt(rate=rate, nper=amortization_years, pv=principal, fv=0))


def size_permanent_loan(
    stabilized_noi: float,
    cap_rate: float,
    terms: PermanentLoanTerms,
) -> PermanentLoan:
    """Size permanent loan as stabilized value x LTV.

    Stabilized value = NOI / cap rate; a cap rate <= 0 or negative NOI gives a
    zero value and therefore a zero loan.

    Args:
        stabilized_noi: Year-1 stabilized NOI.
        cap_rate: Capitalization rate.
        terms: Permanent loan terms.

    Returns:
        PermanentLoan with amount and payments.

    Example:
        >>> loan = size_permanent_loan(1_300_000, 0.065, PermanentLoanTerms())
        >>> round(loan.loan_amount)
        14000000
    """
    stabilized_value = max(0.0, capitalized_value(stabilized_noi, cap_rate))
    loan_amount = stabilized_value * terms.ltv if terms.enabled else 0.0

    annual_payment = calculate_annual_payment(loan_amount, terms.rate, terms.amortization_years)
    io_payment = loan_amount * terms.rate

    logger.debug("Permanent loan: value=%.0f loan=%.0f payment=%.0f", stabilized_value, loan_amount, annual_payment)

    return PermanentLoan(
        loan_amount=loan_amount,
        stabilized_value=stabilized_value,
        ltv_ratio=terms.ltv,
        interest_rate=terms.rate,
        amortization_years=terms.amortization_years,
        io_years=terms.io_years,
        annual_payment=annual_payment,
        io_payment=io_payment,
    )


def calculate_loan_balance(
    original_principal: float,
    periodic_rate: float,
    payment: float,
    periods_elapsed: int,
) -> float:
    """Calculate remaining loan balance after a number of payments.

    Uses the loan balance formula:
    Balance = P x (1 + r)^n - PMT x [((1 + r)^n - 1) / r]

    Args:
        original_principal: Original loan amount.
        periodic_rate: Interest rate per period.
        payment: P&I payment per period.
        periods_elapsed: Number of payments made.

    Returns:
        Remaining loan balance, floored at zero.
    """
    if periods_elapsed <= 0:
        return max(0.0, original_principal)

    if periodic_rate == 0:
        return max(0.0, original_principal - payment * periods_elapsed)

    growth_factor = (1 + periodic_rate) ** periods_elapsed
    balance = (
        original_principal * growth_factor
        - payment * ((growth_factor - 1) / periodic_rate)
    )

    return max(0.0, balance)
