"""Sources and uses: construction debt, required equity and its LP/GP split."""

import logging
from dataclasses import dataclass, field
from typing import List

from ..models.config import ConfigurationModel
from ..models.lookups import Severity
from .costs import DevelopmentCost
from .debt import ConstructionLoan, size_construction_loan
from .validation import ValidationIssue

logger = logging.getLogger(__name__)


@dataclass
class FinancingResult:
    """Capital stack for the development period."""

    construction_loan: ConstructionLoan
    total_project_cost: float  # TDC + construction interest + loan fees
    equity_required: float
    lp_equity: float
    gp_equity: float
    gp_coinvest: float
    total_gp_commitment: float
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def construction_loan_amount(self) -> float:
        return self.construction_loan.loan_amount

    @property
    def construction_interest(self) -> float:
        return self.construction_loan.interest

    @property
    def loan_fees(self) -> float:
        return self.construction_loan.fees

    @property
    def total_sources(self) -> float:
        return self.construction_loan_amount + self.equity_required


def calculate_financing(config: ConfigurationModel, cost: DevelopmentCost) -> FinancingResult:
    """Size construction debt and derive required equity.

    Total project cost = TDC + construction interest + origination fees
    Equity = Total project cost - construction loan (floored at zero)

    The GP co-invest is carved out of the GP's notional share:
        GP co-invest = Equity x GP % x co-invest %
        GP equity    = Equity x GP % - GP co-invest
        LP equity    = Equity x LP %

    Negative results are clamped to zero and reported as issues.

    Args:
        config: Project configuration.
        cost: CostEngine result.

    Returns:
        FinancingResult with the capital stack and any clamping issues.
    """
    loan = size_construction_loan(cost.total, config.construction_loan)
    total_project_cost = cost.total + loan.interest + loan.fees
    issues: List[ValidationIssue] = []

    equity_required = total_project_cost - loan.loan_amount
    if equity_required < 0:
        logger.warning("Financing exceeds project cost by %.0f; equity clamped to zero", -equity_required)
        issues.append(ValidationIssue(
            field="equity_required",
            message="Construction financing exceeds total project cost; equity clamped to zero",
            severity=Severity.WARNING,
        ))
        equity_required = 0.0

    equity = config.equity
    gp_notional = equity_required * equity.gp_share
    gp_coinvest = gp_notional * equity.gp_coinvest
    gp_equity = gp_notional - gp_coinvest
    lp_equity = equity_required * equity.lp_share

    for name, amount in (("lp_equity", lp_equity), ("gp_equity", gp_equity), ("gp_coinvest", gp_coinvest)):
        if amount < 0:
            issues.append(ValidationIssue(
                field=name,
                message=f"{name} computed as {amount:,.0f}; clamped to zero",
                severity=Severity.WARNING,
            ))
    lp_equity = max(0.0, lp_equity)
    gp_equity = max(0.0, gp_equity)
    gp_coinvest = max(0.0, gp_coinvest)

    logger.debug(
        "Financing: loan=%.0f interest=%.0f equity=%.0f",
        loan.loan_amount, loan.interest, equity_required,
    )

    return FinancingResult(
        construction_loan=loan,
        total_project_cost=total_project_cost,
        equity_required=equity_required,
        lp_equity=lp_equity,
        gp_equity=gp_equity,
        gp_coinvest=gp_coinvest,
        total_gp_commitment=gp_equity + gp_coinvest,
        issues=issues,
    )
