"""Monthly sales-absorption projection for the for-sale archetype.

Each phase pre-sells units at a fixed monthly pace from its start month until
delivery, collecting the deposit share of the escalated price. From delivery,
units close at the same pace and pay the closing share; units not pre-sold
before delivery pay their full price at closing.

Net sales proceeds sweep the construction loan: interest accrues monthly on
the outstanding balance and principal is repaid from proceeds until retired.
Any balance still outstanding at the horizon is repaid in the final month.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List

from ..models.config import ConfigurationModel, SalesAssumptions, SalesPhase
from ..models.lookups import PropertyType
from .cashflow import (
    CashFlowProjection,
    CashFlowProjector,
    CashFlowRecord,
    append_record,
    initial_record,
)
from .costs import DevelopmentCost
from .financing import FinancingResult

logger = logging.getLogger(__name__)


@dataclass
class MonthlySaleFlow:
    """One month of the sales ledger."""

    month: int
    units_sold: int
    units_closed: int
    deposit_revenue: float
    closing_revenue: float
    selling_costs: float
    interest: float
    principal_repayment: float
    loan_balance: float  # After this month's repayment

    @property
    def gross_revenue(self) -> float:
        return self.deposit_revenue + self.closing_revenue

    @property
    def net_revenue(self) -> float:
        return self.gross_revenue - self.selling_costs

    @property
    def debt_service(self) -> float:
        return self.interest + self.principal_repayment

    @property
    def cash_flow(self) -> float:
        return self.net_revenue - self.debt_service


@dataclass
class _PhaseState:
    phase: SalesPhase
    presold: int = 0
    closed: int = 0


def escalated_price(sales: SalesAssumptions, months_elapsed: float) -> float:
    """Unit price after ``months_elapsed`` months of annual escalation."""
    return sales.avg_price * (1 + sales.price_escalation) ** (months_elapsed / 12)


def _presell(state: _PhaseState, month: int, sales: SalesAssumptions) -> tuple:
    phase = state.phase
    if not phase.start_month <= month < phase.delivery_month:
        return 0, 0.0
    units = min(sales.sales_pace, phase.units - state.presold)
    if units <= 0:
        return 0, 0.0
    state.presold += units
    price = escalated_price(sales, month - 1)
    return units, units * price * sales.deposit_share


def _close(state: _PhaseState, month: int, sales: SalesAssumptions) -> tuple:
    phase = state.phase
    if month < phase.delivery_month:
        return 0, 0.0
    units = min(sales.sales_pace, phase.units - state.closed)
    if units <= 0:
        return 0, 0.0

    closing_month = month - phase.delivery_month
    price = escalated_price(sales, phase.start_month + closing_month)
    presold_closing = max(0, min(units, state.presold - state.closed))
    unsold_closing = units - presold_closing
    state.closed += units

    revenue = presold_closing * price * sales.closing_share
    revenue += unsold_closing * price * (sales.deposit_share + sales.closing_share)
    return units, revenue


def build_monthly_ledger(
    sales: SalesAssumptions,
    construction_loan_amount: float,
    construction_rate: float,
) -> List[MonthlySaleFlow]:
    """Run the monthly absorption and loan sweep over the sales horizon.

    Args:
        sales: Sales assumptions with phases and deposit schedule.
        construction_loan_amount: Opening construction loan balance.
        construction_rate: Annual construction loan rate.

    Returns:
        One MonthlySaleFlow per month, 1..horizon_months.
    """
    states = [_PhaseState(phase) for phase in sales.phases]
    balance = max(0.0, construction_loan_amount)
    monthly_rate = max(0.0, construction_rate) / 12
    horizon = max(0, sales.horizon_months)
    ledger: List[MonthlySaleFlow] = []

    for month in range(1, horizon + 1):
        units_sold = units_closed = 0
        deposits = closings = 0.0
        for state in states:
            sold, deposit_revenue = _presell(state, month, sales)
            closed, closing_revenue = _close(state, month, sales)
            units_sold += sold
            units_closed += closed
            deposits += deposit_revenue
            closings += closing_revenue

        selling_costs = (deposits + closings) * sales.selling_cost_pct
        interest = balance * monthly_rate
        available = max(0.0, deposits + closings - selling_costs - interest)
        repayment = balance if month == horizon else min(balance, available)
        balance -= repayment

        ledger.append(MonthlySaleFlow(
            month=month,
            units_sold=units_sold,
            units_closed=units_closed,
            deposit_revenue=deposits,
            closing_revenue=closings,
            selling_costs=selling_costs,
            interest=interest,
            principal_repayment=repayment,
            loan_balance=balance,
        ))

    return ledger


class ForSaleProjector(CashFlowProjector):
    """Condominium/for-sale projection rolled up from a monthly ledger."""

    property_type = PropertyType.FOR_SALE

    def project(
        self,
        config: ConfigurationModel,
        cost: DevelopmentCost,
        financing: FinancingResult,
    ) -> CashFlowProjection:
        ledger = build_monthly_ledger(
            config.sales,
            financing.construction_loan_amount,
            config.construction_loan.rate,
        )

        by_year: Dict[int, List[MonthlySaleFlow]] = {}
        for flow in ledger:
            by_year.setdefault(math.ceil(flow.month / 12), []).append(flow)

        records: List[CashFlowRecord] = [initial_record(financing.equity_required)]
        for year in sorted(by_year):
            months = by_year[year]
            gross = sum(m.gross_revenue for m in months)
            append_record(
                records,
                year=year,
                noi=sum(m.net_revenue for m in months),
                debt_service=sum(m.debt_service for m in months),
                cash_flow=sum(m.cash_flow for m in months),
                gross_revenue=gross,
                operating_expenses=sum(m.selling_costs for m in months),
                sales_revenue=gross,
            )

        unsold = sum(p.units for p in config.sales.phases) - sum(m.units_closed for m in ledger)
        if unsold > 0:
            logger.warning("%d for-sale units not closed within %d months", unsold, config.sales.horizon_months)

        return CashFlowProjection(
            property_type=PropertyType.FOR_SALE,
            records=records,
            year1_noi=0.0,
            stabilized_value=0.0,
            permanent_loan=None,
            details={"monthly": ledger, "unsold_units": max(0, unsold)},
        )
