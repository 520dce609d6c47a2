"""Return metrics: project IRR, equity multiple, payback and LP/GP splits."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.config import ConfigurationModel
from ..models.lookups import PropertyType
from .cashflow import CashFlowProjection
from .costs import DevelopmentCost
from .financing import FinancingResult
from .irr import IRRResult, IRRSolverSettings, solve_irr
from .numeric import capitalized_value, finite_or_zero, safe_divide
from .validation import ValidationIssue
from .waterfall import DistributionStep, WaterfallResult, run_waterfall

logger = logging.getLogger(__name__)


@dataclass
class ReturnMetrics:
    """Investor-level returns for one calculation run."""

    irr_result: IRRResult
    equity_multiple: float
    total_distributions: float  # Sum of positive flows after year 0
    initial_equity: float
    lp_distribution: float
    gp_distribution: float  # Before sponsor promote
    sponsor_promote: float
    lp_irr: float
    gp_irr: float
    payback_year: Optional[int]  # None if equity is never recovered from operations
    waterfall_steps: List[DistributionStep] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def irr(self) -> float:
        """Project IRR as a decimal (0.0 when not computable)."""
        return self.irr_result.rate_or_zero

    @property
    def irr_pct(self) -> float:
        return self.irr * 100

    @property
    def irr_available(self) -> bool:
        return self.irr_result.is_valid

    @property
    def gp_total(self) -> float:
        return self.gp_distribution + self.sponsor_promote


@dataclass
class CashOnCashYear:
    """Per-year cash-on-cash, excluding exit proceeds."""

    year: int
    cash_on_cash: float
    cumulative_cash_on_cash: float
    yield_on_cost: float


@dataclass
class DevelopmentMetrics:
    """Development-level metrics derived from year-1 NOI and cost."""

    yield_on_cost: float
    development_spread_bps: float
    stabilized_value: float
    development_profit: float
    profit_margin: float
    return_on_equity: float  # Year-1 NOI / equity
    peak_equity: float
    break_even_occupancy: float
    debt_yield: float
    cash_on_cash: List[CashOnCashYear] = field(default_factory=list)

    @property
    def average_cash_on_cash(self) -> float:
        if not self.cash_on_cash:
            return 0.0
        return sum(y.cash_on_cash for y in self.cash_on_cash) / len(self.cash_on_cash)


def calculate_payback_year(projection: CashFlowProjection) -> Optional[int]:
    """First year whose cumulative operating cash flow recovers the equity.

    Exit proceeds are excluded so that a sale does not count as payback.
    """
    equity = projection.initial_equity
    cumulative = 0.0
    for record in projection.records[1:]:
        cumulative += record.cash_flow - (record.exit_proceeds or 0.0)
        if cumulative >= equity:
            return record.year
    return None


def calculate_returns(
    config: ConfigurationModel,
    projection: CashFlowProjection,
    settings: Optional[IRRSolverSettings] = None,
) -> ReturnMetrics:
    """Project IRR, equity multiple, payback and the LP/GP waterfall.

    Equity multiple = sum of positive flows after year 0 / initial equity

    Args:
        config: Project configuration (equity structure, tiers, hold).
        projection: CashFlowProjector result.
        settings: IRR solver settings.

    Returns:
        ReturnMetrics. A non-convergent IRR renders as 0.0 through ``irr``.
    """
    cash_flows = projection.cash_flows
    irr_result = solve_irr(cash_flows, settings)
    initial_equity = projection.initial_equity
    total_distributions = sum(max(0.0, cf) for cf in cash_flows[1:])
    equity_multiple = finite_or_zero(safe_divide(total_distributions, initial_equity))

    waterfall: WaterfallResult = run_waterfall(
        total_distributable=total_distributions,
        initial_equity=initial_equity,
        equity=config.equity,
        tiers=config.waterfall_tiers,
        project_irr=irr_result.rate_or_zero,
        hold_years=config.operating.hold_years,
    )

    if not irr_result.is_valid:
        logger.info("Project IRR unavailable: %s (%s)", irr_result.status.value, irr_result.message)

    return ReturnMetrics(
        irr_result=irr_result,
        equity_multiple=equity_multiple,
        total_distributions=total_distributions,
        initial_equity=initial_equity,
        lp_distribution=waterfall.lp_distribution,
        gp_distribution=waterfall.gp_distribution,
        sponsor_promote=waterfall.sponsor_promote,
        lp_irr=finite_or_zero(waterfall.lp_irr),
        gp_irr=finite_or_zero(waterfall.gp_irr),
        payback_year=calculate_payback_year(projection),
        waterfall_steps=waterfall.steps,
        issues=waterfall.issues,
    )


def calculate_cash_on_cash(projection: CashFlowProjection, total_cost: float) -> List[CashOnCashYear]:
    """Per-year cash-on-cash on the initial equity, excluding exit proceeds."""
    equity = projection.initial_equity
    if equity <= 0:
        return []
    years = []
    cumulative = 0.0
    for record in projection.records[1:]:
        operating = record.cash_flow - (record.exit_proceeds or 0.0)
        cumulative += operating
        years.append(CashOnCashYear(
            year=record.year,
            cash_on_cash=operating / equity,
            cumulative_cash_on_cash=cumulative / equity,
            yield_on_cost=safe_divide(record.noi, total_cost),
        ))
    return years


def calculate_development_metrics(
    config: ConfigurationModel,
    cost: DevelopmentCost,
    financing: FinancingResult,
    projection: CashFlowProjection,
) -> DevelopmentMetrics:
    """Yield on cost, spread, profit and break-even occupancy.

    Yield on cost = Year-1 NOI / total development cost
    Spread (bps)  = (Yield on cost - exit cap rate) x 10,000
    Break-even occupancy = (Year-1 opex + debt service) / potential gross revenue

    Args:
        config: Project configuration.
        cost: CostEngine result.
        financing: FinancingEngine result.
        projection: CashFlowProjector result.

    Returns:
        DevelopmentMetrics; every ratio is 0.0 when its denominator is 0.
    """
    year1_noi = projection.year1_noi
    cap_rate = config.operating.cap_rate
    yield_on_cost = safe_divide(year1_noi, cost.total)
    stabilized_value = capitalized_value(year1_noi, cap_rate)
    development_profit = stabilized_value - cost.total if stabilized_value > 0 else 0.0

    break_even = 0.0
    vacancy = config.operating.vacancy
    if len(projection.records) > 1 and projection.property_type != PropertyType.FOR_SALE and 0 < vacancy < 1:
        first = projection.records[1]
        potential = safe_divide(first.gross_revenue, 1 - vacancy)
        break_even = safe_divide(first.operating_expenses + first.debt_service, potential)

    return DevelopmentMetrics(
        yield_on_cost=yield_on_cost,
        development_spread_bps=(yield_on_cost - cap_rate) * 10_000 if year1_noi else 0.0,
        stabilized_value=stabilized_value,
        development_profit=development_profit,
        profit_margin=safe_divide(development_profit, cost.total),
        return_on_equity=safe_divide(year1_noi, financing.equity_required),
        peak_equity=financing.equity_required,
        break_even_occupancy=break_even,
        debt_yield=safe_divide(year1_noi, projection.permanent_loan_amount),
        cash_on_cash=calculate_cash_on_cash(projection, cost.total),
    )


def format_returns_table(metrics: ReturnMetrics, development: Optional[DevelopmentMetrics] = None) -> str:
    """Format returns as a text table.

    Args:
        metrics: Return metrics.
        development: Optional development metrics to append.

    Returns:
        Formatted string table.
    """
    irr_text = f"{metrics.irr:>14.2%}" if metrics.irr_available else f"{'n/a':>14}"
    payback = f"{metrics.payback_year:>15d}" if metrics.payback_year is not None else f"{'-':>15}"
    lines = [
        "=" * 60,
        "RETURNS",
        "=" * 60,
        f"{'Project IRR':<30} {irr_text}",
        f"{'Equity Multiple':<30} {metrics.equity_multiple:>14.2f}x",
        f"{'Initial Equity':<30} ${metrics.initial_equity:>14,.0f}",
        f"{'Total Distributions':<30} ${metrics.total_distributions:>14,.0f}",
        f"{'Payback Year':<30}{payback}",
        "",
        f"{'LP Distributions':<30} ${metrics.lp_distribution:>14,.0f}",
        f"{'GP Distributions':<30} ${metrics.gp_distribution:>14,.0f}",
        f"{'Sponsor Promote':<30} ${metrics.sponsor_promote:>14,.0f}",
        f"{'LP IRR (approx.)':<30} {metrics.lp_irr:>14.2%}",
        f"{'GP IRR (approx.)':<30} {metrics.gp_irr:>14.2%}",
    ]
    if not metrics.irr_available and metrics.irr_result.message:
        lines.append(f"  Note: {metrics.irr_result.message}")

    if development is not None:
        lines.extend([
            "",
            "-" * 60,
            f"{'Yield on Cost':<30} {development.yield_on_cost:>14.2%}",
            f"{'Development Spread':<30} {development.development_spread_bps:>11,.0f} bps",
            f"{'Stabilized Value':<30} ${development.stabilized_value:>14,.0f}",
            f"{'Development Profit':<30} ${development.development_profit:>14,.0f}",
            f"{'Profit Margin':<30} {development.profit_margin:>14.1%}",
            f"{'Break-even Occupancy':<30} {development.break_even_occupancy:>14.1%}",
        ])

    lines.append("=" * 60)
    return "\n".join(lines)
