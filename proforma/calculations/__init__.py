"""Calculation modules for the pro-forma engine."""

from .numeric import safe_divide, capitalized_value
from .validation import (
    ValidationIssue,
    validate_configuration,
    validate_waterfall_tiers,
    validate_results,
)
from .costs import calculate_development_cost, calculate_soft_costs, count_parking_spaces, DevelopmentCost
from .debt import (
    size_construction_loan,
    size_permanent_loan,
    calculate_loan_balance,
    ConstructionLoan,
    PermanentLoan,
)
from .financing import calculate_financing, FinancingResult
from .cashflow import CashFlowRecord, CashFlowProjection, CashFlowProjector
from .lease import LeaseProjector, OfficeProjector, RetailProjector, ApartmentProjector
from .for_sale import ForSaleProjector, MonthlySaleFlow, build_monthly_ledger
from .mixed_use import MixedUseProjector, ComponentCashFlow, component_cash_flows
from .ground_lease import GroundLeasePayment, calculate_ground_lease_payment
from .incentives import TIFResult, calculate_tif, state_funding_disbursement
from .projection import PROJECTORS, get_projector, project_cash_flows

# IRR and returns
from .irr import IRRStatus, IRRResult, IRRSolverSettings, solve_irr, npv
from .waterfall import (
    DistributionStep,
    WaterfallState,
    WaterfallResult,
    run_waterfall,
    find_tier,
)
from .metrics import (
    ReturnMetrics,
    DevelopmentMetrics,
    CashOnCashYear,
    calculate_returns,
    calculate_development_metrics,
    calculate_cash_on_cash,
    format_returns_table,
)

# Unified entry point
from .deal import DealAnalysis, calculate_deal
from .goal_seek import GoalSeekResult, goal_seek

# Risk analysis
from .sensitivity import (
    ChangeUnit,
    SensitivityVariable,
    SensitivityRow,
    DEFAULT_SENSITIVITY_VARIABLES,
    run_sensitivity,
    run_all_sensitivities,
)
from .monte_carlo import (
    BaseInputs,
    MonteCarloConfig,
    IterationResult,
    MonteCarloResult,
    run_monte_carlo,
)

__all__ = [
    "safe_divide",
    "capitalized_value",
    "ValidationIssue",
    "validate_configuration",
    "validate_waterfall_tiers",
    "validate_results",
    "calculate_development_cost",
    "calculate_soft_costs",
    "count_parking_spaces",
    "DevelopmentCost",
    "size_construction_loan",
    "size_permanent_loan",
    "calculate_loan_balance",
    "ConstructionLoan",
    "PermanentLoan",
    "calculate_financing",
    "FinancingResult",
    "CashFlowRecord",
    "CashFlowProjection",
    "CashFlowProjector",
    "LeaseProjector",
    "OfficeProjector",
    "RetailProjector",
    "ApartmentProjector",
    "ForSaleProjector",
    "MonthlySaleFlow",
    "build_monthly_ledger",
    "MixedUseProjector",
    "ComponentCashFlow",
    "component_cash_flows",
    "GroundLeasePayment",
    "calculate_ground_lease_payment",
    "TIFResult",
    "calculate_tif",
    "state_funding_disbursement",
    "PROJECTORS",
    "get_projector",
    "project_cash_flows",
    # IRR and returns
    "IRRStatus",
    "IRRResult",
    "IRRSolverSettings",
    "solve_irr",
    "npv",
    "DistributionStep",
    "WaterfallState",
    "WaterfallResult",
    "run_waterfall",
    "find_tier",
    "ReturnMetrics",
    "DevelopmentMetrics",
    "CashOnCashYear",
    "calculate_returns",
    "calculate_development_metrics",
    "calculate_cash_on_cash",
    "format_returns_table",
    "DealAnalysis",
    "calculate_deal",
    "GoalSeekResult",
    "goal_seek",
    # Risk analysis
    "ChangeUnit",
    "SensitivityVariable",
    "SensitivityRow",
    "DEFAULT_SENSITIVITY_VARIABLES",
    "run_sensitivity",
    "run_all_sensitivities",
    "BaseInputs",
    "MonteCarloConfig",
    "IterationResult",
    "MonteCarloResult",
    "run_monte_carlo",
]
