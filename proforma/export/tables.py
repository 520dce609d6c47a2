"""Flat tabular views of engine results for CSV/PDF exporters.

Every function returns plain ordered records (lists of dicts with scalar
values) or a pandas DataFrame built from them. Engine-internal objects such
as solver state or loan objects do not appear in the output.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import pandas as pd

from ..calculations.cashflow import CashFlowRecord
from ..calculations.deal import DealAnalysis
from ..calculations.for_sale import MonthlySaleFlow
from ..calculations.metrics import DevelopmentMetrics, ReturnMetrics
from ..calculations.monte_carlo import MonteCarloResult
from ..calculations.sensitivity import SensitivityRow
from ..calculations.validation import ValidationIssue
from ..calculations.waterfall import DistributionStep
from ..scenarios import ScenarioAnalysis

CASH_FLOW_COLUMNS = [
    "year",
    "gross_revenue",
    "operating_expenses",
    "noi",
    "debt_service",
    "ground_lease_payment",
    "tif_revenue",
    "sales_revenue",
    "external_funding",
    "refinance_proceeds",
    "sale_price",
    "exit_costs",
    "loan_payoff",
    "exit_proceeds",
    "cash_flow",
    "cumulative_cash_flow",
    "rent",
]


def cash_flow_records(records: Sequence[CashFlowRecord]) -> List[Dict[str, Any]]:
    """One dict per year in a fixed column order; inapplicable fields are None."""
    rows = []
    for record in records:
        values = asdict(record)
        rows.append({column: values[column] for column in CASH_FLOW_COLUMNS})
    return rows


def cash_flow_dataframe(records: Sequence[CashFlowRecord]) -> pd.DataFrame:
    """Annual cash flows indexed by year."""
    return pd.DataFrame(cash_flow_records(records), columns=CASH_FLOW_COLUMNS).set_index("year")


def monthly_sales_dataframe(ledger: Sequence[MonthlySaleFlow]) -> pd.DataFrame:
    """For-sale monthly ledger with derived revenue and cash-flow columns."""
    rows = []
    for flow in ledger:
        row = asdict(flow)
        row.update(
            gross_revenue=flow.gross_revenue,
            net_revenue=flow.net_revenue,
            debt_service=flow.debt_service,
            cash_flow=flow.cash_flow,
        )
        rows.append(row)
    return pd.DataFrame(rows)


def returns_record(metrics: ReturnMetrics) -> Dict[str, Any]:
    """Return metrics as a flat record. IRR is None when not computable."""
    return {
        "irr": metrics.irr if metrics.irr_available else None,
        "irr_pct": metrics.irr_pct if metrics.irr_available else None,
        "irr_status": metrics.irr_result.status.value,
        "irr_message": metrics.irr_result.message,
        "equity_multiple": metrics.equity_multiple,
        "initial_equity": metrics.initial_equity,
        "total_distributions": metrics.total_distributions,
        "lp_distribution": metrics.lp_distribution,
        "gp_distribution": metrics.gp_distribution,
        "sponsor_promote": metrics.sponsor_promote,
        "lp_irr": metrics.lp_irr,
        "gp_irr": metrics.gp_irr,
        "payback_year": metrics.payback_year,
    }


def development_record(metrics: DevelopmentMetrics) -> Dict[str, Any]:
    values = asdict(metrics)
    values.pop("cash_on_cash")
    values["average_cash_on_cash"] = metrics.average_cash_on_cash
    return values


def cash_on_cash_dataframe(metrics: DevelopmentMetrics) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(year) for year in metrics.cash_on_cash],
        columns=["year", "cash_on_cash", "cumulative_cash_on_cash", "yield_on_cost"],
    )


def sensitivity_dataframe(rows: Sequence[SensitivityRow]) -> pd.DataFrame:
    return pd.DataFrame([asdict(row) for row in rows], columns=["change", "irr", "delta"])


def waterfall_dataframe(steps: Sequence[DistributionStep]) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(step) for step in steps],
        columns=["stage", "label", "lp_amount", "gp_amount", "remaining"],
    )


def monte_carlo_record(result: MonteCarloResult) -> Dict[str, Any]:
    return {
        "iterations": result.n_iterations,
        "dropped": result.dropped,
        "mean": result.mean,
        "std": result.std,
        "p10": result.p10,
        "p50": result.p50,
        "p90": result.p90,
        "min": result.min,
        "max": result.max,
    }


def monte_carlo_dataframe(result: MonteCarloResult) -> pd.DataFrame:
    """Per-iteration draws and IRR."""
    return pd.DataFrame(
        [asdict(iteration) for iteration in result.iterations],
        columns=["iteration", "rent_variation", "cost_variation", "cap_rate_variation", "irr"],
    )


def scenario_dataframe(analysis: ScenarioAnalysis) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "scenario": r.scenario.name,
                "probability": r.scenario.probability,
                "irr": r.irr,
                "equity_multiple": r.equity_multiple,
                "weighted_irr": r.weighted_irr,
            }
            for r in analysis.results
        ],
        columns=["scenario", "probability", "irr", "equity_multiple", "weighted_irr"],
    )


def issues_dataframe(issues: Sequence[ValidationIssue]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"field": i.field, "message": i.message, "severity": i.severity.value} for i in issues],
        columns=["field", "message", "severity"],
    )


def deal_tables(deal: DealAnalysis) -> Dict[str, pd.DataFrame]:
    """All tables for one deal, keyed by sheet name."""
    tables = {
        "cash_flows": cash_flow_dataframe(deal.records),
        "returns": pd.DataFrame([returns_record(deal.returns)]),
        "development": pd.DataFrame([development_record(deal.development)]),
        "cash_on_cash": cash_on_cash_dataframe(deal.development),
        "waterfall": waterfall_dataframe(deal.returns.waterfall_steps),
        "issues": issues_dataframe(deal.issues),
    }
    if "monthly" in deal.projection.details:
        tables["monthly_sales"] = monthly_sales_dataframe(deal.projection.details["monthly"])
    return tables
