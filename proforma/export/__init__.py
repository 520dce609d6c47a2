"""Export boundary: flat records and DataFrames for exporters."""

from .tables import (
    CASH_FLOW_COLUMNS,
    cash_flow_records,
    cash_flow_dataframe,
    monthly_sales_dataframe,
    returns_record,
    development_record,
    cash_on_cash_dataframe,
    sensitivity_dataframe,
    waterfall_dataframe,
    monte_carlo_record,
    monte_carlo_dataframe,
    scenario_dataframe,
    issues_dataframe,
    deal_tables,
)

__all__ = [
    "CASH_FLOW_COLUMNS",
    "cash_flow_records",
    "cash_flow_dataframe",
    "monthly_sales_dataframe",
    "returns_record",
    "development_record",
    "cash_on_cash_dataframe",
    "sensitivity_dataframe",
    "waterfall_dataframe",
    "monte_carlo_record",
    "monte_carlo_dataframe",
    "scenario_dataframe",
    "issues_dataframe",
    "deal_tables",
]
