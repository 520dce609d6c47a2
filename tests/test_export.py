"""Tests for the flat tabular export views."""

import pandas as pd
import pytest

from proforma import calculate_deal, run_scenario_analysis
from proforma.calculations.monte_carlo import BaseInputs, MonteCarloConfig, run_monte_carlo
from proforma.calculations.sensitivity import run_sensitivity
from proforma.export import (
    CASH_FLOW_COLUMNS,
    cash_flow_dataframe,
    cash_flow_records,
    deal_tables,
    issues_dataframe,
    monte_carlo_dataframe,
    monte_carlo_record,
    returns_record,
    scenario_dataframe,
    sensitivity_dataframe,
    waterfall_dataframe,
)
from proforma.models import ConfigurationModel, SiteInputs


class TestCashFlowExport:
    def test_records_in_column_order(self, office_config):
        deal = calculate_deal(office_config)
        rows = cash_flow_records(deal.records)

        assert len(rows) == 11
        assert list(rows[0]) == CASH_FLOW_COLUMNS
        assert rows[0]["cash_flow"] == -deal.financing.equity_required
        assert rows[1]["sale_price"] is None

    def test_dataframe_indexed_by_year(self, office_config):
        df = cash_flow_dataframe(calculate_deal(office_config).records)

        assert isinstance(df, pd.DataFrame)
        assert df.index.name == "year"
        assert list(df.index) == list(range(11))
        assert "year" not in df.columns
        assert df.loc[10, "exit_proceeds"] > 0


class TestReturnsExport:
    def test_returns_record(self, office_config):
        deal = calculate_deal(office_config)
        record = returns_record(deal.returns)

        assert record["irr"] == pytest.approx(deal.irr)
        assert record["irr_status"] == "converged"
        assert record["equity_multiple"] == pytest.approx(deal.returns.equity_multiple)

    def test_unavailable_irr_is_none(self):
        deal = calculate_deal(ConfigurationModel(site=SiteInputs(building_gfa=0)))
        record = returns_record(deal.returns)

        assert record["irr"] is None
        assert record["irr_status"] == "no_sign_change"

    def test_no_internal_objects(self, office_config):
        record = returns_record(calculate_deal(office_config).returns)
        assert all(value is None or isinstance(value, (int, float, str)) for value in record.values())


class TestDealTables:
    def test_lease_tables(self, office_config):
        tables = deal_tables(calculate_deal(office_config))
        assert set(tables) == {"cash_flows", "returns", "development", "cash_on_cash", "waterfall", "issues"}
        assert len(tables["cash_on_cash"]) == 10

    def test_for_sale_includes_monthly(self, for_sale_config):
        tables = deal_tables(calculate_deal(for_sale_config))
        monthly = tables["monthly_sales"]

        assert len(monthly) == 60
        assert {"units_sold", "net_revenue", "cash_flow", "loan_balance"} <= set(monthly.columns)

    def test_waterfall_and_issues(self, office_config):
        deal = calculate_deal(office_config)
        waterfall = waterfall_dataframe(deal.returns.waterfall_steps)

        assert list(waterfall.columns) == ["stage", "label", "lp_amount", "gp_amount", "remaining"]
        assert list(issues_dataframe(deal.issues).columns) == ["field", "message", "severity"]


class TestRiskExport:
    def test_sensitivity(self):
        df = sensitivity_dataframe(run_sensitivity(0.10, "rent"))
        assert list(df.columns) == ["change", "irr", "delta"]
        assert len(df) == 7

    def test_monte_carlo(self, office_config):
        deal = calculate_deal(office_config)
        result = run_monte_carlo(BaseInputs.from_config(office_config, deal.cost), MonteCarloConfig(iterations=40, seed=5))

        assert monte_carlo_record(result)["iterations"] == 40
        assert len(monte_carlo_dataframe(result)) == 40

    def test_scenarios(self, office_config):
        df = scenario_dataframe(run_scenario_analysis(office_config))
        assert list(df["scenario"]) == ["Downside", "Base Case", "Upside"]
        assert df["weighted_irr"].sum() == pytest.approx(run_scenario_analysis(office_config).weighted_irr)
