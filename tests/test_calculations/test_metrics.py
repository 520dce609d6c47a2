"""Tests for return and development metrics."""

from dataclasses import replace

import pytest

from proforma.calculations.cashflow import CashFlowProjection, append_record, initial_record
from proforma.calculations.costs import calculate_development_cost
from proforma.calculations.financing import calculate_financing
from proforma.calculations.metrics import (
    calculate_cash_on_cash,
    calculate_development_metrics,
    calculate_payback_year,
    calculate_returns,
    format_returns_table,
)
from proforma.calculations.projection import project_cash_flows
from proforma.models import ConfigurationModel, PropertyType


def make_projection(equity, flows, exit_proceeds=0.0, noi=50.0):
    """Synthetic projection; the last flow carries ``exit_proceeds``."""
    records = [initial_record(equity)]
    for year, cash_flow in enumerate(flows, start=1):
        extras = {"exit_proceeds": exit_proceeds} if year == len(flows) and exit_proceeds else {}
        append_record(records, year=year, noi=noi, debt_service=0.0, cash_flow=cash_flow, **extras)
    return CashFlowProjection(
        property_type=PropertyType.OFFICE,
        records=records,
        year1_noi=noi,
        stabilized_value=0.0,
    )


def run(config):
    cost = calculate_development_cost(config)
    financing = calculate_financing(config, cost)
    projection = project_cash_flows(config, cost, financing)
    return cost, financing, projection


class TestPayback:
    """Tests for payback year."""

    def test_recovered_from_operations(self):
        projection = make_projection(100.0, [50.0, 50.0, 50.0])
        assert calculate_payback_year(projection) == 2

    def test_exit_does_not_count(self):
        """Equity recovered only by the sale has no payback year."""
        projection = make_projection(100.0, [30.0, 30.0, 130.0], exit_proceeds=100.0)
        assert calculate_payback_year(projection) is None


class TestCashOnCash:
    def test_excludes_exit(self):
        projection = make_projection(100.0, [10.0, 10.0, 110.0], exit_proceeds=100.0)
        years = calculate_cash_on_cash(projection, total_cost=1_000.0)

        assert [y.cash_on_cash for y in years] == pytest.approx([0.10, 0.10, 0.10])
        assert years[-1].cumulative_cash_on_cash == pytest.approx(0.30)
        assert years[0].yield_on_cost == pytest.approx(0.05)

    def test_zero_equity(self):
        assert calculate_cash_on_cash(make_projection(0.0, [10.0]), 1_000.0) == []


class TestCalculateReturns:
    """Tests for project-level returns."""

    def test_equity_multiple(self, office_config):
        _, _, projection = run(office_config)
        returns = calculate_returns(office_config, projection)
        positive = sum(max(0.0, cf) for cf in projection.cash_flows[1:])

        assert returns.total_distributions == pytest.approx(positive)
        assert returns.equity_multiple == pytest.approx(positive / projection.initial_equity)
        assert returns.irr_pct == pytest.approx(returns.irr * 100)

    def test_waterfall_conserves_distributions(self, office_config):
        _, _, projection = run(office_config)
        returns = calculate_returns(office_config, projection)
        assert returns.lp_distribution + returns.gp_distribution == pytest.approx(returns.total_distributions)

    def test_unavailable_irr_renders_zero(self):
        """A zero-area building has no income; IRR is unavailable and reads 0."""
        config = ConfigurationModel(site=replace(ConfigurationModel().site, building_gfa=0))
        _, _, projection = run(config)
        returns = calculate_returns(config, projection)

        assert not returns.irr_available
        assert returns.irr == 0.0
        assert "n/a" in format_returns_table(returns)


class TestDevelopmentMetrics:
    """Tests for yield on cost, spread and break-even."""

    def test_yield_and_spread(self, office_config):
        cost, financing, projection = run(office_config)
        metrics = calculate_development_metrics(office_config, cost, financing, projection)
        yoc = projection.year1_noi / cost.total

        assert metrics.yield_on_cost == pytest.approx(yoc)
        assert metrics.development_spread_bps == pytest.approx((yoc - 0.065) * 10_000)
        assert metrics.stabilized_value == pytest.approx(projection.year1_noi / 0.065)
        assert metrics.development_profit == pytest.approx(metrics.stabilized_value - cost.total)
        assert metrics.peak_equity == pytest.approx(financing.equity_required)
        assert metrics.debt_yield == pytest.approx(projection.year1_noi / projection.permanent_loan_amount)

    def test_break_even_occupancy(self, office_config):
        cost, financing, projection = run(office_config)
        metrics = calculate_development_metrics(office_config, cost, financing, projection)
        first = projection.records[1]
        potential = first.gross_revenue / 0.95

        assert metrics.break_even_occupancy == pytest.approx(
            (first.operating_expenses + first.debt_service) / potential
        )

    def test_for_sale_has_no_stabilized_metrics(self, for_sale_config):
        cost, financing, projection = run(for_sale_config)
        metrics = calculate_development_metrics(for_sale_config, cost, financing, projection)

        assert metrics.yield_on_cost == 0
        assert metrics.development_spread_bps == 0
        assert metrics.break_even_occupancy == 0

    def test_zero_cap_rate(self, office_config):
        config = replace(office_config, operating=replace(office_config.operating, cap_rate=0.0))
        cost, financing, projection = run(config)
        metrics = calculate_development_metrics(config, cost, financing, projection)

        assert metrics.stabilized_value == 0
        assert metrics.development_profit == 0
        assert metrics.debt_yield == 0


class TestFormatReturnsTable:
    def test_contains_headline_metrics(self, office_config):
        cost, financing, projection = run(office_config)
        returns = calculate_returns(office_config, projection)
        development = calculate_development_metrics(office_config, cost, financing, projection)
        table = format_returns_table(returns, development)

        assert "Project IRR" in table
        assert "Equity Multiple" in table
        assert "Yield on Cost" in table
