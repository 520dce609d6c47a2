"""End-to-end tests for the full calculation pipeline."""

import math
from dataclasses import replace

import pytest

from proforma import calculate_deal
from proforma.models import ConfigurationModel, OperatingAssumptions, PropertyType, Severity, SiteInputs

ALL_ARCHETYPES = [
    "office_config",
    "retail_config",
    "apartment_config",
    "for_sale_config",
    "mixed_use_config",
    "mixed_use_incentives_config",
]


class TestOfficeReferenceCase:
    """Office: $5M land, 50,000 SF at $250/SF, $35 rent, 6.5% cap, 10-year hold."""

    def test_finite_positive_irr(self, office_config):
        deal = calculate_deal(office_config)

        assert deal.returns.irr_available
        assert math.isfinite(deal.irr)
        assert deal.irr > 0

    def test_equity_multiple_above_one(self, office_config):
        deal = calculate_deal(office_config)
        assert deal.returns.equity_multiple > 1.0

    def test_year_zero_is_exactly_negative_equity(self, office_config):
        deal = calculate_deal(office_config)
        assert deal.records[0].cash_flow == -deal.financing.equity_required

    def test_only_error_is_negative_spread(self, office_config):
        """Year-1 yield on cost (about 6.43%) sits just under the 6.5% cap rate."""
        deal = calculate_deal(office_config)

        assert deal.development.development_spread_bps < 0
        assert [issue.field for issue in deal.errors] == ["development_spread"]

    def test_summary(self, office_config):
        summary = calculate_deal(office_config).summary()
        assert "RETURNS" in summary
        assert "Project IRR" in summary


class TestEveryArchetype:
    """Invariants that hold for every property type."""

    @pytest.mark.parametrize("fixture", ALL_ARCHETYPES)
    def test_records_invariants(self, fixture, request):
        config = request.getfixturevalue(fixture)
        deal = calculate_deal(config)
        records = deal.records

        assert records[0].cash_flow == -deal.financing.equity_required
        for previous, current in zip(records, records[1:]):
            assert current.cumulative_cash_flow == pytest.approx(
                previous.cumulative_cash_flow + current.cash_flow
            )
        assert all(math.isfinite(r.cash_flow) for r in records)

    @pytest.mark.parametrize("fixture", ALL_ARCHETYPES)
    def test_waterfall_conservation(self, fixture, request):
        deal = calculate_deal(request.getfixturevalue(fixture))
        returns = deal.returns
        assert returns.lp_distribution + returns.gp_distribution == pytest.approx(returns.total_distributions)

    @pytest.mark.parametrize("fixture", ALL_ARCHETYPES)
    def test_idempotent(self, fixture, request):
        """Two runs on the same configuration give identical results."""
        config = request.getfixturevalue(fixture)
        first = calculate_deal(config)
        second = calculate_deal(config)

        assert first.cost == second.cost
        assert first.financing == second.financing
        assert first.records == second.records
        assert first.returns == second.returns


class TestDegenerateDeals:
    """Degenerate inputs never raise and never produce NaN."""

    def test_zero_gfa(self):
        deal = calculate_deal(ConfigurationModel(site=SiteInputs(building_gfa=0)))

        assert deal.irr == 0.0
        assert deal.projection.year1_noi == 0
        assert deal.development.stabilized_value == 0
        assert math.isfinite(deal.returns.equity_multiple)

    def test_zero_units(self, apartment_config):
        deal = calculate_deal(replace(apartment_config, unit_mix=()))

        assert deal.projection.year1_noi == 0
        assert deal.development.stabilized_value == 0
        assert deal.records[-1].sale_price == 0
        assert all(math.isfinite(r.cash_flow) for r in deal.records)

    def test_zero_cap_rate(self):
        deal = calculate_deal(ConfigurationModel(operating=OperatingAssumptions(cap_rate=0.0)))

        assert deal.development.stabilized_value == 0
        assert deal.records[-1].sale_price == 0
        assert any(i.field == "operating.cap_rate" and i.severity == Severity.ERROR for i in deal.issues)

    def test_unknown_property_type(self, office_config):
        config = replace(office_config, property_type="hotel")
        with pytest.raises(ValueError):
            calculate_deal(config)


class TestIssueCollection:
    def test_configuration_issues_do_not_abort(self):
        """A bad equity split is reported and the calculation still completes."""
        config = ConfigurationModel.for_property_type(PropertyType.OFFICE)
        config = replace(config, equity=replace(config.equity, gp_share=0.5))
        deal = calculate_deal(config)

        assert any(i.field == "equity" for i in deal.errors)
        assert len(deal.records) == 11
