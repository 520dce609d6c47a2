"""Tests for probability-weighted scenario analysis."""

import logging

import pytest

from proforma.calculations.costs import calculate_development_cost
from proforma.calculations.monte_carlo import BaseInputs, yield_based_irr
from proforma.scenarios import (
    DEFAULT_SCENARIOS,
    Scenario,
    adjust_config,
    run_scenario_analysis,
    run_scenario_deals,
)


class TestScenarioAnalysis:
    """Tests for run_scenario_analysis."""

    def test_base_case_matches_yield_irr(self, office_config):
        analysis = run_scenario_analysis(office_config)
        base = BaseInputs.from_config(office_config, calculate_development_cost(office_config))
        expected = yield_based_irr(base.annual_rent_psf, base.area_sf, base.vacancy, base.total_cost, base.cap_rate)

        assert analysis.by_name["Base Case"].irr == pytest.approx(expected)

    def test_ordering(self, office_config):
        results = run_scenario_analysis(office_config).by_name
        assert results["Downside"].irr < results["Base Case"].irr < results["Upside"].irr

    def test_weighted_irr(self, office_config):
        analysis = run_scenario_analysis(office_config)
        expected = sum(r.irr * r.scenario.probability for r in analysis.results)

        assert analysis.weighted_irr == pytest.approx(expected)
        assert analysis.total_probability == pytest.approx(1.0)

    def test_equity_multiple_rule_of_thumb(self, office_config):
        for result in run_scenario_analysis(office_config).results:
            assert result.equity_multiple == pytest.approx(result.irr * 10)

    def test_probabilities_not_summing_warns(self, office_config, caplog):
        scenarios = [Scenario("Only", 0.6)]
        with caplog.at_level(logging.WARNING, logger="proforma.scenarios"):
            analysis = run_scenario_analysis(office_config, scenarios=scenarios)

        assert analysis.total_probability == pytest.approx(0.6)
        assert "not 100%" in caplog.text

    def test_summary(self, office_config):
        assert "Probability-weighted IRR" in run_scenario_analysis(office_config).summary()


class TestScenarioDeals:
    """Full-engine runs on adjusted configurations."""

    def test_adjust_config(self, office_config):
        downside = adjust_config(office_config, DEFAULT_SCENARIOS[0])

        assert downside.operating.rent_psf == pytest.approx(35.0 * 0.90)
        assert downside.operating.cap_rate == pytest.approx(0.07)
        assert downside.hard_costs.building_psf == pytest.approx(250.0 * 1.10)
        assert office_config.operating.rent_psf == 35.0

    def test_run_scenario_deals(self, office_config):
        deals = run_scenario_deals(office_config)

        assert list(deals) == ["Downside", "Base Case", "Upside"]
        assert deals["Downside"].irr < deals["Base Case"].irr < deals["Upside"].irr

    def test_for_sale_has_no_yield_scenarios(self, for_sale_config):
        with pytest.raises(ValueError):
            run_scenario_analysis(for_sale_config)
