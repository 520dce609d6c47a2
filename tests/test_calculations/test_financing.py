"""Tests for sources and uses and the LP/GP equity split."""

from dataclasses import replace

import pytest

from proforma.calculations.costs import calculate_development_cost
from proforma.calculations.financing import calculate_financing
from proforma.calculations.waterfall import run_waterfall
from proforma.models import ConstructionLoanTerms, EquityStructure


class TestCalculateFinancing:
    """Tests for calculate_financing."""

    def test_equity_fills_gap_after_loan(self, office_config):
        """Equity = TDC + interest + fees - construction loan."""
        cost = calculate_development_cost(office_config)
        financing = calculate_financing(office_config, cost)
        loan = financing.construction_loan

        assert financing.total_project_cost == pytest.approx(cost.total + loan.interest + loan.fees)
        assert financing.equity_required == pytest.approx(financing.total_project_cost - loan.loan_amount)
        assert financing.total_sources == pytest.approx(financing.total_project_cost)
        assert financing.issues == []

    def test_coinvest_carved_from_gp(self, office_config):
        """GP co-invest comes out of the GP's notional share; the LP share is untouched."""
        cost = calculate_development_cost(office_config)
        financing = calculate_financing(office_config, cost)
        equity = financing.equity_required

        assert financing.gp_coinvest == pytest.approx(equity * 0.10 * 0.10)
        assert financing.gp_equity == pytest.approx(equity * 0.10 - equity * 0.10 * 0.10)
        assert financing.lp_equity == pytest.approx(equity * 0.90)
        assert financing.total_gp_commitment == pytest.approx(equity * 0.10)
        assert financing.lp_equity + financing.total_gp_commitment == pytest.approx(equity)

    def test_coinvest_matches_waterfall_capital(self, office_config):
        """Financing and the waterfall agree on the co-invest that earns the preferred return."""
        cost = calculate_development_cost(office_config)
        financing = calculate_financing(office_config, cost)
        equity = office_config.equity
        accrued = (1 + equity.preferred_return) ** 10 - 1

        result = run_waterfall(
            1e12, financing.equity_required, equity, office_config.waterfall_tiers, 0.10, 10
        )
        lp_pref, gp_pref = [step for step in result.steps if step.stage == "preferred"]

        assert lp_pref.lp_amount == pytest.approx(financing.lp_equity * accrued)
        assert gp_pref.gp_amount == pytest.approx(financing.gp_coinvest * accrued)

    def test_no_construction_loan(self, office_config):
        config = replace(office_config, construction_loan=ConstructionLoanTerms(enabled=False))
        cost = calculate_development_cost(config)
        financing = calculate_financing(config, cost)

        assert financing.construction_loan_amount == 0
        assert financing.equity_required == pytest.approx(cost.total)

    def test_over_leverage_clamps_equity(self, office_config):
        """A loan larger than project cost clamps equity to zero with a warning."""
        config = replace(office_config, construction_loan=ConstructionLoanTerms(ltc=1.5))
        cost = calculate_development_cost(config)
        financing = calculate_financing(config, cost)

        assert financing.equity_required == 0
        assert financing.lp_equity == 0
        assert any(issue.field == "equity_required" for issue in financing.issues)
        assert not any(issue.is_error for issue in financing.issues)

    def test_negative_gp_equity_clamped(self, office_config):
        """A co-invest above 100% of the GP share would go negative; it is clamped and reported."""
        config = replace(office_config, equity=EquityStructure(lp_share=0.5, gp_share=0.5, gp_coinvest=1.5))
        cost = calculate_development_cost(config)
        financing = calculate_financing(config, cost)

        assert financing.gp_equity == 0
        assert financing.lp_equity == pytest.approx(financing.equity_required * 0.5)
        assert [issue.field for issue in financing.issues] == ["gp_equity"]
