"""Tests for the IRR solver and its failure classification."""

import numpy_financial as npf
import pytest

from proforma.calculations.irr import IRRSolverSettings, IRRStatus, npv, solve_irr


class TestNPV:
    def test_first_flow_undiscounted(self):
        assert npv(0.10, [-100.0]) == -100.0

    def test_matches_numpy_financial(self):
        flows = [-1_000, 200, 300, 400, 500]
        assert npv(0.08, flows) == pytest.approx(npf.npv(0.08, flows))


class TestSolveIRR:
    """Tests for converged solves."""

    def test_single_period(self):
        """[-100, 110] has an IRR of exactly 10%."""
        result = solve_irr([-100, 110])

        assert result.status == IRRStatus.CONVERGED
        assert result.is_valid
        assert result.rate == pytest.approx(0.10, abs=1e-4)

    def test_bond_like_series(self):
        flows = [-1_000, 100, 100, 100, 1_100]
        assert solve_irr(flows).rate == pytest.approx(0.10, abs=1e-4)

    def test_matches_numpy_financial(self):
        flows = [-9_663_188, 257_775, 260_000, 265_000, 270_000, 275_000, 390_000, 395_000, 400_000, 405_000, 10_900_000]
        result = solve_irr(flows)
        assert result.rate == pytest.approx(npf.irr(flows), abs=1e-4)

    def test_negative_irr(self):
        result = solve_irr([-100, 50, 40])
        assert result.status == IRRStatus.CONVERGED
        assert result.rate < 0
        assert npv(result.rate, [-100, 50, 40]) == pytest.approx(0, abs=1e-3)

    def test_bracketed_fallback(self):
        """With no Newton guesses Brent's method on the rate bracket still converges."""
        result = solve_irr([-100, 110], IRRSolverSettings(guesses=()))
        assert result.status == IRRStatus.CONVERGED
        assert result.rate == pytest.approx(0.10, abs=1e-3)

    def test_bracketed_fallback_matches_numpy_financial(self):
        flows = [-1_000, 100, 100, 100, 1_100]
        result = solve_irr(flows, IRRSolverSettings(guesses=(), tolerance=1e-8))

        assert result.status == IRRStatus.CONVERGED
        assert result.rate == pytest.approx(npf.irr(flows), abs=1e-6)
        assert result.iterations > 0


class TestSolveIRRFailures:
    """Failures come back as result variants, never exceptions."""

    def test_empty_series(self):
        result = solve_irr([])
        assert result.status == IRRStatus.INVALID_INITIAL
        assert not result.is_valid
        assert result.rate_or_zero == 0.0

    def test_positive_initial_flow(self):
        assert solve_irr([100, -50, -60]).status == IRRStatus.INVALID_INITIAL

    def test_non_finite_flows(self):
        assert solve_irr([-100, float("nan"), 120]).status == IRRStatus.INVALID_INITIAL

    def test_no_positive_flows(self):
        """A total loss has no sign change."""
        result = solve_irr([-100, 0, -10])
        assert result.status == IRRStatus.NO_SIGN_CHANGE
        assert result.best_rate == -1.0
        assert result.rate is None

    def test_multiple_roots(self):
        """-100, +230, -132 is solved by both 10% and 20%."""
        result = solve_irr([-100, 230, -132])
        assert result.status == IRRStatus.MULTIPLE_ROOTS
        assert result.rate is None
        assert result.best_rate == pytest.approx(0.10, abs=1e-3)

    def test_no_root_is_non_convergent(self):
        """NPV is negative at every rate, so there is nothing to find."""
        result = solve_irr([-100, 300, -300], IRRSolverSettings(guesses=()))
        assert result.status == IRRStatus.NON_CONVERGENT
        assert result.rate_or_zero == 0.0
        assert "loses money" in result.message

    def test_root_finder_exhausted_is_non_convergent(self):
        """Brent's method stopping at its iteration cap is reported, not raised."""
        settings = IRRSolverSettings(guesses=(), max_bracket_iterations=1)
        result = solve_irr([-1_000, 100, 100, 100, 1_100], settings)

        assert result.status == IRRStatus.NON_CONVERGENT
        assert result.rate is None
        assert "did not converge" in result.message
