"""Tests for Monte Carlo simulation engine."""

import math

import numpy as np
import pytest

from proforma.calculations.costs import calculate_development_cost
from proforma.calculations.monte_carlo import (
    BaseInputs,
    MonteCarloConfig,
    box_muller,
    run_monte_carlo,
    yield_based_irr,
)


@pytest.fixture
def base_inputs(office_config):
    return BaseInputs.from_config(office_config, calculate_development_cost(office_config))


class TestBaseInputs:
    def test_office(self, office_config, base_inputs):
        assert base_inputs.annual_rent_psf == 35.0
        assert base_inputs.area_sf == 50_000
        assert base_inputs.cap_rate == 0.065

    def test_apartment_rent_annualized(self, apartment_config):
        base = BaseInputs.from_config(apartment_config, calculate_development_cost(apartment_config))
        assert base.annual_rent_psf == pytest.approx(30.0)
        assert base.area_sf == pytest.approx(56_500)  # Unit mix, not GFA

    def test_mixed_use_effective_rent(self, mixed_use_config):
        base = BaseInputs.from_config(mixed_use_config, calculate_development_cost(mixed_use_config))
        revenue = 50_000 * 35 * 0.90 + 30_000 * 30 * 0.95 + 45_000 * 20 + 20 * 1_200 * 12 * 0.95
        area = 50_000 + 30_000 + 45_000 + 20 * 900

        assert base.area_sf == pytest.approx(area)
        assert base.vacancy == 0.0
        assert base.annual_rent_psf * base.area_sf == pytest.approx(revenue)

    def test_for_sale_rejected(self, for_sale_config):
        with pytest.raises(ValueError, match="for-sale"):
            BaseInputs.from_config(for_sale_config, calculate_development_cost(for_sale_config))


class TestYieldBasedIRR:
    def test_formula(self):
        """YoC 10% against a 6% cap: 10% + 4% x 0.5 = 12%."""
        assert yield_based_irr(40.0, 50_000, 0.0, 20_000_000, 0.06) == pytest.approx(0.12)

    def test_zero_cost(self):
        assert yield_based_irr(40.0, 50_000, 0.0, 0.0, 0.06) == pytest.approx(-0.03)


class TestBoxMuller:
    def test_standard_normal(self):
        rng = np.random.default_rng(42)
        samples = [box_muller(rng) for _ in range(10_000)]

        assert -0.05 < np.mean(samples) < 0.05
        assert 0.95 < np.std(samples) < 1.05


class TestRunMonteCarlo:
    """Test run_monte_carlo function."""

    def test_reproducible_with_seed(self, base_inputs):
        """Same seed produces same results."""
        config = MonteCarloConfig(iterations=100, seed=42)

        result1 = run_monte_carlo(base_inputs, config)
        result2 = run_monte_carlo(base_inputs, config)

        assert result1.distribution == result2.distribution
        assert result1.mean == result2.mean

    def test_different_seeds_differ(self, base_inputs):
        result1 = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=100, seed=1))
        result2 = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=100, seed=2))
        assert result1.distribution != result2.distribution

    def test_parallel_matches_sequential(self, base_inputs):
        """Per-iteration seeding makes thread-pool runs identical to serial ones."""
        sequential = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=60, seed=7))
        parallel = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=60, seed=7, parallel=True, max_workers=4))

        assert parallel.iterations == sequential.iterations
        assert parallel.p50 == sequential.p50

    def test_statistics(self, base_inputs):
        result = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=500, seed=42))
        n = result.n_iterations

        assert n == 500
        assert result.dropped == 0
        assert result.distribution == sorted(result.distribution)
        assert result.min <= result.p10 <= result.p50 <= result.p90 <= result.max
        assert result.p10 == result.distribution[math.floor(n * 0.1)]
        assert result.p90 == result.distribution[math.floor(n * 0.9)]
        assert result.mean == pytest.approx(np.mean(result.distribution))

    def test_variations_within_volatility(self, base_inputs):
        config = MonteCarloConfig(iterations=300, seed=3, cost_volatility=0.05, cap_rate_volatility_bps=50)
        result = run_monte_carlo(base_inputs, config)

        assert all(abs(it.cost_variation) <= 0.05 for it in result.iterations)
        assert all(abs(it.cap_rate_variation) <= 0.005 for it in result.iterations)

    def test_zero_volatility_collapses_to_base(self, base_inputs):
        config = MonteCarloConfig(
            iterations=50, seed=1, rent_volatility=0.0, cost_volatility=0.0, cap_rate_volatility_bps=0.0,
        )
        result = run_monte_carlo(base_inputs, config)
        expected = yield_based_irr(
            base_inputs.annual_rent_psf, base_inputs.area_sf, base_inputs.vacancy,
            base_inputs.total_cost, base_inputs.cap_rate,
        )

        assert result.min == pytest.approx(expected)
        assert result.max == pytest.approx(expected)
        assert result.std == pytest.approx(0.0, abs=1e-12)

    def test_progress_callback(self, base_inputs):
        calls = []
        run_monte_carlo(base_inputs, MonteCarloConfig(iterations=20, seed=1), lambda done, total: calls.append((done, total)))

        assert len(calls) == 20
        assert calls[-1] == (20, 20)

    def test_zero_iterations(self, base_inputs):
        result = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=0, seed=1))
        assert result.n_iterations == 0
        assert result.mean == 0.0
        assert result.probability_above(0.0) == 0.0

    def test_non_finite_iterations_dropped(self):
        """NaN base inputs make every draw non-finite; statistics fall back to zero."""
        base = BaseInputs(annual_rent_psf=float("nan"), area_sf=50_000, vacancy=0.05, total_cost=1e7, cap_rate=0.065)
        result = run_monte_carlo(base, MonteCarloConfig(iterations=25, seed=1))

        assert result.dropped == 25
        assert result.n_iterations == 0
        assert result.p50 == 0.0

    def test_summary(self, base_inputs):
        result = run_monte_carlo(base_inputs, MonteCarloConfig(iterations=50, seed=1))
        summary = result.summary()

        assert "MONTE CARLO" in summary
        assert "P50" in summary
        assert 0.0 <= result.probability_above(0.10) <= 1.0
