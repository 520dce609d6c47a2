"""Tests for goal seek on project IRR."""

from dataclasses import replace
from types import SimpleNamespace

import pytest

from proforma import calculate_deal, goal_seek
from proforma.models import replace_field


def linear_evaluator(config, field_path, value):
    """Stand-in for a deal run whose IRR is value / 100."""
    returns = SimpleNamespace(irr_available=True)
    return SimpleNamespace(returns=returns, irr=value / 100)


class TestGoalSeek:
    """Tests for goal_seek."""

    def test_linear_target(self, office_config):
        result = goal_seek(office_config, "operating.rent_psf", 0.12, 0.0, 50.0, evaluator=linear_evaluator)

        assert result.converged
        assert result.value == pytest.approx(12.0, abs=0.01)
        assert result.achieved_irr == pytest.approx(0.12, abs=1e-4)
        assert result.trials[:2] == [(0.0, 0.0), (50.0, 0.5)]

    def test_rent_for_target_irr(self, office_config):
        """Solving for the IRR produced at $40 rent recovers a matching rent."""
        target = calculate_deal(replace_field(office_config, "operating.rent_psf", 40.0)).irr
        result = goal_seek(office_config, "operating.rent_psf", target, 30.0, 50.0)

        assert result.converged
        assert result.achieved_irr == pytest.approx(target, abs=1e-4)
        assert 30.0 < result.value < 50.0

    def test_base_config_unchanged(self, office_config):
        before = replace(office_config)
        goal_seek(office_config, "operating.rent_psf", 0.12, 0.0, 50.0, evaluator=linear_evaluator)
        assert office_config == before

    def test_target_not_bracketed(self, office_config):
        result = goal_seek(office_config, "operating.rent_psf", 0.90, 0.0, 50.0, evaluator=linear_evaluator)

        assert not result.converged
        assert "not bracketed" in result.message
        assert result.value == 50.0

    def test_unavailable_irr(self, office_config):
        def unavailable(config, field_path, value):
            return SimpleNamespace(returns=SimpleNamespace(irr_available=False), irr=0.0)

        result = goal_seek(office_config, "operating.rent_psf", 0.12, 0.0, 50.0, evaluator=unavailable)
        assert not result.converged
        assert result.value is None

    def test_non_float_field(self, office_config):
        with pytest.raises(ValueError):
            goal_seek(office_config, "operating.hold_years", 0.12, 5, 20)

    def test_unknown_field(self, office_config):
        with pytest.raises(KeyError):
            goal_seek(office_config, "operating.rent", 0.12, 0.0, 50.0)

    def test_iteration_cap_reported(self, office_config):
        def curved(config, field_path, value):
            return SimpleNamespace(returns=SimpleNamespace(irr_available=True), irr=(value / 50) ** 3)

        result = goal_seek(
            office_config, "operating.rent_psf", 0.12, 0.0, 50.0, max_iterations=1, evaluator=curved
        )

        assert not result.converged
        assert result.iterations == 1
        assert result.value is not None

    def test_jump_in_irr_not_converged(self, office_config):
        """A discontinuity straddling the target is not mistaken for a solution."""
        def step(config, field_path, value):
            return SimpleNamespace(returns=SimpleNamespace(irr_available=True), irr=0.05 if value < 10 else 0.15)

        result = goal_seek(office_config, "operating.rent_psf", 0.10, 0.0, 50.0, evaluator=step)

        assert not result.converged
        assert "jumps" in result.message
        assert result.value == pytest.approx(10.0, abs=1e-6)

    def test_unavailable_irr_inside_bracket(self, office_config):
        def gap(config, field_path, value):
            available = value <= 1.0 or value >= 49.0
            return SimpleNamespace(returns=SimpleNamespace(irr_available=available), irr=value / 100)

        result = goal_seek(office_config, "operating.rent_psf", 0.12, 0.0, 50.0, evaluator=gap)

        assert not result.converged
        assert "unavailable" in result.message
