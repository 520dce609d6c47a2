"""Probability-weighted scenario analysis.

Each scenario adjusts rent, total cost and exit cap rate and recomputes the
yield-on-cost-derived IRR used by the Monte Carlo simulation. The weighted
IRR is the probability-weighted sum over scenarios.

``run_scenario_deals`` instead re-runs the full engine (calculate_deal) on
each adjusted configuration.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from .calculations.costs import DevelopmentCost, calculate_development_cost
from .calculations.deal import DealAnalysis, calculate_deal
from .calculations.monte_carlo import BaseInputs, yield_based_irr
from .calculations.numeric import finite_or_zero
from .models.config import ConfigurationModel

logger = logging.getLogger(__name__)

PROBABILITY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Scenario:
    """A named set of adjustments with its probability."""

    name: str
    probability: float
    rent_adjustment: float = 0.0  # Decimal change in rent
    cost_adjustment: float = 0.0  # Decimal change in total cost
    cap_rate_adjustment_bps: float = 0.0


DEFAULT_SCENARIOS: Sequence[Scenario] = (
    Scenario("Downside", 0.25, rent_adjustment=-0.10, cost_adjustment=0.10, cap_rate_adjustment_bps=50),
    Scenario("Base Case", 0.50),
    Scenario("Upside", 0.25, rent_adjustment=0.10, cost_adjustment=-0.05, cap_rate_adjustment_bps=-50),
)


@dataclass
class ScenarioResult:
    """IRR for one scenario."""

    scenario: Scenario
    irr: float
    equity_multiple: float  # Rule of thumb: IRR (in %) / 10

    @property
    def weighted_irr(self) -> float:
        return self.irr * self.scenario.probability


@dataclass
class ScenarioAnalysis:
    """All scenario results and the probability-weighted IRR."""

    results: List[ScenarioResult]
    weighted_irr: float
    total_probability: float

    @property
    def by_name(self) -> Dict[str, ScenarioResult]:
        return {r.scenario.name: r for r in self.results}

    def summary(self) -> str:
        lines = [
            "=" * 60,
            "SCENARIO ANALYSIS",
            "=" * 60,
            f"{'Scenario':<20} {'Probability':>12} {'IRR':>10} {'Multiple':>10}",
            "-" * 60,
        ]
        for r in self.results:
            lines.append(
                f"{r.scenario.name:<20} {r.scenario.probability:>12.0%} {r.irr:>10.2%} {r.equity_multiple:>9.2f}x"
            )
        lines.extend([
            "-" * 60,
            f"{'Probability-weighted IRR':<44} {self.weighted_irr:>10.2%}",
            "=" * 60,
        ])
        return "\n".join(lines)


def scenario_irr(base: BaseInputs, scenario: Scenario) -> float:
    """Simplified IRR under a scenario's adjustments."""
    return finite_or_zero(yield_based_irr(
        annual_rent_psf=base.annual_rent_psf * (1 + scenario.rent_adjustment),
        area_sf=base.area_sf,
        vacancy=base.vacancy,
        total_cost=base.total_cost * (1 + scenario.cost_adjustment),
        cap_rate=base.cap_rate + scenario.cap_rate_adjustment_bps / 10_000,
    ))


def run_scenario_analysis(
    config: ConfigurationModel,
    cost: Optional[DevelopmentCost] = None,
    scenarios: Sequence[Scenario] = DEFAULT_SCENARIOS,
) -> ScenarioAnalysis:
    """Evaluate each scenario and the probability-weighted IRR.

    Weighted IRR = sum(scenario IRR x probability)

    Args:
        config: Project configuration.
        cost: Development cost (calculated from ``config`` if omitted).
        scenarios: Scenarios to evaluate.

    Returns:
        ScenarioAnalysis. Probabilities that do not sum to 100% are used as
        given and logged.

    Raises:
        ValueError: For the for-sale archetype (see ``BaseInputs.from_config``).
    """
    cost = cost or calculate_development_cost(config)
    base = BaseInputs.from_config(config, cost)

    results = []
    for scenario in scenarios:
        irr = scenario_irr(base, scenario)
        results.append(ScenarioResult(scenario=scenario, irr=irr, equity_multiple=irr * 100 / 10))

    total_probability = sum(s.probability for s in scenarios)
    if abs(total_probability - 1.0) > PROBABILITY_TOLERANCE:
        logger.warning("Scenario probabilities sum to %.2f%%, not 100%%", total_probability * 100)

    return ScenarioAnalysis(
        results=results,
        weighted_irr=sum(r.weighted_irr for r in results),
        total_probability=total_probability,
    )


def adjust_config(config: ConfigurationModel, scenario: Scenario) -> ConfigurationModel:
    """Apply a scenario's adjustments to a configuration.

    Rent scales the operating rent; cost scales the per-SF building rates;
    the cap rate shifts by the adjustment in bps.
    """
    operating = replace(
        config.operating,
        rent_psf=config.operating.rent_psf * (1 + scenario.rent_adjustment),
        cap_rate=config.operating.cap_rate + scenario.cap_rate_adjustment_bps / 10_000,
    )
    hard_costs = replace(
        config.hard_costs,
        core_shell_psf=config.hard_costs.core_shell_psf * (1 + scenario.cost_adjustment),
        tenant_improvements_psf=config.hard_costs.tenant_improvements_psf * (1 + scenario.cost_adjustment),
    )
    return replace(config, operating=operating, hard_costs=hard_costs)


def run_scenario_deals(
    config: ConfigurationModel,
    scenarios: Sequence[Scenario] = DEFAULT_SCENARIOS,
) -> Dict[str, DealAnalysis]:
    """Run the full engine for each scenario's adjusted configuration."""
    return {scenario.name: calculate_deal(adjust_config(config, scenario)) for scenario in scenarios}
