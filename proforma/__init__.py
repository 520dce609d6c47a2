"""Real-estate development pro-forma engine.

Typical usage:
    from proforma import ConfigurationModel, PropertyType, calculate_deal

    deal = calculate_deal(ConfigurationModel.for_property_type(PropertyType.OFFICE))
    print(deal.summary())
"""

from .models import ConfigurationModel, PropertyType, Severity
from .calculations import (
    DealAnalysis,
    calculate_deal,
    goal_seek,
    run_monte_carlo,
    run_sensitivity,
    MonteCarloConfig,
    BaseInputs,
)
from .scenarios import Scenario, DEFAULT_SCENARIOS, run_scenario_analysis

__version__ = "0.1.0"

__all__ = [
    "ConfigurationModel",
    "PropertyType",
    "Severity",
    "DealAnalysis",
    "calculate_deal",
    "goal_seek",
    "run_monte_carlo",
    "run_sensitivity",
    "MonteCarloConfig",
    "BaseInputs",
    "Scenario",
    "DEFAULT_SCENARIOS",
    "run_scenario_analysis",
]
