"""Full calculation pipeline for one configuration.

ConfigurationModel -> cost -> financing -> cash flows -> returns.
Every stage is a pure function of its inputs; calling ``calculate_deal``
twice with the same configuration gives identical results.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.config import ConfigurationModel
from .cashflow import CashFlowProjection, CashFlowRecord
from .costs import DevelopmentCost, calculate_development_cost
from .financing import FinancingResult, calculate_financing
from .irr import IRRSolverSettings
from .metrics import (
    DevelopmentMetrics,
    ReturnMetrics,
    calculate_development_metrics,
    calculate_returns,
    format_returns_table,
)
from .projection import get_projector
from .validation import ValidationIssue, validate_configuration, validate_results

logger = logging.getLogger(__name__)


@dataclass
class DealAnalysis:
    """Everything derived from one configuration."""

    config: ConfigurationModel
    cost: DevelopmentCost
    financing: FinancingResult
    projection: CashFlowProjection
    returns: ReturnMetrics
    development: DevelopmentMetrics
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def records(self) -> List[CashFlowRecord]:
        return self.projection.records

    @property
    def irr(self) -> float:
        """Project IRR as a decimal (0.0 when not computable)."""
        return self.returns.irr

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    def summary(self) -> str:
        return format_returns_table(self.returns, self.development)


def calculate_deal(
    config: ConfigurationModel,
    irr_settings: Optional[IRRSolverSettings] = None,
) -> DealAnalysis:
    """Run every engine stage for ``config``.

    Configuration problems are collected as issues; the calculation always
    produces a best-effort result.

    Args:
        config: Project configuration.
        irr_settings: IRR solver settings.

    Returns:
        DealAnalysis with cost, financing, cash flows, returns and issues.

    Raises:
        ValueError: If ``config.property_type`` has no registered projector.
    """
    projector = get_projector(config.property_type)
    issues = validate_configuration(config)

    cost = calculate_development_cost(config)
    financing = calculate_financing(config, cost)
    projection = projector.project(config, cost, financing)
    returns = calculate_returns(config, projection, irr_settings)
    development = calculate_development_metrics(config, cost, financing, projection)

    issues.extend(financing.issues)
    issues.extend(returns.issues)
    issues.extend(validate_results(config, cost, projection, returns.irr_result))

    logger.debug(
        "%s deal: cost=%.0f equity=%.0f irr=%s (%d issues)",
        config.property_type.value,
        cost.total,
        financing.equity_required,
        returns.irr_result.rate,
        len(issues),
    )

    return DealAnalysis(
        config=config,
        cost=cost,
        financing=financing,
        projection=projection,
        returns=returns,
        development=development,
        issues=issues,
    )
