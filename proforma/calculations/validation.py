"""Configuration and result checks reported as non-fatal issues.

Nothing here raises: each rule yields a ``ValidationIssue`` with a severity,
and the engine still produces a best-effort result.
"""

import logging
import math
from dataclasses import dataclass, fields, is_dataclass
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Sequence, Tuple

from ..models.config import ConfigurationModel, WaterfallTier
from ..models.lookups import PropertyType, Severity
from .numeric import safe_divide

if TYPE_CHECKING:
    from .cashflow import CashFlowProjection
    from .costs import DevelopmentCost
    from .irr import IRRResult

logger = logging.getLogger(__name__)

SHARE_TOLERANCE = 1e-6

# Fields that are legitimately signed or categorical and skipped by the
# non-negative sweep
_SIGNED_FIELDS = {"min_irr", "max_irr", "start_month", "delivery_month"}


@dataclass(frozen=True)
class ValidationIssue:
    """A configuration or result problem."""

    field: str
    message: str
    severity: Severity = Severity.WARNING

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


def _walk_numbers(obj: Any, prefix: str = "") -> Iterator[Tuple[str, float]]:
    """Yield (dotted path, value) for every numeric leaf of a dataclass tree."""
    for f in fields(obj):
        value = getattr(obj, f.name)
        path = f"{prefix}{f.name}"
        if is_dataclass(value):
            yield from _walk_numbers(value, f"{path}.")
        elif isinstance(value, tuple):
            for index, item in enumerate(value):
                if is_dataclass(item):
                    yield from _walk_numbers(item, f"{path}[{index}].")
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            if f.name not in _SIGNED_FIELDS:
                yield path, float(value)


def validate_waterfall_tiers(tiers: Sequence[WaterfallTier]) -> List[ValidationIssue]:
    """Check that tiers partition [0, inf) with splits summing to 100%.

    Args:
        tiers: Ordered waterfall tiers.

    Returns:
        Issues for gaps, overlaps, bad endpoints, bad splits and a GP share
        that falls as the IRR rises.
    """
    issues: List[ValidationIssue] = []
    if not tiers:
        return [ValidationIssue("waterfall_tiers", "No waterfall tiers defined", Severity.ERROR)]

    for index, tier in enumerate(tiers):
        label = f"waterfall_tiers[{index}]"
        if abs(tier.lp_share + tier.gp_share - 1.0) > SHARE_TOLERANCE:
            issues.append(ValidationIssue(
                label,
                f"LP + GP share is {tier.lp_share + tier.gp_share:.2%}, not 100%",
                Severity.ERROR,
            ))
        if tier.max_irr is not None and tier.max_irr <= tier.min_irr:
            issues.append(ValidationIssue(label, "Tier upper bound must exceed its lower bound", Severity.ERROR))

    if tiers[0].min_irr != 0:
        issues.append(ValidationIssue(
            "waterfall_tiers[0]",
            f"First tier starts at {tiers[0].min_irr:.2%}; tiers must start at 0%",
            Severity.ERROR,
        ))
    if tiers[-1].max_irr is not None:
        issues.append(ValidationIssue(
            f"waterfall_tiers[{len(tiers) - 1}]",
            "Last tier must be unbounded above",
            Severity.ERROR,
        ))

    for index, (current, following) in enumerate(zip(tiers, tiers[1:]), start=1):
        label = f"waterfall_tiers[{index}]"
        upper = current.upper
        if following.min_irr > upper:
            issues.append(ValidationIssue(
                label, f"Gap between {upper:.2%} and {following.min_irr:.2%}", Severity.ERROR,
            ))
        elif following.min_irr < upper:
            issues.append(ValidationIssue(
                label, f"Tier overlaps the previous tier below {upper:.2%}", Severity.ERROR,
            ))
        if following.gp_share < current.gp_share:
            issues.append(ValidationIssue(
                label, "GP share decreases as IRR increases", Severity.WARNING,
            ))

    return issues


def validate_configuration(config: ConfigurationModel) -> List[ValidationIssue]:
    """Check configuration inputs before calculation.

    Args:
        config: Project configuration.

    Returns:
        List of issues, empty when nothing is flagged.
    """
    issues: List[ValidationIssue] = []

    for path, value in _walk_numbers(config):
        if value < 0:
            issues.append(ValidationIssue(path, f"Negative value {value:,.4g}", Severity.ERROR))

    # Financing
    ltc = config.construction_loan.ltc
    if ltc > 0.85:
        issues.append(ValidationIssue("construction_loan.ltc", "LTC above 85% is very risky and rarely available", Severity.ERROR))
    elif ltc > 0.75:
        issues.append(ValidationIssue("construction_loan.ltc", "LTC above 75% is uncommon in current market"))

    if config.permanent_loan.ltv > 0.80 and config.property_type != PropertyType.APARTMENT:
        issues.append(ValidationIssue("permanent_loan.ltv", "LTV above 80% is aggressive for commercial properties"))

    if config.construction_loan.rate > 0.12:
        issues.append(ValidationIssue("construction_loan.rate", "Construction loan rate above 12% is very high"))
    if config.permanent_loan.rate > 0.10:
        issues.append(ValidationIssue("permanent_loan.rate", "Permanent loan rate above 10% is very high"))

    # Exit cap rate
    cap_rate = config.operating.cap_rate
    if cap_rate <= 0:
        issues.append(ValidationIssue("operating.cap_rate", "Cap rate must be positive; valuations resolve to 0", Severity.ERROR))
    else:
        if cap_rate < 0.04:
            issues.append(ValidationIssue("operating.cap_rate", "Cap rate below 4% may be aggressive"))
        if cap_rate < 0.03 or cap_rate > 0.12:
            issues.append(ValidationIssue("operating.cap_rate", "Cap rate outside 3-12% range is unusual", Severity.ERROR))

    # Equity structure
    equity = config.equity
    if abs(equity.lp_share + equity.gp_share - 1.0) > SHARE_TOLERANCE:
        issues.append(ValidationIssue("equity", "LP + GP equity should equal 100%", Severity.ERROR))
    if not 0 <= equity.preferred_return <= 0.20:
        issues.append(ValidationIssue("equity.preferred_return", "Preferred return outside 0-20% is unusual"))
    if not 0 <= equity.gp_coinvest <= 1:
        issues.append(ValidationIssue("equity.gp_coinvest", "GP co-invest must be between 0% and 100%", Severity.ERROR))

    issues.extend(validate_waterfall_tiers(config.waterfall_tiers))

    if config.property_type == PropertyType.APARTMENT and config.unit_mix_sf > config.site.building_gfa:
        issues.append(ValidationIssue(
            "unit_mix",
            f"Total unit SF ({config.unit_mix_sf:,.0f}) exceeds building GFA ({config.site.building_gfa:,.0f})",
            Severity.ERROR,
        ))

    if issues:
        logger.debug("Configuration validation: %d issues", len(issues))
    return issues


def validate_results(
    config: ConfigurationModel,
    cost: "DevelopmentCost",
    projection: "CashFlowProjection",
    irr: Optional["IRRResult"] = None,
) -> List[ValidationIssue]:
    """Check derived metrics (cost/SF, debt yield, development spread, IRR).

    Args:
        config: Project configuration.
        cost: CostEngine result.
        projection: CashFlowProjector result.
        irr: Project IRR, if already solved.

    Returns:
        List of issues.
    """
    issues: List[ValidationIssue] = []

    if cost.buildable_sf > 0:
        cost_psf = cost.cost_per_sf
        if cost_psf < 100:
            issues.append(ValidationIssue("development_cost", f"Cost per SF ${cost_psf:,.0f} below $100 seems too low"))
        elif cost_psf > 1_000:
            issues.append(ValidationIssue("development_cost", f"Cost per SF ${cost_psf:,.0f} above $1,000 is very high"))

    debt_yield = safe_divide(projection.year1_noi, projection.permanent_loan_amount)
    if 0 < debt_yield < 0.06:
        issues.append(ValidationIssue("debt_yield", "Debt yield below 6% is very risky", Severity.ERROR))
    elif 0 < debt_yield < 0.08:
        issues.append(ValidationIssue("debt_yield", "Debt yield below 8% may face financing challenges"))

    if projection.property_type != PropertyType.FOR_SALE and projection.year1_noi:
        spread_bps = (safe_divide(projection.year1_noi, cost.total) - config.operating.cap_rate) * 10_000
        if spread_bps <= 0:
            issues.append(ValidationIssue(
                "development_spread",
                f"Development spread of {spread_bps:,.0f} bps: yield on cost does not exceed the exit cap rate",
                Severity.ERROR,
            ))
        elif spread_bps < 50:
            issues.append(ValidationIssue("development_spread", "Development spread below 50 bps is insufficient", Severity.ERROR))
        elif spread_bps < 100:
            issues.append(ValidationIssue(
                "development_spread", "Development spread below 100 bps may not justify development risk",
            ))

    if irr is not None and irr.is_valid and irr.rate is not None and irr.rate < 0:
        issues.append(ValidationIssue("irr", f"Project IRR is negative ({irr.rate:.2%})", Severity.ERROR))

    for record in projection.records:
        values = (record.cash_flow, record.cumulative_cash_flow, record.noi)
        if not all(math.isfinite(v) for v in values):
            issues.append(ValidationIssue(f"records[{record.year}]", "Non-finite cash flow", Severity.ERROR))

    return issues
