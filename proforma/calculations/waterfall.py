"""LP/GP distribution waterfall.

Distributable cash is consumed by an ordered list of steps, each taking the
current state and returning a new one with the remaining pool reduced:

    1. Preferred return: LP on its capital, then GP on its co-invest,
       compounded over the hold period.
    2. Catch-up (optional): GP is brought toward its target share of all
       distributions, capped at ``catch_up_pct`` of the remaining pool.
    3. Tiered split: whatever remains is split by the tier bracketing the
       project IRR.

The sponsor promote is an uplift on the GP's tiered-split amount, paid on top
of the distributable pool.
"""

import logging
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.config import EquityStructure, WaterfallTier
from ..models.lookups import Severity
from .numeric import compound_growth, safe_divide
from .validation import ValidationIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionStep:
    """One entry of the distribution log."""

    stage: str  # "preferred", "catch_up", "split" or "promote"
    label: str
    lp_amount: float
    gp_amount: float
    remaining: float  # Pool left after this step


@dataclass(frozen=True)
class WaterfallState:
    """Running totals while the pool is distributed."""

    remaining: float
    lp: float = 0.0
    gp: float = 0.0
    steps: Tuple[DistributionStep, ...] = ()

    def pay(self, stage: str, label: str, lp_amount: float = 0.0, gp_amount: float = 0.0) -> "WaterfallState":
        """Distribute to LP/GP out of the remaining pool."""
        remaining = self.remaining - lp_amount - gp_amount
        return replace(
            self,
            remaining=remaining,
            lp=self.lp + lp_amount,
            gp=self.gp + gp_amount,
            steps=self.steps + (DistributionStep(stage, label, lp_amount, gp_amount, remaining),),
        )


Step = Callable[[WaterfallState], WaterfallState]


@dataclass
class WaterfallResult:
    """Outcome of one waterfall run."""

    total_distributable: float
    lp_distribution: float
    gp_distribution: float  # Before sponsor promote
    sponsor_promote: float
    lp_irr: float
    gp_irr: float
    tier: Optional[WaterfallTier]
    steps: List[DistributionStep] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def gp_total(self) -> float:
        return self.gp_distribution + self.sponsor_promote

    @property
    def undistributed(self) -> float:
        return self.total_distributable - self.lp_distribution - self.gp_distribution


def preferred_return_step(lp_capital: float, gp_coinvest: float, rate: float, hold_years: int) -> Step:
    """LP then GP-on-co-invest preferred return, compounded over the hold."""
    growth = compound_growth(rate, max(0, hold_years)) - 1

    def step(state: WaterfallState) -> WaterfallState:
        lp_amount = min(state.remaining, max(0.0, lp_capital * growth))
        state = state.pay("preferred", "Preferred return (LP)", lp_amount=lp_amount)
        if gp_coinvest > 0 and state.remaining > 0:
            gp_amount = min(state.remaining, max(0.0, gp_coinvest * growth))
            state = state.pay("preferred", "Preferred return (GP co-invest)", gp_amount=gp_amount)
        return state

    return step


def catch_up_step(target_share: float, max_share_of_remaining: float) -> Step:
    """GP catch-up toward ``target_share`` of cumulative distributions.

    Target = (distributed so far + remaining) x target share
    Catch-up = min(remaining, target - GP so far, remaining x cap)
    """

    def step(state: WaterfallState) -> WaterfallState:
        if state.remaining <= 0:
            return state
        target = (state.lp + state.gp + state.remaining) * target_share
        needed = max(0.0, target - state.gp)
        amount = min(state.remaining, needed, state.remaining * max(0.0, max_share_of_remaining))
        return state.pay("catch_up", "GP catch-up", gp_amount=amount)

    return step


def tier_split_step(tier: Optional[WaterfallTier]) -> Step:
    """Split the entire remaining pool by the tier's LP/GP shares."""

    def step(state: WaterfallState) -> WaterfallState:
        if tier is None or state.remaining <= 0:
            return state
        pool = state.remaining
        lp_amount = pool * tier.lp_share
        gp_amount = pool - lp_amount
        return state.pay("split", f"Tier split {tier.lp_share:.0%}/{tier.gp_share:.0%}", lp_amount, gp_amount)

    return step


def find_tier(tiers: Sequence[WaterfallTier], irr: float) -> Tuple[Optional[WaterfallTier], bool]:
    """Tier whose [min_irr, max_irr) bracket contains ``irr``.

    When no bracket matches (a gap in the tiers, or a negative IRR), the
    nearest tier below the IRR is used, or the first tier if none lies below.

    Returns:
        (tier, matched) where ``matched`` is False if the fallback was used.
    """
    for tier in tiers:
        if tier.contains(irr):
            return tier, True
    if not tiers:
        return None, False
    below = [tier for tier in tiers if tier.min_irr <= irr]
    if below:
        return max(below, key=lambda tier: tier.min_irr), False
    return tiers[0], False


def run_waterfall(
    total_distributable: float,
    initial_equity: float,
    equity: EquityStructure,
    tiers: Sequence[WaterfallTier],
    project_irr: float,
    hold_years: int,
) -> WaterfallResult:
    """Distribute cash between LP and GP.

    LP/GP IRRs are the project IRR scaled by each party's share of
    distributions relative to its share of capital:

        LP IRR = IRR x (LP distributions / total) / LP share

    This is an approximation, not a solve over each party's own cash flows.

    Args:
        total_distributable: Sum of positive operating-period cash flows.
        initial_equity: Year-0 equity outlay.
        equity: LP/GP structure and catch-up terms.
        tiers: Ordered promote tiers.
        project_irr: Project IRR as a decimal.
        hold_years: Years over which the preferred return compounds.

    Returns:
        WaterfallResult. LP + GP distributions equal the distributable pool.

    Example:
        >>> from proforma.models import EquityStructure, WaterfallTier
        >>> tiers = (WaterfallTier(0.0, None, 0.8, 0.2),)
        >>> result = run_waterfall(1000.0, 500.0, EquityStructure(catch_up=False), tiers, 0.12, 1)
        >>> round(result.lp_distribution + result.gp_distribution, 6)
        1000.0
    """
    pool = max(0.0, total_distributable)
    initial_equity = max(0.0, initial_equity)
    issues: List[ValidationIssue] = []

    lp_capital = initial_equity * equity.lp_share
    gp_capital = initial_equity * equity.gp_share
    gp_coinvest = gp_capital * equity.gp_coinvest

    tier, matched = find_tier(tiers, project_irr)
    if not matched:
        logger.warning("No waterfall tier contains IRR %.4f; using tier starting at %s",
                       project_irr, None if tier is None else tier.min_irr)
        issues.append(ValidationIssue(
            field="waterfall_tiers",
            message=f"No tier contains project IRR {project_irr:.2%}; nearest tier applied",
            severity=Severity.WARNING,
        ))

    steps: List[Step] = [preferred_return_step(lp_capital, gp_coinvest, equity.preferred_return, hold_years)]
    if equity.catch_up:
        steps.append(catch_up_step(equity.target_gp_promote, equity.catch_up_pct))
    steps.append(tier_split_step(tier))

    state = reduce(lambda current, step: step(current), steps, WaterfallState(remaining=pool))

    split_gp = sum(s.gp_amount for s in state.steps if s.stage == "split")
    sponsor_promote = split_gp * max(0.0, equity.sponsor_promote)
    if sponsor_promote > 0:
        state = replace(state, steps=state.steps + (
            DistributionStep("promote", "Sponsor promote", 0.0, sponsor_promote, state.remaining),
        ))

    lp_irr = safe_divide(project_irr * safe_divide(state.lp, pool), equity.lp_share) if pool > 0 else 0.0
    gp_irr = safe_divide(project_irr * safe_divide(state.gp, pool), equity.gp_share) if pool > 0 else 0.0

    logger.debug("Waterfall: pool=%.0f lp=%.0f gp=%.0f promote=%.0f", pool, state.lp, state.gp, sponsor_promote)

    return WaterfallResult(
        total_distributable=pool,
        lp_distribution=state.lp,
        gp_distribution=state.gp,
        sponsor_promote=sponsor_promote,
        lp_irr=lp_irr,
        gp_irr=gp_irr,
        tier=tier,
        steps=list(state.steps),
        issues=issues,
    )
