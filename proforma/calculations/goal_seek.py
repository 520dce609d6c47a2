"""Solve for the input value that reaches a target project IRR.

Each trial replaces one field of an otherwise unchanged configuration and
runs a fresh ``calculate_deal``; no state carries between trials.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from scipy.optimize import brentq

from ..models.config import ConfigurationModel, field_type, replace_field
from .deal import DealAnalysis, calculate_deal

logger = logging.getLogger(__name__)


@dataclass
class GoalSeekResult:
    """Outcome of a goal seek."""

    field_path: str
    target_irr: float
    converged: bool
    value: Optional[float]  # Input value reaching the target (best trial if not converged)
    achieved_irr: Optional[float]
    iterations: int
    trials: List[Tuple[float, float]]  # (input value, IRR)
    message: str = ""


def evaluate(config: ConfigurationModel, field_path: str, value: float) -> DealAnalysis:
    """Calculate the deal with ``field_path`` set to ``value``."""
    return calculate_deal(replace_field(config, field_path, value))


def goal_seek(
    config: ConfigurationModel,
    field_path: str,
    target_irr: float,
    low: float,
    high: float,
    tolerance: float = 1e-4,
    xtol: float = 1e-8,
    max_iterations: int = 100,
    evaluator: Callable[[ConfigurationModel, str, float], DealAnalysis] = evaluate,
) -> GoalSeekResult:
    """Find the value in ``[low, high]`` giving ``target_irr`` with Brent's method.

    Args:
        config: Base configuration.
        field_path: Dotted field to vary, e.g. ``"operating.rent_psf"``.
        target_irr: Target project IRR as a decimal.
        low: Lower bracket for the input.
        high: Upper bracket for the input.
        tolerance: Acceptable IRR error at the solution.
        xtol: Absolute tolerance on the input value.
        max_iterations: Root-finder iteration cap.
        evaluator: Function running one trial.

    Returns:
        GoalSeekResult. A target outside the bracket, or an IRR that is
        unavailable at a bracket end, is reported as not converged.

    Raises:
        KeyError: If ``field_path`` does not name a configuration field.
        ValueError: If the field is not a float.
    """
    declared = field_type(config, field_path)
    if declared not in (float, Optional[float]):
        raise ValueError(f"Goal seek needs a float field; {field_path} is {declared}")
    trials: Dict[float, float] = {}

    def irr_gap(value: float) -> float:
        if value not in trials:
            deal = evaluator(config, field_path, value)
            if not deal.returns.irr_available:
                raise ValueError(f"IRR unavailable at {value:g}")
            trials[value] = deal.irr
        return trials[value] - target_irr

    def result(converged: bool, iterations: int, message: str = "") -> GoalSeekResult:
        value, irr = min(trials.items(), key=lambda t: abs(t[1] - target_irr)) if trials else (None, None)
        return GoalSeekResult(field_path, target_irr, converged, value, irr, iterations, list(trials.items()), message)

    try:
        f_low, f_high = irr_gap(low), irr_gap(high)
    except ValueError:
        return result(False, 0, "IRR unavailable at a bracket end")
    if f_low * f_high > 0:
        return result(False, 0, "Target IRR is not bracketed by [low, high]")

    try:
        root, info = brentq(irr_gap, low, high, xtol=xtol, maxiter=max_iterations, full_output=True)
        root = float(root)
        gap = irr_gap(root)
    except (RuntimeError, ValueError) as exc:
        logger.warning("Goal seek on %s did not converge: %s", field_path, exc)
        return result(False, max_iterations, str(exc))

    if abs(gap) >= tolerance:
        # Brent brackets a jump in IRR rather than a root
        return GoalSeekResult(field_path, target_irr, False, root, gap + target_irr, info.iterations,
                              list(trials.items()), f"IRR jumps across {root:g}")

    logger.debug("Goal seek %s -> %.6g after %d iterations", field_path, root, info.iterations)
    return GoalSeekResult(field_path, target_irr, True, root, gap + target_irr, info.iterations, list(trials.items()))
