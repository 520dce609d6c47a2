"""Internal rate of return with explicit failure classification.

Newton-Raphson is tried from several starting guesses; if none converges
inside the admissible rate range, Brent's method runs on a sign-changing
bracket found in the same range.
Failures are returned as IRRResult variants, never raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
import numpy_financial as npf
from scipy.optimize import brentq

logger = logging.getLogger(__name__)


class IRRStatus(str, Enum):
    """Outcome of an IRR solve."""
    CONVERGED = "converged"
    INVALID_INITIAL = "invalid_initial"  # Empty series or non-negative first flow
    NO_SIGN_CHANGE = "no_sign_change"
    MULTIPLE_ROOTS = "multiple_roots"
    NON_CONVERGENT = "non_convergent"


@dataclass(frozen=True)
class IRRSolverSettings:
    """Search parameters for ``solve_irr``."""

    guesses: Tuple[float, ...] = (0.1, 0.0, -0.5, 0.5, -0.9, 0.9)
    tolerance: float = 1e-4
    max_newton_iterations: int = 100
    max_bracket_iterations: int = 200
    derivative_epsilon: float = 1e-10
    divergence_limit: float = 100.0
    min_rate: float = -0.99
    max_rate: float = 10.0
    bound_scan_step: float = 0.1


@dataclass
class IRRResult:
    """IRR solve result.

    ``rate`` is set only when converged; ``best_rate`` is the closest
    candidate found, offered as a hint on failure.
    """

    status: IRRStatus
    rate: Optional[float] = None
    best_rate: Optional[float] = None
    iterations: int = 0
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.status == IRRStatus.CONVERGED

    @property
    def rate_or_zero(self) -> float:
        """Rate for rendering: 0.0 when the IRR is unavailable."""
        return self.rate if self.is_valid and self.rate is not None else 0.0


def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """Net present value with the first flow at t=0.

    Example:
        >>> round(npv(0.10, [-100.0, 110.0]), 10)
        0.0
    """
    if rate <= -1.0:
        return float("inf")
    return float(npf.npv(rate, np.asarray(cash_flows, dtype=float)))


def _npv_and_derivative(rate: float, flows: np.ndarray) -> Tuple[float, float]:
    periods = np.arange(len(flows))
    discount = (1.0 + rate) ** periods
    value = np.sum(flows / discount)
    derivative = -np.sum(periods[1:] * flows[1:] / (discount[1:] * (1.0 + rate)))
    return float(value), float(derivative)


def _sign_changes(flows: np.ndarray) -> int:
    signs = np.sign(flows[flows != 0])
    return int(np.count_nonzero(signs[1:] != signs[:-1]))


def _newton(flows: np.ndarray, settings: IRRSolverSettings) -> Tuple[List[float], int, Optional[float]]:
    """Run Newton from every guess; return distinct roots, iterations and best candidate."""
    roots: List[float] = []
    best: Optional[Tuple[float, float]] = None
    total_iterations = 0

    def admissible(rate: float) -> bool:
        return settings.min_rate <= rate <= settings.max_rate

    for guess in settings.guesses:
        rate = guess
        for _ in range(settings.max_newton_iterations):
            total_iterations += 1
            value, derivative = _npv_and_derivative(rate, flows)
            if not np.isfinite(value):
                break
            if best is None or abs(value) < best[1]:
                best = (rate, abs(value))
            if abs(value) < settings.tolerance and admissible(rate):
                roots.append(rate)
                break
            if abs(derivative) < settings.derivative_epsilon:
                break
            new_rate = rate - value / derivative
            if not np.isfinite(new_rate) or abs(new_rate) > settings.divergence_limit or new_rate <= -1.0:
                break
            if abs(new_rate - rate) < settings.tolerance:
                if admissible(new_rate):
                    roots.append(new_rate)
                break
            rate = new_rate

    distinct: List[float] = []
    for root in roots:
        if all(abs(root - other) > settings.tolerance * 10 for other in distinct):
            distinct.append(root)
    return distinct, total_iterations, best[0] if best else None


def _find_bracket(flows: np.ndarray, settings: IRRSolverSettings) -> Optional[Tuple[float, float]]:
    """Rate interval whose end points give NPVs of opposite sign."""
    low, high = settings.min_rate, settings.max_rate
    npv_low = npv(low, flows)
    npv_high = npv(high, flows)
    if npv_low * npv_high < 0:
        return low, high

    # Scan for an interior bracket
    for rate in np.arange(low + settings.bound_scan_step, 5.0 + 1e-9, settings.bound_scan_step):
        value = npv(float(rate), flows)
        if npv_low * value < 0:
            return low, float(rate)
        if value * npv_high < 0:
            return float(rate), high
    return None


def _bracketed_root(flows: np.ndarray, settings: IRRSolverSettings) -> Tuple[Optional[float], int]:
    bracket = _find_bracket(flows, settings)
    if bracket is None:
        return None, 0
    try:
        rate, info = brentq(
            npv, bracket[0], bracket[1], args=(flows,),
            xtol=settings.tolerance, maxiter=settings.max_bracket_iterations, full_output=True,
        )
    except (RuntimeError, ValueError) as exc:
        logger.debug("Bracketed IRR search failed on %s: %s", bracket, exc)
        return None, settings.max_bracket_iterations
    return float(rate), info.iterations


def solve_irr(cash_flows: Sequence[float], settings: Optional[IRRSolverSettings] = None) -> IRRResult:
    """Solve for the rate making NPV zero.

    Args:
        cash_flows: Signed flows; index 0 is the initial outlay and must be negative.
        settings: Search parameters (defaults to IRRSolverSettings()).

    Returns:
        IRRResult; ``status`` is CONVERGED with ``rate`` set, or a failure
        variant with ``best_rate`` as a hint where one exists.

    Example:
        >>> result = solve_irr([-100.0, 110.0])
        >>> result.status.value, round(result.rate, 4)
        ('converged', 0.1)
    """
    settings = settings or IRRSolverSettings()

    if cash_flows is None or len(cash_flows) < 2:
        return IRRResult(IRRStatus.INVALID_INITIAL, message="Need at least 2 cash flows")

    flows = np.asarray(cash_flows, dtype=float)
    if not np.all(np.isfinite(flows)):
        return IRRResult(IRRStatus.INVALID_INITIAL, message="Cash flows contain non-finite values")
    if flows[0] >= 0:
        return IRRResult(IRRStatus.INVALID_INITIAL, message="Initial cash flow must be negative")
    if not np.any(flows > 0):
        return IRRResult(IRRStatus.NO_SIGN_CHANGE, best_rate=-1.0,
                         message="No positive cash flows: investment is a total loss")
    if not np.any(flows < 0):
        return IRRResult(IRRStatus.NO_SIGN_CHANGE, message="No negative cash flows")

    roots, iterations, best = _newton(flows, settings)
    if len(roots) > 1 and _sign_changes(flows) > 1:
        logger.warning("IRR ambiguous: %d roots found (%s)", len(roots), ", ".join(f"{r:.4f}" for r in roots))
        return IRRResult(
            IRRStatus.MULTIPLE_ROOTS,
            best_rate=min(roots, key=abs),
            iterations=iterations,
            message=f"Cash flows change sign more than once; {len(roots)} rates solve NPV = 0",
        )
    if roots:
        logger.debug("IRR converged (Newton) at %.6f after %d iterations", roots[0], iterations)
        return IRRResult(IRRStatus.CONVERGED, rate=roots[0], best_rate=roots[0], iterations=iterations)

    rate, bracket_iterations = _bracketed_root(flows, settings)
    iterations += bracket_iterations
    if rate is not None:
        logger.debug("IRR converged (Brent) at %.6f", rate)
        return IRRResult(IRRStatus.CONVERGED, rate=rate, best_rate=rate, iterations=iterations)

    message = "IRR calculation did not converge"
    if flows.sum() < 0:
        message = "Investment loses money overall; IRR did not converge"
    logger.warning("%s (best candidate %s)", message, best)
    return IRRResult(IRRStatus.NON_CONVERGENT, best_rate=best, iterations=iterations, message=message)
