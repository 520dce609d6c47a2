"""Monte Carlo simulation of a yield-on-cost-derived IRR.

Each iteration perturbs rent, total cost and exit cap rate and recomputes a
simplified IRR:

    Yield on cost = rent x area x (1 - vacancy) / cost
    IRR           = YoC + (YoC - cap rate) x 0.5

Rent variation is normal (Box-Muller, std = volatility / 3, so ~99.7% of
draws fall within the volatility); cost and cap-rate variations are uniform
within +/- their volatility.

Every iteration draws from its own generator seeded by a master generator, so
results are reproducible under a fixed seed whether or not iterations run in
parallel.

Typical usage:
    from proforma.calculations.monte_carlo import BaseInputs, MonteCarloConfig, run_monte_carlo

    base = BaseInputs.from_config(config, cost)
    result = run_monte_carlo(base, MonteCarloConfig(iterations=1000, seed=42))
    print(f"P50 IRR: {result.p50:.2%}")
"""

import concurrent.futures
import logging
import math
import multiprocessing
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from ..models.config import ConfigurationModel
from ..models.lookups import PropertyType
from .costs import DevelopmentCost
from .mixed_use import component_cash_flows
from .numeric import safe_divide

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation.

    Attributes:
        iterations: Number of simulation iterations
        rent_volatility: Rent volatility as a decimal (3 std devs)
        cost_volatility: Max +/- total cost variation as a decimal
        cap_rate_volatility_bps: Max +/- cap rate variation in bps
        seed: Random seed for reproducibility
        parallel: Whether to run iterations in a thread pool
        max_workers: Max parallel workers (None = CPU count, capped at 8)
    """
    iterations: int = 1000
    rent_volatility: float = 0.10
    cost_volatility: float = 0.05
    cap_rate_volatility_bps: float = 50
    seed: Optional[int] = None
    parallel: bool = False
    max_workers: Optional[int] = None


@dataclass
class BaseInputs:
    """Base-case values the simulation perturbs."""
    annual_rent_psf: float
    area_sf: float
    vacancy: float
    total_cost: float
    cap_rate: float

    @classmethod
    def from_config(cls, config: ConfigurationModel, cost: DevelopmentCost) -> "BaseInputs":
        """Extract base inputs for a rent-producing archetype.

        Apartment rent is quoted monthly per SF of the unit mix and is
        annualized here. Mixed-use folds the enabled operating components
        into one effective rent over their leased area, net of each
        component's own vacancy.

        Raises:
            ValueError: For the for-sale archetype, which has no stabilized
                rent for a yield-on-cost IRR.
        """
        operating = config.operating
        if config.property_type == PropertyType.FOR_SALE:
            raise ValueError("Yield-on-cost simulation needs a rent-producing archetype, not for-sale")

        if config.property_type == PropertyType.MIXED_USE:
            program = config.mixed_use
            area = program.commercial_sf
            if program.affordable.enabled:
                area += program.affordable.units * program.affordable.avg_size
            revenue = sum(flow.revenue for flow in component_cash_flows(program))
            return cls(
                annual_rent_psf=safe_divide(revenue, area),
                area_sf=max(0.0, area),
                vacancy=0.0,
                total_cost=cost.total,
                cap_rate=operating.cap_rate,
            )

        if config.property_type == PropertyType.APARTMENT:
            rent, area = operating.rent_psf * 12, config.unit_mix_sf
        else:
            rent, area = operating.rent_psf, config.site.building_gfa
        return cls(
            annual_rent_psf=rent,
            area_sf=max(0.0, area),
            vacancy=operating.vacancy,
            total_cost=cost.total,
            cap_rate=operating.cap_rate,
        )


@dataclass
class IterationResult:
    """Result from a single Monte Carlo iteration."""
    iteration: int
    rent_variation: float
    cost_variation: float
    cap_rate_variation: float
    irr: float


@dataclass
class MonteCarloResult:
    """Monte Carlo simulation results.

    Percentiles index the sorted sample directly: p10 = sorted[floor(n x 0.10)].
    """
    n_iterations: int  # Valid iterations
    dropped: int  # Iterations discarded for non-finite IRR
    iterations: List[IterationResult]
    mean: float
    std: float
    p10: float
    p50: float
    p90: float
    min: float
    max: float
    distribution: List[float] = field(default_factory=list)  # Sorted IRRs

    def get_irr_distribution(self) -> np.ndarray:
        """Get array of all valid IRR values, sorted."""
        return np.array(self.distribution)

    def probability_above(self, target_irr: float) -> float:
        """Share of iterations with IRR above ``target_irr``."""
        if not self.distribution:
            return 0.0
        return float(np.mean(self.get_irr_distribution() > target_irr))

    def summary(self) -> str:
        """Return a formatted summary of results."""
        lines = [
            "=" * 60,
            "MONTE CARLO SIMULATION RESULTS",
            "=" * 60,
            f"Iterations: {self.n_iterations:,}",
            f"Dropped:    {self.dropped:,}",
            "",
            "IRR",
            "-" * 40,
            f"  Mean:   {self.mean:>8.2%}",
            f"  Std:    {self.std:>8.2%}",
            f"  P10:    {self.p10:>8.2%}",
            f"  P50:    {self.p50:>8.2%}",
            f"  P90:    {self.p90:>8.2%}",
            f"  Min:    {self.min:>8.2%}",
            f"  Max:    {self.max:>8.2%}",
            "",
            "PROBABILITIES",
            "-" * 40,
            f"  P(IRR > 0%):   {self.probability_above(0.0):>6.1%}",
            f"  P(IRR > 10%):  {self.probability_above(0.10):>6.1%}",
            "=" * 60,
        ]
        return "\n".join(lines)


def box_muller(rng: np.random.Generator) -> float:
    """Standard normal draw via the Box-Muller transform."""
    u = 0.0
    v = 0.0
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def yield_based_irr(annual_rent_psf: float, area_sf: float, vacancy: float, total_cost: float, cap_rate: float) -> float:
    """Simplified IRR from yield on cost and the exit cap rate.

    Example:
        >>> round(yield_based_irr(40.0, 50_000, 0.0, 20_000_000, 0.06), 6)
        0.12
    """
    if total_cost <= 0:
        yield_on_cost = 0.0
    else:
        yield_on_cost = annual_rent_psf * area_sf * (1 - vacancy) / total_cost
    return yield_on_cost + (yield_on_cost - cap_rate) * 0.5


def _run_single_iteration(
    iteration: int,
    base: BaseInputs,
    config: MonteCarloConfig,
    seed: int,
) -> IterationResult:
    """Run a single Monte Carlo iteration.

    Args:
        iteration: Iteration number
        base: Base-case inputs
        config: Volatilities
        seed: Random seed for this iteration

    Returns:
        IterationResult with the sampled variations and IRR
    """
    rng = np.random.default_rng(seed)

    rent_variation = box_muller(rng) * config.rent_volatility / 3
    cost_variation = (rng.random() - 0.5) * 2 * config.cost_volatility
    cap_rate_variation = (rng.random() - 0.5) * 2 * config.cap_rate_volatility_bps / 10_000

    irr = yield_based_irr(
        annual_rent_psf=base.annual_rent_psf * (1 + rent_variation),
        area_sf=base.area_sf,
        vacancy=base.vacancy,
        total_cost=base.total_cost * (1 + cost_variation),
        cap_rate=base.cap_rate + cap_rate_variation,
    )

    return IterationResult(
        iteration=iteration,
        rent_variation=rent_variation,
        cost_variation=cost_variation,
        cap_rate_variation=cap_rate_variation,
        irr=irr,
    )


def _empty_result(dropped: int, iterations: List[IterationResult]) -> MonteCarloResult:
    return MonteCarloResult(
        n_iterations=0, dropped=dropped, iterations=iterations,
        mean=0.0, std=0.0, p10=0.0, p50=0.0, p90=0.0, min=0.0, max=0.0,
    )


def run_monte_carlo(
    base: BaseInputs,
    config: Optional[MonteCarloConfig] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> MonteCarloResult:
    """Run Monte Carlo simulation.

    Args:
        base: Base-case inputs
        config: Simulation configuration
        progress_callback: Optional callback(completed, total) for progress updates

    Returns:
        MonteCarloResult with statistics and iteration data. If every
        iteration is non-finite, all statistics are 0.0.
    """
    config = config or MonteCarloConfig()
    n = max(0, config.iterations)

    # Create master RNG for reproducibility
    master_rng = np.random.default_rng(config.seed)
    iteration_seeds = master_rng.integers(0, 2**31, size=n)

    results: List[IterationResult] = []

    if config.parallel and n > 10:
        max_workers = config.max_workers or min(multiprocessing.cpu_count(), 8)

        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_run_single_iteration, i, base, config, int(iteration_seeds[i]))
                for i in range(n)
            ]
            for i, future in enumerate(concurrent.futures.as_completed(futures)):
                results.append(future.result())
                if progress_callback:
                    progress_callback(i + 1, n)
    else:
        for i in range(n):
            results.append(_run_single_iteration(i, base, config, int(iteration_seeds[i])))
            if progress_callback:
                progress_callback(i + 1, n)

    # Sort by iteration number
    results.sort(key=lambda r: r.iteration)

    valid = sorted(r.irr for r in results if math.isfinite(r.irr))
    dropped = len(results) - len(valid)
    if dropped:
        logger.warning("Monte Carlo dropped %d non-finite iterations of %d", dropped, len(results))
    if not valid:
        return _empty_result(dropped, results)

    irrs = np.array(valid)
    count = len(valid)
    logger.debug("Monte Carlo: %d iterations, mean IRR %.4f", count, float(irrs.mean()))

    return MonteCarloResult(
        n_iterations=count,
        dropped=dropped,
        iterations=results,
        mean=float(np.mean(irrs)),
        std=float(np.std(irrs)),
        p10=valid[int(math.floor(count * 0.1))],
        p50=valid[int(math.floor(count * 0.5))],
        p90=valid[min(count - 1, int(math.floor(count * 0.9)))],
        min=valid[0],
        max=valid[-1],
        distribution=valid,
    )
