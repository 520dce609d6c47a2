#!/usr/bin/env python3
"""Example Monte Carlo simulation on the office reference case.

Usage:
    python examples/run_monte_carlo.py

Rent, total cost and exit cap rate are perturbed around the base case and a
yield-on-cost IRR is recomputed for each draw. The run prints the IRR
distribution, percentile bands and the probability of clearing target
returns.
"""

import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from proforma.models import ConfigurationModel, PropertyType
from proforma.calculations.costs import calculate_development_cost
from proforma.calculations.monte_carlo import BaseInputs, MonteCarloConfig, run_monte_carlo


def main():
    """Run Monte Carlo simulation on the office reference case."""

    print("=" * 70)
    print("PRO-FORMA ENGINE - MONTE CARLO SIMULATION")
    print("=" * 70)
    print()

    config = ConfigurationModel.for_property_type(PropertyType.OFFICE)
    cost = calculate_development_cost(config)
    base_inputs = BaseInputs.from_config(config, cost)

    print("Base inputs:")
    print(f"  Rent:        ${base_inputs.annual_rent_psf:,.2f}/SF/yr")
    print(f"  Area:        {base_inputs.area_sf:,.0f} SF")
    print(f"  Vacancy:     {base_inputs.vacancy:.1%}")
    print(f"  Total cost:  ${base_inputs.total_cost:,.0f}")
    print(f"  Exit cap:    {base_inputs.cap_rate:.2%}")
    print()

    mc_config = MonteCarloConfig(
        iterations=5_000,
        rent_volatility=0.10,
        cost_volatility=0.05,
        cap_rate_volatility_bps=50,
        seed=42,  # For reproducibility
        parallel=True,
    )

    def progress(completed, total):
        if completed % 1_000 == 0 or completed == total:
            print(f"  {completed:,}/{total:,} iterations", end="\r")

    start = time.perf_counter()
    result = run_monte_carlo(base_inputs, mc_config, progress_callback=progress)
    elapsed = time.perf_counter() - start

    print()
    print(result.summary())
    print(f"\nCompleted in {elapsed:.2f}s")

    print("\nProbability of clearing targets:")
    for target in (0.05, 0.08, 0.10, 0.12, 0.15):
        print(f"  P(IRR > {target:.0%}): {result.probability_above(target):.1%}")


if __name__ == "__main__":
    main()
