#!/usr/bin/env python3
"""Example script running the pro-forma engine on the reference configurations."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from proforma.models import ConfigurationModel, PropertyType
from proforma.calculations.deal import calculate_deal
from proforma.calculations.goal_seek import goal_seek
from proforma.calculations.sensitivity import run_all_sensitivities
from proforma.scenarios import run_scenario_analysis


def run_office_deal():
    """Run the office reference case and print its returns."""
    print("\n" + "=" * 60)
    print("OFFICE REFERENCE CASE")
    print("=" * 60 + "\n")

    config = ConfigurationModel.for_property_type(PropertyType.OFFICE)
    deal = calculate_deal(config)

    print(f"Total Development Cost: ${deal.cost.total:>14,.0f}")
    print(f"Construction Loan:      ${deal.financing.construction_loan_amount:>14,.0f}")
    print(f"Equity Required:        ${deal.financing.equity_required:>14,.0f}")
    print(f"Permanent Loan:         ${deal.projection.permanent_loan_amount:>14,.0f}")
    print()
    print(deal.summary())

    print(f"\n{'Year':>4} {'NOI':>14} {'Debt Service':>14} {'Cash Flow':>14} {'Cumulative':>14}")
    print("-" * 64)
    for record in deal.records:
        print(
            f"{record.year:>4} {record.noi:>14,.0f} {record.debt_service:>14,.0f} "
            f"{record.cash_flow:>14,.0f} {record.cumulative_cash_flow:>14,.0f}"
        )

    for issue in deal.issues:
        print(f"  [{issue.severity.value}] {issue.field}: {issue.message}")

    return deal


def run_all_archetypes():
    """Compare headline returns across property types."""
    print("\n" + "=" * 60)
    print("ARCHETYPE COMPARISON")
    print("=" * 60 + "\n")

    print(f"{'Property Type':<16} {'TDC':>14} {'Equity':>14} {'IRR':>8} {'Multiple':>9}")
    print("-" * 64)
    for property_type in PropertyType:
        deal = calculate_deal(ConfigurationModel.for_property_type(property_type))
        irr = f"{deal.irr:>8.2%}" if deal.returns.irr_available else f"{'n/a':>8}"
        print(
            f"{property_type.value:<16} ${deal.cost.total:>13,.0f} ${deal.financing.equity_required:>13,.0f} "
            f"{irr} {deal.returns.equity_multiple:>8.2f}x"
        )


def run_risk(deal):
    """Sensitivity tables, scenarios and a goal seek on rent."""
    print("\n" + "=" * 60)
    print("SENSITIVITY (closed-form)")
    print("=" * 60)

    for name, rows in run_all_sensitivities(deal.irr).items():
        cells = "  ".join(f"{row.change:+g}: {row.irr:.2%}" for row in rows)
        print(f"{name:<14} {cells}")

    print()
    print(run_scenario_analysis(deal.config, deal.cost).summary())

    print("\nGoal seek: rent for a 10% project IRR")
    result = goal_seek(deal.config, "operating.rent_psf", 0.10, 20.0, 80.0)
    if result.converged:
        print(f"  Rent ${result.value:,.2f}/SF reaches {result.achieved_irr:.2%} in {result.iterations} iterations")
    else:
        print(f"  Not reached: {result.message}")


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    deal = run_office_deal()
    run_all_archetypes()
    run_risk(deal)


if __name__ == "__main__":
    main()
