"""Closed-form IRR sensitivity tables.

Each variable shifts the base IRR by a fixed elasticity instead of
re-projecting cash flows, so tables are instant and reproducible:

    rent:          IRR x (1 + 1.5 x change)
    construction:  IRR x (1 - 0.8 x change)
    cap rate:      IRR x (1 - 0.02 x change_pp)
    interest rate: IRR x (1 - 0.005 x change_pp)

Percentage changes are decimals; bps changes are converted to percentage
points (change_pp = bps / 100).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .numeric import finite_or_zero


class ChangeUnit(str, Enum):
    """How a variable's perturbations are quoted."""
    PERCENT = "percent"  # Decimal fraction of the input
    BPS = "bps"  # Absolute basis points


@dataclass(frozen=True)
class SensitivityVariable:
    """A perturbed input with its elasticity and perturbation grid."""

    name: str
    label: str
    unit: ChangeUnit
    coefficient: float  # Signed IRR elasticity per unit change
    changes: Tuple[float, ...]

    def scale(self, change: float) -> float:
        """Change expressed in the unit the coefficient applies to."""
        return change / 100 if self.unit == ChangeUnit.BPS else change


@dataclass(frozen=True)
class SensitivityRow:
    """One row of a sensitivity table."""

    change: float
    irr: float
    delta: float


DEFAULT_SENSITIVITY_VARIABLES: Dict[str, SensitivityVariable] = {
    variable.name: variable
    for variable in (
        SensitivityVariable(
            "rent", "Rent", ChangeUnit.PERCENT, 1.5,
            (-0.15, -0.10, -0.05, 0.0, 0.05, 0.10, 0.15),
        ),
        SensitivityVariable(
            "construction", "Construction Cost", ChangeUnit.PERCENT, -0.8,
            (-0.10, -0.05, -0.025, 0.0, 0.025, 0.05, 0.10),
        ),
        SensitivityVariable(
            "cap_rate", "Exit Cap Rate", ChangeUnit.BPS, -0.02,
            (-75, -50, -25, 0, 25, 50, 75),
        ),
        SensitivityVariable(
            "interest_rate", "Interest Rate", ChangeUnit.BPS, -0.005,
            (-100, -75, -50, -25, 0, 25, 50, 75, 100),
        ),
    )
}


def sensitivity_irr(base_irr: float, variable: SensitivityVariable, change: float) -> float:
    """IRR after applying ``change`` to ``variable``.

    Example:
        >>> rent = DEFAULT_SENSITIVITY_VARIABLES["rent"]
        >>> round(sensitivity_irr(0.10, rent, 0.10), 6)
        0.115
    """
    return finite_or_zero(base_irr * (1 + variable.coefficient * variable.scale(change)))


def run_sensitivity(
    base_irr: float,
    variable: str,
    changes: Optional[Sequence[float]] = None,
    variables: Optional[Dict[str, SensitivityVariable]] = None,
) -> List[SensitivityRow]:
    """Build the sensitivity table for one variable.

    Args:
        base_irr: Project IRR as a decimal.
        variable: Variable name (``rent``, ``construction``, ``cap_rate``,
            ``interest_rate``).
        changes: Override the variable's default perturbation grid.
        variables: Variable definitions (defaults to DEFAULT_SENSITIVITY_VARIABLES).

    Returns:
        One SensitivityRow per change, in grid order.

    Raises:
        ValueError: If ``variable`` is not defined.
    """
    variables = variables or DEFAULT_SENSITIVITY_VARIABLES
    if variable not in variables:
        raise ValueError(f"Unknown sensitivity variable: {variable}")
    definition = variables[variable]
    base_irr = finite_or_zero(base_irr)

    rows = []
    for change in definition.changes if changes is None else changes:
        irr = sensitivity_irr(base_irr, definition, change)
        rows.append(SensitivityRow(change=change, irr=irr, delta=irr - base_irr))
    return rows


def run_all_sensitivities(
    base_irr: float,
    variables: Optional[Dict[str, SensitivityVariable]] = None,
) -> Dict[str, List[SensitivityRow]]:
    """Sensitivity tables for every defined variable."""
    variables = variables or DEFAULT_SENSITIVITY_VARIABLES
    return {name: run_sensitivity(base_irr, name, variables=variables) for name in variables}
