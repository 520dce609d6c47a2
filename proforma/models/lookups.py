"""Lookup enums and default tables for the pro-forma engine."""

from enum import Enum
from typing import Dict, List, Tuple

SQFT_PER_ACRE = 43_560

# Mixed-use operating constants carried over from the original underwriting tool
PARKING_OPEX_PER_SPACE = 500.0  # Annual operating cost per structured space
AMENITY_ANCILLARY_SHARE = 0.30  # Concessions/sponsorships as share of tickets
TOWNHOME_SELLOUT_YEARS = 3
STATE_FUNDING_MILESTONE_YEARS = 3
TIF_BONDING_RATIO = 0.90


class PropertyType(str, Enum):
    """Property archetype. Drives cost formula and cash-flow strategy."""

    OFFICE = "office"
    RETAIL = "retail"
    APARTMENT = "apartment"
    FOR_SALE = "for_sale"
    MIXED_USE = "mixed_use"


class EscalationPattern(str, Enum):
    """How office rent steps up over the hold period."""

    STEPPED = "stepped"  # Jump by step_increase every step_years
    ANNUAL = "annual"  # Compound annual_increase every year


class GroundLeaseStructure(str, Enum):
    """What the ground-lease payment is a percentage of."""

    PERCENTAGE_REVENUE = "percentage_revenue"
    PERCENTAGE_NOI = "percentage_noi"
    BASE_PLUS_PERCENTAGE = "base_plus_percentage"


class GroundLeaseEscalation(str, Enum):
    """Ground-lease escalation index."""

    FIXED = "fixed"
    CPI = "cpi"  # Uses the configured rate as the CPI estimate


class DisbursementSchedule(str, Enum):
    """When an external (state) funding source pays out."""

    UPFRONT = "upfront"  # All in year 1
    MILESTONE = "milestone"  # Split evenly over years 1-3
    COMPLETION = "completion"  # All in year 3


class Severity(str, Enum):
    """Severity of a configuration validation issue."""

    WARNING = "warning"
    ERROR = "error"


# (unit type, units, SF per unit)
DEFAULT_UNIT_MIX: List[Tuple[str, int, int]] = [
    ("Studio", 10, 500),
    ("1BR", 30, 750),
    ("2BR", 20, 1_100),
    ("3BR", 5, 1_400),
]

# (units, start month, delivery month)
DEFAULT_SALES_PHASES: List[Tuple[int, int, int]] = [
    (40, 0, 24),
    (30, 6, 30),
    (30, 12, 36),
]

# Milestone -> share of price. "Closing" is paid at delivery, the rest as deposits.
CLOSING_MILESTONE = "Closing"
DEFAULT_DEPOSIT_SCHEDULE: Dict[str, float] = {
    "Contract": 0.10,
    "Construction Start": 0.05,
    "50% Complete": 0.05,
    CLOSING_MILESTONE: 0.80,
}

# (min IRR, max IRR, LP share, GP share); None = unbounded
DEFAULT_WATERFALL_TIERS: List[Tuple[float, float | None, float, float]] = [
    (0.00, 0.08, 0.90, 0.10),
    (0.08, 0.12, 0.80, 0.20),
    (0.12, 0.15, 0.70, 0.30),
    (0.15, None, 0.60, 0.40),
]
