"""Public incentives for the mixed-use archetype: TIF and state funding."""

from dataclasses import dataclass
from typing import Sequence

import numpy_financial as npf

from ..models.config import StateFundingSource, TIFDistrict
from ..models.lookups import (
    STATE_FUNDING_MILESTONE_YEARS,
    TIF_BONDING_RATIO,
    DisbursementSchedule,
)


@dataclass
class TIFResult:
    """Annual TIF increment and its financing capacity."""

    assessed_value: float
    incremental_value: float
    annual_increment: float
    term_years: int
    capacity: float  # PV of the increment stream over the term
    bonding_capacity: float

    def revenue(self, year: int) -> float:
        """TIF revenue for an operating year; zero after the term ends."""
        if 1 <= year <= self.term_years:
            return self.annual_increment
        return 0.0


def calculate_tif(tif: TIFDistrict, assessed_value: float) -> TIFResult:
    """Calculate captured tax increment.

    Increment = max(0, assessed value - base value) x tax rate x capture rate

    Args:
        tif: TIF district terms.
        assessed_value: Post-development assessed value.

    Returns:
        TIFResult. Zero increment when the district is disabled.

    Example:
        >>> tif = TIFDistrict(base_assessed_value=10_000_000, tax_rate=0.012, capture_rate=0.75)
        >>> round(calculate_tif(tif, 60_000_000).annual_increment)
        450000
    """
    incremental = max(0.0, assessed_value - tif.base_assessed_value)
    annual = incremental * tif.tax_rate * tif.capture_rate if tif.enabled else 0.0
    term = max(0, tif.term_years)

    capacity = 0.0
    if annual > 0 and term > 0:
        capacity = float(-npf.pv(rate=tif.discount_rate, nper=term, pmt=annual, fv=0))

    return TIFResult(
        assessed_value=assessed_value,
        incremental_value=incremental,
        annual_increment=annual,
        term_years=term,
        capacity=capacity,
        bonding_capacity=capacity * TIF_BONDING_RATIO,
    )


def state_funding_disbursement(sources: Sequence[StateFundingSource], year: int) -> float:
    """Total external funding paid out in an operating year.

    Upfront sources pay in year 1, milestone sources split evenly across
    years 1-3, completion sources pay in year 3.
    """
    total = 0.0
    for source in sources:
        if not source.enabled or year < 1:
            continue
        if source.schedule == DisbursementSchedule.UPFRONT and year == 1:
            total += source.amount
        elif source.schedule == DisbursementSchedule.MILESTONE and year <= STATE_FUNDING_MILESTONE_YEARS:
            total += source.amount / STATE_FUNDING_MILESTONE_YEARS
        elif source.schedule == DisbursementSchedule.COMPLETION and year == STATE_FUNDING_MILESTONE_YEARS:
            total += source.amount
    return total
