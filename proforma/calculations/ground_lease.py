"""Ground-lease payments for the mixed-use archetype."""

from dataclasses import dataclass

from ..models.config import GroundLease
from ..models.lookups import GroundLeaseStructure


@dataclass
class GroundLeasePayment:
    """Ground-lease payment for one operating year."""

    year: int
    base_payment: float
    escalation: float  # Dollar amount of escalation
    total_payment: float


def escalation_factor(lease: GroundLease, year: int) -> float:
    """Cumulative escalation as a fraction of the base payment.

    (1 + rate)^(year - 1) - 1, capped at ``escalation_cap x (year - 1)`` when
    a cap is set. Fixed and CPI escalation both compound at the configured
    rate.
    """
    if year <= 1:
        return 0.0
    factor = (1 + lease.escalation_rate) ** (year - 1) - 1
    if lease.escalation_cap > 0:
        factor = min(factor, lease.escalation_cap * (year - 1))
    return factor


def calculate_ground_lease_payment(
    lease: GroundLease,
    year: int,
    gross_revenue: float,
    noi: float,
) -> GroundLeasePayment:
    """Calculate the annual ground-lease payment.

    Args:
        lease: Ground-lease terms.
        year: Operating year (1-indexed).
        gross_revenue: Combined component revenue for the year.
        noi: Combined component NOI for the year.

    Returns:
        GroundLeasePayment (all zero when the lease is disabled).

    Example:
        >>> lease = GroundLease(enabled=True, percentage_rate=0.10)
        >>> calculate_ground_lease_payment(lease, 1, 5_000_000, 3_000_000).total_payment
        500000.0
    """
    if not lease.enabled:
        return GroundLeasePayment(year=year, base_payment=0.0, escalation=0.0, total_payment=0.0)

    if lease.structure == GroundLeaseStructure.PERCENTAGE_NOI:
        base = max(0.0, noi) * lease.percentage_rate
    elif lease.structure == GroundLeaseStructure.BASE_PLUS_PERCENTAGE:
        base = lease.base_rate + max(0.0, gross_revenue) * lease.percentage_rate
    else:
        base = max(0.0, gross_revenue) * lease.percentage_rate

    factor = escalation_factor(lease, year)
    return GroundLeasePayment(
        year=year,
        base_payment=base,
        escalation=base * factor,
        total_payment=base * (1 + factor),
    )
