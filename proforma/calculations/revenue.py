"""Revenue calculations: rent escalation, percentage rent and ancillary income."""

from ..models.config import (
    ApartmentEscalation,
    OfficeEscalation,
    ParkingRevenue,
    RetailEscalation,
)
from ..models.lookups import EscalationPattern


def escalate_rent(rent: float, year: int, growth_rate: float) -> float:
    """Compound rent by ``growth_rate`` for every year after year 1."""
    if year <= 1:
        return rent
    return rent * (1 + growth_rate)


def escalate_office_rent(rent: float, year: int, escalation: OfficeEscalation) -> float:
    """Apply the office escalation pattern to the prior year's rent.

    Stepped: rent jumps by ``step_increase`` in years 1 + k x step_years
    (k >= 1). Annual: compounds every year after year 1.

    Args:
        rent: Prior year's rent.
        year: Operating year being projected (1-indexed).
        escalation: Office escalation terms.

    Returns:
        Rent for ``year``.

    Example:
        >>> esc = OfficeEscalation(step_years=5, step_increase=0.10)
        >>> escalate_office_rent(35.0, 3, esc)
        35.0
        >>> round(escalate_office_rent(35.0, 6, esc), 2)
        38.5
    """
    if year <= 1:
        return rent
    if escalation.pattern == EscalationPattern.STEPPED:
        if escalation.step_years > 0 and (year - 1) % escalation.step_years == 0:
            return rent * (1 + escalation.step_increase)
        return rent
    return rent * (1 + escalation.annual_increase)


def escalate_retail_rent(rent: float, year: int, escalation: RetailEscalation) -> float:
    return escalate_rent(rent, year, escalation.annual_increase)


def blend_apartment_rent(rent: float, year: int, escalation: ApartmentEscalation) -> float:
    """Blend renewal and new-lease rent by turnover.

    Renewal = rent x (1 + g)
    New lease = rent x (1 + g) x (1 - loss_to_lease)
    Blended = Renewal x (1 - turnover) + New lease x turnover
    """
    if year <= 1:
        return rent
    renewal = rent * (1 + escalation.annual_increase)
    new_lease = renewal * (1 - escalation.loss_to_lease)
    return renewal * (1 - escalation.turnover) + new_lease * escalation.turnover


def calculate_percentage_rent(rent_psf: float, area_sf: float, escalation: RetailEscalation) -> float:
    """Retail percentage rent above the natural breakpoint.

    Natural breakpoint = base rent / threshold; percentage rent is the
    threshold share of sales above it.

    Args:
        rent_psf: Current base rent per SF.
        area_sf: Leasable area.
        escalation: Retail terms (sales/SF, threshold).

    Returns:
        Annual percentage rent (0 if sales are below breakpoint or disabled).
    """
    if not escalation.percentage_rent or area_sf <= 0:
        return 0.0
    threshold = escalation.percentage_threshold
    total_sales = escalation.sales_psf * area_sf
    breakpoint = rent_psf * area_sf / threshold if threshold > 0 else 0.0
    if total_sales <= breakpoint:
        return 0.0
    return (total_sales - breakpoint) * threshold


def calculate_parking_revenue(spaces: int, parking: ParkingRevenue) -> float:
    """Annual parking revenue: reserved spaces always pay, unreserved at occupancy."""
    if spaces <= 0:
        return 0.0
    reserved = spaces * parking.reserved * parking.monthly_rate
    unreserved = spaces * (1 - parking.reserved) * parking.monthly_rate * parking.occupancy
    return (reserved + unreserved) * 12

