"""Development cost calculations: land, hard, soft and developer fee."""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict

from ..models.config import ConfigurationModel, enabled_value
from ..models.lookups import PropertyType
from .numeric import safe_divide

logger = logging.getLogger(__name__)


@dataclass
class DevelopmentCost:
    """Results of total development cost calculation."""

    land_cost: float
    buildable_sf: float  # Area the per-SF building rates apply to
    site_area_sf: float
    parking_spaces: int

    # Hard cost build-up
    building_cost: float
    site_work: float
    parking_cost: float
    landscaping_cost: float
    amenity_cost: float
    public_contributions: float  # Netted against mixed-use hard cost
    hard_cost_before_contingency: float
    contingency: float
    hard_cost: float  # Including contingency

    soft_cost_items: Dict[str, float] = field(default_factory=dict)
    soft_cost: float = 0.0
    developer_fee: float = 0.0
    total: float = 0.0

    @property
    def cost_per_sf(self) -> float:
        return safe_divide(self.total, self.buildable_sf)


def count_parking_spaces(area_sf: float, parking_ratio: float) -> int:
    """Spaces required at ``parking_ratio`` per 1,000 SF, rounded half up."""
    if area_sf <= 0 or parking_ratio <= 0:
        return 0
    return int(math.floor(area_sf / 1000 * parking_ratio + 0.5))


def calculate_soft_costs(
    hard_cost: float,
    land_cost: float,
    building_gfa: float,
    config: ConfigurationModel,
) -> Dict[str, float]:
    """Calculate each soft-cost line item. Disabled items contribute zero.

    Args:
        hard_cost: Hard cost including contingency.
        land_cost: Land cost.
        building_gfa: Gross floor area for per-SF items.
        config: Configuration supplying the soft-cost table.

    Returns:
        Dict of line item name -> amount.
    """
    soft = config.soft_costs
    return {
        "architecture_engineering": hard_cost * enabled_value(soft.architecture_engineering),
        "permits_impact_fees": max(0.0, building_gfa) * enabled_value(soft.permits_psf),
        "legal_accounting": enabled_value(soft.legal_accounting),
        "construction_property_tax": land_cost * enabled_value(soft.construction_property_tax),
        "construction_insurance": hard_cost * enabled_value(soft.construction_insurance),
        "marketing_leasing": enabled_value(soft.marketing_leasing),
        "construction_management": hard_cost * enabled_value(soft.construction_management),
    }


def calculate_development_cost(config: ConfigurationModel) -> DevelopmentCost:
    """Calculate Total Development Cost for the configured archetype.

    Hard cost = building rate x buildable area + site work + parking
    + landscaping (each toggleable), x (1 + contingency). Mixed-use sums the
    enabled components, prices the parking structure and amenity only when
    they are enabled, and nets public contributions, floored at zero.

    Total = Land + Hard + Soft + Developer Fee

    Args:
        config: Project configuration.

    Returns:
        DevelopmentCost with the full build-up.

    Example:
        >>> cost = calculate_development_cost(ConfigurationModel())
        >>> round(cost.hard_cost)
        14763630
    """
    site = config.site
    hard = config.hard_costs
    land_cost = config.land_cost
    site_area_sf = site.site_area_sf

    amenity_cost = 0.0
    public_contributions = 0.0

    if config.property_type == PropertyType.MIXED_USE:
        program = config.mixed_use
        buildable_sf = program.commercial_sf + program.residential_sf
        parking_spaces = 0
        parking_cost = 0.0
        if program.parking.enabled:
            parking_spaces = program.parking.total_spaces
            parking_cost = program.parking.build_cost
        if program.amenity.enabled:
            amenity_cost = program.amenity.build_cost
        public_contributions = (
            program.public_financing.land_contribution
            + program.public_financing.infrastructure_contribution
        )
    else:
        if config.property_type == PropertyType.FOR_SALE:
            buildable_sf = config.sales.total_units * config.sales.avg_unit_size
        else:
            buildable_sf = site.building_gfa
        parking_spaces = (
            count_parking_spaces(site.building_gfa, site.parking_ratio) if site.include_parking else 0
        )
        parking_cost = parking_spaces * hard.parking_surface_per_space

    buildable_sf = max(0.0, buildable_sf)
    building_cost = hard.building_psf * buildable_sf
    site_work = enabled_value(hard.site_work)
    landscaping_cost = enabled_value(hard.landscaping_psf) * site_area_sf

    hard_before = max(
        0.0,
        building_cost + site_work + parking_cost + landscaping_cost + amenity_cost - public_contributions,
    )
    contingency = hard_before * hard.contingency
    hard_cost = hard_before + contingency

    soft_items = calculate_soft_costs(hard_cost, land_cost, site.building_gfa, config)
    soft_cost = sum(soft_items.values())

    before_fee = land_cost + hard_cost + soft_cost
    developer_fee = before_fee * enabled_value(config.soft_costs.developer_fee)
    total = before_fee + developer_fee

    logger.debug(
        "%s cost: land=%.0f hard=%.0f soft=%.0f fee=%.0f total=%.0f",
        config.property_type.value, land_cost, hard_cost, soft_cost, developer_fee, total,
    )

    return DevelopmentCost(
        land_cost=land_cost,
        buildable_sf=buildable_sf,
        site_area_sf=site_area_sf,
        parking_spaces=parking_spaces,
        building_cost=building_cost,
        site_work=site_work,
        parking_cost=parking_cost,
        landscaping_cost=landscaping_cost,
        amenity_cost=amenity_cost,
        public_contributions=public_contributions,
        hard_cost_before_contingency=hard_before,
        contingency=contingency,
        hard_cost=hard_cost,
        soft_cost_items=soft_items,
        soft_cost=soft_cost,
        developer_fee=developer_fee,
        total=total,
    )
