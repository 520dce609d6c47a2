"""Configuration model containing every input for a pro-forma run.

The model is a tree of frozen dataclasses. Engine stages read it and never
mutate it; perturbed copies for risk analysis and goal seek are produced with
``replace_field``.

Toggleable line items are ``Optional[float]``: ``None`` disables the item and
it contributes exactly zero.
"""

import logging
import math
import types
from dataclasses import dataclass, field, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .lookups import (
    CLOSING_MILESTONE,
    DEFAULT_DEPOSIT_SCHEDULE,
    DEFAULT_SALES_PHASES,
    DEFAULT_UNIT_MIX,
    DEFAULT_WATERFALL_TIERS,
    SQFT_PER_ACRE,
    DisbursementSchedule,
    EscalationPattern,
    GroundLeaseEscalation,
    GroundLeaseStructure,
    PropertyType,
)

logger = logging.getLogger(__name__)


def enabled_value(item: Optional[float]) -> float:
    """Contribution of a toggleable line item (0.0 when disabled)."""
    return 0.0 if item is None else item


@dataclass(frozen=True)
class SiteInputs:
    """Land, site and building geometry."""

    land_cost: float = 5_000_000
    site_acres: float = 1.0
    building_gfa: float = 50_000  # Gross floor area, SF
    parking_ratio: float = 2.5  # Spaces per 1,000 SF
    include_parking: bool = True

    @property
    def site_area_sf(self) -> float:
        return max(0.0, self.site_acres * SQFT_PER_ACRE)


@dataclass(frozen=True)
class HardCosts:
    """Hard-cost rates. Contingency applies to the hard-cost subtotal."""

    core_shell_psf: float = 200.0
    tenant_improvements_psf: float = 50.0
    site_work: Optional[float] = 500_000
    parking_surface_per_space: float = 5_000
    landscaping_psf: Optional[float] = 10.0  # Per SF of site area
    contingency: float = 0.05

    @property
    def building_psf(self) -> float:
        return self.core_shell_psf + self.tenant_improvements_psf


@dataclass(frozen=True)
class SoftCosts:
    """Soft-cost line items.

    Percentages are of hard cost with contingency unless noted.
    """

    architecture_engineering: Optional[float] = 0.06
    permits_psf: Optional[float] = 15.0  # Per SF of GFA
    legal_accounting: Optional[float] = 0.0  # Flat
    construction_property_tax: Optional[float] = 0.012  # Of land cost
    construction_insurance: Optional[float] = 0.005
    marketing_leasing: Optional[float] = 0.0  # Flat
    construction_management: Optional[float] = 0.03
    developer_fee: Optional[float] = 0.04  # Of land + hard + soft


@dataclass(frozen=True)
class ConstructionLoanTerms:
    """Construction loan terms."""

    enabled: bool = True
    ltc: float = 0.65
    rate: float = 0.085
    origination_fee: float = 0.01
    avg_outstanding: float = 0.60  # Average drawn balance as share of commitment
    construction_months: int = 24


@dataclass(frozen=True)
class PermanentLoanTerms:
    """Permanent (take-out) loan terms."""

    enabled: bool = True
    ltv: float = 0.70
    rate: float = 0.065
    amortization_years: int = 30
    term_years: int = 10
    io_years: int = 0


@dataclass(frozen=True)
class EquityStructure:
    """LP/GP equity split and distribution terms."""

    lp_share: float = 0.90
    gp_share: float = 0.10
    preferred_return: float = 0.08
    gp_coinvest: float = 0.10  # Share of GP's notional equity co-invested
    catch_up: bool = True
    catch_up_pct: float = 0.50  # Max share of the remaining pool paid as catch-up
    target_gp_promote: float = 0.20  # GP share of distributions the catch-up targets
    sponsor_promote: float = 0.0  # Uplift on GP's tiered-split distribution


@dataclass(frozen=True)
class WaterfallTier:
    """Promote split applying when project IRR is in [min_irr, max_irr)."""

    min_irr: float
    max_irr: Optional[float]  # None = unbounded
    lp_share: float
    gp_share: float

    @property
    def upper(self) -> float:
        return math.inf if self.max_irr is None else self.max_irr

    def contains(self, irr: float) -> bool:
        return self.min_irr <= irr < self.upper


def _default_tiers() -> Tuple[WaterfallTier, ...]:
    return tuple(WaterfallTier(*tier) for tier in DEFAULT_WATERFALL_TIERS)


@dataclass(frozen=True)
class OperatingAssumptions:
    """Stabilized operations and exit assumptions."""

    rent_psf: float = 35.0  # Apartment: per SF per month
    vacancy: float = 0.05
    opex: float = 8.0  # Per SF per year; apartment: per unit per year
    cap_rate: float = 0.065
    rent_growth: float = 0.03
    expense_growth: float = 0.025
    hold_years: int = 10
    exit_costs: float = 0.02


@dataclass(frozen=True)
class ParkingRevenue:
    """Monthly parking income for lease-based archetypes."""

    monthly_rate: float = 150.0
    occupancy: float = 0.85  # Of unreserved spaces
    reserved: float = 0.50  # Share of spaces leased as reserved


@dataclass(frozen=True)
class OfficeEscalation:
    pattern: EscalationPattern = EscalationPattern.STEPPED
    step_years: int = 5
    step_increase: float = 0.10
    annual_increase: float = 0.03


@dataclass(frozen=True)
class RetailEscalation:
    annual_increase: float = 0.03
    percentage_rent: bool = True
    sales_psf: float = 400.0
    percentage_threshold: float = 0.05


@dataclass(frozen=True)
class ApartmentEscalation:
    annual_increase: float = 0.03
    loss_to_lease: float = 0.02
    turnover: float = 0.50
    other_income: float = 50.0  # Per unit per month


@dataclass(frozen=True)
class UnitMixEntry:
    """Apartment unit type."""

    unit_type: str
    units: int
    size_sf: float


def _default_unit_mix() -> Tuple[UnitMixEntry, ...]:
    return tuple(UnitMixEntry(*entry) for entry in DEFAULT_UNIT_MIX)


@dataclass(frozen=True)
class SalesPhase:
    """For-sale release phase. Months count from project start."""

    units: int
    start_month: int
    delivery_month: int


@dataclass(frozen=True)
class DepositMilestone:
    milestone: str
    share: float


def _default_phases() -> Tuple[SalesPhase, ...]:
    return tuple(SalesPhase(*phase) for phase in DEFAULT_SALES_PHASES)


def _default_deposits() -> Tuple[DepositMilestone, ...]:
    return tuple(DepositMilestone(name, share) for name, share in DEFAULT_DEPOSIT_SCHEDULE.items())


@dataclass(frozen=True)
class SalesAssumptions:
    """For-sale absorption, pricing and selling costs."""

    total_units: int = 100
    avg_unit_size: float = 1_200
    avg_price: float = 750_000
    sales_pace: int = 5  # Units per month per phase
    price_escalation: float = 0.04  # Annual
    commission: float = 0.05
    marketing: float = 0.02
    closing_costs: float = 0.01
    horizon_months: int = 60
    deposits: Tuple[DepositMilestone, ...] = field(default_factory=_default_deposits)
    phases: Tuple[SalesPhase, ...] = field(default_factory=_default_phases)

    @property
    def deposit_share(self) -> float:
        """Share of price collected before closing."""
        return sum(d.share for d in self.deposits if d.milestone != CLOSING_MILESTONE)

    @property
    def closing_share(self) -> float:
        """Share of price collected at closing (0.80 if no closing milestone)."""
        for deposit in self.deposits:
            if deposit.milestone == CLOSING_MILESTONE:
                return deposit.share
        return DEFAULT_DEPOSIT_SCHEDULE[CLOSING_MILESTONE]

    @property
    def selling_cost_pct(self) -> float:
        return self.commission + self.marketing + self.closing_costs


@dataclass(frozen=True)
class CommercialComponent:
    """Leased commercial component of a mixed-use program."""

    enabled: bool = True
    sf: float = 0.0
    rent_psf: float = 0.0
    vacancy: float = 0.0
    opex_psf: float = 0.0


@dataclass(frozen=True)
class TownhomeComponent:
    enabled: bool = True
    units: int = 100
    avg_size: float = 2_000
    avg_price: float = 550_000


@dataclass(frozen=True)
class AffordableComponent:
    enabled: bool = True
    units: int = 20
    avg_size: float = 900
    rent_per_unit: float = 1_200  # Monthly
    vacancy: float = 0.05
    opex_per_unit: float = 5_000  # Annual


@dataclass(frozen=True)
class ParkingStructureComponent:
    """Paid parking structure with its own structured and surface spaces."""

    enabled: bool = False
    structured_spaces: int = 500
    surface_spaces: int = 100
    structured_cost_per_space: float = 25_000
    surface_cost_per_space: float = 5_000
    monthly_rate: float = 100.0
    utilization: float = 0.70

    @property
    def total_spaces(self) -> int:
        return max(0, self.structured_spaces) + max(0, self.surface_spaces)

    @property
    def build_cost(self) -> float:
        return (
            max(0, self.structured_spaces) * self.structured_cost_per_space
            + max(0, self.surface_spaces) * self.surface_cost_per_space
        )


@dataclass(frozen=True)
class AmenityComponent:
    """Event amenity (amphitheater) with ticketed revenue."""

    enabled: bool = False
    seats: int = 2_500
    annual_events: int = 40
    attendance: float = 0.65
    ticket_price: float = 35.0
    annual_maintenance: float = 250_000
    build_cost: float = 5_000_000


@dataclass(frozen=True)
class PublicFinancing:
    """Public contributions netted against mixed-use hard cost."""

    land_contribution: float = 0.0
    infrastructure_contribution: float = 0.0


@dataclass(frozen=True)
class LandParcel:
    name: str
    acres: float
    price_per_acre: float
    donated: bool = False


@dataclass(frozen=True)
class GroundLease:
    enabled: bool = False
    structure: GroundLeaseStructure = GroundLeaseStructure.PERCENTAGE_REVENUE
    base_rate: float = 0.0  # Annual, for base_plus_percentage
    percentage_rate: float = 0.10
    escalation: GroundLeaseEscalation = GroundLeaseEscalation.FIXED
    escalation_rate: float = 0.02
    escalation_cap: float = 0.03  # Max cumulative escalation per elapsed year; 0 = uncapped


@dataclass(frozen=True)
class TIFDistrict:
    enabled: bool = True
    capture_rate: float = 0.75
    term_years: int = 20
    base_assessed_value: float = 10_000_000
    tax_rate: float = 0.012
    discount_rate: float = 0.05  # For capacity reporting only


@dataclass(frozen=True)
class StateFundingSource:
    name: str
    amount: float
    schedule: DisbursementSchedule = DisbursementSchedule.MILESTONE
    enabled: bool = True


def _office_component() -> CommercialComponent:
    return CommercialComponent(sf=50_000, rent_psf=35.0, vacancy=0.10, opex_psf=8.0)


def _retail_component() -> CommercialComponent:
    return CommercialComponent(sf=30_000, rent_psf=30.0, vacancy=0.05, opex_psf=7.0)


def _grocery_component() -> CommercialComponent:
    return CommercialComponent(sf=45_000, rent_psf=20.0, vacancy=0.0, opex_psf=5.0)


@dataclass(frozen=True)
class MixedUseProgram:
    """Independently enabled sub-ledgers of a mixed-use development."""

    office: CommercialComponent = field(default_factory=_office_component)
    retail: CommercialComponent = field(default_factory=_retail_component)
    grocery: CommercialComponent = field(default_factory=_grocery_component)
    townhomes: TownhomeComponent = field(default_factory=TownhomeComponent)
    affordable: AffordableComponent = field(default_factory=AffordableComponent)
    parking: ParkingStructureComponent = field(default_factory=ParkingStructureComponent)
    amenity: AmenityComponent = field(default_factory=AmenityComponent)
    public_financing: PublicFinancing = field(default_factory=PublicFinancing)
    ground_lease: GroundLease = field(default_factory=GroundLease)
    tif: TIFDistrict = field(default_factory=TIFDistrict)
    state_funding: Tuple[StateFundingSource, ...] = ()
    parcels: Tuple[LandParcel, ...] = ()

    @property
    def commercial_components(self) -> Tuple[CommercialComponent, ...]:
        return (self.office, self.retail, self.grocery)

    @property
    def commercial_sf(self) -> float:
        return sum(c.sf for c in self.commercial_components if c.enabled)

    @property
    def residential_sf(self) -> float:
        total = 0.0
        if self.townhomes.enabled:
            total += self.townhomes.units * self.townhomes.avg_size
        if self.affordable.enabled:
            total += self.affordable.units * self.affordable.avg_size
        return total


@dataclass(frozen=True)
class ConfigurationModel:
    """Complete input set for one pro-forma calculation.

    Example:
        >>> config = ConfigurationModel.for_property_type(PropertyType.APARTMENT)
        >>> config.operating.rent_psf
        2.5
    """

    property_type: PropertyType = PropertyType.OFFICE
    site: SiteInputs = field(default_factory=SiteInputs)
    hard_costs: HardCosts = field(default_factory=HardCosts)
    soft_costs: SoftCosts = field(default_factory=SoftCosts)
    construction_loan: ConstructionLoanTerms = field(default_factory=ConstructionLoanTerms)
    permanent_loan: PermanentLoanTerms = field(default_factory=PermanentLoanTerms)
    equity: EquityStructure = field(default_factory=EquityStructure)
    waterfall_tiers: Tuple[WaterfallTier, ...] = field(default_factory=_default_tiers)
    operating: OperatingAssumptions = field(default_factory=OperatingAssumptions)
    parking_revenue: ParkingRevenue = field(default_factory=ParkingRevenue)
    office_escalation: OfficeEscalation = field(default_factory=OfficeEscalation)
    retail_escalation: RetailEscalation = field(default_factory=RetailEscalation)
    apartment_escalation: ApartmentEscalation = field(default_factory=ApartmentEscalation)
    unit_mix: Tuple[UnitMixEntry, ...] = field(default_factory=_default_unit_mix)
    sales: SalesAssumptions = field(default_factory=SalesAssumptions)
    mixed_use: MixedUseProgram = field(default_factory=MixedUseProgram)

    @classmethod
    def for_property_type(cls, property_type: PropertyType, **overrides: Any) -> "ConfigurationModel":
        """Build a default configuration with archetype-specific operating defaults."""
        operating = OperatingAssumptions()
        if property_type == PropertyType.APARTMENT:
            operating = replace(operating, rent_psf=2.5, opex=6_000)
        elif property_type == PropertyType.FOR_SALE:
            operating = replace(operating, rent_psf=625, opex=0)
        overrides.setdefault("operating", operating)
        return cls(property_type=property_type, **overrides)

    @property
    def total_units(self) -> int:
        """Total apartment units in the unit mix."""
        return sum(entry.units for entry in self.unit_mix)

    @property
    def unit_mix_sf(self) -> float:
        return sum(entry.units * entry.size_sf for entry in self.unit_mix)

    @property
    def land_cost(self) -> float:
        """Land cost, summing non-donated parcels when a mixed-use parcel list is given."""
        if self.property_type == PropertyType.MIXED_USE and self.mixed_use.parcels:
            return sum(
                0.0 if parcel.donated else parcel.acres * parcel.price_per_acre
                for parcel in self.mixed_use.parcels
            )
        return self.site.land_cost

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigurationModel":
        """Rebuild a configuration from its persisted form.

        Missing keys take their defaults, so configurations saved before a
        field existed still load. Unknown keys are ignored.

        Args:
            data: Mapping as produced by ``to_dict`` (possibly older/newer).

        Returns:
            ConfigurationModel.
        """
        return _from_mapping(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain, JSON-safe Python values."""
        return _to_plain(self)


def replace_field(config: Any, path: str, value: Any) -> Any:
    """Return a copy of ``config`` with the dotted ``path`` set to ``value``.

    Args:
        config: Configuration (or nested dataclass) to copy.
        path: Dotted attribute path, e.g. ``"operating.rent_psf"``.
        value: Replacement value.

    Returns:
        New dataclass instance; the original is untouched.

    Raises:
        KeyError: If a path segment does not name a field.
    """
    head, _, rest = path.partition(".")
    if head not in {f.name for f in fields(config)}:
        raise KeyError(f"Unknown configuration field: {head!r}")
    if rest:
        value = replace_field(getattr(config, head), rest, value)
    return replace(config, **{head: value})


def get_field(config: Any, path: str) -> Any:
    """Read the value at a dotted path."""
    for part in path.split("."):
        if part not in {f.name for f in fields(config)}:
            raise KeyError(f"Unknown configuration field: {part!r}")
        config = getattr(config, part)
    return config


def field_type(config: Any, path: str) -> Any:
    """Declared type of the field at a dotted path."""
    *parents, name = path.split(".")
    owner = get_field(config, ".".join(parents)) if parents else config
    hints = get_type_hints(type(owner))
    if name not in hints:
        raise KeyError(f"Unknown configuration field: {name!r}")
    return hints[name]


def _from_mapping(cls: type, data: Any) -> Any:
    if isinstance(data, cls):
        return data
    hints = get_type_hints(cls)
    names = {f.name for f in fields(cls)}
    unknown = set(data) - names
    if unknown:
        logger.debug("Ignoring unknown %s keys: %s", cls.__name__, sorted(unknown))
    kwargs = {name: _coerce(hints[name], data[name]) for name in names if name in data}
    return cls(**kwargs)


def _coerce(tp: Any, value: Any) -> Any:
    origin = get_origin(tp)

    if origin in (Union, types.UnionType):
        inner = [arg for arg in get_args(tp) if arg is not type(None)][0]
        if value is None:
            return None
        if isinstance(value, dict) and "enabled" in value:
            return _coerce(inner, value.get("value", 0.0)) if value["enabled"] else None
        return _coerce(inner, value)

    if origin is tuple:
        return tuple(_coerce(get_args(tp)[0], item) for item in value)

    if is_dataclass(tp):
        if isinstance(value, (list, tuple)):
            return tp(*value)
        return _from_mapping(tp, value)

    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)

    if tp is float:
        return float(value)
    if tp is int:
        return int(value)
    if tp is bool:
        return bool(value)
    return value


def _to_plain(obj: Any) -> Any:
    if is_dataclass(obj):
        return {f.name: _to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [_to_plain(item) for item in obj]
    return obj
