"""Data models for the pro-forma engine."""

from .lookups import (
    PropertyType,
    EscalationPattern,
    GroundLeaseStructure,
    GroundLeaseEscalation,
    DisbursementSchedule,
    Severity,
    SQFT_PER_ACRE,
)
from .config import (
    SiteInputs,
    HardCosts,
    SoftCosts,
    ConstructionLoanTerms,
    PermanentLoanTerms,
    EquityStructure,
    WaterfallTier,
    OperatingAssumptions,
    ParkingRevenue,
    OfficeEscalation,
    RetailEscalation,
    ApartmentEscalation,
    UnitMixEntry,
    SalesPhase,
    DepositMilestone,
    SalesAssumptions,
    CommercialComponent,
    TownhomeComponent,
    AffordableComponent,
    ParkingStructureComponent,
    AmenityComponent,
    PublicFinancing,
    LandParcel,
    GroundLease,
    TIFDistrict,
    StateFundingSource,
    MixedUseProgram,
    ConfigurationModel,
    enabled_value,
    replace_field,
    get_field,
    field_type,
)

__all__ = [
    "PropertyType",
    "EscalationPattern",
    "GroundLeaseStructure",
    "GroundLeaseEscalation",
    "DisbursementSchedule",
    "Severity",
    "SQFT_PER_ACRE",
    "SiteInputs",
    "HardCosts",
    "SoftCosts",
    "ConstructionLoanTerms",
    "PermanentLoanTerms",
    "EquityStructure",
    "WaterfallTier",
    "OperatingAssumptions",
    "ParkingRevenue",
    "OfficeEscalation",
    "RetailEscalation",
    "ApartmentEscalation",
    "UnitMixEntry",
    "SalesPhase",
    "DepositMilestone",
    "SalesAssumptions",
    "CommercialComponent",
    "TownhomeComponent",
    "AffordableComponent",
    "ParkingStructureComponent",
    "AmenityComponent",
    "PublicFinancing",
    "LandParcel",
    "GroundLease",
    "TIFDistrict",
    "StateFundingSource",
    "MixedUseProgram",
    "ConfigurationModel",
    "enabled_value",
    "replace_field",
    "get_field",
    "field_type",
]
