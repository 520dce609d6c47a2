"""Reference configurations used across the test suite."""

from dataclasses import replace

from proforma.models import (
    ConfigurationModel,
    GroundLease,
    LandParcel,
    PropertyType,
    SiteInputs,
    StateFundingSource,
    DisbursementSchedule,
)


def get_office_inputs() -> ConfigurationModel:
    """Office reference case.

    Land $5M, 50,000 SF at $250/SF (core/shell $200 + TI $50), rent $35/SF,
    5% vacancy, opex $8/SF, 6.5% exit cap, 70% LTV permanent, 65% LTC
    construction, 10-year hold.

    These inputs should produce:
    - Hard cost with contingency: ~$14.76M
    - Total development cost: ~$22.86M
    - A finite positive project IRR and an equity multiple above 1.0x
    """
    return ConfigurationModel.for_property_type(PropertyType.OFFICE)


def get_retail_inputs() -> ConfigurationModel:
    return ConfigurationModel.for_property_type(PropertyType.RETAIL)


def get_apartment_inputs() -> ConfigurationModel:
    """Apartment case sized so the default unit mix fits in the building."""
    return ConfigurationModel.for_property_type(
        PropertyType.APARTMENT,
        site=SiteInputs(building_gfa=65_000),
    )


def get_for_sale_inputs() -> ConfigurationModel:
    """100-unit condominium in three phases over a 60-month horizon."""
    return ConfigurationModel.for_property_type(PropertyType.FOR_SALE)


def get_mixed_use_inputs() -> ConfigurationModel:
    """Default mixed-use program: office, retail, grocery, townhomes and affordable."""
    return ConfigurationModel.for_property_type(PropertyType.MIXED_USE)


def get_mixed_use_inputs_with_incentives() -> ConfigurationModel:
    """Mixed-use with a ground lease, state funding and a donated parcel."""
    config = get_mixed_use_inputs()
    program = replace(
        config.mixed_use,
        ground_lease=GroundLease(enabled=True, percentage_rate=0.05),
        state_funding=(
            StateFundingSource("Infrastructure grant", 3_000_000, DisbursementSchedule.MILESTONE),
            StateFundingSource("Completion bonus", 1_000_000, DisbursementSchedule.COMPLETION),
        ),
        parcels=(
            LandParcel("North", acres=4.0, price_per_acre=1_000_000),
            LandParcel("City lot", acres=2.0, price_per_acre=1_000_000, donated=True),
        ),
    )
    return replace(config, mixed_use=program)
