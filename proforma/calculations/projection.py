"""Archetype dispatch for the cash-flow projection."""

from typing import Dict

from ..models.config import ConfigurationModel
from ..models.lookups import PropertyType
from .cashflow import CashFlowProjection, CashFlowProjector
from .costs import DevelopmentCost
from .financing import FinancingResult
from .for_sale import ForSaleProjector
from .lease import ApartmentProjector, OfficeProjector, RetailProjector
from .mixed_use import MixedUseProjector

PROJECTORS: Dict[PropertyType, CashFlowProjector] = {
    projector.property_type: projector
    for projector in (
        OfficeProjector(),
        RetailProjector(),
        ApartmentProjector(),
        ForSaleProjector(),
        MixedUseProjector(),
    )
}


def get_projector(property_type: PropertyType) -> CashFlowProjector:
    """Look up the projector for an archetype.

    Raises:
        ValueError: If no projector is registered for ``property_type``.
    """
    try:
        return PROJECTORS[PropertyType(property_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown property type: {property_type}") from None


def project_cash_flows(
    config: ConfigurationModel,
    cost: DevelopmentCost,
    financing: FinancingResult,
) -> CashFlowProjection:
    """Project cash flows with the strategy registered for ``config.property_type``."""
    return get_projector(config.property_type).project(config, cost, financing)
