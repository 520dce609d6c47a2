"""Lease-based cash-flow projection for office, retail and apartment archetypes."""

import logging
from typing import List

from ..models.config import ConfigurationModel
from ..models.lookups import PropertyType
from .cashflow import (
    CashFlowProjection,
    CashFlowProjector,
    CashFlowRecord,
    append_record,
    exit_values,
    initial_record,
    refinance_proceeds,
)
from .costs import DevelopmentCost
from .debt import size_permanent_loan
from .financing import FinancingResult
from .revenue import (
    blend_apartment_rent,
    calculate_parking_revenue,
    calculate_percentage_rent,
    escalate_office_rent,
    escalate_rent,
    escalate_retail_rent,
)

logger = logging.getLogger(__name__)


class LeaseProjector(CashFlowProjector):
    """Annual projection for a single leased building.

    Each operating year:
        Revenue  = rent x (1 - vacancy) x area (+ archetype extras)
                   + parking + other income (growing at rent growth)
        NOI      = Revenue - opex (growing at expense growth)
        Cash flow = NOI - debt service (+ refinance in year 1, + exit in the last year)

    Subclasses override the escalation and revenue hooks.
    """

    property_type = PropertyType.OFFICE

    def escalate(self, rent: float, year: int, config: ConfigurationModel) -> float:
        return escalate_rent(rent, year, config.operating.rent_growth)

    def revenue_periods(self, config: ConfigurationModel) -> int:
        """Rent periods per year (rent is quoted annually by default)."""
        return 1

    def rentable_area(self, config: ConfigurationModel) -> float:
        """Area the rent rate applies to."""
        return max(0.0, config.site.building_gfa)

    def expense_basis(self, config: ConfigurationModel) -> float:
        """Quantity the opex rate applies to."""
        return max(0.0, config.site.building_gfa)

    def extra_revenue(self, rent: float, config: ConfigurationModel) -> float:
        return 0.0

    def other_income(self, config: ConfigurationModel) -> float:
        """Year-1 other income."""
        return 0.0

    def project(
        self,
        config: ConfigurationModel,
        cost: DevelopmentCost,
        financing: FinancingResult,
    ) -> CashFlowProjection:
        operating = config.operating
        area = self.rentable_area(config)
        hold = max(0, operating.hold_years)

        # Ancillary income needs rentable space
        parking_year1 = (
            calculate_parking_revenue(cost.parking_spaces, config.parking_revenue)
            if config.site.include_parking and area > 0
            else 0.0
        )
        other_year1 = self.other_income(config) if area > 0 else 0.0
        expense_basis = self.expense_basis(config)

        # Operating rows first: year-1 NOI sizes the permanent loan
        rows = []
        rent = operating.rent_psf
        expense_rate = operating.opex
        for year in range(1, hold + 1):
            rent = self.escalate(rent, year, config)
            growth = (1 + operating.rent_growth) ** (year - 1)
            gross = rent * (1 - operating.vacancy) * area * self.revenue_periods(config)
            gross += self.extra_revenue(rent, config)
            revenue = gross + (parking_year1 + other_year1) * growth
            expenses = expense_rate * expense_basis
            rows.append((year, rent, revenue, expenses, revenue - expenses))
            expense_rate *= 1 + operating.expense_growth

        year1_noi = rows[0][4] if rows else 0.0
        loan = size_permanent_loan(year1_noi, operating.cap_rate, config.permanent_loan)

        records: List[CashFlowRecord] = [initial_record(financing.equity_required)]
        for year, rent, revenue, expenses, noi in rows:
            debt_service = loan.debt_service(year)
            cash_flow = noi - debt_service
            extras = {}

            if year == 1:
                refinance = refinance_proceeds(loan, financing)
                if refinance > 0:
                    cash_flow += refinance
                    extras["refinance_proceeds"] = refinance

            if year == hold:
                extras.update(exit_values(noi, config, loan))
                cash_flow += extras["exit_proceeds"]

            append_record(
                records,
                year=year,
                noi=noi,
                debt_service=debt_service,
                cash_flow=cash_flow,
                gross_revenue=revenue,
                operating_expenses=expenses,
                rent=rent,
                **extras,
            )

        logger.debug(
            "%s projection: %d years, year-1 NOI %.0f, perm loan %.0f",
            config.property_type.value, hold, year1_noi, loan.loan_amount,
        )

        return CashFlowProjection(
            property_type=config.property_type,
            records=records,
            year1_noi=year1_noi,
            stabilized_value=loan.stabilized_value,
            permanent_loan=loan,
        )


class OfficeProjector(LeaseProjector):
    """Office: stepped or annual escalation."""

    property_type = PropertyType.OFFICE

    def escalate(self, rent: float, year: int, config: ConfigurationModel) -> float:
        return escalate_office_rent(rent, year, config.office_escalation)


class RetailProjector(LeaseProjector):
    """Retail: annual escalation plus percentage rent above the natural breakpoint."""

    property_type = PropertyType.RETAIL

    def escalate(self, rent: float, year: int, config: ConfigurationModel) -> float:
        return escalate_retail_rent(rent, year, config.retail_escalation)

    def extra_revenue(self, rent: float, config: ConfigurationModel) -> float:
        return calculate_percentage_rent(rent, config.site.building_gfa, config.retail_escalation)


class ApartmentProjector(LeaseProjector):
    """Apartment: monthly rent/SF on the unit mix, turnover-blended escalation, per-unit opex."""

    property_type = PropertyType.APARTMENT

    def escalate(self, rent: float, year: int, config: ConfigurationModel) -> float:
        return blend_apartment_rent(rent, year, config.apartment_escalation)

    def revenue_periods(self, config: ConfigurationModel) -> int:
        return 12

    def rentable_area(self, config: ConfigurationModel) -> float:
        """Leasable unit area; an empty unit mix has nothing to rent."""
        return max(0.0, config.unit_mix_sf)

    def expense_basis(self, config: ConfigurationModel) -> float:
        return max(0, config.total_units)

    def other_income(self, config: ConfigurationModel) -> float:
        return config.apartment_escalation.other_income * max(0, config.total_units) * 12
