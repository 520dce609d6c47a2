"""Mixed-use projection aggregating independently enabled component ledgers."""

import logging
from dataclasses import dataclass
from typing import Dict, List

from ..models.config import ConfigurationModel, MixedUseProgram
from ..models.lookups import (
    AMENITY_ANCILLARY_SHARE,
    PARKING_OPEX_PER_SPACE,
    TOWNHOME_SELLOUT_YEARS,
    PropertyType,
)
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
from .ground_lease import GroundLeasePayment, calculate_ground_lease_payment
from .incentives import calculate_tif, state_funding_disbursement
from .numeric import capitalized_value

logger = logging.getLogger(__name__)


@dataclass
class ComponentCashFlow:
    """Year-1 revenue/expense for one component."""

    name: str
    revenue: float
    expenses: float

    @property
    def noi(self) -> float:
        return self.revenue - self.expenses


def component_cash_flows(program: MixedUseProgram) -> List[ComponentCashFlow]:
    """Year-1 ledgers for every enabled operating component.

    Args:
        program: Mixed-use program.

    Returns:
        One entry per enabled component (townhomes are sales, not operations).
    """
    flows = []
    for name in ("office", "retail", "grocery"):
        component = getattr(program, name)
        if component.enabled:
            flows.append(ComponentCashFlow(
                name=name,
                revenue=component.sf * component.rent_psf * (1 - component.vacancy),
                expenses=component.sf * component.opex_psf,
            ))

    affordable = program.affordable
    if affordable.enabled:
        flows.append(ComponentCashFlow(
            name="affordable",
            revenue=affordable.units * affordable.rent_per_unit * 12 * (1 - affordable.vacancy),
            expenses=affordable.units * affordable.opex_per_unit,
        ))

    parking = program.parking
    if parking.enabled and parking.total_spaces > 0:
        flows.append(ComponentCashFlow(
            name="parking",
            revenue=parking.total_spaces * parking.utilization * parking.monthly_rate * 12,
            expenses=parking.total_spaces * PARKING_OPEX_PER_SPACE,
        ))

    amenity = program.amenity
    if amenity.enabled:
        tickets = amenity.annual_events * amenity.seats * amenity.attendance * amenity.ticket_price
        flows.append(ComponentCashFlow(
            name="amenity",
            revenue=tickets * (1 + AMENITY_ANCILLARY_SHARE),
            expenses=amenity.annual_maintenance,
        ))

    return flows


def townhome_sales(program: MixedUseProgram, year: int) -> float:
    """Townhome sales revenue, spread evenly over the first three years."""
    townhomes = program.townhomes
    if not townhomes.enabled or not 1 <= year <= TOWNHOME_SELLOUT_YEARS:
        return 0.0
    return townhomes.units * townhomes.avg_price / TOWNHOME_SELLOUT_YEARS


class MixedUseProjector(CashFlowProjector):
    """Mixed-use: component NOI, ground lease, TIF and state funding.

    Cash flow = NOI - ground lease - debt service + TIF + townhome sales
                + state funding (+ refinance in year 1, + exit in the last year)

    Component revenue grows at rent growth and expenses at expense growth.
    TIF is measured on the capitalized year-1 commercial value.
    """

    property_type = PropertyType.MIXED_USE

    def project(
        self,
        config: ConfigurationModel,
        cost: DevelopmentCost,
        financing: FinancingResult,
    ) -> CashFlowProjection:
        program = config.mixed_use
        operating = config.operating
        hold = max(0, operating.hold_years)

        components = component_cash_flows(program)
        year1_noi = sum(c.noi for c in components)
        commercial_noi = sum(c.noi for c in components if c.name in ("office", "retail", "grocery"))

        tif = calculate_tif(program.tif, capitalized_value(max(0.0, commercial_noi), operating.cap_rate))
        loan = size_permanent_loan(year1_noi, operating.cap_rate, config.permanent_loan)

        records: List[CashFlowRecord] = [initial_record(financing.equity_required)]
        ground_lease_schedule: List[GroundLeasePayment] = []
        component_schedule: Dict[int, Dict[str, float]] = {}

        for year in range(1, hold + 1):
            revenue_growth = (1 + operating.rent_growth) ** (year - 1)
            expense_growth = (1 + operating.expense_growth) ** (year - 1)
            revenue = sum(c.revenue for c in components) * revenue_growth
            expenses = sum(c.expenses for c in components) * expense_growth
            noi = revenue - expenses
            component_schedule[year] = {
                c.name: c.revenue * revenue_growth - c.expenses * expense_growth for c in components
            }

            ground_lease = calculate_ground_lease_payment(program.ground_lease, year, revenue, noi)
            ground_lease_schedule.append(ground_lease)
            tif_revenue = tif.revenue(year)
            funding = state_funding_disbursement(program.state_funding, year)
            sales = townhome_sales(program, year)
            debt_service = loan.debt_service(year)

            cash_flow = noi - ground_lease.total_payment - debt_service + tif_revenue + sales + funding
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
                sales_revenue=sales if sales else None,
                tif_revenue=tif_revenue if program.tif.enabled else None,
                ground_lease_payment=ground_lease.total_payment if program.ground_lease.enabled else None,
                external_funding=funding if funding else None,
                **extras,
            )

        logger.debug(
            "Mixed-use projection: %d components, year-1 NOI %.0f, TIF %.0f/yr",
            len(components), year1_noi, tif.annual_increment,
        )

        return CashFlowProjection(
            property_type=PropertyType.MIXED_USE,
            records=records,
            year1_noi=year1_noi,
            stabilized_value=loan.stabilized_value,
            permanent_loan=loan,
            details={
                "components": components,
                "component_noi": component_schedule,
                "ground_lease": ground_lease_schedule,
                "tif": tif,
            },
        )
