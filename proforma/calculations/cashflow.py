"""Annual cash-flow records and the projector contract shared by all archetypes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.config import ConfigurationModel
from ..models.lookups import PropertyType
from .costs import DevelopmentCost
from .debt import PermanentLoan
from .financing import FinancingResult
from .numeric import capitalized_value


@dataclass
class CashFlowRecord:
    """Single year of the projection. Year 0 is the equity outlay.

    Optional fields are ``None`` in years they do not apply to.
    """

    year: int
    noi: float
    debt_service: float
    cash_flow: float
    cumulative_cash_flow: float
    gross_revenue: float = 0.0
    operating_expenses: float = 0.0
    rent: Optional[float] = None  # Rent rate in effect (lease archetypes)

    sale_price: Optional[float] = None
    exit_costs: Optional[float] = None
    loan_payoff: Optional[float] = None
    exit_proceeds: Optional[float] = None
    refinance_proceeds: Optional[float] = None
    sales_revenue: Optional[float] = None  # For-sale closings/deposits, townhome sales
    tif_revenue: Optional[float] = None
    ground_lease_payment: Optional[float] = None
    external_funding: Optional[float] = None


@dataclass
class CashFlowProjection:
    """Output of a projector: the ordered annual records plus sizing context."""

    property_type: PropertyType
    records: List[CashFlowRecord]
    year1_noi: float
    stabilized_value: float
    permanent_loan: Optional[PermanentLoan] = None
    details: Dict[str, Any] = field(default_factory=dict)  # Archetype-specific schedules

    @property
    def cash_flows(self) -> List[float]:
        return [record.cash_flow for record in self.records]

    @property
    def initial_equity(self) -> float:
        return -self.records[0].cash_flow if self.records else 0.0

    @property
    def terminal(self) -> CashFlowRecord:
        return self.records[-1]

    @property
    def permanent_loan_amount(self) -> float:
        return self.permanent_loan.loan_amount if self.permanent_loan else 0.0


def initial_record(equity_required: float) -> CashFlowRecord:
    """Year-0 record: the equity outlay."""
    return CashFlowRecord(
        year=0,
        noi=0.0,
        debt_service=0.0,
        cash_flow=-equity_required,
        cumulative_cash_flow=-equity_required,
    )


def append_record(records: List[CashFlowRecord], **values: Any) -> CashFlowRecord:
    """Append a record whose cumulative cash flow extends the running sum."""
    previous = records[-1].cumulative_cash_flow if records else 0.0
    record = CashFlowRecord(cumulative_cash_flow=previous + values["cash_flow"], **values)
    records.append(record)
    return record


class CashFlowProjector(ABC):
    """Strategy producing the cash-flow series for one archetype.

    Implementations are stateless: ``project`` depends only on its arguments.
    """

    property_type: PropertyType

    @abstractmethod
    def project(
        self,
        config: ConfigurationModel,
        cost: DevelopmentCost,
        financing: FinancingResult,
    ) -> CashFlowProjection:
        """Project annual cash flows.

        Args:
            config: Project configuration.
            cost: CostEngine result.
            financing: FinancingEngine result.

        Returns:
            CashFlowProjection whose first record is ``-equity_required``.
        """


def refinance_proceeds(loan: Optional[PermanentLoan], financing: FinancingResult) -> float:
    """Year-1 cash out: permanent loan less construction loan and accrued interest.

    Only a positive difference is returned; a shortfall is not modeled.
    """
    if loan is None:
        return 0.0
    proceeds = loan.loan_amount - financing.construction_loan_amount - financing.construction_interest
    return max(0.0, proceeds)


def exit_values(
    terminal_noi: float,
    config: ConfigurationModel,
    loan: Optional[PermanentLoan],
) -> Dict[str, float]:
    """Terminal-year sale: price, costs, loan payoff and net proceeds.

    Sale price = terminal NOI / exit cap rate (0 when the cap rate is <= 0)
    Exit proceeds = sale price - exit costs - remaining loan balance
    """
    operating = config.operating
    sale_price = capitalized_value(terminal_noi, operating.cap_rate)
    exit_costs = sale_price * operating.exit_costs
    payoff = loan.balance_after(operating.hold_years) if loan else 0.0
    return {
        "sale_price": sale_price,
        "exit_costs": exit_costs,
        "loan_payoff": payoff,
        "exit_proceeds": sale_price - exit_costs - payoff,
    }
