# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
High-level reporting services for Workshop FinSight.

This module sits between:
- a FinanceDataSource (the current snapshot of every collection), and
- user-facing layers such as the CLI, report pages or dashboards.

Every report surface calls the same functions, so the financial summary is
computed in exactly one place.

Responsibilities
----------------
1) Financial summary
   - aggregate sales and completed services of a period into operations,
   - compute income, profit and cost-of-goods totals with a per-type
     breakdown,
   - subtract payroll and fixed expenses, apply the profitability gate and
     distribute commissions,
   - return a single FinancialSummary object.

2) Ledger and stock movements
   - list the normalized operations of a period, newest first,
   - list the stock-depleting movements of a period.

3) Rentals
   - compute one driver's rental debt or full balance,
   - summarize debts and collected rent across the fleet.

Design notes
------------
- Callers pass a ReportContext (reference day, requesting user, business
  rules, standard deposit). Nothing is read from ambient state, which keeps
  every call deterministic for a given snapshot and context.
- Results are recomputed from scratch on every call and never cached.
- None of these functions raise for inconsistent data: unknown drivers or
  missing inventory references degrade to zero figures and are logged.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .commissions import CommissionResult, compute_commissions
from .config import DEFAULT_RULES, AppConfig, BusinessRules
from .engine import ProfitTotals, TypeBreakdown, compute_profit_totals
from .models import FinancialOperation, InventoryMovement
from .movements import list_inventory_movements as _list_movements
from .operations import aggregate_operations, sort_operations
from .periods import Period, _today
from . import rentals
from .rentals import NO_DEBT, DriverBalance, DriverDebt, FleetSummary
from .sources import FinanceDataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportContext:
    """
    Explicit caller context for a report computation.

    Attributes
    ----------
    today :
        Reference day for rent accrual. Defaults to the current date.
    requested_by :
        Identifier of the user requesting the report, used for audit logs.
    rules :
        Business rules (statuses, roles, labels).
    standard_deposit_amount :
        Deposit required from drivers without an explicit requirement.
    """

    today: date = field(default_factory=_today)
    requested_by: Optional[str] = None
    rules: BusinessRules = DEFAULT_RULES
    standard_deposit_amount: float = 0.0

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        requested_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> "ReportContext":
        return cls(
            today=today or _today(),
            requested_by=requested_by,
            rules=config.rules,
            standard_deposit_amount=config.standard_deposit_amount,
        )


@dataclass(frozen=True)
class FinancialSummary:
    """
    Financial summary of a period.

    ``fixed_expenses`` holds the base expenses the profitability gate is
    measured against: technician and administrative salaries plus monthly
    fixed expenses. The detailed figures are available in ``totals`` and
    ``commission``.
    """

    period: Period
    income: float
    profit: float
    cost_of_goods: float
    fixed_expenses: float
    commissions: float
    net_profit: float
    breakdown_by_type: dict[str, TypeBreakdown]
    totals: ProfitTotals
    commission: CommissionResult

    @property
    def is_profitable_for_commissions(self) -> bool:
        return self.commission.is_profitable_for_commissions

    def as_dict(self) -> dict[str, Any]:
        """Plain-dict view for presentation layers and JSON export."""
        return {
            "period_label": self.period.label,
            "period_start": self.period.start.isoformat(),
            "period_end": self.period.end.isoformat(),
            "income": self.income,
            "profit": self.profit,
            "cost_of_goods": self.cost_of_goods,
            "fixed_expenses": self.fixed_expenses,
            "commissions": self.commissions,
            "net_profit": self.net_profit,
            "is_profitable_for_commissions": self.is_profitable_for_commissions,
            "breakdown_by_type": {
                key: {"income": b.income, "profit": b.profit, "count": b.count}
                for key, b in self.breakdown_by_type.items()
            },
        }


def _audit(action: str, context: ReportContext, detail: str) -> None:
    logger.info(
        "%s requested by %s (%s)", action, context.requested_by or "anonymous", detail
    )


def list_operations(
    source: FinanceDataSource,
    period: Period,
    context: Optional[ReportContext] = None,
) -> list[FinancialOperation]:
    """Normalized operations of the period, newest first."""
    context = context or ReportContext()
    _audit("Operations ledger", context, period.label)
    operations = aggregate_operations(
        sales=source.list_sales(period),
        services=source.list_services(period),
        inventory=source.get_inventory_snapshot(),
        period=period,
        rules=context.rules,
    )
    return sort_operations(operations)


def aggregate_financial_summary(
    source: FinanceDataSource,
    period: Period,
    context: Optional[ReportContext] = None,
) -> FinancialSummary:
    """Compute the financial summary of a period from the current snapshot.

    Args:
        source: Data source providing sales, services, inventory, personnel
            and fixed expenses.
        period: Inclusive reporting period.
        context: Caller context (business rules, requesting user).

    Returns:
        A FinancialSummary. Calling it twice with the same snapshot and
        period yields identical figures.
    """
    context = context or ReportContext()
    _audit("Financial summary", context, period.label)

    inventory = source.get_inventory_snapshot()
    operations = aggregate_operations(
        sales=source.list_sales(period),
        services=source.list_services(period),
        inventory=inventory,
        period=period,
        rules=context.rules,
    )
    totals = compute_profit_totals(operations, inventory)
    commission = compute_commissions(
        operational_profit=totals.total_operational_profit,
        personnel=source.list_active_personnel(),
        fixed_expenses=source.list_fixed_expenses(),
        rules=context.rules,
    )

    return FinancialSummary(
        period=period,
        income=totals.total_operational_income,
        profit=totals.total_operational_profit,
        cost_of_goods=totals.total_cost_of_goods,
        fixed_expenses=commission.total_base_expenses,
        commissions=commission.total_variable_commissions,
        net_profit=commission.net_profit,
        breakdown_by_type=totals.breakdown,
        totals=totals,
        commission=commission,
    )


def list_inventory_movements(
    source: FinanceDataSource,
    period: Period,
    context: Optional[ReportContext] = None,
) -> list[InventoryMovement]:
    """Stock-depleting movements of the period."""
    context = context or ReportContext()
    _audit("Inventory movements", context, period.label)
    return _list_movements(
        sales=source.list_sales(period),
        services=source.list_services(period),
        inventory=source.get_inventory_snapshot(),
        period=period,
        rules=context.rules,
    )


def compute_driver_debt(
    source: FinanceDataSource,
    driver_id: str,
    context: Optional[ReportContext] = None,
) -> DriverDebt:
    """Rental debt of one driver. Unknown drivers owe nothing."""
    context = context or ReportContext()
    _audit("Driver debt", context, driver_id)

    driver = source.get_driver(driver_id)
    if driver is None:
        logger.warning("Driver %r not found, reporting no debt", driver_id)
        return NO_DEBT

    vehicle = (
        source.get_vehicle(driver.assigned_vehicle_id)
        if driver.assigned_vehicle_id
        else None
    )
    return rentals.compute_driver_debt(
        driver,
        vehicle,
        source.list_payments(driver_id),
        today=context.today,
        tz=context.rules.timezone,
    )


def compute_driver_balance(
    source: FinanceDataSource,
    driver_id: str,
    context: Optional[ReportContext] = None,
) -> Optional[DriverBalance]:
    """Full balance (rent, deposit, manual debts) of one driver, or None."""
    context = context or ReportContext()
    _audit("Driver balance", context, driver_id)

    driver = source.get_driver(driver_id)
    if driver is None:
        logger.warning("Driver %r not found", driver_id)
        return None

    vehicle = (
        source.get_vehicle(driver.assigned_vehicle_id)
        if driver.assigned_vehicle_id
        else None
    )
    return rentals.compute_driver_balance(
        driver,
        vehicle,
        source.list_payments(driver_id),
        source.list_manual_debts(driver_id),
        today=context.today,
        tz=context.rules.timezone,
        standard_deposit_amount=context.standard_deposit_amount,
    )


def summarize_fleet(
    source: FinanceDataSource,
    period: Period,
    context: Optional[ReportContext] = None,
) -> tuple[FleetSummary, list[DriverBalance]]:
    """Fleet-wide rent summary plus per-driver balances."""
    context = context or ReportContext()
    _audit("Fleet summary", context, period.label)
    return rentals.summarize_fleet(
        drivers=source.list_drivers(),
        vehicles=source.list_vehicles(),
        payments=source.list_all_payments(),
        manual_debts=[
            d for driver in source.list_drivers() for d in source.list_manual_debts(driver.id)
        ],
        period=period,
        today=context.today,
        tz=context.rules.timezone,
        standard_deposit_amount=context.standard_deposit_amount,
    )
