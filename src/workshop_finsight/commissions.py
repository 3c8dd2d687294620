# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Commission computation for Workshop FinSight.

Commissions follow a *pool-rate* model gated on profitability:

1. Active (non-archived) staff are split into technicians (holding the
   technician role) and administrative staff (everybody else). The two
   buckets are mutually exclusive.
2. Salaries of both buckets and the monthly fixed expenses are subtracted
   from the operational profit, giving the net profit before commissions.
3. Commissions are paid only when that figure is strictly positive.
4. When paid, every active staff member receives
   ``net_profit_before_commissions × commission_rate``: each rate applies
   to the whole shop's net profit, not to the revenue the person produced.
5. Net profit is the net profit before commissions minus all commissions.
   It is still reported, possibly negative, when the gate is closed.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import DEFAULT_RULES, BusinessRules
from .models import MonthlyFixedExpense, Personnel

logger = logging.getLogger(__name__)

TECHNICIAN = "technician"
ADMINISTRATIVE = "administrative"


@dataclass(frozen=True)
class StaffCommission:
    """Commission owed to one staff member for the period."""

    personnel_id: str
    name: str
    bucket: str
    commission_rate: float
    amount: float


@dataclass(frozen=True)
class CommissionResult:
    """Payroll, fixed expenses and commission figures for a period."""

    total_technician_salaries: float
    total_administrative_salaries: float
    total_fixed_expenses: float
    net_profit_before_commissions: float
    is_profitable_for_commissions: bool
    total_variable_commissions: float
    net_profit: float
    commissions: tuple[StaffCommission, ...] = field(default_factory=tuple)

    @property
    def total_base_expenses(self) -> float:
        """Salaries of both buckets plus monthly fixed expenses."""
        return (
            self.total_technician_salaries
            + self.total_administrative_salaries
            + self.total_fixed_expenses
        )


def split_personnel(
    personnel: Iterable[Personnel], rules: BusinessRules = DEFAULT_RULES
) -> tuple[list[Personnel], list[Personnel]]:
    """Split active staff into (technicians, administrative staff)."""
    technicians: list[Personnel] = []
    administrative: list[Personnel] = []
    for person in personnel:
        if person.is_archived:
            continue
        if person.has_role(rules.technician_role):
            technicians.append(person)
        else:
            administrative.append(person)
    return technicians, administrative


def compute_commissions(
    operational_profit: float,
    personnel: Iterable[Personnel],
    fixed_expenses: Iterable[MonthlyFixedExpense],
    rules: BusinessRules = DEFAULT_RULES,
) -> CommissionResult:
    """Apply fixed costs and the profitability gate, then distribute commissions.

    Args:
        operational_profit: Σ profit of the period's operations.
        personnel: Staff list; archived members are ignored.
        fixed_expenses: Monthly fixed expenses.
        rules: Business rules (technician role label).

    Returns:
        A CommissionResult. ``commissions`` lists one entry per active staff
        member (technicians first) when the gate is open, and is empty
        otherwise.
    """
    technicians, administrative = split_personnel(personnel, rules)

    total_technician_salaries = sum(p.monthly_salary for p in technicians)
    total_administrative_salaries = sum(p.monthly_salary for p in administrative)
    total_fixed_expenses = sum(e.amount for e in fixed_expenses)

    net_before = operational_profit - (
        total_technician_salaries + total_administrative_salaries + total_fixed_expenses
    )
    is_profitable = net_before > 0

    commissions: list[StaffCommission] = []
    if is_profitable:
        for bucket, staff in ((TECHNICIAN, technicians), (ADMINISTRATIVE, administrative)):
            for person in staff:
                commissions.append(
                    StaffCommission(
                        personnel_id=person.id,
                        name=person.name,
                        bucket=bucket,
                        commission_rate=person.commission_rate,
                        amount=net_before * person.commission_rate,
                    )
                )
    else:
        logger.debug(
            "Commission gate closed: net profit before commissions is %.2f",
            net_before,
        )

    total_commissions = sum(c.amount for c in commissions)

    return CommissionResult(
        total_technician_salaries=total_technician_salaries,
        total_administrative_salaries=total_administrative_salaries,
        total_fixed_expenses=total_fixed_expenses,
        net_profit_before_commissions=net_before,
        is_profitable_for_commissions=is_profitable,
        total_variable_commissions=total_commissions,
        net_profit=net_before - total_commissions,
        commissions=tuple(commissions),
    )
