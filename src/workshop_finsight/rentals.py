# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rental debt computation for the fleet leasing business.

A driver leasing a fleet vehicle accrues its daily rental cost for every
calendar day since the contract start, both the start day and today
included. The rental debt is what has accrued minus everything the driver
has paid so far, clamped at zero:

    days_since_start = (today − contract_start).days + 1
    expected         = days_since_start × daily_rental_cost
    debt             = max(0, expected − Σ payments)
    days_owed        = floor(debt / daily_rental_cost)

Fail-soft rules
---------------
- no contract date, an unparseable one, or a contract starting after
  today: no debt;
- no vehicle, or a vehicle without a (positive) daily rental cost: no
  debt, and no division is attempted.

On top of the rental debt, a driver's full balance also includes the
missing part of the required deposit and any manual debts (damages,
fines). A monthly statement and a fleet-wide summary build on the same
rules.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .models import Driver, ManualDebt, RentalPayment, Vehicle
from .periods import Period, _today, parse_day, parse_moment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverDebt:
    """Accrued rental debt of a driver."""

    debt_amount: float
    days_owed: int


@dataclass(frozen=True)
class DriverBalance:
    """Full balance of a driver: rent, deposit and manual debts."""

    driver_id: str
    driver_name: str
    rental_debt: float
    deposit_debt: float
    manual_debt: float
    days_owed: int

    @property
    def total_debt(self) -> float:
        return self.rental_debt + self.deposit_debt + self.manual_debt


@dataclass(frozen=True)
class MonthlyStatement:
    """Rent charged and paid during the current calendar month."""

    driver_id: str
    payments: float
    charges: float
    days_paid: float
    days_owed: float

    @property
    def balance(self) -> float:
        return self.payments - self.charges


@dataclass(frozen=True)
class FleetSummary:
    """Fleet-wide rent figures."""

    total_collected: float
    total_debt: float
    driver_with_most_debt: Optional[str]
    most_debt_amount: float


NO_DEBT = DriverDebt(debt_amount=0.0, days_owed=0)


def _daily_rate(vehicle: Optional[Vehicle]) -> float:
    if vehicle is None or not vehicle.daily_rental_cost:
        return 0.0
    return max(0.0, vehicle.daily_rental_cost)


def _payments_of(driver: Driver, payments: Iterable[RentalPayment]) -> list[RentalPayment]:
    return [p for p in payments if p.driver_id == driver.id]


def compute_driver_debt(
    driver: Driver,
    vehicle: Optional[Vehicle],
    payments: Iterable[RentalPayment],
    today: Optional[date] = None,
    tz: str = "UTC",
) -> DriverDebt:
    """Compute a driver's accrued rental debt against all recorded payments.

    Args:
        driver: The driver (contract start date).
        vehicle: The assigned vehicle (daily rental cost), or None.
        payments: Payment history; only payments carrying the driver's id
            count. Payments are summed over all time.
        today: Reference day, defaults to the current date.
        tz: Reporting timezone used to place the contract start on a day.

    Returns:
        A DriverDebt; never negative.
    """
    today = today or _today()
    rate = _daily_rate(vehicle)
    if not driver.contract_date or rate <= 0:
        return NO_DEBT

    contract_start = parse_day(driver.contract_date, tz)
    if contract_start is None:
        logger.debug(
            "Driver %r has an unreadable contract date %r, no debt computed",
            driver.id,
            driver.contract_date,
        )
        return NO_DEBT
    if contract_start > today:
        return NO_DEBT

    days_since_start = (today - contract_start).days + 1
    total_expected = days_since_start * rate
    total_paid = sum(p.amount for p in _payments_of(driver, payments))

    debt = max(0.0, total_expected - total_paid)
    days_owed = math.floor(debt / rate) if debt > 0 else 0
    return DriverDebt(debt_amount=debt, days_owed=days_owed)


def compute_driver_balance(
    driver: Driver,
    vehicle: Optional[Vehicle],
    payments: Iterable[RentalPayment],
    manual_debts: Iterable[ManualDebt] = (),
    today: Optional[date] = None,
    standard_deposit_amount: float = 0.0,
    tz: str = "UTC",
) -> DriverBalance:
    """Compute rent, deposit and manual debts of a driver.

    The required deposit is the driver's own ``required_deposit_amount``
    when recorded, else ``standard_deposit_amount``.
    """
    rental = compute_driver_debt(driver, vehicle, payments, today, tz)

    required = driver.required_deposit_amount
    if required is None:
        required = standard_deposit_amount
    deposit_debt = max(0.0, required - driver.deposit_amount)

    manual_debt = sum(
        d.amount for d in manual_debts if d.driver_id == driver.id
    )

    return DriverBalance(
        driver_id=driver.id,
        driver_name=driver.name,
        rental_debt=rental.debt_amount,
        deposit_debt=deposit_debt,
        manual_debt=manual_debt,
        days_owed=rental.days_owed,
    )


def compute_monthly_statement(
    driver: Driver,
    vehicle: Optional[Vehicle],
    payments: Iterable[RentalPayment],
    today: Optional[date] = None,
    tz: str = "UTC",
) -> MonthlyStatement:
    """Rent charged and paid since the first day of the current month.

    Charges accrue from the later of the contract start and the first day
    of the month, up to today included. Drivers without a usable contract
    date are not charged.
    """
    today = today or _today()
    month_start = today.replace(day=1)
    rate = _daily_rate(vehicle)

    paid = 0.0
    for p in _payments_of(driver, payments):
        moment = parse_moment(p.payment_date, tz)
        if moment is not None and month_start <= moment.date() <= today:
            paid += p.amount

    contract_start = parse_day(driver.contract_date, tz)
    if contract_start is None:
        days_charged = 0
    else:
        charge_start = max(contract_start, month_start)
        days_charged = (today - charge_start).days + 1 if charge_start <= today else 0
    charges = rate * days_charged

    owed = max(0.0, charges - paid)
    return MonthlyStatement(
        driver_id=driver.id,
        payments=paid,
        charges=charges,
        days_paid=paid / rate if rate > 0 else 0.0,
        days_owed=owed / rate if rate > 0 else 0.0,
    )


def summarize_fleet(
    drivers: Iterable[Driver],
    vehicles: Iterable[Vehicle],
    payments: Iterable[RentalPayment],
    manual_debts: Iterable[ManualDebt],
    period: Period,
    today: Optional[date] = None,
    standard_deposit_amount: float = 0.0,
    tz: str = "UTC",
) -> tuple[FleetSummary, list[DriverBalance]]:
    """Summarize rent collection and debts over the active drivers.

    Returns:
        The FleetSummary and the per-driver balances it was built from,
        sorted by total debt (largest first). ``total_collected`` only
        counts payments dated within ``period``; debts are all-time.
    """
    today = today or _today()
    vehicles_by_id = {v.id: v for v in vehicles}
    all_payments = list(payments)
    all_manual = list(manual_debts)

    balances: list[DriverBalance] = []
    for driver in drivers:
        if driver.is_archived:
            continue
        balances.append(
            compute_driver_balance(
                driver,
                vehicles_by_id.get(driver.assigned_vehicle_id),
                [p for p in all_payments if p.driver_id == driver.id],
                [d for d in all_manual if d.driver_id == driver.id],
                today=today,
                standard_deposit_amount=standard_deposit_amount,
                tz=tz,
            )
        )
    balances.sort(key=lambda b: (-b.total_debt, b.driver_name))

    collected = sum(
        p.amount
        for p in all_payments
        if period.contains(parse_moment(p.payment_date, tz))
    )

    top = balances[0] if balances and balances[0].total_debt > 0 else None
    summary = FleetSummary(
        total_collected=collected,
        total_debt=sum(b.total_debt for b in balances),
        driver_with_most_debt=(top.driver_name or top.driver_id) if top else None,
        most_debt_amount=top.total_debt if top else 0.0,
    )
    return summary, balances
