# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Workshop FinSight.

This module turns the result objects produced by the reporting services
(FinancialSummary, operations, movements, commissions, driver balances)
into pandas DataFrames ready for display or CSV export.

The computation itself is performed elsewhere; views only select columns,
order rows and round money figures to the requested number of decimals.
Every builder returns a DataFrame with a stable column set, even when its
input is empty.
"""

from collections.abc import Iterable

import pandas as pd

from .commissions import CommissionResult
from .models import FinancialOperation, InventoryMovement
from .movements import MovementSummary
from .rentals import DriverBalance
from .report_service import FinancialSummary

SUMMARY_COLUMNS = ["key", "label", "value"]
BREAKDOWN_COLUMNS = ["type", "income", "profit", "count"]
OPERATIONS_COLUMNS = [
    "date",
    "type",
    "id",
    "description",
    "total_amount",
    "cost_of_goods",
    "profit",
]
MOVEMENTS_COLUMNS = [
    "date",
    "type",
    "related_id",
    "item_name",
    "quantity",
    "unit_cost",
    "total_cost",
]
MOVEMENT_SUMMARY_COLUMNS = ["item_name", "quantity", "total_cost", "movement_count"]
COMMISSIONS_COLUMNS = ["personnel_id", "name", "bucket", "commission_rate", "amount"]
DRIVER_BALANCES_COLUMNS = [
    "driver_id",
    "driver_name",
    "rental_debt",
    "days_owed",
    "deposit_debt",
    "manual_debt",
    "total_debt",
]


def summary_to_dataframe(summary: FinancialSummary, decimals: int = 2) -> pd.DataFrame:
    """
    Key figures of a FinancialSummary, one row per figure.

    Columns: key, label, value. Rows follow the reading order of a profit
    and loss report, from income down to net profit.
    """
    c = summary.commission
    rows = [
        ("income", "Operational income", summary.income),
        ("income_from_sales", "  from sales", summary.totals.income_from_sales),
        ("income_from_services", "  from services", summary.totals.income_from_services),
        ("cost_of_goods", "Cost of goods", summary.cost_of_goods),
        ("profit", "Operational profit", summary.profit),
        ("technician_salaries", "Technician salaries", c.total_technician_salaries),
        (
            "administrative_salaries",
            "Administrative salaries",
            c.total_administrative_salaries,
        ),
        ("monthly_fixed_expenses", "Monthly fixed expenses", c.total_fixed_expenses),
        (
            "net_profit_before_commissions",
            "Net profit before commissions",
            c.net_profit_before_commissions,
        ),
        ("commissions", "Commissions", summary.commissions),
        ("net_profit", "Net profit", summary.net_profit),
        ("units_sold", "Units sold", summary.totals.total_units_sold),
        ("inventory_value", "Inventory value", summary.totals.inventory_value),
    ]
    df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    df["value"] = df["value"].astype(float).round(decimals)
    return df


def breakdown_to_dataframe(summary: FinancialSummary, decimals: int = 2) -> pd.DataFrame:
    """Income and profit per operation type, largest income first."""
    rows = [
        {"type": key, "income": b.income, "profit": b.profit, "count": b.count}
        for key, b in summary.breakdown_by_type.items()
    ]
    if not rows:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    df = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
    df = df.sort_values(["income", "type"], ascending=[False, True], kind="stable")
    df[["income", "profit"]] = df[["income", "profit"]].round(decimals)
    return df.reset_index(drop=True)


def operations_to_dataframe(
    operations: Iterable[FinancialOperation], decimals: int = 2
) -> pd.DataFrame:
    """One row per operation, in the order received."""
    rows = [
        {
            "date": op.date,
            "type": op.type,
            "id": op.id,
            "description": op.description,
            "total_amount": op.total_amount,
            "cost_of_goods": op.cost_of_goods,
            "profit": op.profit,
        }
        for op in operations
    ]
    if not rows:
        return pd.DataFrame(columns=OPERATIONS_COLUMNS)

    df = pd.DataFrame(rows, columns=OPERATIONS_COLUMNS)
    money = ["total_amount", "cost_of_goods", "profit"]
    df[money] = df[money].round(decimals)
    return df


def movements_to_dataframe(
    movements: Iterable[InventoryMovement], decimals: int = 2
) -> pd.DataFrame:
    """One row per inventory movement, newest first."""
    rows = [
        {
            "date": m.date,
            "type": m.type,
            "related_id": m.related_id,
            "item_name": m.item_name,
            "quantity": m.quantity,
            "unit_cost": m.unit_cost,
            "total_cost": m.total_cost,
        }
        for m in movements
    ]
    if not rows:
        return pd.DataFrame(columns=MOVEMENTS_COLUMNS)

    df = pd.DataFrame(rows, columns=MOVEMENTS_COLUMNS)
    df = df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)
    df[["unit_cost", "total_cost"]] = df[["unit_cost", "total_cost"]].round(decimals)
    return df


def movement_summary_to_dataframe(
    summaries: Iterable[MovementSummary], decimals: int = 2
) -> pd.DataFrame:
    rows = [
        {
            "item_name": s.item_name,
            "quantity": s.quantity,
            "total_cost": round(s.total_cost, decimals),
            "movement_count": s.movement_count,
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=MOVEMENT_SUMMARY_COLUMNS)


def commissions_to_dataframe(result: CommissionResult, decimals: int = 2) -> pd.DataFrame:
    """
    One row per commissioned staff member.

    Empty when the profitability gate is closed.
    """
    rows = [
        {
            "personnel_id": c.personnel_id,
            "name": c.name,
            "bucket": c.bucket,
            "commission_rate": c.commission_rate,
            "amount": round(c.amount, decimals),
        }
        for c in result.commissions
    ]
    return pd.DataFrame(rows, columns=COMMISSIONS_COLUMNS)


def driver_balances_to_dataframe(
    balances: Iterable[DriverBalance], decimals: int = 2
) -> pd.DataFrame:
    """One row per driver with rent, deposit and manual debts."""
    rows = [
        {
            "driver_id": b.driver_id,
            "driver_name": b.driver_name,
            "rental_debt": b.rental_debt,
            "days_owed": b.days_owed,
            "deposit_debt": b.deposit_debt,
            "manual_debt": b.manual_debt,
            "total_debt": b.total_debt,
        }
        for b in balances
    ]
    if not rows:
        return pd.DataFrame(columns=DRIVER_BALANCES_COLUMNS)

    df = pd.DataFrame(rows, columns=DRIVER_BALANCES_COLUMNS)
    money = ["rental_debt", "deposit_debt", "manual_debt", "total_debt"]
    df[money] = df[money].round(decimals)
    return df
