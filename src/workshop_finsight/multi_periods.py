# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Multi-period comparison of financial summaries.

``compute_summaries_multi_period()`` computes the financial summary of
several reporting periods (e.g. the last three months side by side) in a
single pass:

1. The collections are read from the data source *once* and kept as an
   in-memory snapshot, so that every period sees exactly the same data.
2. For each Period, ``report_service.aggregate_financial_summary()`` is
   called on that snapshot. The summary computation itself stays in one
   place.
3. Per-period results are concatenated into long-format DataFrames with a
   ``period_label`` column, ready for CLI tables, CSV export or charts.
"""

from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .periods import Period
from .report_service import (
    FinancialSummary,
    ReportContext,
    aggregate_financial_summary,
)
from .sources import FinanceDataSource, SnapshotDataSource

# (measure_key, label, unit) in display order.
SUMMARY_MEASURES: list[tuple[str, str, str]] = [
    ("income", "Operational income", "amount"),
    ("cost_of_goods", "Cost of goods", "amount"),
    ("profit", "Operational profit", "amount"),
    ("fixed_expenses", "Salaries and fixed expenses", "amount"),
    ("net_profit_before_commissions", "Net profit before commissions", "amount"),
    ("commissions", "Commissions", "amount"),
    ("net_profit", "Net profit", "amount"),
    ("units_sold", "Units sold", "count"),
    ("operation_count", "Operations", "count"),
]


@dataclass(frozen=True)
class SummariesMultiPeriod:
    """
    Multi-period result for financial summaries.

    Attributes
    ----------
    measures :
        Long-format DataFrame, one row per measure and period.

        Columns:
            - period_label : str
            - measure_key  : str
            - label        : str
            - value        : float
            - unit         : str ('amount' or 'count')

    breakdown :
        Long-format DataFrame, one row per operation type and period.

        Columns:
            - period_label : str
            - type         : str ('Venta' or a service type)
            - income       : float
            - profit       : float
            - count        : int
    """

    measures: pd.DataFrame
    breakdown: pd.DataFrame


def _measure_values(summary: FinancialSummary) -> dict[str, float]:
    return {
        "income": summary.income,
        "cost_of_goods": summary.cost_of_goods,
        "profit": summary.profit,
        "fixed_expenses": summary.fixed_expenses,
        "net_profit_before_commissions": (
            summary.commission.net_profit_before_commissions
        ),
        "commissions": summary.commissions,
        "net_profit": summary.net_profit,
        "units_sold": float(summary.totals.total_units_sold),
        "operation_count": float(summary.totals.operation_count),
    }


def _materialize(source: FinanceDataSource) -> SnapshotDataSource:
    """Read every collection once."""
    drivers = source.list_drivers()
    return SnapshotDataSource.from_collections(
        sales=source.list_sales(),
        services=source.list_services(),
        inventory=source.get_inventory_snapshot().values(),
        personnel=source.list_active_personnel(),
        fixed_expenses=source.list_fixed_expenses(),
        drivers=drivers,
        vehicles=source.list_vehicles(),
        payments=source.list_all_payments(),
        manual_debts=[d for drv in drivers for d in source.list_manual_debts(drv.id)],
    )


def compute_summaries_multi_period(
    source: FinanceDataSource,
    periods: list[Period],
    context: Optional[ReportContext] = None,
) -> SummariesMultiPeriod:
    """
    Compute the financial summary for each period.

    Parameters
    ----------
    source :
        Data source for all collections. It is read once.
    periods :
        Periods to compute, in display order.
    context :
        Caller context shared by every period.

    Returns
    -------
    SummariesMultiPeriod

    Raises
    ------
    ValueError
        If no periods are provided.
    """
    if not periods:
        raise ValueError("compute_summaries_multi_period requires at least one Period.")

    context = context or ReportContext()
    snapshot = _materialize(source)

    measure_rows: list[dict[str, Any]] = []
    breakdown_rows: list[dict[str, Any]] = []

    for period in periods:
        summary = aggregate_financial_summary(snapshot, period, context)
        values = _measure_values(summary)

        for key, label, unit in SUMMARY_MEASURES:
            measure_rows.append(
                {
                    "period_label": period.label,
                    "measure_key": key,
                    "label": label,
                    "value": values[key],
                    "unit": unit,
                }
            )

        for op_type, b in summary.breakdown_by_type.items():
            breakdown_rows.append(
                {
                    "period_label": period.label,
                    "type": op_type,
                    "income": b.income,
                    "profit": b.profit,
                    "count": b.count,
                }
            )

    measures = pd.DataFrame(
        measure_rows, columns=["period_label", "measure_key", "label", "value", "unit"]
    )
    breakdown = pd.DataFrame(
        breakdown_rows, columns=["period_label", "type", "income", "profit", "count"]
    )
    return SummariesMultiPeriod(measures=measures, breakdown=breakdown)
