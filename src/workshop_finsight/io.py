# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Workshop FinSight.

This module reads a snapshot of the back office collections from a
directory and turns it into a SnapshotDataSource the reporting services can
consume.

Expected snapshot layout
------------------------

Documents with nested lists are exported as JSON arrays:

    sales.json        list of sale receipts (with their ``items``)
    services.json     list of service records (with ``serviceItems`` and
                      their ``suppliesUsed``)

Flat collections are exported as CSV files:

    inventory.csv        id, name, unit_price, selling_price, quantity, is_service
    personnel.csv        id, name, roles, monthly_salary, commission_rate, is_archived
    fixed_expenses.csv   id, name, amount, category
    drivers.csv          id, name, contract_date, assigned_vehicle_id,
                         deposit_amount, required_deposit_amount, is_archived
    vehicles.csv         id, license_plate, daily_rental_cost
    rental_payments.csv  id, driver_id, payment_date, amount
    manual_debts.csv     id, driver_id, date, amount, note

CSV column names are case-insensitive and may be given in snake_case or in
the document store's camelCase (``unitPrice``, ``contractDate``, ...).
Columns other than the ones listed are ignored.

Missing files are treated as empty collections. Structurally invalid files
(a JSON root that is not a list, a CSV without an ``id`` column) raise a
clear ValueError. Field values themselves are never validated here: bad
numbers or dates are handled leniently by the model constructors.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Callable, TypeVar, Union

import pandas as pd

from .models import (
    Driver,
    InventoryItem,
    ManualDebt,
    MonthlyFixedExpense,
    Personnel,
    RentalPayment,
    SaleReceipt,
    ServiceRecord,
    Vehicle,
)
from .sources import SnapshotDataSource

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
T = TypeVar("T")

SALES_FILE = "sales.json"
SERVICES_FILE = "services.json"
INVENTORY_FILE = "inventory.csv"
PERSONNEL_FILE = "personnel.csv"
FIXED_EXPENSES_FILE = "fixed_expenses.csv"
DRIVERS_FILE = "drivers.csv"
VEHICLES_FILE = "vehicles.csv"
PAYMENTS_FILE = "rental_payments.csv"
MANUAL_DEBTS_FILE = "manual_debts.csv"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_column(name: str) -> str:
    """
    Normalize a CSV header to snake_case.

    ``unitPrice`` -> ``unit_price``, ``Unit Price`` -> ``unit_price``,
    ``UNIT_PRICE`` -> ``unit_price``.
    """
    text = _CAMEL_BOUNDARY.sub("_", str(name).strip())
    text = re.sub(r"[\s\-]+", "_", text)
    return text.lower()


def read_json_records(path: PathLike) -> list[dict[str, Any]]:
    """
    Read a JSON array of documents.

    Returns an empty list when the file does not exist.

    Raises
    ------
    ValueError
        If the file is not valid JSON or its root is not a list.
    """
    p = Path(path)
    if not p.is_file():
        logger.debug("Snapshot file %s not found, using an empty collection", p)
        return []

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in snapshot file: {p}") from exc

    if not isinstance(data, list):
        raise ValueError(
            f"Invalid structure in {p}: expected a JSON array of documents."
        )

    records = [d for d in data if isinstance(d, dict)]
    if len(records) != len(data):
        logger.debug("Skipped %d non-object entries in %s", len(data) - len(records), p)
    return records


def read_csv_records(path: PathLike) -> list[dict[str, Any]]:
    """
    Read a flat collection from a CSV file.

    Column names are normalized with :func:`normalize_column`. Returns an
    empty list when the file does not exist or has no rows.

    Raises
    ------
    ValueError
        If the CSV has no ``id`` column.
    """
    p = Path(path)
    if not p.is_file():
        logger.debug("Snapshot file %s not found, using an empty collection", p)
        return []

    try:
        # Read every column as text, models convert field values themselves.
        df = pd.read_csv(p, dtype=str)
    except pd.errors.EmptyDataError:
        return []

    df.columns = [normalize_column(c) for c in df.columns]
    if "id" not in df.columns:
        raise ValueError(f"Invalid structure in {p}: missing required 'id' column.")

    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def _build(records: list[dict[str, Any]], factory: Callable[[dict[str, Any]], T]) -> list[T]:
    return [factory(r) for r in records]


def load_snapshot(data_dir: PathLike) -> SnapshotDataSource:
    """
    Load every collection found in ``data_dir`` into a SnapshotDataSource.

    Parameters
    ----------
    data_dir:
        Directory holding the snapshot files described in the module
        docstring.

    Raises
    ------
    FileNotFoundError
        If ``data_dir`` does not exist.
    ValueError
        If one of the files is structurally invalid.
    """
    base = Path(data_dir)
    if not base.is_dir():
        raise FileNotFoundError(f"Snapshot directory not found: {base}")

    source = SnapshotDataSource.from_collections(
        sales=_build(read_json_records(base / SALES_FILE), SaleReceipt.from_record),
        services=_build(
            read_json_records(base / SERVICES_FILE), ServiceRecord.from_record
        ),
        inventory=_build(
            read_csv_records(base / INVENTORY_FILE), InventoryItem.from_record
        ),
        personnel=_build(read_csv_records(base / PERSONNEL_FILE), Personnel.from_record),
        fixed_expenses=_build(
            read_csv_records(base / FIXED_EXPENSES_FILE),
            MonthlyFixedExpense.from_record,
        ),
        drivers=_build(read_csv_records(base / DRIVERS_FILE), Driver.from_record),
        vehicles=_build(read_csv_records(base / VEHICLES_FILE), Vehicle.from_record),
        payments=_build(
            read_csv_records(base / PAYMENTS_FILE), RentalPayment.from_record
        ),
        manual_debts=_build(
            read_csv_records(base / MANUAL_DEBTS_FILE), ManualDebt.from_record
        ),
    )

    logger.info(
        "Loaded snapshot from %s: %d sales, %d services, %d inventory items, "
        "%d staff, %d drivers",
        base,
        len(source.sales),
        len(source.services),
        len(source.inventory),
        len(source.personnel),
        len(source.drivers),
    )
    return source
