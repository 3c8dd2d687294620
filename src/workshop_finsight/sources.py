# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data source interface consumed by the reporting services.

The engine never talks to the document store itself. The calling layer
provides a FinanceDataSource that hands over the current snapshot of every
collection as plain model objects. ``SnapshotDataSource`` is the in-memory
implementation used by the CLI (see io.load_snapshot) and by tests.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Protocol

from .costing import InventorySnapshot
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
from .periods import Period


class FinanceDataSource(Protocol):
    """Collections the reporting services read from."""

    def list_sales(self, period: Optional[Period] = None) -> list[SaleReceipt]: ...

    def list_services(self, period: Optional[Period] = None) -> list[ServiceRecord]: ...

    def list_active_personnel(self) -> list[Personnel]: ...

    def list_fixed_expenses(self) -> list[MonthlyFixedExpense]: ...

    def get_inventory_snapshot(self) -> InventorySnapshot: ...

    def list_payments(self, driver_id: str) -> list[RentalPayment]: ...

    def list_all_payments(self) -> list[RentalPayment]: ...

    def list_manual_debts(self, driver_id: str) -> list[ManualDebt]: ...

    def list_drivers(self) -> list[Driver]: ...

    def list_vehicles(self) -> list[Vehicle]: ...

    def get_driver(self, driver_id: str) -> Optional[Driver]: ...

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]: ...


@dataclass(frozen=True)
class SnapshotDataSource:
    """
    In-memory FinanceDataSource over plain collections.

    ``list_sales`` and ``list_services`` ignore the period: the source is a
    full snapshot and date filtering is applied by the operation aggregator
    (with the status rules and the delivery-date fallback that a simple
    range query could not express).
    """

    sales: tuple[SaleReceipt, ...] = ()
    services: tuple[ServiceRecord, ...] = ()
    inventory: tuple[InventoryItem, ...] = ()
    personnel: tuple[Personnel, ...] = ()
    fixed_expenses: tuple[MonthlyFixedExpense, ...] = ()
    drivers: tuple[Driver, ...] = ()
    vehicles: tuple[Vehicle, ...] = ()
    payments: tuple[RentalPayment, ...] = ()
    manual_debts: tuple[ManualDebt, ...] = ()

    @classmethod
    def from_collections(
        cls,
        sales: Iterable[SaleReceipt] = (),
        services: Iterable[ServiceRecord] = (),
        inventory: Iterable[InventoryItem] = (),
        personnel: Iterable[Personnel] = (),
        fixed_expenses: Iterable[MonthlyFixedExpense] = (),
        drivers: Iterable[Driver] = (),
        vehicles: Iterable[Vehicle] = (),
        payments: Iterable[RentalPayment] = (),
        manual_debts: Iterable[ManualDebt] = (),
    ) -> "SnapshotDataSource":
        return cls(
            sales=tuple(sales),
            services=tuple(services),
            inventory=tuple(inventory),
            personnel=tuple(personnel),
            fixed_expenses=tuple(fixed_expenses),
            drivers=tuple(drivers),
            vehicles=tuple(vehicles),
            payments=tuple(payments),
            manual_debts=tuple(manual_debts),
        )

    def list_sales(self, period: Optional[Period] = None) -> list[SaleReceipt]:
        return list(self.sales)

    def list_services(self, period: Optional[Period] = None) -> list[ServiceRecord]:
        return list(self.services)

    def list_active_personnel(self) -> list[Personnel]:
        return [p for p in self.personnel if not p.is_archived]

    def list_fixed_expenses(self) -> list[MonthlyFixedExpense]:
        return list(self.fixed_expenses)

    def get_inventory_snapshot(self) -> InventorySnapshot:
        return InventorySnapshot.from_items(self.inventory)

    def list_payments(self, driver_id: str) -> list[RentalPayment]:
        return [p for p in self.payments if p.driver_id == driver_id]

    def list_all_payments(self) -> list[RentalPayment]:
        return list(self.payments)

    def list_manual_debts(self, driver_id: str) -> list[ManualDebt]:
        return [d for d in self.manual_debts if d.driver_id == driver_id]

    def list_drivers(self) -> list[Driver]:
        return list(self.drivers)

    def list_vehicles(self) -> list[Vehicle]:
        return list(self.vehicles)

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        return next((d for d in self.drivers if d.id == driver_id), None)

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        return next((v for v in self.vehicles if v.id == vehicle_id), None)
