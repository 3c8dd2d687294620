# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for Workshop FinSight.

Source collections (sales, services, inventory, personnel, fixed expenses,
drivers, vehicles, payments) arrive from the document store as plain
mappings. Each dataclass below exposes a ``from_record()`` constructor that
accepts either snake_case keys or the store's camelCase keys and never
raises on bad field values: unreadable numbers fall back to 0.0 (or None
when "absent" carries meaning), missing strings fall back to "".

Dates are kept as the raw values found in the record. They are parsed
lazily by :func:`workshop_finsight.periods.parse_moment`, so that a record
with a malformed date is simply left out of a date window instead of
failing the whole load.

Derived records (FinancialOperation, InventoryMovement) are produced fresh
on every computation and are never stored.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

SALE_COMPLETED = "Completado"
SALE_CANCELLED = "Cancelado"
SERVICE_COMPLETED = "Completado"
SERVICE_DELIVERED = "Entregado"

_TRUE_STRINGS = {"true", "1", "yes", "y", "si", "sí", "x"}


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _get(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-missing value among keys, or None."""
    for key in keys:
        value = record.get(key)
        if not _is_missing(value):
            return value
    return None


def _to_float(value: Any, default: float = 0.0) -> float:
    if _is_missing(value):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def _to_optional_float(value: Any) -> Optional[float]:
    if _is_missing(value):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _to_str(value: Any) -> str:
    if _is_missing(value):
        return ""
    # CSV ids read by pandas may come back as floats (e.g. 12.0)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_optional_str(value: Any) -> Optional[str]:
    text = _to_str(value)
    return text or None


def _to_bool(value: Any) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def _to_roles(value: Any) -> tuple[str, ...]:
    if _is_missing(value):
        return ()
    if isinstance(value, str):
        parts = value.replace(",", ";").replace("|", ";").split(";")
        return tuple(p.strip() for p in parts if p.strip())
    if isinstance(value, Iterable):
        return tuple(str(v).strip() for v in value if not _is_missing(v))
    return (str(value).strip(),)


def _records(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [v for v in value if isinstance(v, Mapping)]


# Raw date value as stored (ISO string, date or datetime); parsed lazily.
DateValue = Any


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleItem:
    """One line of a point-of-sale receipt (prices are tax-inclusive)."""

    inventory_item_id: str
    item_name: str
    quantity: float
    unit_price: float
    total_price: float

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SaleItem":
        quantity = _to_float(_get(record, "quantity"))
        unit_price = _to_float(_get(record, "unit_price", "unitPrice"))
        total_raw = _get(record, "total_price", "totalPrice")
        total_price = (
            _to_float(total_raw) if total_raw is not None else quantity * unit_price
        )
        return cls(
            inventory_item_id=_to_str(
                _get(record, "inventory_item_id", "inventoryItemId")
            ),
            item_name=_to_str(_get(record, "item_name", "itemName", "name")),
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
        )


@dataclass(frozen=True)
class SaleReceipt:
    """A point-of-sale receipt."""

    id: str
    sale_date: DateValue
    status: str
    items: tuple[SaleItem, ...]
    total_amount: float
    payment_method: str = ""
    customer_name: str = ""

    @property
    def units_sold(self) -> float:
        return sum(item.quantity for item in self.items)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SaleReceipt":
        items = tuple(
            SaleItem.from_record(r) for r in _records(_get(record, "items"))
        )
        total_raw = _get(record, "total_amount", "totalAmount")
        total_amount = (
            _to_float(total_raw)
            if total_raw is not None
            else sum(i.total_price for i in items)
        )
        return cls(
            id=_to_str(_get(record, "id")),
            sale_date=_get(record, "sale_date", "saleDate"),
            status=_to_str(_get(record, "status")) or SALE_COMPLETED,
            items=items,
            total_amount=total_amount,
            payment_method=_to_str(_get(record, "payment_method", "paymentMethod")),
            customer_name=_to_str(_get(record, "customer_name", "customerName")),
        )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceSupply:
    """A supply consumed while performing a service."""

    supply_id: str
    supply_name: str
    quantity: float

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ServiceSupply":
        return cls(
            supply_id=_to_str(_get(record, "supply_id", "supplyId")),
            supply_name=_to_str(_get(record, "supply_name", "supplyName", "name")),
            quantity=_to_float(_get(record, "quantity")),
        )


@dataclass(frozen=True)
class ServiceItem:
    """A billable item of a service order with its consumed supplies."""

    id: str
    name: str
    supplies_used: tuple[ServiceSupply, ...]

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ServiceItem":
        return cls(
            id=_to_str(_get(record, "id")),
            name=_to_str(_get(record, "name")),
            supplies_used=tuple(
                ServiceSupply.from_record(r)
                for r in _records(_get(record, "supplies_used", "suppliesUsed"))
            ),
        )


@dataclass(frozen=True)
class ServiceRecord:
    """
    A workshop service order.

    ``service_profit`` is precomputed upstream and is authoritative when
    present; ``None`` means the upstream value was never recorded.
    """

    id: str
    service_date: DateValue
    status: str
    total_cost: float
    total_supplies_cost: float
    service_items: tuple[ServiceItem, ...] = ()
    delivery_date_time: DateValue = None
    service_type: Optional[str] = None
    service_profit: Optional[float] = None
    technician_id: str = ""
    payment_method: str = ""
    description: str = ""

    @property
    def supplies(self) -> list[ServiceSupply]:
        """Flat list of every supply consumed across service items."""
        return [s for item in self.service_items for s in item.supplies_used]

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ServiceRecord":
        service_items = [
            ServiceItem.from_record(r)
            for r in _records(_get(record, "service_items", "serviceItems"))
        ]
        # Older documents store supplies at the top level of the order.
        flat_supplies = _records(_get(record, "supplies_used", "suppliesUsed"))
        if not service_items and flat_supplies:
            service_items = [
                ServiceItem(
                    id="",
                    name="",
                    supplies_used=tuple(
                        ServiceSupply.from_record(r) for r in flat_supplies
                    ),
                )
            ]

        return cls(
            id=_to_str(_get(record, "id")),
            service_date=_get(record, "service_date", "serviceDate"),
            delivery_date_time=_get(record, "delivery_date_time", "deliveryDateTime"),
            status=_to_str(_get(record, "status")),
            service_type=_to_optional_str(_get(record, "service_type", "serviceType")),
            total_cost=_to_float(_get(record, "total_cost", "totalCost")),
            service_profit=_to_optional_float(
                _get(record, "service_profit", "serviceProfit")
            ),
            total_supplies_cost=_to_float(
                _get(record, "total_supplies_cost", "totalSuppliesCost")
            ),
            service_items=tuple(service_items),
            technician_id=_to_str(_get(record, "technician_id", "technicianId")),
            payment_method=_to_str(_get(record, "payment_method", "paymentMethod")),
            description=_to_str(_get(record, "description")),
        )


# ---------------------------------------------------------------------------
# Inventory, personnel, expenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InventoryItem:
    """A stock item. ``unit_price`` is the workshop cost, not the sale price."""

    id: str
    name: str
    unit_price: float
    selling_price: float
    quantity: float
    is_service: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InventoryItem":
        return cls(
            id=_to_str(_get(record, "id")),
            name=_to_str(_get(record, "name")),
            unit_price=_to_float(_get(record, "unit_price", "unitPrice")),
            selling_price=_to_float(_get(record, "selling_price", "sellingPrice")),
            quantity=_to_float(_get(record, "quantity")),
            is_service=_to_bool(_get(record, "is_service", "isService")),
        )


@dataclass(frozen=True)
class Personnel:
    """A staff member, as seen by payroll and commission computations."""

    id: str
    name: str
    roles: tuple[str, ...]
    monthly_salary: float
    commission_rate: float
    is_archived: bool = False

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Personnel":
        return cls(
            id=_to_str(_get(record, "id")),
            name=_to_str(_get(record, "name")),
            roles=_to_roles(_get(record, "roles", "role")),
            monthly_salary=_to_float(_get(record, "monthly_salary", "monthlySalary")),
            commission_rate=_to_float(
                _get(record, "commission_rate", "commissionRate")
            ),
            is_archived=_to_bool(_get(record, "is_archived", "isArchived")),
        )


@dataclass(frozen=True)
class MonthlyFixedExpense:
    """A recurring monthly expense (rent, utilities, software, ...)."""

    id: str
    name: str
    amount: float
    category: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "MonthlyFixedExpense":
        return cls(
            id=_to_str(_get(record, "id")),
            name=_to_str(_get(record, "name")),
            amount=_to_float(_get(record, "amount")),
            category=_to_str(_get(record, "category")),
        )


# ---------------------------------------------------------------------------
# Fleet rentals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Driver:
    """A driver leasing one of the fleet vehicles."""

    id: str
    name: str
    contract_date: DateValue
    assigned_vehicle_id: str
    deposit_amount: float = 0.0
    required_deposit_amount: Optional[float] = None
    is_archived: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Driver":
        return cls(
            id=_to_str(_get(record, "id")),
            name=_to_str(_get(record, "name")),
            contract_date=_get(record, "contract_date", "contractDate"),
            assigned_vehicle_id=_to_str(
                _get(record, "assigned_vehicle_id", "assignedVehicleId")
            ),
            deposit_amount=_to_float(_get(record, "deposit_amount", "depositAmount")),
            required_deposit_amount=_to_optional_float(
                _get(record, "required_deposit_amount", "requiredDepositAmount")
            ),
            is_archived=_to_bool(_get(record, "is_archived", "isArchived")),
        )


@dataclass(frozen=True)
class Vehicle:
    """Rental-relevant view of a fleet vehicle."""

    id: str
    license_plate: str = ""
    daily_rental_cost: Optional[float] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Vehicle":
        return cls(
            id=_to_str(_get(record, "id")),
            license_plate=_to_str(_get(record, "license_plate", "licensePlate")),
            daily_rental_cost=_to_optional_float(
                _get(record, "daily_rental_cost", "dailyRentalCost")
            ),
        )


@dataclass(frozen=True)
class RentalPayment:
    """A rent payment made by a driver."""

    id: str
    driver_id: str
    payment_date: DateValue
    amount: float

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "RentalPayment":
        return cls(
            id=_to_str(_get(record, "id")),
            driver_id=_to_str(_get(record, "driver_id", "driverId")),
            payment_date=_get(record, "payment_date", "paymentDate"),
            amount=_to_float(_get(record, "amount")),
        )


@dataclass(frozen=True)
class ManualDebt:
    """A debt entered by hand against a driver (damages, fines, ...)."""

    id: str
    driver_id: str
    date: DateValue
    amount: float
    note: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ManualDebt":
        return cls(
            id=_to_str(_get(record, "id")),
            driver_id=_to_str(_get(record, "driver_id", "driverId")),
            date=_get(record, "date"),
            amount=_to_float(_get(record, "amount")),
            note=_to_str(_get(record, "note", "notes")),
        )


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FinancialOperation:
    """
    A normalized financial event (sale or completed service).

    Attributes
    ----------
    id :
        Id of the originating record. Sales and services may share ids;
        use :attr:`key` when a unique identifier is needed.
    date :
        Parsed moment of the operation (sale date, or delivery/service date).
    type :
        'Venta' for sales, the service type otherwise.
    total_amount :
        Revenue of the operation.
    profit :
        Revenue minus cost basis, or the authoritative upstream service profit.
    cost_of_goods :
        Cost basis attributed to the operation.
    source :
        'sale' or 'service'.
    record :
        The originating SaleReceipt or ServiceRecord.
    """

    id: str
    date: Any
    type: str
    description: str
    total_amount: float
    profit: float
    cost_of_goods: float
    source: str
    record: Union[SaleReceipt, ServiceRecord]

    @property
    def key(self) -> tuple[str, str]:
        return (self.type, self.id)


@dataclass(frozen=True)
class InventoryMovement:
    """A stock-depleting event derived from a sale line or a consumed supply."""

    id: str
    date: Any
    type: str
    related_id: str
    item_name: str
    quantity: float
    unit_cost: float
    total_cost: float
