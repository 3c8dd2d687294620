from datetime import date

import pytest

from workshop_finsight.models import (
    Driver,
    InventoryItem,
    ManualDebt,
    MonthlyFixedExpense,
    Personnel,
    RentalPayment,
    SaleItem,
    SaleReceipt,
    ServiceItem,
    ServiceRecord,
    ServiceSupply,
    Vehicle,
)
from workshop_finsight.report_service import ReportContext
from workshop_finsight.sources import SnapshotDataSource

TODAY = date(2025, 3, 20)


def _sale(sale_id, sale_date, lines, status="Completado") -> SaleReceipt:
    items = tuple(
        SaleItem(
            inventory_item_id=item_id,
            item_name=name,
            quantity=qty,
            unit_price=price,
            total_price=qty * price,
        )
        for item_id, name, qty, price in lines
    )
    return SaleReceipt(
        id=sale_id,
        sale_date=sale_date,
        status=status,
        items=items,
        total_amount=sum(i.total_price for i in items),
    )


def _service(service_id, service_date, status, total, supplies_cost, service_type=None, supplies=()):
    return ServiceRecord(
        id=service_id,
        service_date=service_date,
        status=status,
        total_cost=total,
        total_supplies_cost=supplies_cost,
        service_type=service_type,
        service_items=(
            ServiceItem(
                id="it1",
                name="Trabajo",
                supplies_used=tuple(
                    ServiceSupply(supply_id=sid, supply_name=name, quantity=qty)
                    for sid, name, qty in supplies
                ),
            ),
        ),
    )


@pytest.fixture
def workshop_source() -> SnapshotDataSource:
    """
    A small but complete back office snapshot for March 2025.

    March figures:
      - sales: s1 (2 x 100 filter, cost 60) + s2 (3 x 35 oil, cost 20),
        s3 is cancelled, s4 is in February;
      - services: sv1 Mecánica 10,000 (supplies 1,000), sv2 untyped 22,000
        (supplies 2,000, delivered in March), sv3 still in progress.
    Operational profit: (200 - 120) + (105 - 60) + 9,000 + 20,000 = 29,125.
    Salaries 5,000 + 5,000 and 10,000 of fixed expenses leave 9,125 before
    commissions.
    """
    return SnapshotDataSource.from_collections(
        sales=[
            _sale("s1", "2025-03-03T10:00:00", [("inv-1", "Filtro", 2, 100.0)]),
            _sale("s2", "2025-03-15T12:00:00", [("inv-2", "Aceite", 3, 35.0)]),
            _sale("s3", "2025-03-16", [("inv-1", "Filtro", 5, 100.0)], status="Cancelado"),
            _sale("s4", "2025-02-27", [("inv-1", "Filtro", 1, 100.0)]),
        ],
        services=[
            _service(
                "sv1", "2025-03-05", "Completado", 10000.0, 1000.0, "Mecánica",
                supplies=[("inv-2", "Aceite", 4)],
            ),
            ServiceRecord(
                id="sv2",
                service_date="2025-02-26",
                delivery_date_time="2025-03-02T09:00:00",
                status="Entregado",
                total_cost=22000.0,
                total_supplies_cost=2000.0,
            ),
            _service("sv3", "2025-03-10", "En Proceso", 5000.0, 500.0),
        ],
        inventory=[
            InventoryItem(id="inv-1", name="Filtro", unit_price=60.0, selling_price=100.0, quantity=10),
            InventoryItem(id="inv-2", name="Aceite", unit_price=20.0, selling_price=35.0, quantity=50),
        ],
        personnel=[
            Personnel(
                id="p1", name="Ana", roles=("Técnico",), monthly_salary=5000.0, commission_rate=0.05
            ),
            Personnel(
                id="p2", name="Beto", roles=("Administración",), monthly_salary=5000.0,
                commission_rate=0.03,
            ),
            Personnel(
                id="p3", name="Carla", roles=("Técnico",), monthly_salary=7000.0,
                commission_rate=0.10, is_archived=True,
            ),
        ],
        fixed_expenses=[
            MonthlyFixedExpense(id="f1", name="Renta", amount=8000.0),
            MonthlyFixedExpense(id="f2", name="Luz", amount=2000.0),
        ],
        drivers=[
            Driver(
                id="d1", name="Luis", contract_date="2025-03-10", assigned_vehicle_id="v1",
                deposit_amount=1000.0, required_deposit_amount=1500.0,
            ),
            Driver(id="d2", name="Marta", contract_date="2025-03-18", assigned_vehicle_id="v2"),
        ],
        vehicles=[
            Vehicle(id="v1", license_plate="ABC-123", daily_rental_cost=300.0),
            Vehicle(id="v2", license_plate="XYZ-999", daily_rental_cost=250.0),
        ],
        payments=[
            RentalPayment(id="pay1", driver_id="d1", payment_date="2025-03-12", amount=2000.0),
            RentalPayment(id="pay2", driver_id="d2", payment_date="2025-03-19", amount=750.0),
        ],
        manual_debts=[
            ManualDebt(id="m1", driver_id="d1", date="2025-03-14", amount=400.0, note="Multa"),
        ],
    )


@pytest.fixture
def context() -> ReportContext:
    return ReportContext(today=TODAY, requested_by="tester")
