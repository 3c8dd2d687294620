from datetime import date

import pytest

from workshop_finsight.costing import as_snapshot
from workshop_finsight.engine import (
    compute_profit_totals,
    sale_profit,
    service_income,
    service_profit,
)
from workshop_finsight.models import (
    InventoryItem,
    SaleItem,
    SaleReceipt,
    ServiceItem,
    ServiceRecord,
    ServiceSupply,
)
from workshop_finsight.operations import aggregate_operations
from workshop_finsight.periods import Period

MARCH = Period(start=date(2025, 3, 1), end=date(2025, 3, 31), label="March")

INVENTORY = [
    InventoryItem(id="inv-1", name="Filtro", unit_price=60.0, selling_price=100.0, quantity=10),
    InventoryItem(id="inv-2", name="Aceite", unit_price=20.0, selling_price=35.0, quantity=50),
]


def _sale(sale_id: str, qty: float, total: float, item_id: str = "inv-1") -> SaleReceipt:
    return SaleReceipt(
        id=sale_id,
        sale_date="2025-03-10",
        status="Completado",
        items=(
            SaleItem(
                inventory_item_id=item_id,
                item_name="Filtro",
                quantity=qty,
                unit_price=total / qty,
                total_price=total,
            ),
        ),
        total_amount=total,
    )


def _service(service_id: str, service_type=None, profit=None, supplies_qty=2.0) -> ServiceRecord:
    return ServiceRecord(
        id=service_id,
        service_date="2025-03-12",
        status="Entregado",
        total_cost=1000.0,
        total_supplies_cost=300.0,
        service_type=service_type,
        service_profit=profit,
        service_items=(
            ServiceItem(
                id="it1",
                name="Servicio",
                supplies_used=(
                    ServiceSupply(supply_id="inv-2", supply_name="Aceite", quantity=supplies_qty),
                ),
            ),
        ),
    )


def test_per_operation_profit_rules() -> None:
    snapshot = as_snapshot(INVENTORY)

    assert sale_profit(_sale("s1", 2, 250.0), snapshot) == pytest.approx(130.0)
    assert service_income(_service("a")) == pytest.approx(1000.0)
    assert service_profit(_service("a")) == pytest.approx(700.0)
    # Upstream profit is authoritative, including zero
    assert service_profit(_service("b", profit=0.0)) == 0.0
    assert service_profit(_service("c", profit=820.0)) == pytest.approx(820.0)


def test_compute_profit_totals_splits_sales_and_services() -> None:
    ops = aggregate_operations(
        [_sale("s1", 2, 250.0), _sale("s2", 1, 100.0)],
        [_service("a", "Mecánica"), _service("b", profit=500.0)],
        INVENTORY,
        MARCH,
    )

    totals = compute_profit_totals(ops, as_snapshot(INVENTORY))

    assert totals.operation_count == 4
    assert totals.income_from_sales == pytest.approx(350.0)
    assert totals.profit_from_sales == pytest.approx(130.0 + 40.0)
    assert totals.income_from_services == pytest.approx(2000.0)
    assert totals.profit_from_services == pytest.approx(700.0 + 500.0)
    assert totals.total_operational_income == pytest.approx(2350.0)
    assert totals.total_operational_profit == pytest.approx(170.0 + 1200.0)
    assert totals.total_cost_of_goods == pytest.approx(180.0 + 600.0)
    assert totals.total_units_sold == pytest.approx(3 + 4)
    assert totals.inventory_value == pytest.approx(10 * 60.0 + 50 * 20.0)


def test_breakdown_by_type() -> None:
    ops = aggregate_operations(
        [_sale("s1", 2, 250.0), _sale("s2", 1, 100.0)],
        [_service("a", "Mecánica"), _service("b", "Mecánica"), _service("c")],
        INVENTORY,
        MARCH,
    )

    breakdown = compute_profit_totals(ops).breakdown

    assert set(breakdown) == {"Venta", "Mecánica", "Servicio General"}
    assert breakdown["Venta"].count == 2
    assert breakdown["Venta"].income == pytest.approx(350.0)
    assert breakdown["Mecánica"].count == 2
    assert breakdown["Mecánica"].profit == pytest.approx(1400.0)
    assert breakdown["Servicio General"].income == pytest.approx(1000.0)


def test_sales_income_minus_cost_equals_profit() -> None:
    """Income, cost and profit come from one pass and stay consistent for sales."""
    ops = aggregate_operations(
        [_sale("s1", 3, 310.0), _sale("s2", 1, 45.0, item_id="inv-2")], [], INVENTORY, MARCH
    )

    totals = compute_profit_totals(ops)

    assert totals.total_operational_income - totals.total_cost_of_goods == pytest.approx(
        totals.total_operational_profit
    )


def test_empty_operations_yield_zero_totals() -> None:
    totals = compute_profit_totals([])

    assert totals.total_operational_income == 0.0
    assert totals.total_operational_profit == 0.0
    assert totals.operation_count == 0
    assert totals.breakdown == {}
    assert totals.inventory_value == 0.0
