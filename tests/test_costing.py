from datetime import date

import pytest

from workshop_finsight.costing import (
    InventorySnapshot,
    as_snapshot,
    sale_cost_basis,
    service_cost_basis,
    supplies_cost_basis,
)
from workshop_finsight.engine import compute_profit_totals
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

ITEMS = [
    InventoryItem(id="inv-1", name="Filtro", unit_price=60.0, selling_price=100.0, quantity=10),
    InventoryItem(id="inv-2", name="Aceite", unit_price=20.0, selling_price=35.0, quantity=50),
    InventoryItem(
        id="lab-1", name="Mano de obra", unit_price=0.0, selling_price=300.0, quantity=0,
        is_service=True,
    ),
]


def _line(item_id: str, qty: float, total: float) -> SaleItem:
    return SaleItem(
        inventory_item_id=item_id,
        item_name=item_id,
        quantity=qty,
        unit_price=total / qty,
        total_price=total,
    )


def test_unit_cost_and_missing_items() -> None:
    snapshot = InventorySnapshot.from_items(ITEMS)

    assert snapshot.unit_cost("inv-1") == pytest.approx(60.0)
    assert snapshot.unit_cost("deleted") == 0.0
    assert "inv-2" in snapshot
    assert len(snapshot) == 3


def test_sale_cost_basis_uses_current_unit_cost() -> None:
    sale = SaleReceipt(
        id="s1",
        sale_date="2025-03-10",
        status="Completado",
        items=(_line("inv-1", 2, 200.0), _line("inv-2", 3, 105.0)),
        total_amount=305.0,
    )

    assert sale_cost_basis(sale, as_snapshot(ITEMS)) == pytest.approx(2 * 60.0 + 3 * 20.0)


def test_deleted_inventory_item_costs_nothing_but_revenue_counts() -> None:
    """A line referencing a deleted item adds revenue with no cost."""
    sale = SaleReceipt(
        id="s1",
        sale_date="2025-03-10",
        status="Completado",
        items=(_line("inv-1", 1, 100.0), _line("deleted-item", 2, 80.0)),
        total_amount=180.0,
    )
    march = Period(start=date(2025, 3, 1), end=date(2025, 3, 31), label="March")

    ops = aggregate_operations([sale], [], ITEMS, march)
    totals = compute_profit_totals(ops)

    assert ops[0].cost_of_goods == pytest.approx(60.0)
    assert totals.total_operational_income == pytest.approx(180.0)
    # Deleted line contributes its full 80.0 revenue to profit
    assert totals.total_operational_profit == pytest.approx(40.0 + 80.0)


def test_service_cost_bases() -> None:
    service = ServiceRecord(
        id="sv1",
        service_date="2025-03-10",
        status="Completado",
        total_cost=1000.0,
        total_supplies_cost=95.0,
        service_items=(
            ServiceItem(
                id="it1",
                name="Cambio de aceite",
                supplies_used=(
                    ServiceSupply(supply_id="inv-2", supply_name="Aceite", quantity=4),
                    ServiceSupply(supply_id="inv-1", supply_name="Filtro", quantity=1),
                    ServiceSupply(supply_id="gone", supply_name="Junta", quantity=1),
                ),
            ),
        ),
    )

    assert service_cost_basis(service) == pytest.approx(95.0)
    assert supplies_cost_basis(service, as_snapshot(ITEMS)) == pytest.approx(4 * 20.0 + 60.0)


def test_inventory_value_excludes_service_items() -> None:
    assert as_snapshot(ITEMS).inventory_value() == pytest.approx(10 * 60.0 + 50 * 20.0)


def test_as_snapshot_accepts_several_inputs() -> None:
    by_id = {item.id: item for item in ITEMS}
    snapshot = InventorySnapshot.from_items(ITEMS)

    assert as_snapshot(snapshot) is snapshot
    assert set(as_snapshot(by_id)) == set(by_id)
    assert len(as_snapshot(None)) == 0
