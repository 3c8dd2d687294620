from datetime import date, datetime

import pytest

from workshop_finsight.config import BusinessRules
from workshop_finsight.models import (
    InventoryItem,
    SaleItem,
    SaleReceipt,
    ServiceItem,
    ServiceRecord,
)
from workshop_finsight.operations import (
    aggregate_operations,
    filter_services,
    service_effective_date,
    sort_operations,
)
from workshop_finsight.periods import Period

MARCH = Period(start=date(2025, 3, 1), end=date(2025, 3, 31), label="March")

INVENTORY = [
    InventoryItem(id="inv-1", name="Filtro", unit_price=60.0, selling_price=100.0, quantity=10),
    InventoryItem(id="inv-2", name="Aceite", unit_price=20.0, selling_price=35.0, quantity=50),
]


def _sale(sale_id, sale_date, status="Completado", qty=1.0, item_id="inv-1", total=100.0):
    return SaleReceipt(
        id=sale_id,
        sale_date=sale_date,
        status=status,
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


def _service(service_id, service_date, status="Completado", delivery=None, **kwargs):
    return ServiceRecord(
        id=service_id,
        service_date=service_date,
        status=status,
        total_cost=kwargs.pop("total_cost", 1000.0),
        total_supplies_cost=kwargs.pop("total_supplies_cost", 400.0),
        delivery_date_time=delivery,
        **kwargs,
    )


def test_cancelled_sales_never_aggregated() -> None:
    """A cancelled sale is excluded from operations whatever its other fields."""
    sales = [
        _sale("s1", "2025-03-05"),
        _sale("s2", "2025-03-06", status="Cancelado", total=9999.0),
    ]

    ops = aggregate_operations(sales, [], INVENTORY, MARCH)

    assert [op.id for op in ops] == ["s1"]
    assert sum(op.total_amount for op in ops) == pytest.approx(100.0)


def test_only_completed_or_delivered_services_count() -> None:
    services = [
        _service("a", "2025-03-02", status="Completado"),
        _service("b", "2025-03-02", status="Entregado"),
        _service("c", "2025-03-02", status="En Proceso"),
        _service("d", "2025-03-02", status="Cancelado"),
    ]

    ops = aggregate_operations([], services, INVENTORY, MARCH)

    assert [op.id for op in ops] == ["a", "b"]


def test_service_uses_delivery_date_when_present() -> None:
    """A service performed in February but delivered in March belongs to March."""
    delivered_in_march = _service("a", "2025-02-27", delivery="2025-03-01T09:00:00")
    delivered_in_april = _service("b", "2025-03-30", delivery="2025-04-02T09:00:00")

    assert service_effective_date(delivered_in_march) == "2025-03-01T09:00:00"
    kept = filter_services([delivered_in_march, delivered_in_april], MARCH)

    assert [s.id for s, _ in kept] == ["a"]
    assert kept[0][1] == datetime(2025, 3, 1, 9, 0)


def test_malformed_or_missing_dates_are_excluded() -> None:
    sales = [_sale("ok", "2025-03-10"), _sale("bad", "10/03/2025?"), _sale("none", None)]
    services = [_service("sv-bad", "garbage")]

    ops = aggregate_operations(sales, services, INVENTORY, MARCH)

    assert [op.id for op in ops] == ["ok"]


def test_period_bounds_are_inclusive() -> None:
    sales = [
        _sale("first", "2025-03-01T00:00:00"),
        _sale("last", "2025-03-31T23:59:59"),
        _sale("after", "2025-04-01T00:00:00"),
    ]

    ops = aggregate_operations(sales, [], INVENTORY, MARCH)

    assert {op.id for op in ops} == {"first", "last"}


def test_operation_fields_for_sales_and_services() -> None:
    sale = _sale("s1", "2025-03-10", qty=2, total=250.0)
    service = _service("sv1", "2025-03-11", service_type="Mecánica", service_profit=700.0)
    untyped = _service("sv2", "2025-03-12")

    ops = aggregate_operations([sale], [service, untyped], INVENTORY, MARCH)
    by_id = {op.id: op for op in ops}

    assert by_id["s1"].type == "Venta"
    assert by_id["s1"].source == "sale"
    assert by_id["s1"].cost_of_goods == pytest.approx(120.0)
    assert by_id["s1"].profit == pytest.approx(130.0)
    assert by_id["sv1"].type == "Mecánica"
    assert by_id["sv1"].profit == pytest.approx(700.0)
    assert by_id["sv2"].type == "Servicio General"
    assert by_id["sv2"].profit == pytest.approx(600.0)
    # Sales first, then services
    assert [op.source for op in ops] == ["sale", "service", "service"]


def test_shared_ids_are_disambiguated_by_key() -> None:
    """A sale and a service may share an id; key includes the type."""
    ops = aggregate_operations(
        [_sale("42", "2025-03-10")], [_service("42", "2025-03-10")], INVENTORY, MARCH
    )

    assert len({op.key for op in ops}) == 2


def test_custom_rules_are_honoured() -> None:
    rules = BusinessRules(completed_service_statuses=("Listo",), sale_operation_type="Sale")
    ops = aggregate_operations(
        [_sale("s1", "2025-03-10")],
        [_service("a", "2025-03-10", status="Listo"), _service("b", "2025-03-10")],
        INVENTORY,
        MARCH,
        rules,
    )

    assert [(op.type, op.id) for op in ops] == [("Sale", "s1"), ("Servicio General", "a")]



def test_offset_timestamps_use_the_reporting_timezone() -> None:
    """An evening sale in Mexico City on March 31 is stored as April 1st UTC."""
    sales = [_sale("s1", "2025-04-01T02:00:00.000Z")]
    local = BusinessRules(timezone="America/Mexico_City")
    april = Period(start=date(2025, 4, 1), end=date(2025, 4, 30), label="April")

    march_ops = aggregate_operations(sales, [], INVENTORY, MARCH, local)

    assert [op.id for op in march_ops] == ["s1"]
    assert march_ops[0].date == datetime(2025, 3, 31, 20, 0)
    assert aggregate_operations(sales, [], INVENTORY, april, local) == []
    # Default rules report in UTC
    assert aggregate_operations(sales, [], INVENTORY, MARCH) == []


def test_service_description_falls_back_to_item_names() -> None:
    items = (
        ServiceItem(id="it1", name="Frenos", supplies_used=()),
        ServiceItem(id="it2", name="", supplies_used=()),
        ServiceItem(id="it3", name="Afinación", supplies_used=()),
    )
    services = [
        _service("sv1", "2025-03-10", service_items=items),
        _service("sv2", "2025-03-11", service_items=items, description="Revisión anual"),
    ]

    by_id = {op.id: op for op in aggregate_operations([], services, INVENTORY, MARCH)}

    assert by_id["sv1"].description == "Frenos, Afinación"
    assert by_id["sv2"].description == "Revisión anual"

def test_sort_operations_newest_first() -> None:
    ops = aggregate_operations(
        [_sale("old", "2025-03-01"), _sale("new", "2025-03-20")],
        [_service("mid", "2025-03-10")],
        INVENTORY,
        MARCH,
    )

    assert [op.id for op in sort_operations(ops)] == ["new", "mid", "old"]
    assert [op.id for op in sort_operations(ops, newest_first=False)] == ["old", "mid", "new"]


def test_aggregation_does_not_mutate_inputs() -> None:
    sales = [_sale("s1", "2025-03-10")]
    services = [_service("sv1", "2025-03-10")]
    before = (list(sales), list(services))

    aggregate_operations(sales, services, INVENTORY, MARCH)

    assert (sales, services) == before
