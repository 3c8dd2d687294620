import json

import pytest

from workshop_finsight.io import (
    load_snapshot,
    normalize_column,
    read_csv_records,
    read_json_records,
)


def _write_snapshot(base) -> None:
    (base / "sales.json").write_text(
        json.dumps(
            [
                {
                    "id": "s1",
                    "saleDate": "2025-03-10T10:00:00",
                    "status": "Completado",
                    "totalAmount": 200,
                    "items": [
                        {"inventoryItemId": "007", "itemName": "Filtro", "quantity": 2, "unitPrice": 100}
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )
    (base / "services.json").write_text(
        json.dumps(
            [
                {
                    "id": "sv1",
                    "serviceDate": "2025-03-11",
                    "status": "Entregado",
                    "totalCost": 1000,
                    "totalSuppliesCost": 300,
                    "serviceItems": [
                        {"id": "it1", "name": "Frenos", "suppliesUsed": [{"supplyId": "007", "quantity": 1}]}
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )
    (base / "inventory.csv").write_text(
        "id,name,unitPrice,sellingPrice,quantity,isService\n"
        "007,Filtro,60,100,10,false\n"
        "lab,Mano de obra,0,300,0,true\n",
        encoding="utf-8",
    )
    (base / "personnel.csv").write_text(
        "ID,Name,Roles,Monthly Salary,Commission Rate,Is Archived\n"
        "p1,Ana,Técnico,5000,0.05,false\n"
        "p2,Beto,Administración,4000,,true\n",
        encoding="utf-8",
    )
    (base / "drivers.csv").write_text(
        "id,name,contract_date,assigned_vehicle_id,deposit_amount\n"
        "d1,Luis,2025-03-01,v1,1000\n",
        encoding="utf-8",
    )
    (base / "vehicles.csv").write_text(
        "id,license_plate,daily_rental_cost\nv1,ABC-123,300\nv2,XYZ-999,\n",
        encoding="utf-8",
    )
    (base / "rental_payments.csv").write_text(
        "id,driverId,paymentDate,amount\npay1,d1,2025-03-05,1500\n",
        encoding="utf-8",
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("unitPrice", "unit_price"),
        ("Unit Price", "unit_price"),
        ("UNIT_PRICE", "unit_price"),
        (" assignedVehicleId ", "assigned_vehicle_id"),
        ("id", "id"),
    ],
)
def test_normalize_column(raw, expected) -> None:
    assert normalize_column(raw) == expected


def test_load_snapshot_reads_every_collection(tmp_path) -> None:
    _write_snapshot(tmp_path)

    source = load_snapshot(tmp_path)

    assert [s.id for s in source.sales] == ["s1"]
    assert source.sales[0].items[0].inventory_item_id == "007"
    assert source.services[0].supplies[0].supply_id == "007"

    inventory = source.get_inventory_snapshot()
    assert inventory.unit_cost("007") == pytest.approx(60.0)
    assert inventory["lab"].is_service is True

    assert [p.id for p in source.list_active_personnel()] == ["p1"]
    assert source.personnel[0].monthly_salary == pytest.approx(5000.0)
    assert source.personnel[1].commission_rate == 0.0

    assert source.get_driver("d1").deposit_amount == pytest.approx(1000.0)
    assert source.get_vehicle("v1").daily_rental_cost == pytest.approx(300.0)
    assert source.get_vehicle("v2").daily_rental_cost is None
    assert source.list_payments("d1")[0].amount == pytest.approx(1500.0)

    # Files that are absent yield empty collections
    assert source.list_fixed_expenses() == []
    assert source.list_manual_debts("d1") == []


def test_missing_directory_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_snapshot(tmp_path / "absent")


def test_json_root_must_be_a_list(tmp_path) -> None:
    path = tmp_path / "sales.json"
    path.write_text(json.dumps({"id": "s1"}), encoding="utf-8")

    with pytest.raises(ValueError):
        read_json_records(path)


def test_invalid_json_raises(tmp_path) -> None:
    path = tmp_path / "sales.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(ValueError):
        read_json_records(path)


def test_csv_without_id_column_raises(tmp_path) -> None:
    path = tmp_path / "inventory.csv"
    path.write_text("name,unit_price\nFiltro,60\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_csv_records(path)


def test_empty_csv_yields_no_records(tmp_path) -> None:
    path = tmp_path / "manual_debts.csv"
    path.write_text("", encoding="utf-8")
    header_only = tmp_path / "fixed_expenses.csv"
    header_only.write_text("id,name,amount\n", encoding="utf-8")

    assert read_csv_records(path) == []
    assert read_csv_records(header_only) == []


def test_missing_csv_values_become_none(tmp_path) -> None:
    path = tmp_path / "vehicles.csv"
    path.write_text("id,license_plate,daily_rental_cost\nv2,XYZ-999,\n", encoding="utf-8")

    records = read_csv_records(path)

    assert records == [{"id": "v2", "license_plate": "XYZ-999", "daily_rental_cost": None}]
