import io

import pytest
from openpyxl import Workbook, load_workbook

from config import SettingsProvider, get_settings_provider
from main import app
from utils.excel_utils import EXPORT_HEADERS, TEMPLATE_HEADERS, row_to_item_data


def _workbook_bytes(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def _upload(client, contents, filename="items.xlsx"):
    return client.post(
        "/api/excel/import",
        files={"file": (filename, contents, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
    )


def test_import_reports_failed_rows(client, category):
    header = ["name", "categoryId", "specification", "unitType", "currentQuantity", "minimumQuantity", "location"]
    rows = [
        ["UTP Cable", category["id"], "Cat.6", "EA", 20, 5, "A-1"],
        ["Coax Cable", category["id"], None, "M", 100, 10, None],
        ["Fiber Cable", category["id"], "SM 12C", "M", 50, None, "A-3"],
        ["Patch Cord", category["id"], "1m", "EA", 0, 0, None],
        ["Junction Box", category["id"], None, "EA", 7, 2, "B-1"],
    ]

    resp = _upload(client, _workbook_bytes([header, *rows]))

    assert resp.status_code == 200, resp.text
    details = resp.json()["details"]
    assert details["total"] == 5
    assert details["success"] == 4
    assert details["failed"] == 1
    assert len(details["errors"]) == 1
    assert details["errors"][0].startswith("Row 3")
    assert "minimumQuantity" in details["errors"][0]

    items = client.get("/api/items").json()
    assert sorted(item["name"] for item in items) == ["Coax Cable", "Junction Box", "Patch Cord", "UTP Cable"]
    coax = next(item for item in items if item["name"] == "Coax Cable")
    assert coax["current_quantity"] == 100
    assert coax["specification"] is None


def test_import_row_with_unknown_category_fails_alone(client, category):
    header = ["name", "categoryId", "currentQuantity", "minimumQuantity"]
    resp = _upload(client, _workbook_bytes([
        header,
        ["Good", category["id"], 1, 0],
        ["Lost", 999, 1, 0],
    ]))

    details = resp.json()["details"]
    assert details["success"] == 1
    assert details["failed"] == 1
    assert details["errors"][0].startswith("Row 2")


def test_import_empty_sheet(client):
    resp = _upload(client, _workbook_bytes([["name", "categoryId", "currentQuantity", "minimumQuantity"]]))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Excel file contains no data"


def test_import_rejects_other_file_types(client):
    resp = _upload(client, b"name,categoryId\n", filename="items.csv")
    assert resp.status_code == 400


def test_import_rejects_legacy_xls(client, category):
    resp = _upload(client, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", filename="items.xls")

    assert resp.status_code == 400
    assert ".xlsx" in resp.json()["detail"]
    assert client.get("/api/items").json() == []


def test_import_rejects_unreadable_file(client):
    resp = _upload(client, b"this is not a workbook")
    assert resp.status_code == 400


def test_import_rejects_oversized_file(client, tmp_path):
    small_limit = SettingsProvider(
        settings_file=str(tmp_path / "settings.json"),
        environ={"MAX_UPLOAD_BYTES": "100"},
    )
    app.dependency_overrides[get_settings_provider] = lambda: small_limit

    resp = _upload(client, b"x" * 101)

    assert resp.status_code == 413


def test_export_workbook(client, make_item):
    make_item(name="UTP Cable", current_quantity=20, minimum_quantity=5, location="A-15-3", unit_price=45000)

    resp = client.get("/api/excel/export")

    assert resp.status_code == 200
    assert "inventory_export.xlsx" in resp.headers["content-disposition"]
    wb = load_workbook(io.BytesIO(resp.content))
    ws = wb["Inventory"]
    rows = list(ws.iter_rows(values_only=True))
    assert list(rows[0]) == EXPORT_HEADERS
    assert rows[1][1] == "UTP Cable"
    assert rows[1][5] == 20
    assert rows[1][7] == "A-15-3"
    assert "Transactions" not in wb.sheetnames


def test_export_with_transactions(client, make_item):
    make_item(current_quantity=3)

    resp = client.get("/api/excel/export", params={"include_transactions": True})

    wb = load_workbook(io.BytesIO(resp.content))
    rows = list(wb["Transactions"].iter_rows(values_only=True))
    assert len(rows) == 2
    assert rows[1][3] == "in"
    assert rows[1][4] == 3


def test_template_download(client, category):
    resp = client.get("/api/excel/template")

    assert resp.status_code == 200
    wb = load_workbook(io.BytesIO(resp.content))
    ws = wb["Template"]
    assert [cell.value for cell in ws[1]] == TEMPLATE_HEADERS
    assert ws.cell(row=3, column=2).value == category["id"]


def test_row_to_item_data_converts_spreadsheet_values():
    data = row_to_item_data({
        "name": " Cable ",
        "categoryId": 2.0,
        "currentQuantity": "1,200",
        "minimumQuantity": 10.0,
        "unitPrice": "45,000",
        "specification": float("nan"),
    })

    assert data["name"] == "Cable"
    assert data["category_id"] == 2
    assert data["current_quantity"] == 1200
    assert data["minimum_quantity"] == 10
    assert str(data["unit_price"]) == "45000"
    assert data["specification"] is None


def test_row_to_item_data_rejects_fractional_quantity():
    with pytest.raises(ValueError):
        row_to_item_data({"name": "x", "categoryId": 1, "currentQuantity": 1.5, "minimumQuantity": 0})
