import io
import math
from decimal import Decimal, InvalidOperation

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

REQUIRED_IMPORT_COLUMNS = ["name", "categoryId", "currentQuantity", "minimumQuantity"]
TEMPLATE_HEADERS = [
    "name", "categoryId", "specification", "unitType", "currentQuantity",
    "minimumQuantity", "location", "unitPrice", "notes",
]

EXPORT_HEADERS = [
    "Code", "Name", "Category", "Specification", "Unit", "Current Quantity",
    "Minimum Quantity", "Location", "Unit Price", "Notes", "Created At", "Updated At",
]
TRANSACTION_HEADERS = ["Date", "Item Code", "Item Name", "Type", "Quantity", "Project", "Note"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

header_font = Font(bold=True, color="FFFFFF")
header_fill = PatternFill(start_color="0062FF", end_color="0062FF", fill_type="solid")


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def read_import_rows(contents: bytes):
    """Rows of the first sheet as dicts keyed by the header row; blank rows are skipped."""
    df = pd.read_excel(io.BytesIO(contents), sheet_name=0)
    df = df.dropna(how="all")
    df.columns = [str(column).strip() for column in df.columns]
    return df.to_dict(orient="records")


def missing_required_fields(row: dict):
    return [field for field in REQUIRED_IMPORT_COLUMNS if is_blank(row.get(field))]


def to_int(value, field: str) -> int:
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        raise ValueError(f"{field} must be a number, got '{value}'")
    if not number.is_integer():
        raise ValueError(f"{field} must be a whole number, got '{value}'")
    return int(number)


def to_decimal(value, field: str):
    if is_blank(value):
        return None
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        raise ValueError(f"{field} must be a number, got '{value}'")


def to_text(value):
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def row_to_item_data(row: dict) -> dict:
    """Map a spreadsheet row onto inventory item fields."""
    return {
        "name": to_text(row.get("name")),
        "category_id": to_int(row.get("categoryId"), "categoryId"),
        "current_quantity": to_int(row.get("currentQuantity"), "currentQuantity"),
        "minimum_quantity": to_int(row.get("minimumQuantity"), "minimumQuantity"),
        "specification": to_text(row.get("specification")),
        "unit_type": to_text(row.get("unitType")),
        "location": to_text(row.get("location")),
        "unit_price": to_decimal(row.get("unitPrice"), "unitPrice"),
        "notes": to_text(row.get("notes")),
    }


def _write_header(ws, headers):
    ws.append(headers)
    for col_idx in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
    ws.freeze_panes = "A2"


def _autosize(ws):
    for column_cells in ws.columns:
        length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column_cells)
        ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(max(length + 2, 10), 50)


def _date(value):
    return value.strftime("%Y-%m-%d") if value else ""


def build_inventory_workbook(items, transactions=None) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Inventory"
    _write_header(ws, EXPORT_HEADERS)
    for item in items:
        ws.append([
            item.code,
            item.name,
            item.category_name or "Unknown",
            item.specification or "",
            item.unit_type or "",
            item.current_quantity,
            item.minimum_quantity,
            item.location or "",
            float(item.unit_price) if item.unit_price is not None else "",
            item.notes or "",
            _date(item.created_at),
            _date(item.updated_at),
        ])
    _autosize(ws)

    if transactions is not None:
        ws_tx = wb.create_sheet("Transactions")
        _write_header(ws_tx, TRANSACTION_HEADERS)
        for transaction in transactions:
            ws_tx.append([
                transaction.created_at.strftime("%Y-%m-%d %H:%M") if transaction.created_at else "",
                transaction.item_code or "",
                transaction.item_name or "",
                transaction.type.value,
                transaction.quantity,
                transaction.project or "",
                transaction.note or "",
            ])
        _autosize(ws_tx)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output


def build_template_workbook(categories) -> io.BytesIO:
    """Import template: header row, a description row and one sample row."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Template"
    _write_header(ws, TEMPLATE_HEADERS)
    category_list = ", ".join(f"{category.id}={category.name}" for category in categories)
    ws.append([
        "Item name (required)",
        f"Category id (required). Categories: {category_list}",
        "Specification",
        "Unit (M, EA, 식, 조)",
        "Opening quantity (required)",
        "Minimum quantity (required)",
        "Location",
        "Unit price",
        "Notes",
    ])
    for cell in ws[2]:
        cell.font = Font(italic=True, color="666666")
    ws.append([
        "UTP 케이블 Cat.6",
        categories[0].id if categories else 1,
        "길이: 100m, 색상: 회색",
        "EA",
        20,
        10,
        "A-15-3",
        45000,
        "최소 주문 수량: 10개",
    ])
    _autosize(ws)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output
