from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from config import SettingsProvider, get_settings_provider
from database import get_db
from exceptions import InventoryError
from schemas.excel import ExcelImportResult
from schemas.inventory_items import InventoryItemCreate
from crud import inventory_items as crud_inventory_items
from crud import categories as crud_categories
from crud import transactions as crud_transactions
from utils import excel_utils

router = APIRouter(prefix="/excel", tags=["Excel"])
logger = logging.getLogger("excel")

ALLOWED_EXTENSIONS = (".xlsx",)


@router.post("/import", response_model=ExcelImportResult)
def import_inventory_items(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """
    Bulk-create inventory items from the first sheet of an Excel file.

    Rows are handled independently: a bad row is reported in the result and
    the remaining rows are still imported.
    """
    if file.filename and not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="Only Excel workbooks (.xlsx) can be imported")

    max_bytes = settings_provider.settings.max_upload_bytes
    contents = file.file.read(max_bytes + 1)
    if len(contents) > max_bytes:
        raise HTTPException(status_code=413, detail=f"File is larger than {max_bytes // (1024 * 1024)}MB")
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        rows = excel_utils.read_import_rows(contents)
    except Exception as e:
        logger.warning(f"Could not read uploaded Excel file '{file.filename}': {e}")
        raise HTTPException(status_code=400, detail="Could not read the Excel file")

    if not rows:
        raise HTTPException(status_code=400, detail="Excel file contains no data")

    success = 0
    errors = []
    for row_number, row in enumerate(rows, start=1):
        missing = excel_utils.missing_required_fields(row)
        if missing:
            errors.append(f"Row {row_number}: missing required fields: {', '.join(missing)}")
            continue
        try:
            item = InventoryItemCreate(**excel_utils.row_to_item_data(row))
            crud_inventory_items.create_inventory_item(db, item)
            success += 1
        except (ValueError, InventoryError) as e:
            db.rollback()
            errors.append(f"Row {row_number}: {e}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Database error importing row {row_number}")
            errors.append(f"Row {row_number}: could not be saved ({e.__class__.__name__})")

    failed = len(errors)
    logger.info(f"Excel import of '{file.filename}': {success} imported, {failed} failed")
    return {
        "message": f"Import completed: {success} items imported successfully, {failed} items failed",
        "details": {"total": len(rows), "success": success, "failed": failed, "errors": errors},
    }


@router.get("/export")
def export_inventory_items(
    category_id: Optional[int] = None,
    include_transactions: bool = False,
    db: Session = Depends(get_db),
):
    """Download all inventory items (optionally one category) as an .xlsx workbook."""
    items = crud_inventory_items.get_inventory_items(db, skip=0, limit=None, category_id=category_id)
    transactions = None
    if include_transactions:
        transactions = [
            transaction
            for transaction in crud_transactions.get_transactions(db, skip=0, limit=None)
            if category_id is None or transaction.item.category_id == category_id
        ]
    output = excel_utils.build_inventory_workbook(items, transactions)
    logger.info(f"Exported {len(items)} inventory items to Excel")
    return StreamingResponse(
        output,
        media_type=excel_utils.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=inventory_export.xlsx"},
    )


@router.get("/template")
def download_import_template(db: Session = Depends(get_db)):
    categories = crud_categories.get_categories(db, skip=0, limit=None)
    output = excel_utils.build_template_workbook(categories)
    return StreamingResponse(
        output,
        media_type=excel_utils.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=inventory_template.xlsx"},
    )
