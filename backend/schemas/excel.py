from pydantic import BaseModel
from typing import List


class ExcelImportDetails(BaseModel):
    total: int
    success: int
    failed: int
    errors: List[str] = []


class ExcelImportResult(BaseModel):
    message: str
    details: ExcelImportDetails
