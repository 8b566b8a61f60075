# app/schemas/csv_import.py
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field


class ParsedApplication(BaseModel):
    """One CSV row mapped onto application columns, plus its source row and problems."""
    row_number: int
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    @property
    def email(self) -> Optional[str]:
        return self.data.get("email")

    @property
    def scholarship_id(self) -> Optional[str]:
        return self.data.get("scholarship_id")

    @property
    def is_valid(self) -> bool:
        return not self.errors


class RowError(BaseModel):
    row: int
    message: str
    data: Optional[Dict[str, Any]] = None


class ImportResult(BaseModel):
    success: bool
    processed_count: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: List[RowError] = Field(default_factory=list)


class ImportPreview(BaseModel):
    total_rows: int
    valid: List[ParsedApplication]
    invalid: List[ParsedApplication]
    errors: List[RowError]
