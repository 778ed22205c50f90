"""Pydantic schemas for the CSV import package."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ImportTarget(str, Enum):
    REPAIRERS = "repairers"
    PRODUCTS = "products"


class TargetColumn(BaseModel):
    """A destination column and the header names that usually carry it."""

    key: str
    label: str
    required: bool = False
    patterns: List[str] = Field(default_factory=list)
    transform: Optional[str] = None


class ColumnMapping(BaseModel):
    csv_column: str = ""
    db_column: str
    required: bool = False
    detected: bool = False
    transform: Optional[str] = None


class ParsedCSV(BaseModel):
    headers: List[str]
    rows: List[Dict[str, str]]
    separator: str
    encoding: str
    preview: List[Dict[str, str]]


class ImportPreview(BaseModel):
    parsed: ParsedCSV
    mappings: List[ColumnMapping]
    missing_required: List[str]


class ImportRequest(BaseModel):
    target: ImportTarget = ImportTarget.REPAIRERS
    rows: List[Dict[str, str]]
    mappings: List[ColumnMapping]
    category_id: Optional[str] = None
    enable_ai: bool = False
    enable_geocoding: bool = False


class RowError(BaseModel):
    row: int
    name: Optional[str] = None
    message: str


class ImportResult(BaseModel):
    target: ImportTarget
    processed: int = 0
    imported: int = 0
    failed: int = 0
    geocoded: int = 0
    ai_enhanced: int = 0
    errors: List[RowError] = Field(default_factory=list)
