from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field

from .rules import PREVIEW_MAX_ROWS


class CleanupOptionsModel(BaseModel):
    fix_smart_quotes: bool = False
    trim_whitespace: bool = False
    remove_empty_rows: bool = False
    remove_duplicates: bool = False
    normalize_delimiters: bool = False


class TextRequest(BaseModel):
    text: str = ""


class LineRequest(BaseModel):
    line: str
    line_number: int = Field(ge=1)
    expected_column_count: Optional[int] = Field(default=None, ge=1)


class PreviewRequest(TextRequest):
    max_rows: int = Field(default=PREVIEW_MAX_ROWS, ge=0)


class CleanupRequest(TextRequest):
    options: CleanupOptionsModel = Field(default_factory=CleanupOptionsModel)


class ExportRequest(CleanupRequest):
    filename: Optional[str] = Field(default=None, examples=["export.csv"])
    add_bom: bool = False


class Issue(BaseModel):
    line: int
    content: str
    kind: str
    message: str
    expected_count: Optional[int] = None
    actual_count: Optional[int] = None


class Stats(BaseModel):
    rows: int
    columns: int


class ValidationResponse(BaseModel):
    repaired_text: str
    issues: List[Issue] = Field(default_factory=list)
    expected_column_count: Optional[int] = None
    header_line_number: Optional[int] = None
    is_not_csv: bool = False
    messages: List[str] = Field(default_factory=list)
    stats: Optional[Stats] = None


class LineValidationResponse(BaseModel):
    issue: Optional[Issue] = None


class PreviewResponse(BaseModel):
    stats: Optional[Stats] = None
    rows: List[List[str]] = Field(default_factory=list)
    # display copy of rows, long cells truncated
    cells: List[List[str]] = Field(default_factory=list)


class CleanupResponse(BaseModel):
    text: str


class EncodingReport(BaseModel):
    detected: Optional[str] = None
    decode_used: str
    decode_fallback: bool = False


class UploadResponse(BaseModel):
    filename: str
    encoding: EncodingReport
    text: str
    validation: ValidationResponse


class HealthResponse(BaseModel):
    ok: bool = True
