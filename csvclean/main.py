import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.responses import Response

from .cleanup import CleanupOptions, apply_cleanup
from .export import (
    ExportBlockedError,
    content_disposition,
    decode_csv_bytes,
    ensure_csv_extension,
    export_csv,
)
from .models import (
    CleanupOptionsModel,
    CleanupRequest,
    CleanupResponse,
    ExportRequest,
    HealthResponse,
    LineRequest,
    LineValidationResponse,
    PreviewRequest,
    PreviewResponse,
    TextRequest,
    UploadResponse,
    ValidationResponse,
)
from .stats import compute_preview, compute_stats, truncate_cell
from .validate import ValidationIssue, ValidationResult, describe_issues, validate_document, validate_single_line

logger = logging.getLogger(__name__)

app = FastAPI(
    title="csvclean",
    description="CSV validation, repair suggestions and cleanup for export",
    version="0.1.0",
)


def _issue_payload(issue: ValidationIssue) -> dict:
    payload = asdict(issue)
    payload["kind"] = issue.kind.value
    return payload


def _stats_payload(text: str) -> Optional[dict]:
    stats = compute_stats(text)
    return asdict(stats) if stats is not None else None


def _validation_payload(text: str, result: ValidationResult) -> dict:
    return {
        "repaired_text": result.repaired_text,
        "issues": [_issue_payload(i) for i in result.issues],
        "expected_column_count": result.expected_column_count,
        "header_line_number": result.header_line_number,
        "is_not_csv": result.is_not_csv,
        "messages": describe_issues(result),
        "stats": _stats_payload(text),
    }


def _cleanup_options(model: CleanupOptionsModel) -> CleanupOptions:
    return CleanupOptions(**model.model_dump())


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/validate", response_model=ValidationResponse)
def validate(req: TextRequest):
    return _validation_payload(req.text, validate_document(req.text))


@app.post("/validate/line", response_model=LineValidationResponse)
def validate_line(req: LineRequest):
    issue = validate_single_line(req.line, req.line_number, req.expected_column_count)
    return {"issue": _issue_payload(issue) if issue is not None else None}


@app.post("/preview", response_model=PreviewResponse)
def preview(req: PreviewRequest):
    rows = compute_preview(req.text, req.max_rows)
    return {
        "stats": _stats_payload(req.text),
        "rows": rows,
        "cells": [[truncate_cell(value) for value in row] for row in rows],
    }


@app.post("/cleanup", response_model=CleanupResponse)
def cleanup(req: CleanupRequest):
    return {"text": apply_cleanup(req.text, _cleanup_options(req.options))}


@app.post("/export")
def export(req: ExportRequest):
    try:
        exported = export_csv(
            req.text,
            filename=req.filename,
            options=_cleanup_options(req.options),
            add_bom=req.add_bom,
        )
    except ExportBlockedError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Please fix all validation errors before downloading.",
                "issues": [_issue_payload(i) for i in e.result.issues],
            },
        )

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={
            "Content-Disposition": content_disposition(exported.filename),
            "X-Content-SHA256": exported.sha256,
        },
    )


@app.post("/upload", response_model=UploadResponse)
async def upload(file: UploadFile = File(...)):
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=422, detail="Uploaded file is empty")

    text, encoding = decode_csv_bytes(raw)
    filename = ensure_csv_extension(file.filename)
    logger.info("uploaded %s (%d bytes, %s)", filename, len(raw), encoding["decode_used"])
    return {
        "filename": filename,
        "encoding": encoding,
        "text": text,
        "validation": _validation_payload(text, validate_document(text)),
    }
