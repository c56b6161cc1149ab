"""
Export boundary: bytes in, bytes out.

Responsibilities:
- decode uploaded bytes to text (encoding detection via charset-normalizer, BOM stripped)
- gate exports on a clean validation pass
- run the enabled cleanup transforms
- encode to UTF-8 (optionally with BOM) under a csv-safe filename
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

from charset_normalizer import from_bytes

from .cleanup import CleanupOptions, apply_cleanup
from .rules import (
    BOM_ENCODING,
    CSV_MEDIA_TYPE,
    DEFAULT_FILENAME,
    ILLEGAL_FILENAME_CHARS,
    TARGET_ENCODING,
)
from .validate import ValidationResult, validate_document

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


class ExportBlockedError(Exception):
    """Raised when text with validation issues is submitted for export."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(f"Export blocked by {len(result.issues)} validation issue(s)")


@dataclass(frozen=True)
class ExportedCsv:
    filename: str
    content: bytes
    media_type: str = CSV_MEDIA_TYPE
    sha256: str = ""


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def ensure_csv_extension(name: Optional[str]) -> str:
    """
    Make `name` a safe .csv filename.

    - None/blank -> export.csv
    - illegal filesystem characters become "-"
    - trailing dots/spaces are dropped (Windows file safety)
    - ".csv" is appended unless already present (any case)
    """
    if not name:
        return DEFAULT_FILENAME
    name = re.sub(ILLEGAL_FILENAME_CHARS, "-", name.strip())
    name = re.sub(r"[ .]+$", "", name)
    if not name:
        return DEFAULT_FILENAME
    if not name.lower().endswith(".csv"):
        name += ".csv"
    return name


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names go in filename* (RFC 6266), with an ASCII fallback."""
    fallback = re.sub(r"[^\x20-\x7e]", "_", filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def encode_csv(text: str, add_bom: bool = False) -> bytes:
    return text.encode(BOM_ENCODING if add_bom else TARGET_ENCODING)


def decode_csv_bytes(raw: bytes) -> tuple[str, Dict[str, Any]]:
    """
    Decode uploaded bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - If decode with the detected encoding fails, try UTF-8, then UTF-8 with replacement.
    - A leading BOM is never part of the returned text.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or TARGET_ENCODING
    if raw.startswith(b"\xef\xbb\xbf") and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = BOM_ENCODING

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        decode_fallback = True
        try:
            text = raw.decode(TARGET_ENCODING)
            decode_used = TARGET_ENCODING
        except UnicodeDecodeError:
            # Last resort: keep going with replacement characters
            text = raw.decode(TARGET_ENCODING, errors="replace")
            decode_used = TARGET_ENCODING

    if decode_fallback:
        logger.warning("decode with %s failed, fell back to %s", detected, decode_used)

    if text.startswith(_BOM):
        text = text[len(_BOM):]

    report = {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }
    return text, report


def export_csv(
    text: str,
    filename: Optional[str] = None,
    options: CleanupOptions = CleanupOptions(),
    add_bom: bool = False,
) -> ExportedCsv:
    """Validate, clean up and encode `text`; raises ExportBlockedError while any issue exists."""
    result = validate_document(text)
    if not result.is_clean:
        logger.warning("export blocked: %d issue(s)", len(result.issues))
        raise ExportBlockedError(result)

    cleaned = apply_cleanup(text, options)
    content = encode_csv(cleaned, add_bom=add_bom)
    name = ensure_csv_extension(filename)
    logger.info("exported %s (%d bytes, bom=%s)", name, len(content), add_bom)
    return ExportedCsv(filename=name, content=content, sha256=_sha256_hex(content))
