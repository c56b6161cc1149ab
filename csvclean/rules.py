"""
Deterministic cleanup rules.

This file exists to make the fixed behavior of the tool explicit and enforceable.
"""

DELIMITER = ","
ALTERNATE_DELIMITERS = ("\t", ";")
QUOTE = '"'
CHARS_REQUIRING_QUOTES = (",", '"', "\n", "\r")

LINE_BREAK = "\r\n"  # always CRLF on output for widest CSV compatibility
LINE_SPLIT_PATTERN = r"\r?\n"

# Format detection heuristics
FORMAT_SAMPLE_LINES = 10
COMMA_DRIFT_TOLERANCE = 2

# Best-effort only: overflow fields are merged into the last expected column
REPAIR_OVERFLOW_JOINER = ", "

SMART_PUNCTUATION = str.maketrans({
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u201f": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": "'",
    "\u201b": "'",
    "\u2026": "...",
    "\u2013": "-",
    "\u2014": "-",
})

PREVIEW_MAX_ROWS = 6  # header + 5 data rows
PREVIEW_CELL_WIDTH = 30

DEFAULT_FILENAME = "export.csv"
ILLEGAL_FILENAME_CHARS = r'[\\/:*?"<>|]'

TARGET_ENCODING = "utf-8"
BOM_ENCODING = "utf-8-sig"  # UTF-8 with BOM
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
