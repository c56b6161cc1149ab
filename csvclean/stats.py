from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .parsing import is_blank, split_lines, tokenize_line
from .rules import DELIMITER, PREVIEW_CELL_WIDTH, PREVIEW_MAX_ROWS


@dataclass(frozen=True)
class CsvStats:
    rows: int
    columns: int


def _non_blank_lines(text: str) -> List[str]:
    return [line for line in split_lines(text) if not is_blank(line)]


def compute_stats(text: str) -> Optional[CsvStats]:
    """Row count = non-blank lines; column count = fields on the first non-blank line."""
    if is_blank(text):
        return None
    lines = _non_blank_lines(text)
    if not lines:
        return None

    tokenized = tokenize_line(lines[0])
    if tokenized.unterminated_quote:
        columns = lines[0].count(DELIMITER) + 1
    else:
        columns = len(tokenized)
    return CsvStats(rows=len(lines), columns=columns)


def compute_preview(text: str, max_rows: int = PREVIEW_MAX_ROWS) -> List[List[str]]:
    """Raw values of the first `max_rows` non-blank lines, header first. Read-only."""
    rows = []
    for line in _non_blank_lines(text)[:max(max_rows, 0)]:
        tokenized = tokenize_line(line)
        if tokenized.unterminated_quote:
            rows.append(line.split(DELIMITER))
        else:
            rows.append(tokenized.values)
    return rows


def truncate_cell(value: str, width: int = PREVIEW_CELL_WIDTH) -> str:
    if len(value) > width:
        return value[:width] + "..."
    return value
