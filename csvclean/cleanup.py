"""
Cleanup transforms applied on export.

Each transform is a pure text -> text function and can be toggled on its own.
Lines a transform cannot handle are passed through unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .delimiters import normalize_delimiters
from .parsing import escape_field, is_blank, join_lines, needs_quoting, split_lines, tokenize_line
from .rules import DELIMITER, LINE_BREAK, LINE_SPLIT_PATTERN, SMART_PUNCTUATION

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(LINE_SPLIT_PATTERN)


def fix_smart_quotes(text: str) -> str:
    return text.translate(SMART_PUNCTUATION)


def _trim_line(line: str) -> str:
    if is_blank(line):
        return line
    tokenized = tokenize_line(line)
    if tokenized.unterminated_quote:
        return line

    out = []
    for field in tokenized.fields:
        value = field.value.strip()
        # keep the original quoting style, and quote anything that now needs it
        out.append(escape_field(value, field.was_quoted or needs_quoting(value)))
    return DELIMITER.join(out)


def trim_fields(text: str) -> str:
    return join_lines(_trim_line(line) for line in split_lines(text))


def remove_empty_rows(text: str) -> str:
    return join_lines(line for line in split_lines(text) if not is_blank(line))


def remove_duplicate_rows(text: str) -> str:
    """Keep the first occurrence of each line (compared trimmed); blank lines are always kept."""
    seen = set()
    unique = []
    for line in split_lines(text):
        key = line.strip()
        if key and key in seen:
            continue
        seen.add(key)
        unique.append(line)
    return join_lines(unique)


def normalize_line_endings(text: str) -> str:
    return _LINE_SPLIT_RE.sub(LINE_BREAK, text)


@dataclass(frozen=True)
class CleanupOptions:
    fix_smart_quotes: bool = False
    trim_whitespace: bool = False
    remove_empty_rows: bool = False
    remove_duplicates: bool = False
    normalize_delimiters: bool = False


def apply_cleanup(text: str, options: CleanupOptions) -> str:
    """
    Run the enabled transforms in a fixed order, then force CRLF line endings.

    Order: smart quotes -> trim -> empty rows -> duplicates -> delimiters.
    Trimming before de-duplication lets whitespace-only variants collapse.
    """
    pipeline = (
        (options.fix_smart_quotes, fix_smart_quotes),
        (options.trim_whitespace, trim_fields),
        (options.remove_empty_rows, remove_empty_rows),
        (options.remove_duplicates, remove_duplicate_rows),
        (options.normalize_delimiters, normalize_delimiters),
    )
    for enabled, transform in pipeline:
        if enabled and text:
            text = transform(text)
            logger.debug("applied %s", transform.__name__)

    return normalize_line_endings(text)
