"""
Structural validation and best-effort repair.

Responsibilities:
- gate on the format heuristic (not-CSV supersedes every per-line issue)
- fix the expected column count from the first non-blank line
- flag unmatched quotes and column count mismatches per line
- produce a repaired document alongside (never instead of) the issues

Repairs are suggestions. The too-many-fields repair assumes the overflow came from an
unescaped comma inside the last column; it is a guess and not data-preserving.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .detect import looks_like_csv
from .parsing import (
    TokenizedLine,
    count_quotes,
    is_blank,
    join_fields,
    join_lines,
    split_lines,
    tokenize_line,
)
from .rules import REPAIR_OVERFLOW_JOINER

logger = logging.getLogger(__name__)

NOT_CSV_MESSAGE = "It seems like the input isn't in a valid CSV formatting"
UNMATCHED_QUOTES_MESSAGE = "Unmatched quotes detected"
INVALID_FORMAT_MESSAGE = "Invalid CSV format"
ISSUE_CONTENT_PREVIEW = 50


class IssueKind(str, Enum):
    NOT_CSV_FORMAT = "not_csv_format"
    COLUMN_MISMATCH = "column_mismatch"
    UNMATCHED_QUOTES = "unmatched_quotes"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class ValidationIssue:
    line: int  # 1-based
    content: str
    kind: IssueKind
    message: str
    expected_count: Optional[int] = None
    actual_count: Optional[int] = None


@dataclass(frozen=True)
class ValidationResult:
    repaired_text: str
    issues: Tuple[ValidationIssue, ...] = ()
    expected_column_count: Optional[int] = None
    header_line_number: Optional[int] = None
    is_not_csv: bool = False

    @property
    def is_clean(self) -> bool:
        return not self.issues


def _quote_issue(line: str, line_number: int) -> ValidationIssue:
    if count_quotes(line) % 2 != 0:
        return ValidationIssue(line_number, line, IssueKind.UNMATCHED_QUOTES, UNMATCHED_QUOTES_MESSAGE)
    return ValidationIssue(line_number, line, IssueKind.INVALID_FORMAT, INVALID_FORMAT_MESSAGE)


def _mismatch_issue(line: str, line_number: int, expected: int, actual: int) -> ValidationIssue:
    return ValidationIssue(
        line_number,
        line,
        IssueKind.COLUMN_MISMATCH,
        f"Column count mismatch: expected {expected}, got {actual}",
        expected_count=expected,
        actual_count=actual,
    )


def _check_line(
    line: str,
    line_number: int,
    tokenized: TokenizedLine,
    expected_column_count: Optional[int],
) -> Optional[ValidationIssue]:
    if tokenized.unterminated_quote:
        return _quote_issue(line, line_number)
    if expected_column_count is not None and len(tokenized) != expected_column_count:
        return _mismatch_issue(line, line_number, expected_column_count, len(tokenized))
    return None


def validate_single_line(
    line: str,
    line_number: int,
    expected_column_count: Optional[int],
) -> Optional[ValidationIssue]:
    """
    Check one line against a known expected column count.

    Stateless: the caller owns the expected count and decides how the result
    merges with an earlier full pass.
    """
    if is_blank(line):
        return None
    return _check_line(line, line_number, tokenize_line(line), expected_column_count)


def repair_line(tokenized: TokenizedLine, expected_column_count: int) -> str:
    """
    Rebuild a line to exactly `expected_column_count` fields.

    - too many: overflow values are joined with ", " into the last column
    - too few: padded with empty fields
    Every value is re-escaped; original quoting style is not preserved.
    """
    values = tokenized.values
    if len(values) > expected_column_count:
        keep = max(expected_column_count - 1, 0)
        values = values[:keep] + [REPAIR_OVERFLOW_JOINER.join(values[keep:])]
    elif len(values) < expected_column_count:
        values = values + [""] * (expected_column_count - len(values))
    return join_fields(values)


def _not_csv_result(text: str, lines: List[str]) -> ValidationResult:
    issues = tuple(
        ValidationIssue(i, line, IssueKind.NOT_CSV_FORMAT, NOT_CSV_MESSAGE)
        for i, line in enumerate(lines, start=1)
        if not is_blank(line)
    )
    return ValidationResult(
        repaired_text=text,
        issues=issues,
        expected_column_count=None,
        header_line_number=None,
        is_not_csv=True,
    )


def validate_document(text: str) -> ValidationResult:
    lines = split_lines(text)

    if not looks_like_csv(text):
        logger.debug("input rejected by format check (%d lines)", len(lines))
        return _not_csv_result(text, lines)

    repaired: list[str] = []
    issues: list[ValidationIssue] = []
    expected_column_count = None
    header_line_number = None

    for line_number, line in enumerate(lines, start=1):
        if is_blank(line):
            repaired.append(line)
            continue

        tokenized = tokenize_line(line)
        if expected_column_count is None:
            expected_column_count = len(tokenized)
            header_line_number = line_number

        issue = _check_line(line, line_number, tokenized, expected_column_count)
        if issue is None:
            repaired.append(line)
            continue

        issues.append(issue)
        if issue.kind is IssueKind.COLUMN_MISMATCH:
            repaired.append(repair_line(tokenized, expected_column_count))
        else:
            repaired.append(line)

    logger.debug(
        "validated %d lines: expected_columns=%s issues=%d",
        len(lines), expected_column_count, len(issues),
    )
    return ValidationResult(
        repaired_text=join_lines(repaired),
        issues=tuple(issues),
        expected_column_count=expected_column_count,
        header_line_number=header_line_number,
        is_not_csv=False,
    )


def describe_issues(result: ValidationResult) -> List[str]:
    """User-facing one-liners for a result; a not-CSV result collapses to one message."""
    if not result.issues:
        return []
    if result.is_not_csv:
        return [NOT_CSV_MESSAGE]

    messages = []
    for issue in result.issues:
        content = issue.content
        if len(content) > ISSUE_CONTENT_PREVIEW:
            content = content[:ISSUE_CONTENT_PREVIEW] + "..."
        messages.append(f'Line {issue.line}: {issue.message} - "{content}"')
    return messages
