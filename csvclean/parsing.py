"""
Line-level CSV tokenizing and field escaping.

A logical record is assumed to fit on one line: quote state never carries
over a line break. Tokenizing never fails; an unterminated quote is reported
on the result instead so callers can decide what to do with the line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from .rules import CHARS_REQUIRING_QUOTES, DELIMITER, LINE_BREAK, LINE_SPLIT_PATTERN, QUOTE

_LINE_SPLIT_RE = re.compile(LINE_SPLIT_PATTERN)


@dataclass(frozen=True)
class Field:
    value: str
    was_quoted: bool = False


@dataclass(frozen=True)
class TokenizedLine:
    fields: Tuple[Field, ...]
    unterminated_quote: bool = False

    @property
    def values(self) -> List[str]:
        return [f.value for f in self.fields]

    def __len__(self) -> int:
        return len(self.fields)


def tokenize_line(line: str) -> TokenizedLine:
    """
    Split one line into fields.

    Rules:
    - `""` inside a quoted section is a literal quote.
    - Any other quote toggles the quoted state and marks the current field as quoted,
      wherever it appears in the field.
    - A comma outside quotes closes the field.
    - The last field is always emitted, so an empty line yields one empty field.
    """
    fields: list[Field] = []
    buf: list[str] = []
    in_quotes = False
    was_quoted = False

    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                buf.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
            was_quoted = True
        elif ch == DELIMITER and not in_quotes:
            fields.append(Field("".join(buf), was_quoted))
            buf = []
            was_quoted = False
        else:
            buf.append(ch)
        i += 1

    fields.append(Field("".join(buf), was_quoted))
    return TokenizedLine(tuple(fields), unterminated_quote=in_quotes)


def needs_quoting(value: str) -> bool:
    return any(ch in value for ch in CHARS_REQUIRING_QUOTES)


def escape_field(value: str, force_quote: bool = False) -> str:
    """Quote-wrap `value` (doubling inner quotes) when forced or when it would not survive unquoted."""
    if force_quote or needs_quoting(value):
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


def join_fields(values, force_quote: bool = False) -> str:
    return DELIMITER.join(escape_field(v, force_quote) for v in values)


def split_lines(text: str) -> List[str]:
    return _LINE_SPLIT_RE.split(text)


def join_lines(lines) -> str:
    return LINE_BREAK.join(lines)


def count_quotes(line: str) -> int:
    return line.count(QUOTE)


def is_blank(line: str) -> bool:
    return not line.strip()
