from __future__ import annotations

from .parsing import join_lines, split_lines
from .rules import ALTERNATE_DELIMITERS, DELIMITER, QUOTE


def normalize_line_delimiters(line: str) -> str:
    """Rewrite unquoted tabs/semicolons to commas; quoted segments are copied verbatim."""
    out: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            out.append(ch)
            # "" is copied as-is and never toggles
            if i + 1 < n and line[i + 1] == QUOTE:
                out.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif not in_quotes and ch in ALTERNATE_DELIMITERS:
            out.append(DELIMITER)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def normalize_delimiters(text: str) -> str:
    # Line by line so quote state never leaks across records
    return join_lines(normalize_line_delimiters(line) for line in split_lines(text))
