"""
Heuristic CSV format gate.

Used to short-circuit validation: text that does not look like CSV gets a single
"not CSV" diagnosis instead of a cascade of per-line errors.
"""

from __future__ import annotations

import logging

from .parsing import is_blank, split_lines, tokenize_line
from .rules import COMMA_DRIFT_TOLERANCE, DELIMITER, FORMAT_SAMPLE_LINES

logger = logging.getLogger(__name__)


def looks_like_csv(text: str) -> bool:
    """
    Decide whether `text` is CSV-shaped.

    Rules:
    - Empty/whitespace-only text is trivially CSV.
    - Sample up to the first FORMAT_SAMPLE_LINES non-blank lines.
    - A sampled line with at least one comma counts as a valid CSV-like line.
    - The first such line fixes the expected comma count; later lines may drift by at most
      COMMA_DRIFT_TOLERANCE, and a comma-less line after that is inconsistent.
    - Verdict: some comma seen AND more than half the sample valid AND structure consistent.
    """
    if not text or is_blank(text):
        return True

    sample = [line for line in split_lines(text) if not is_blank(line)][:FORMAT_SAMPLE_LINES]
    if not sample:
        return True

    has_commas = False
    consistent = True
    expected = None
    valid_lines = 0

    for line in sample:
        comma_count = line.count(DELIMITER)
        if comma_count > 0:
            has_commas = True
            # tokenizing always yields fields; an open quote is judged later, per line
            if len(tokenize_line(line)) > 0:
                valid_lines += 1
                if expected is None:
                    expected = comma_count
                elif abs(comma_count - expected) > COMMA_DRIFT_TOLERANCE:
                    consistent = False
        elif expected is not None and expected > 0:
            consistent = False

    verdict = has_commas and (valid_lines / len(sample)) > 0.5 and consistent
    logger.debug(
        "format check: sampled=%d valid=%d consistent=%s verdict=%s",
        len(sample), valid_lines, consistent, verdict,
    )
    return verdict
