"""
Record parser (semicolon text -> raw rows)
==========================================

Turns the raw dataset text into a list of ``RawRow`` dicts (header -> string)
and provides the permissive number coercion used when building the index.

Key ideas:
- The first line is the header and defines the schema for every row.
- Blank lines are skipped; short rows are kept and padded with "".
- Values stay strings here; ``to_number`` is applied later, per field.
"""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional

from cobenefits.config import DELIMITER
from cobenefits.errors import MalformedInput

RawRow = Dict[str, str]

# Leading decimal literal, the same prefix a browser's parseFloat accepts.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def to_number(raw: Optional[str]) -> float:
    """Coerce one raw field to a float, degrading anything unusable to 0.0.

    "1,5" -> 1.5 (only the first comma is read as the decimal separator),
    "" / None / "abc" -> 0.0. Trailing junk after a valid number is ignored.
    """
    if raw is None:
        return 0.0
    s = str(raw).strip()
    if not s:
        return 0.0
    s = s.replace(",", ".", 1)
    match = _NUMBER_PREFIX.match(s)
    if not match:
        return 0.0
    value = float(match.group(0))
    if not math.isfinite(value):
        return 0.0
    return value


def _split_lines(text: str) -> List[str]:
    # CRLF files: drop the carriage return left on each line by the "\n" split
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def parse_header(line: str) -> List[str]:
    return line.strip().split(DELIMITER)


def parse_text(text: str) -> List[RawRow]:
    """Parse delimited text into raw rows.

    Raises:
        MalformedInput: if ``text`` is empty or its first line is blank.
    """
    if not text:
        raise MalformedInput("Input is empty: no header line found.")
    lines = _split_lines(text)
    if not lines[0].strip():
        raise MalformedInput("First line is blank: no header line found.")

    headers = parse_header(lines[0])
    rows: List[RawRow] = []
    for line in lines[1:]:
        if not line or not line.strip():
            continue
        values = line.split(DELIMITER)
        row: RawRow = {}
        for j, name in enumerate(headers):
            row[name] = values[j] if j < len(values) else ""
        rows.append(row)
    return rows
