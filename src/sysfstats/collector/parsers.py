"""
Parsers for the raw text of the monitored sysfs nodes. No I/O.

Every parser returns None when the content can't be parsed, so callers
decide what a failure means for their metric.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple

NO_FAULT_SENTINEL = "0"

# Same shape scanf's %d accepts: optional leading whitespace and sign, then digits.
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

_FLOAT = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
# "<float>,<float>" -- whitespace allowed before each number, not before the comma
_FLOAT_PAIR_RE = re.compile(r"\s*(" + _FLOAT + r"),\s*(" + _FLOAT + r")")


def format_charge_cycles(text: str) -> str:
    """'1 2 3 \\n' -> '1,2,3'"""
    return text.strip().replace(" ", ",")


def is_fault(text: str) -> bool:
    """Anything other than the no-fault sentinel counts as a fault."""
    return text.strip() != NO_FAULT_SENTINEL


def parse_leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(text)
    if not match:
        return None
    return int(match.group(1))


def parse_float_pair(text: str) -> Optional[Tuple[float, float]]:
    match = _FLOAT_PAIR_RE.match(text)
    if not match:
        return None
    left, right = float(match.group(1)), float(match.group(2))
    if not (math.isfinite(left) and math.isfinite(right)):
        return None
    return left, right


def ohms_to_milli_ohms(ohms: float) -> int:
    return int(round(ohms * 1000))
