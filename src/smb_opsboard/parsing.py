# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Currency parsing helpers.

Monetary values are typed by hand in the UI and stored as free-form text
("$12,500", "€ 3 200.50", "45k", "1,200.00 USD"). Every KPI therefore
starts by turning those strings back into numbers.

Policy
------
- every character except digits, '.' and '-' is removed,
- the longest leading float literal of what remains is parsed
  ("1.2.3" -> 1.2, "5-3" -> 5.0),
- anything that does not yield a number (empty, symbol-only, None, NaN)
  becomes 0.0. A parse failure never propagates to the caller, so one bad
  cell cannot break a whole aggregate.

Note that trailing magnitude letters are simply dropped: "45k" parses as
45.0, not 45000.0.
"""

import math
import re
from collections.abc import Iterable
from typing import Union

CurrencyLike = Union[str, int, float, None]

_STRIP_RE = re.compile(r"[^0-9.\-]+")
_LEADING_FLOAT_RE = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_currency(value: CurrencyLike) -> float:
    """
    Extract the numeric magnitude of a loosely formatted monetary value.

    Args:
        value: A string such as "$1,200.50", a number, or None.

    Returns:
        The parsed float, or 0.0 when nothing numeric can be extracted.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    cleaned = _STRIP_RE.sub("", str(value))
    match = _LEADING_FLOAT_RE.match(cleaned)
    if match is None:
        return 0.0

    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def sum_currency(values: Iterable[CurrencyLike]) -> float:
    """Sum a collection of monetary values; an empty collection sums to 0.0."""
    return float(sum(parse_currency(v) for v in values))
