"""
Cell value model.

Spreadsheet parsers hand us loosely typed values (None, numbers, strings, dates, booleans).
Each raw value is tagged exactly once, at ingestion, so the inference heuristics can branch
on an explicit kind instead of inspecting Python types over and over.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Pattern, Union

CellValue = Union[None, int, float, str]


class CellKind(str, Enum):
    """Tag of a single grid cell"""

    NULL = "null"
    NUMBER = "number"
    TEXT = "text"
    DATE_LIKE = "date_like"


@lru_cache(maxsize=32)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern)


@dataclass(frozen=True)
class Cell:
    """Tagged cell value (Null | Number | Text | DateLike)."""

    kind: CellKind
    value: CellValue = None

    @classmethod
    def of(cls, raw: Any, date_pattern: Optional[str] = None) -> "Cell":
        if raw is None:
            return NULL_CELL

        # bool is an int subclass; booleans are labels, not metrics
        if isinstance(raw, bool):
            return cls(CellKind.TEXT, "true" if raw else "false")

        if isinstance(raw, (int, float, Decimal)):
            num = float(raw) if isinstance(raw, Decimal) else raw
            if isinstance(num, float) and not math.isfinite(num):
                return NULL_CELL
            return cls(CellKind.NUMBER, num)

        if isinstance(raw, datetime):
            if raw.hour == 0 and raw.minute == 0 and raw.second == 0 and raw.microsecond == 0:
                return cls(CellKind.DATE_LIKE, raw.date().isoformat())
            return cls(CellKind.DATE_LIKE, raw.isoformat(sep=" "))

        if isinstance(raw, date):
            return cls(CellKind.DATE_LIKE, raw.isoformat())

        if isinstance(raw, time):
            return cls(CellKind.TEXT, raw.isoformat())

        text = raw if isinstance(raw, str) else str(raw)
        # Only the empty string is blank; whitespace is still a value
        if text == "":
            return NULL_CELL
        if date_pattern and _compile(date_pattern).search(text):
            return cls(CellKind.DATE_LIKE, text)
        return cls(CellKind.TEXT, text)

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.NULL

    @property
    def is_number(self) -> bool:
        return self.kind is CellKind.NUMBER

    @property
    def is_string(self) -> bool:
        """Text and date-like cells both originate as strings."""
        return self.kind is CellKind.TEXT or self.kind is CellKind.DATE_LIKE

    @property
    def is_date_like(self) -> bool:
        return self.kind is CellKind.DATE_LIKE

    def text(self) -> str:
        if self.value is None:
            return ""
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


NULL_CELL = Cell(CellKind.NULL, None)
