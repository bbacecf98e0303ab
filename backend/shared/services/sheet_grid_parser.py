"""
Sheet grid parser/extractor.

This module converts uploaded spreadsheet files into raw grids:
- Excel workbooks (.xlsx/.xlsm): one grid per worksheet, A1-anchored
- CSV files: a single grid

Design principles:
- Keep parsing (I/O + format-specific quirks) separate from table inference.
- Prefer JSON-safe primitives in grid cells; numbers stay numbers so downstream
  heuristics can tell metrics from labels.
- Trim only trailing empty rows/cols (bottom/right) so coordinates stay stable.
"""

from __future__ import annotations

import csv
import io
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

from shared.models.sheet_grid import SheetGrid

_NUMERIC_TEXT = re.compile(r"^[+-]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class SheetGridParseOptions:
    """Options shared across parsers."""

    trim_trailing_empty: bool = True
    max_rows: Optional[int] = None
    max_cols: Optional[int] = None

    # Excel-specific
    excel_data_only: bool = True
    max_sheets: Optional[int] = None

    # CSV-specific
    csv_encoding: str = "utf-8-sig"
    csv_coerce_numbers: bool = True


class SheetGridParser:
    """Parsers for Excel workbooks and CSV files into SheetGrid."""

    @staticmethod
    def _load_workbook(xlsx_bytes: bytes, *, data_only: bool):
        try:
            from openpyxl import load_workbook  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError(
                "Excel parsing requires 'openpyxl'. Install it to enable .xlsx support."
            ) from e

        return load_workbook(filename=BytesIO(xlsx_bytes), data_only=data_only, read_only=True)

    @classmethod
    def sheet_names_from_excel_bytes(cls, xlsx_bytes: bytes) -> List[str]:
        wb = cls._load_workbook(xlsx_bytes, data_only=True)
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    @classmethod
    def from_excel_bytes(
        cls,
        xlsx_bytes: bytes,
        *,
        sheet_name: Optional[str] = None,
        options: Optional[SheetGridParseOptions] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[SheetGrid]:
        """
        Parse an .xlsx workbook into one SheetGrid per worksheet (workbook order).

        When `sheet_name` is given only that sheet is returned; an unknown name raises
        ValueError. Requires optional dependency: openpyxl.
        """
        opts = options or SheetGridParseOptions()
        wb = cls._load_workbook(xlsx_bytes, data_only=bool(opts.excel_data_only))
        try:
            names = list(wb.sheetnames)
            if sheet_name:
                if sheet_name not in names:
                    raise ValueError(
                        f"Worksheet '{sheet_name}' not found (available: {', '.join(names)})"
                    )
                names = [sheet_name]
            elif opts.max_sheets is not None:
                names = names[: max(0, int(opts.max_sheets))]

            out: List[SheetGrid] = []
            for name in names:
                ws = wb[name]
                grid: List[List[Any]] = []
                for r_idx, row in enumerate(
                    ws.iter_rows(max_col=opts.max_cols, values_only=True)
                ):
                    if opts.max_rows is not None and r_idx >= int(opts.max_rows):
                        break
                    grid.append([cls._json_safe_cell(v) for v in row])
                out.append(
                    cls._finalize(grid, source="excel", sheet_name=str(name), opts=opts, metadata=metadata)
                )
            return out
        finally:
            wb.close()

    @classmethod
    def from_csv_bytes(
        cls,
        csv_bytes: bytes,
        *,
        sheet_name: Optional[str] = None,
        options: Optional[SheetGridParseOptions] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> SheetGrid:
        """Parse CSV bytes into a SheetGrid; rows stay ragged as in the file."""
        opts = options or SheetGridParseOptions()
        warnings: List[str] = []
        try:
            text = csv_bytes.decode(opts.csv_encoding)
        except UnicodeDecodeError:
            text = csv_bytes.decode("latin-1")
            warnings.append(f"CSV is not valid {opts.csv_encoding}; decoded as latin-1")

        try:
            dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t|")
        except csv.Error:
            dialect = csv.excel

        grid: List[List[Any]] = []
        for r_idx, row in enumerate(csv.reader(io.StringIO(text), dialect)):
            if opts.max_rows is not None and r_idx >= int(opts.max_rows):
                break
            if opts.max_cols is not None:
                row = row[: int(opts.max_cols)]
            if opts.csv_coerce_numbers:
                grid.append([cls._coerce_numeric_text(v) for v in row])
            else:
                grid.append(list(row))

        result = cls._finalize(grid, source="csv", sheet_name=sheet_name, opts=opts, metadata=metadata)
        result.warnings.extend(warnings)
        return result

    # -------------------------
    # Normalization helpers
    # -------------------------

    @classmethod
    def _finalize(
        cls,
        grid: List[List[Any]],
        *,
        source: str,
        sheet_name: Optional[str],
        opts: SheetGridParseOptions,
        metadata: Optional[Dict[str, Any]],
    ) -> SheetGrid:
        warnings: List[str] = []
        if opts.trim_trailing_empty:
            grid, trim_meta = cls._trim_trailing_empty(grid)
            if trim_meta.get("trimmed"):
                warnings.append("Trailing empty rows/cols trimmed")

        rows = len(grid)
        cols = max((len(r) for r in grid), default=0)
        return SheetGrid(
            source=source,
            sheet_name=sheet_name,
            grid=grid,
            metadata={"rows": rows, "cols": cols, **(metadata or {})},
            warnings=warnings,
        )

    @staticmethod
    def _json_safe_cell(value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, str)):
            return value
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, datetime):
            # Excel often stores dates as datetime at midnight
            if value.hour == 0 and value.minute == 0 and value.second == 0 and value.microsecond == 0:
                return value.date().isoformat()
            return value.isoformat(sep=" ")
        if isinstance(value, (date, time)):
            return value.isoformat()
        return str(value)

    @staticmethod
    def _coerce_numeric_text(value: str) -> Any:
        text = value.strip()
        if not text or not _NUMERIC_TEXT.match(text):
            return value
        cleaned = text.replace(",", "")
        try:
            if re.fullmatch(r"[+-]?\d+", cleaned):
                return int(cleaned)
            return float(cleaned)
        except ValueError:
            return value

    @classmethod
    def _trim_trailing_empty(cls, grid: List[List[Any]]) -> Tuple[List[List[Any]], Dict[str, Any]]:
        if not grid:
            return grid, {"trimmed": False}

        rows = len(grid)
        cols = max((len(r) for r in grid), default=0)

        def is_blank(v: Any) -> bool:
            return v is None or str(v).strip() == ""

        bottom = rows - 1
        while bottom >= 0 and all(is_blank(v) for v in grid[bottom]):
            bottom -= 1

        right = cols - 1
        while right >= 0:
            if all(is_blank(grid[r][right]) for r in range(0, bottom + 1) if right < len(grid[r])):
                right -= 1
            else:
                break

        trimmed = (bottom != rows - 1) or (right != cols - 1)
        new_grid = [list(row[: right + 1]) for row in grid[: bottom + 1]]
        return new_grid, {"trimmed": trimmed, "rows": bottom + 1, "cols": right + 1}
