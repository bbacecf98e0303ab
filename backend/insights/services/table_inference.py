"""
Table Inference Engine

Goal: Convert a "messy spreadsheet grid" into a clean table.

Steps:
A) Header row detection (leading titles, banners, notes are skipped)
B) Column pruning (decorative blank columns dropped)
C) Footer trimming (a run of blank rows ends the table)
D) Assembly into named records + parser-decision metadata

The engine is total over any grid shape: ragged rows, None rows and empty grids degrade
to empty outputs instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shared.config.settings import TableInferenceSettings, get_settings
from shared.models.cells import NULL_CELL, Cell
from shared.models.table import InferredTable
from shared.utils.app_logger import get_logger

logger = get_logger(__name__)

CellRow = List[Cell]


@dataclass(frozen=True)
class _HeaderCandidate:
    row: int
    score: float
    distinct: int
    strings: int
    numbers: int


class TableInferenceService:
    """Header detection, column pruning and footer trimming over raw 2D grids."""

    # ---------------------------
    # Ingestion
    # ---------------------------

    @classmethod
    def tag_grid(
        cls, grid: Optional[Sequence[Optional[Sequence[Any]]]], config: TableInferenceSettings
    ) -> List[CellRow]:
        """Tag every raw value once; short or missing rows stay short."""
        if not grid:
            return []
        out: List[CellRow] = []
        for row in grid:
            if row is None or isinstance(row, (str, bytes)):
                # A bare scalar where a row was expected is treated as a one-cell row
                out.append([Cell.of(row, config.date_pattern)] if row is not None else [])
                continue
            try:
                values = list(row)
            except TypeError:
                values = [row]
            out.append([Cell.of(v, config.date_pattern) for v in values])
        return out

    @staticmethod
    def _cell_at(row: CellRow, col: int) -> Cell:
        return row[col] if col < len(row) else NULL_CELL

    # ---------------------------
    # A) Header detection
    # ---------------------------

    @classmethod
    def _score_header_candidate(
        cls, row_index: int, row: CellRow, config: TableInferenceSettings
    ) -> Optional[_HeaderCandidate]:
        vals = [c for c in row if not c.is_empty]
        if not vals:
            return None

        distinct = len({c.text().strip().lower() for c in vals})
        strings = sum(
            1 for c in vals if c.is_string and len(c.text()) < config.max_header_text_length
        )
        numbers = sum(1 for c in vals if c.is_number)
        mostly_strings = strings >= config.min_header_text_ratio * len(vals)

        score = (
            (config.header_text_bonus if mostly_strings else 0.0)
            + distinct
            - config.numeric_header_penalty * numbers
        )
        return _HeaderCandidate(
            row=row_index, score=score, distinct=distinct, strings=strings, numbers=numbers
        )

    @classmethod
    def detect_header_row(
        cls,
        rows: List[CellRow],
        config: TableInferenceSettings,
        *,
        max_header_scan: Optional[int] = None,
    ) -> int:
        """Return the index of the best header candidate among the first N rows (0 if none)."""
        limit = max_header_scan if max_header_scan is not None else config.max_header_scan
        best: Optional[_HeaderCandidate] = None
        for i in range(min(len(rows), max(0, int(limit)))):
            candidate = cls._score_header_candidate(i, rows[i], config)
            if candidate is None:
                continue
            # Strict comparison: ties keep the earliest row
            if best is None or candidate.score > best.score:
                best = candidate
        if best is None:
            return 0
        logger.debug(
            "Header row %d selected (score=%.1f distinct=%d strings=%d numbers=%d)",
            best.row,
            best.score,
            best.distinct,
            best.strings,
            best.numbers,
        )
        return best.row

    # ---------------------------
    # B) Column pruning
    # ---------------------------

    @classmethod
    def retained_columns(cls, rows: List[CellRow], header_row_index: int) -> List[int]:
        """Columns holding at least one value below the header row, in original order."""
        # Width comes from the whole grid so a header wider than every data row is still covered
        col_count = max((len(r) for r in rows), default=0)
        body = rows[header_row_index + 1:]
        keep: List[int] = []
        for c in range(col_count):
            if any(not cls._cell_at(r, c).is_empty for r in body):
                keep.append(c)
        return keep

    # ---------------------------
    # C) Footer trimming
    # ---------------------------

    @classmethod
    def trim_footer(
        cls,
        body: List[CellRow],
        keep_cols: Sequence[int],
        config: TableInferenceSettings,
    ) -> Tuple[List[CellRow], int]:
        """Project body rows onto kept columns, stopping at the configured blank run."""
        pruned: List[CellRow] = []
        consecutive_empty = 0
        for row in body:
            projected = [cls._cell_at(row, c) for c in keep_cols]
            if all(cell.is_empty for cell in projected):
                consecutive_empty += 1
            else:
                consecutive_empty = 0
            if consecutive_empty >= config.footer_blank_run_length:
                break
            pruned.append(projected)
        return pruned, max(0, len(body) - len(pruned))

    # ---------------------------
    # D) Assembly
    # ---------------------------

    @classmethod
    def build_headers(
        cls, header_row: CellRow, keep_cols: Sequence[int], config: TableInferenceSettings
    ) -> List[str]:
        headers: List[str] = []
        for position, c in enumerate(keep_cols, start=1):
            name = cls._cell_at(header_row, c).text().strip()
            headers.append(name or f"{config.synthesized_header_prefix}_{position}")
        return cls._dedupe_headers(headers)

    @classmethod
    def _dedupe_headers(cls, headers: List[str]) -> List[str]:
        seen: Dict[str, int] = {}
        taken = {h.lower() for h in headers}
        out: List[str] = []
        for h in headers:
            key = h.lower()
            n = seen.get(key, 0) + 1
            seen[key] = n
            if n == 1:
                out.append(h)
                continue
            candidate = f"{h}_{n}"
            while candidate.lower() in taken:
                n += 1
                candidate = f"{h}_{n}"
            seen[key] = n
            taken.add(candidate.lower())
            out.append(candidate)
        return out

    @classmethod
    def infer(
        cls,
        grid: Optional[Sequence[Optional[Sequence[Any]]]],
        *,
        max_header_scan: Optional[int] = None,
        config: Optional[TableInferenceSettings] = None,
    ) -> InferredTable:
        cfg = config or get_settings().table_inference
        rows = cls.tag_grid(grid, cfg)
        if not rows:
            return InferredTable(headers=[], rows=[], header_row_index=0, trimmed_footer_rows=0)

        header_row_index = cls.detect_header_row(rows, cfg, max_header_scan=max_header_scan)
        keep_cols = cls.retained_columns(rows, header_row_index)
        headers = cls.build_headers(rows[header_row_index], keep_cols, cfg)

        body = rows[header_row_index + 1:]
        pruned, trimmed = cls.trim_footer(body, keep_cols, cfg)

        records: List[Dict[str, Any]] = [
            {h: cell.value for h, cell in zip(headers, row)} for row in pruned
        ]

        logger.debug(
            "Inferred table: header_row=%d columns=%d/%d rows=%d trimmed_footer=%d",
            header_row_index,
            len(keep_cols),
            max((len(r) for r in rows), default=0),
            len(records),
            trimmed,
        )
        return InferredTable(
            headers=headers,
            rows=records,
            header_row_index=header_row_index,
            trimmed_footer_rows=trimmed,
        )


def infer_table(
    grid: Optional[Sequence[Optional[Sequence[Any]]]],
    *,
    max_header_scan: Optional[int] = None,
    config: Optional[TableInferenceSettings] = None,
) -> InferredTable:
    """Infer header row, kept columns and body rows of a raw grid."""
    return TableInferenceService.infer(grid, max_header_scan=max_header_scan, config=config)
