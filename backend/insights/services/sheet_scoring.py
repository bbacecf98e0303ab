"""
Sheet Scorer

Scores candidate tables by "tabularity" so the best tab of a workbook can be shown by
default. Higher is better; the score has no upper bound.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from shared.config.settings import SheetScoringSettings, get_settings
from shared.models.cells import Cell
from shared.models.table import InferredTable, SheetScore, SheetSelection
from shared.utils.app_logger import get_logger

logger = get_logger(__name__)


def score_table(
    rows: Sequence[Mapping[str, Any]],
    config: Optional[SheetScoringSettings] = None,
) -> float:
    """
    width bonus + length bonus + one point per mostly-numeric column.

    Columns are the keys of the first record; only the first `scoring_sample_rows`
    records are inspected for numeric content.
    """
    cfg = config or get_settings().sheet_scoring
    if not rows:
        return 0.0
    cols = list(rows[0].keys())
    if not cols:
        return 0.0

    sample = rows[: min(cfg.scoring_sample_rows, len(rows))]
    numeric_score = 0
    for col in cols:
        numbers = sum(1 for r in sample if Cell.of(r.get(col)).is_number)
        if numbers >= len(sample) * cfg.numeric_column_ratio:
            numeric_score += 1

    width_bonus = cfg.width_bonus if len(cols) >= cfg.min_table_width else 0.0
    length_bonus = cfg.length_bonus if len(rows) >= cfg.min_table_length else 0.0
    return float(width_bonus + length_bonus + numeric_score)


def select_best_sheet(
    candidates: Iterable[Tuple[str, InferredTable]],
    config: Optional[SheetScoringSettings] = None,
) -> SheetSelection:
    """Pick the highest-scoring table among the first N candidates; ties keep the first seen."""
    cfg = config or get_settings().sheet_scoring

    scores: List[SheetScore] = []
    skipped: List[str] = []
    best_name: Optional[str] = None
    best_table = InferredTable()
    best_score = -1.0

    for index, (name, table) in enumerate(candidates):
        if index >= cfg.max_candidate_sheets:
            skipped.append(name)
            continue
        score = score_table(table.rows, cfg)
        scores.append(
            SheetScore(sheet_name=name, score=score, rows=len(table.rows), columns=len(table.headers))
        )
        if score > best_score:
            best_score = score
            best_name = name
            best_table = table

    if skipped:
        logger.info(
            "Scored %d candidate sheets, skipped %d beyond the cap", len(scores), len(skipped)
        )
    logger.debug("Best sheet: %s (score=%.1f)", best_name, max(best_score, 0.0))
    return SheetSelection(
        sheet_name=best_name, table=best_table, scores=scores, skipped_sheets=skipped
    )
