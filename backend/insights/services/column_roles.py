"""
Column Role Classifier

Labels each column of an assembled table as id / date / metric / category / text.
Value-based rules run first; the identifier name pattern overrides them.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shared.config.settings import ColumnRoleSettings, TableInferenceSettings, get_settings
from shared.models.cells import Cell
from shared.models.table import ColumnRole
from shared.utils.app_logger import get_logger

logger = get_logger(__name__)


def _column_names(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    names: Dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            names.setdefault(str(key), None)
    return list(names)


def classify_values(sample: Sequence[Cell], config: ColumnRoleSettings) -> ColumnRole:
    """Value-based role of one column; `sample` holds its non-empty cells."""
    total = len(sample)
    if total == 0:
        return ColumnRole.TEXT

    date_count = sum(1 for c in sample if c.is_date_like)
    if date_count >= config.date_ratio * total:
        return ColumnRole.DATE

    numeric_count = sum(1 for c in sample if c.is_number)
    if numeric_count >= config.metric_ratio * total:
        return ColumnRole.METRIC

    string_count = sum(1 for c in sample if c.is_string)
    if string_count >= config.category_ratio * total:
        return ColumnRole.CATEGORY

    return ColumnRole.TEXT


def infer_column_roles(
    rows: Sequence[Mapping[str, Any]],
    config: Optional[ColumnRoleSettings] = None,
    *,
    inference_config: Optional[TableInferenceSettings] = None,
) -> Dict[str, ColumnRole]:
    """
    Infer a role per column from assembled records.

    Args:
        rows: Records mapping header -> value (as produced by infer_table)
        config: Role thresholds and identifier name pattern
        inference_config: Supplies the date-like pattern used to tag string values

    Returns:
        Ordered mapping header -> ColumnRole (first-seen column order)
    """
    if not rows:
        return {}

    settings = get_settings()
    cfg = config or settings.column_roles
    date_pattern = (inference_config or settings.table_inference).date_pattern
    id_pattern = re.compile(cfg.id_name_pattern, re.IGNORECASE)

    roles: Dict[str, ColumnRole] = {}
    for name in _column_names(rows):
        cells = (Cell.of(row.get(name), date_pattern) for row in rows)
        sample = [c for c in cells if not c.is_empty]
        roles[name] = classify_values(sample, cfg)

    for name in roles:
        if id_pattern.match(name):
            roles[name] = ColumnRole.ID

    logger.debug("Column roles: %s", {k: v.value for k, v in roles.items()})
    return roles
