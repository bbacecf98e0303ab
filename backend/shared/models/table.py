"""
Table inference models for Executive Insights.

These models represent the output of the table inference engine that turns messy
spreadsheet-like grids into named rows, plus the column-role and sheet-scoring
results computed from those rows.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ColumnRole(str, Enum):
    """Semantic role of a column"""

    ID = "id"
    DATE = "date"
    METRIC = "metric"
    CATEGORY = "category"
    TEXT = "text"


class InferredTable(BaseModel):
    """Assembled table: unique headers, records in header order, parser decisions."""

    headers: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(
        default_factory=list, description="One record per body row, keyed by header"
    )
    header_row_index: int = Field(default=0, ge=0, description="0-based row chosen as header")
    trimmed_footer_rows: int = Field(
        default=0, ge=0, description="Body rows dropped after the footer blank run"
    )

    model_config = ConfigDict(extra="ignore")

    def to_grid(self) -> List[List[Any]]:
        """Rebuild a grid with the headers as row 0."""
        grid: List[List[Any]] = [list(self.headers)]
        for row in self.rows:
            grid.append([row.get(h) for h in self.headers])
        return grid


class TableInferenceRequest(BaseModel):
    """Request for inferring a table from a raw grid"""

    grid: List[List[Any]] = Field(..., description="Raw 2D grid (ragged rows allowed)")
    max_header_scan: Optional[int] = Field(default=None, ge=1, le=10000)

    model_config = ConfigDict(extra="ignore")


class TableRowsRequest(BaseModel):
    """Request carrying assembled records (for role inference and scoring)"""

    rows: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class ColumnRolesResponse(BaseModel):
    roles: Dict[str, ColumnRole] = Field(default_factory=dict)


class TableScoreResponse(BaseModel):
    score: float = Field(..., ge=0.0)


class SheetScore(BaseModel):
    """Tabularity score of one candidate sheet"""

    sheet_name: str
    score: float = Field(..., ge=0.0)
    rows: int = Field(default=0, ge=0)
    columns: int = Field(default=0, ge=0)


class SheetSelection(BaseModel):
    """Best-scoring candidate among a workbook's tabs"""

    sheet_name: Optional[str] = None
    table: InferredTable = Field(default_factory=InferredTable)
    scores: List[SheetScore] = Field(default_factory=list)
    skipped_sheets: List[str] = Field(
        default_factory=list, description="Tabs beyond the candidate cap"
    )


class WorkbookAnalysisResponse(BaseModel):
    """Upload analysis: chosen sheet, its table and column roles"""

    source: str
    selected_sheet: Optional[str] = None
    available_sheets: List[str] = Field(default_factory=list)
    table: InferredTable = Field(default_factory=InferredTable)
    roles: Dict[str, ColumnRole] = Field(default_factory=dict)
    scores: List[SheetScore] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
