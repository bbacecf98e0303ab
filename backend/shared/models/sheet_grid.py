"""
Sheet grid extraction models.

Goal: represent an uploaded spreadsheet (Excel workbook tab or CSV file) as a raw grid,
so the table inference engine can operate on one standard format.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SheetGrid(BaseModel):
    """Raw sheet representation (0-based coordinates, A1-anchored)."""

    source: Literal["excel", "csv", "unknown"] = "unknown"
    sheet_name: Optional[str] = None

    grid: List[List[Any]] = Field(default_factory=list, description="Row-major 2D grid")

    metadata: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")
