"""
Shared model definitions for Executive Insights
"""

from .cells import Cell, CellKind
from .forecast import (
    ChartSpec,
    ForecastMethod,
    ForecastPoint,
    ForecastRequest,
    ForecastResult,
    SeriesPoint,
)
from .responses import ApiResponse
from .sheet_grid import SheetGrid
from .table import (
    ColumnRole,
    ColumnRolesResponse,
    InferredTable,
    SheetScore,
    SheetSelection,
    TableInferenceRequest,
    TableRowsRequest,
    TableScoreResponse,
    WorkbookAnalysisResponse,
)

__all__ = [
    "ApiResponse",
    "Cell",
    "CellKind",
    "ChartSpec",
    "ColumnRole",
    "ColumnRolesResponse",
    "ForecastMethod",
    "ForecastPoint",
    "ForecastRequest",
    "ForecastResult",
    "InferredTable",
    "SeriesPoint",
    "SheetGrid",
    "SheetScore",
    "SheetSelection",
    "TableInferenceRequest",
    "TableRowsRequest",
    "TableScoreResponse",
    "WorkbookAnalysisResponse",
]
