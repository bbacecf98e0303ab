"""
Forecast models for Executive Insights.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

TimeLabel = Union[int, float, str]


class ForecastMethod(str, Enum):
    SIMPLE_EXPONENTIAL_SMOOTHING = "SimpleExponentialSmoothing"
    HOLT_LINEAR_TREND = "HoltLinearTrend"


class SeriesPoint(BaseModel):
    """One observation of a chronologically ordered series"""

    t: TimeLabel = Field(..., description="Ordinal position or period label")
    y: Optional[float] = Field(default=None, description="Observed value; missing values are skipped")

    model_config = ConfigDict(extra="ignore")


class ForecastPoint(BaseModel):
    t: TimeLabel
    y: float
    upper_bound: float
    lower_bound: float
    is_forecast: bool = True


class ForecastResult(BaseModel):
    """Fitted values, projected points and heuristic quality scores"""

    fitted: List[float] = Field(default_factory=list, description="One value per valid input point")
    forecast: List[ForecastPoint] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=100.0)
    accuracy: float = Field(..., ge=0.0, le=100.0)
    methodology: ForecastMethod
    parameters: Dict[str, float] = Field(default_factory=dict)


class ForecastRequest(BaseModel):
    series: List[SeriesPoint] = Field(..., description="Chronologically ordered points")
    periods_ahead: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(extra="ignore")


class ChartSpec(BaseModel):
    """Minimal description of a plotted chart used by the projections flow"""

    type: str = Field(default="line")
    data: List[Dict[str, Any]] = Field(default_factory=list)
    x_field: Optional[str] = None
    y_field: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
