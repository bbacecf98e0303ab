"""
Lightweight exponential smoothing forecaster

- Trend detection via ordinary least squares slope
- Simple exponential smoothing (flat projection, constant-width bounds)
- Holt linear trend (trend projection, bounds widening with sqrt(h))
- Period label synthesis for projected points

Confidence and accuracy are heuristic 0-100 scores derived from one-step-ahead
residuals, not formal statistical confidence levels.
"""

from __future__ import annotations

import calendar
import math
import re
import statistics
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from shared.config.settings import ForecastSettings, get_settings
from shared.exceptions.forecast import InsufficientDataError
from shared.models.forecast import (
    ChartSpec,
    ForecastMethod,
    ForecastPoint,
    ForecastResult,
    SeriesPoint,
    TimeLabel,
)
from shared.utils.app_logger import get_logger

logger = get_logger(__name__)

PointLike = Union[SeriesPoint, Mapping[str, Any], Tuple[Any, Any]]

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_ONLY = re.compile(r"^\d{4}$")
_INTEGER = re.compile(r"^[+-]?\d+$")

_TIME_FIELD_HINTS = ("date", "time", "month", "year", "quarter", "period", "week")
_DATE_VALUE_HINTS = (
    re.compile(r"\d{4}"),
    re.compile(r"\d{1,2}/\d{1,2}"),
    re.compile(r"\d{4}-\d{2}"),
)


# ---------------------------
# Series helpers
# ---------------------------


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        try:
            num = float(str(value).replace(",", "").strip())
        except ValueError:
            return None
    return num if math.isfinite(num) else None


def _coerce_point(point: PointLike) -> Tuple[TimeLabel, Optional[float]]:
    if isinstance(point, SeriesPoint):
        return point.t, _to_float(point.y)
    if isinstance(point, Mapping):
        return point.get("t"), _to_float(point.get("y"))
    t, y = point
    return t, _to_float(y)


def _valid_values(series: Sequence[PointLike]) -> Tuple[List[float], Optional[TimeLabel]]:
    """Finite numeric values in order, plus the label of the last raw point."""
    values: List[float] = []
    last_label: Optional[TimeLabel] = None
    for point in series:
        t, y = _coerce_point(point)
        last_label = t
        if y is not None:
            values.append(y)
    return values, last_label


def _require_points(series: Optional[Sequence[PointLike]], cfg: ForecastSettings) -> Tuple[List[float], TimeLabel]:
    available = len(series) if series else 0
    if available < cfg.min_forecast_points:
        raise InsufficientDataError(
            f"Insufficient data for forecasting (minimum {cfg.min_forecast_points} points required)",
            required=cfg.min_forecast_points,
            available=available,
        )
    values, last_label = _valid_values(series)
    if len(values) < cfg.min_forecast_points:
        raise InsufficientDataError(
            "Insufficient valid numeric data for forecasting",
            required=cfg.min_forecast_points,
            available=len(values),
        )
    return values, last_label


def _clamp_percent(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return float(max(0.0, min(100.0, value)))


def _accuracy(values: Sequence[float], residuals: Sequence[float]) -> float:
    """(1 - MAPE) * 100 over scored points; zero actuals cannot be scored."""
    ratios = [abs(r / a) for a, r in zip(values[1:], residuals[1:]) if a != 0]
    if not ratios:
        return 0.0
    mape = sum(ratios) / len(ratios)
    return _clamp_percent(round((1 - mape) * 100))


def _confidence(values: Sequence[float], residual_std: float) -> float:
    """(1 - residual std / mean) * 100; a negative mean therefore clamps to 100."""
    mean_y = statistics.fmean(values)
    if mean_y == 0:
        return 0.0
    return _clamp_percent(round((1 - residual_std / mean_y) * 100))


def _residual_std(residuals: Sequence[float]) -> float:
    scored = residuals[1:]
    if not scored:
        return 0.0
    return statistics.pstdev(scored)


# ---------------------------
# Time labels
# ---------------------------


def _add_months(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def next_time_label(last: Optional[TimeLabel], steps: int) -> TimeLabel:
    """
    Label of the point `steps` periods after `last`.

    YYYY-MM-DD and YYYY-MM advance by months, YYYY by years, integers by one per step.
    Unrecognized labels get an ordinal suffix so projected points stay distinct.
    """
    if isinstance(last, bool):
        last = str(last).lower()
    if isinstance(last, int):
        return last + steps
    if isinstance(last, float) and last.is_integer():
        return int(last) + steps

    text = "" if last is None else str(last).strip()

    m = _ISO_DATE.match(text)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if 1 <= month <= 12:
            ny, nm = _add_months(year, month, steps)
            nd = min(max(day, 1), calendar.monthrange(ny, nm)[1])
            return f"{ny:04d}-{nm:02d}-{nd:02d}"

    m = _YEAR_MONTH.match(text)
    if m:
        year, month = int(m.group(1)), int(m.group(2))
        if 1 <= month <= 12:
            ny, nm = _add_months(year, month, steps)
            return f"{ny:04d}-{nm:02d}"

    if _YEAR_ONLY.match(text):
        return str(int(text) + steps)

    if _INTEGER.match(text):
        return str(int(text) + steps)

    base = text or "t"
    return f"{base} (+{steps})"


# ---------------------------
# Trend detection
# ---------------------------


def linear_slope(values: Sequence[float]) -> float:
    """OLS slope of values against their index."""
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = n * (n - 1) / 2
    sum_x2 = (n - 1) * n * (2 * n - 1) / 6
    sum_y = math.fsum(values)
    sum_xy = math.fsum(i * y for i, y in enumerate(values))
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def detect_trend(series: Sequence[PointLike], config: Optional[ForecastSettings] = None) -> bool:
    """True when the OLS slope exceeds `trend_threshold_ratio` of the mean level per step."""
    cfg = config or get_settings().forecast
    if not series or len(series) < cfg.min_forecast_points:
        return False
    values, _ = _valid_values(series)
    if len(values) < cfg.min_forecast_points:
        return False

    slope = linear_slope(values)
    avg_y = math.fsum(values) / len(values)
    threshold = abs(avg_y * cfg.trend_threshold_ratio)
    has_trend = abs(slope) > threshold
    logger.debug(
        "Trend detection: slope=%.4f avg=%.2f threshold=%.4f trend=%s",
        slope,
        avg_y,
        threshold,
        has_trend,
    )
    return has_trend


# ---------------------------
# Smoothing models
# ---------------------------


def _resolve_horizon(periods_ahead: Optional[int], cfg: ForecastSettings) -> int:
    horizon = cfg.default_periods_ahead if periods_ahead is None else int(periods_ahead)
    if horizon < 1:
        raise ValueError("periods_ahead must be at least 1")
    return min(horizon, cfg.max_periods_ahead)


def _build_points(
    last_label: TimeLabel,
    horizon: int,
    value_at: Callable[[int], float],
    margin_at: Callable[[int], float],
) -> List[ForecastPoint]:
    points: List[ForecastPoint] = []
    for h in range(1, horizon + 1):
        value = value_at(h)
        margin = margin_at(h)
        points.append(
            ForecastPoint(
                t=next_time_label(last_label, h),
                y=round(value, 2),
                upper_bound=round(value + margin, 2),
                lower_bound=round(value - margin, 2),
            )
        )
    return points


def generate_ses_forecast(
    series: Sequence[PointLike],
    periods_ahead: Optional[int] = None,
    alpha: Optional[float] = None,
    config: Optional[ForecastSettings] = None,
) -> ForecastResult:
    """Simple exponential smoothing: flat projection of the final level."""
    cfg = config or get_settings().forecast
    a = cfg.smoothing_alpha if alpha is None else float(alpha)
    horizon = _resolve_horizon(periods_ahead, cfg)
    values, last_label = _require_points(series, cfg)

    level = values[0]
    fitted: List[float] = [level]
    residuals: List[float] = [0.0]
    for actual in values[1:]:
        prediction = level
        fitted.append(prediction)
        residuals.append(actual - prediction)
        level = a * actual + (1 - a) * level

    residual_std = _residual_std(residuals)
    margin = cfg.confidence_z * residual_std
    final_level = level

    return ForecastResult(
        fitted=fitted,
        forecast=_build_points(last_label, horizon, lambda h: final_level, lambda h: margin),
        confidence=_confidence(values, residual_std),
        accuracy=_accuracy(values, residuals),
        methodology=ForecastMethod.SIMPLE_EXPONENTIAL_SMOOTHING,
        parameters={"alpha": a},
    )


def generate_holt_forecast(
    series: Sequence[PointLike],
    periods_ahead: Optional[int] = None,
    alpha: Optional[float] = None,
    beta: Optional[float] = None,
    config: Optional[ForecastSettings] = None,
) -> ForecastResult:
    """Holt's linear trend (double exponential smoothing)."""
    cfg = config or get_settings().forecast
    a = cfg.smoothing_alpha if alpha is None else float(alpha)
    b = cfg.trend_beta if beta is None else float(beta)
    horizon = _resolve_horizon(periods_ahead, cfg)
    values, last_label = _require_points(series, cfg)

    level = values[0]
    trend = values[1] - values[0]
    fitted: List[float] = [level]
    residuals: List[float] = [0.0]
    for actual in values[1:]:
        prediction = level + trend
        fitted.append(prediction)
        residuals.append(actual - prediction)
        previous_level = level
        level = a * actual + (1 - a) * (level + trend)
        trend = b * (level - previous_level) + (1 - b) * trend

    residual_std = _residual_std(residuals)
    final_level, final_trend = level, trend

    return ForecastResult(
        fitted=fitted,
        forecast=_build_points(
            last_label,
            horizon,
            lambda h: final_level + h * final_trend,
            lambda h: cfg.confidence_z * residual_std * math.sqrt(h),
        ),
        confidence=_confidence(values, residual_std),
        accuracy=_accuracy(values, residuals),
        methodology=ForecastMethod.HOLT_LINEAR_TREND,
        parameters={"alpha": a, "beta": b},
    )


def generate_smart_forecast(
    series: Sequence[PointLike],
    periods_ahead: Optional[int] = None,
    config: Optional[ForecastSettings] = None,
) -> ForecastResult:
    """Holt for trending series, SES otherwise; any Holt failure falls back to SES."""
    cfg = config or get_settings().forecast
    if detect_trend(series, cfg):
        try:
            logger.info("Using Holt linear trend forecast for trending data")
            return generate_holt_forecast(series, periods_ahead, config=cfg)
        except Exception as e:
            logger.warning(f"Holt forecast failed, falling back to SES: {e}")
            return generate_ses_forecast(series, periods_ahead, config=cfg)

    logger.info("Using SES forecast for non-trending data")
    return generate_ses_forecast(series, periods_ahead, config=cfg)


# ---------------------------
# Chart helpers (projections flow)
# ---------------------------


def can_forecast(chart: Optional[ChartSpec], config: Optional[ForecastSettings] = None) -> bool:
    """A line chart with enough points over a time-like x axis."""
    cfg = config or get_settings().forecast
    if chart is None or chart.type != "line":
        return False
    if len(chart.data) < cfg.min_forecast_points or not chart.x_field:
        return False

    x_field = chart.x_field.lower()
    if any(hint in x_field for hint in _TIME_FIELD_HINTS):
        return True

    first = chart.data[0].get(chart.x_field)
    first_text = "" if first is None else str(first)
    return any(p.search(first_text) for p in _DATE_VALUE_HINTS)


def chart_to_series(chart: ChartSpec) -> List[SeriesPoint]:
    """Plotted points as a series; non-numeric y values are dropped."""
    if not chart.data or not chart.x_field or not chart.y_field:
        return []
    series: List[SeriesPoint] = []
    for point in chart.data:
        y = _to_float(point.get(chart.y_field))
        if y is None:
            continue
        t = point.get(chart.x_field)
        series.append(SeriesPoint(t=t if isinstance(t, (int, float, str)) else str(t), y=y))
    return series


def forecast_summary(result: ForecastResult, metric_name: str) -> str:
    if not result.forecast:
        return f"{metric_name} forecast is unavailable"
    first, last = result.forecast[0].y, result.forecast[-1].y
    if last > first:
        direction = "increasing"
    elif last < first:
        direction = "decreasing"
    else:
        direction = "flat"
    if result.confidence > 70:
        level = "high"
    elif result.confidence > 50:
        level = "moderate"
    else:
        level = "low"
    return (
        f"{metric_name} forecast shows {direction} trend with {level} confidence "
        f"({result.confidence:.0f}% confidence, {result.accuracy:.0f}% accuracy)"
    )
