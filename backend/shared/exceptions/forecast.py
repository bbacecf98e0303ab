"""
Forecasting domain exceptions
"""

from typing import Optional

from .base import DomainException


class ForecastException(DomainException):
    """Base class for forecasting failures"""

    def __init__(self, message: str, code: str = "FORECAST_ERROR", details: Optional[dict] = None):
        super().__init__(message=message, code=code, details=details)


class InsufficientDataError(ForecastException):
    """Raised when a series is too short to fit a smoothing model"""

    def __init__(self, message: str, *, required: int, available: int):
        super().__init__(
            message=message,
            code="INSUFFICIENT_DATA",
            details={"required": required, "available": available},
        )
        self.required = required
        self.available = available
