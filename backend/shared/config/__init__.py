"""
Unified Configuration Access Point

    from shared.config import get_settings

    settings = get_settings()
    scan = settings.table_inference.max_header_scan
"""

from .settings import (
    ApplicationSettings,
    ColumnRoleSettings,
    Environment,
    ForecastSettings,
    ServiceSettings,
    SheetScoringSettings,
    TableInferenceSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "ApplicationSettings",
    "ColumnRoleSettings",
    "Environment",
    "ForecastSettings",
    "ServiceSettings",
    "SheetScoringSettings",
    "TableInferenceSettings",
    "get_settings",
    "reload_settings",
]
