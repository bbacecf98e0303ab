"""
Centralized Configuration System for Executive Insights

This module provides a type-safe, centralized configuration system using Pydantic Settings.
Every heuristic threshold used by the inference and forecasting engines lives here so it
can be tuned through the environment (or passed explicitly in tests) without code edits.

Features:
- Type-safe configuration with validation
- Environment variable binding with defaults
- Hierarchical configuration structure
- Test-friendly configuration isolation
"""

import os
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment types"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class TableInferenceSettings(BaseSettings):
    """Header detection, column pruning and footer trimming thresholds"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    max_header_scan: int = Field(
        default=30,
        ge=1,
        description="Only the first N rows are considered header candidates"
    )
    min_header_text_ratio: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Share of short text cells that makes a row 'mostly strings'"
    )
    header_text_bonus: float = Field(
        default=1000.0,
        description="Score bonus for mostly-text rows"
    )
    max_header_text_length: int = Field(
        default=128,
        ge=1,
        description="Strings at or above this length do not count as header labels"
    )
    numeric_header_penalty: float = Field(
        default=0.2,
        description="Score penalty per numeric cell in a header candidate"
    )
    footer_blank_run_length: int = Field(
        default=3,
        ge=1,
        description="Consecutive fully-empty body rows that end the table"
    )
    synthesized_header_prefix: str = Field(
        default="column",
        description="Prefix for names given to blank header cells"
    )
    date_pattern: str = Field(
        default=r"\d{4}-\d{2}-\d{2}",
        description="Regex searched in text cells to decide which are date-like"
    )


class ColumnRoleSettings(BaseSettings):
    """Column role classification thresholds"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    date_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    metric_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    category_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    id_name_pattern: str = Field(
        default=r"^(id|.*_id|customerid)$",
        description="Column names matching this (case-insensitive) are identifiers"
    )


class SheetScoringSettings(BaseSettings):
    """Tabularity scoring constants (empirical defaults, not validated)"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    scoring_sample_rows: int = Field(default=200, ge=1)
    numeric_column_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    min_table_width: int = Field(default=5, ge=1)
    min_table_length: int = Field(default=20, ge=1)
    width_bonus: float = Field(default=10.0)
    length_bonus: float = Field(default=10.0)
    max_candidate_sheets: int = Field(
        default=8,
        ge=1,
        description="Only the first N workbook tabs are scored"
    )


class ForecastSettings(BaseSettings):
    """Exponential smoothing parameters"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    smoothing_alpha: float = Field(default=0.3, gt=0.0, le=1.0)
    trend_beta: float = Field(default=0.1, gt=0.0, le=1.0)
    min_forecast_points: int = Field(default=8, ge=2)
    trend_threshold_ratio: float = Field(
        default=0.01,
        ge=0.0,
        description="Trend is present when |slope| exceeds this share of |mean|"
    )
    confidence_z: float = Field(default=1.96, gt=0.0)
    default_periods_ahead: int = Field(default=3, ge=1)
    max_periods_ahead: int = Field(default=36, ge=1)


class ServiceSettings(BaseSettings):
    """Service configuration settings"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    insights_host: str = Field(
        default="0.0.0.0",
        description="Insights service bind host"
    )
    insights_port: int = Field(
        default=8003,
        description="Insights service port"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    max_upload_bytes: int = Field(
        default=25 * 1024 * 1024,
        description="Largest workbook accepted by the upload endpoint"
    )
    max_grid_rows: int = Field(
        default=50000,
        description="Rows read per worksheet"
    )
    max_grid_cols: int = Field(
        default=500,
        description="Columns read per worksheet"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return str(v or "INFO").upper()


class ApplicationSettings(BaseSettings):
    """Main application settings - aggregates all other settings"""

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("DOCKER_CONTAINER") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )

    # Nested settings
    table_inference: TableInferenceSettings = TableInferenceSettings()
    column_roles: ColumnRoleSettings = ColumnRoleSettings()
    sheet_scoring: SheetScoringSettings = SheetScoringSettings()
    forecast: ForecastSettings = ForecastSettings()
    service: ServiceSettings = ServiceSettings()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_test(self) -> bool:
        """Check if running in test mode"""
        return self.environment == Environment.TEST


settings = ApplicationSettings()


def get_settings() -> ApplicationSettings:
    """
    Get the global settings instance

    Can be used with FastAPI's Depends() for dependency injection.

    Returns:
        ApplicationSettings: The global settings instance
    """
    return settings


def reload_settings() -> ApplicationSettings:
    """
    Reload settings from environment (useful for testing)

    Returns:
        ApplicationSettings: New settings instance with reloaded values
    """
    global settings
    settings = ApplicationSettings()
    return settings
