"""
Insights Service
Table inference, sheet selection and forecasting for the executive dashboard

Port: 8003
"""

from dotenv import load_dotenv

load_dotenv()  # Load .env file

from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI

from insights.routers.insights_router import router as insights_router
from shared.config.settings import get_settings
from shared.models.responses import ApiResponse
from shared.utils.app_logger import configure_logging, get_logger

SERVICE_NAME = "insights"
SERVICE_VERSION = "0.1.0"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 이벤트"""
    settings = get_settings()
    configure_logging(settings.service.log_level)
    app.state.settings = settings
    logger.info(
        f"🚀 Insights Service 시작 (environment={settings.environment.value}, "
        f"max_header_scan={settings.table_inference.max_header_scan})"
    )

    yield

    logger.info("🔄 Insights Service 종료")


app = FastAPI(
    title="Insights Service",
    description="Table inference, sheet scoring and exponential smoothing forecasts",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Health check and service status"},
        {"name": "insights", "description": "Table inference and forecasting"},
    ],
)

app.include_router(insights_router, prefix="/api/v1")


@app.get("/", tags=["Health"])
async def root() -> Dict[str, Any]:
    """루트 엔드포인트"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "description": "표 구조 추론 및 시계열 예측 서비스",
        "endpoints": {
            "health": "/health",
            "infer_table": "/api/v1/insights/table/infer",
            "column_roles": "/api/v1/insights/table/roles",
            "score_table": "/api/v1/insights/table/score",
            "analyze_workbook": "/api/v1/insights/workbook/analyze",
            "forecast": "/api/v1/insights/forecast",
            "docs": "/docs",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """서비스 상태 확인"""
    return ApiResponse.health_check(
        service_name=SERVICE_NAME, version=SERVICE_VERSION, description="표 구조 추론 및 예측 서비스"
    ).to_dict()


if __name__ == "__main__":
    service = get_settings().service
    uvicorn.run(
        "insights.main:app",
        host=service.insights_host,
        port=service.insights_port,
        log_level=service.log_level.lower(),
    )
