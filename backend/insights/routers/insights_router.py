"""
Insights Router
Table inference, column roles, sheet scoring and forecasting endpoints
"""

import asyncio
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from insights.services.column_roles import infer_column_roles
from insights.services.forecasting import generate_smart_forecast
from insights.services.sheet_scoring import score_table, select_best_sheet
from insights.services.table_inference import infer_table
from shared.config.settings import ApplicationSettings, get_settings
from shared.exceptions.forecast import InsufficientDataError
from shared.models.forecast import ForecastRequest, ForecastResult
from shared.models.sheet_grid import SheetGrid
from shared.models.table import (
    ColumnRolesResponse,
    InferredTable,
    TableInferenceRequest,
    TableRowsRequest,
    TableScoreResponse,
    WorkbookAnalysisResponse,
)
from shared.services.sheet_grid_parser import SheetGridParseOptions, SheetGridParser
from shared.utils.app_logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/insights", tags=["insights"])

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)


@router.post("/table/infer", response_model=InferredTable)
async def infer_table_from_grid(
    request: TableInferenceRequest,
    settings: ApplicationSettings = Depends(get_settings),
) -> InferredTable:
    """
    Raw grid에서 헤더 행, 유효 컬럼, 본문 행을 추론합니다.

    - 헤더 행 탐지 (제목/배너 행 건너뜀)
    - 빈 컬럼 제거
    - 연속 빈 행 이후 푸터 제거
    """
    try:
        logger.info(f"Inferring table from grid with {len(request.grid)} rows")
        return await asyncio.to_thread(
            infer_table,
            request.grid,
            max_header_scan=request.max_header_scan,
            config=settings.table_inference,
        )
    except Exception as e:
        logger.error(f"Table inference failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Table inference failed: {str(e)}",
        )


@router.post("/table/roles", response_model=ColumnRolesResponse)
async def infer_roles(
    request: TableRowsRequest,
    settings: ApplicationSettings = Depends(get_settings),
) -> ColumnRolesResponse:
    """Assign id / date / metric / category / text to each column."""
    try:
        roles = infer_column_roles(
            request.rows,
            settings.column_roles,
            inference_config=settings.table_inference,
        )
        return ColumnRolesResponse(roles=roles)
    except Exception as e:
        logger.error(f"Column role inference failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Column role inference failed: {str(e)}",
        )


@router.post("/table/score", response_model=TableScoreResponse)
async def score_rows(
    request: TableRowsRequest,
    settings: ApplicationSettings = Depends(get_settings),
) -> TableScoreResponse:
    """Tabularity score of one candidate table."""
    try:
        return TableScoreResponse(score=score_table(request.rows, settings.sheet_scoring))
    except Exception as e:
        logger.error(f"Table scoring failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Table scoring failed: {str(e)}",
        )


def _parse_upload(
    filename: str,
    content: bytes,
    *,
    sheet_name: Optional[str],
    settings: ApplicationSettings,
) -> Tuple[str, List[SheetGrid], List[str]]:
    lowered = filename.lower()
    options = SheetGridParseOptions(
        max_rows=settings.service.max_grid_rows,
        max_cols=settings.service.max_grid_cols,
        max_sheets=settings.sheet_scoring.max_candidate_sheets,
    )
    if lowered.endswith(EXCEL_EXTENSIONS):
        available = SheetGridParser.sheet_names_from_excel_bytes(content)
        grids = SheetGridParser.from_excel_bytes(content, sheet_name=sheet_name, options=options)
        return "excel", grids, available

    grid = SheetGridParser.from_csv_bytes(content, sheet_name=filename, options=options)
    return "csv", [grid], [filename]


def _analyze_grids(
    source: str,
    grids: List[SheetGrid],
    available: List[str],
    settings: ApplicationSettings,
) -> WorkbookAnalysisResponse:
    candidates = [
        (grid.sheet_name or f"sheet_{i + 1}", infer_table(grid.grid, config=settings.table_inference))
        for i, grid in enumerate(grids)
    ]
    selection = select_best_sheet(candidates, settings.sheet_scoring)
    roles = infer_column_roles(
        selection.table.rows,
        settings.column_roles,
        inference_config=settings.table_inference,
    )
    warnings: List[str] = []
    for grid in grids:
        warnings.extend(grid.warnings)
    if len(available) > len(grids):
        warnings.append(
            f"Only the first {len(grids)} of {len(available)} sheets were scored"
        )
    return WorkbookAnalysisResponse(
        source=source,
        selected_sheet=selection.sheet_name,
        available_sheets=available,
        table=selection.table,
        roles=roles,
        scores=selection.scores,
        warnings=warnings,
    )


@router.post("/workbook/analyze", response_model=WorkbookAnalysisResponse)
async def analyze_workbook(
    file: UploadFile = File(...),
    sheet_name: Optional[str] = None,
    settings: ApplicationSettings = Depends(get_settings),
) -> WorkbookAnalysisResponse:
    """
    Excel(.xlsx/.xlsm) 또는 CSV 파일을 업로드 받아 시트별로 표를 추론하고,
    가장 점수가 높은 시트를 기본 표로 선택합니다.
    """
    filename = file.filename or ""
    if not filename.lower().endswith(EXCEL_EXTENSIONS + CSV_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx/.xlsm/.csv files are supported",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    if len(content) > settings.service.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail="File too large",
        )

    try:
        source, grids, available = await asyncio.to_thread(
            _parse_upload, filename, content, sheet_name=sheet_name, settings=settings
        )
    except Exception as e:
        logger.error(f"Failed to parse upload '{filename}': {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to parse file: {str(e)}",
        )

    try:
        result = await asyncio.to_thread(_analyze_grids, source, grids, available, settings)
        logger.info(
            f"Analyzed '{filename}': selected sheet={result.selected_sheet}, "
            f"columns={len(result.table.headers)}, rows={len(result.table.rows)}"
        )
        return result
    except Exception as e:
        logger.error(f"Workbook analysis failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Workbook analysis failed: {str(e)}",
        )


@router.post("/forecast", response_model=ForecastResult)
async def forecast_series(
    request: ForecastRequest,
    settings: ApplicationSettings = Depends(get_settings),
) -> ForecastResult:
    """
    시계열을 받아 추세 여부에 따라 Holt 또는 SES 예측을 수행합니다.

    데이터가 부족하면 422를 반환합니다 (UI는 예측 버튼을 숨김).
    """
    try:
        return await asyncio.to_thread(
            generate_smart_forecast,
            request.series,
            request.periods_ahead,
            config=settings.forecast,
        )
    except InsufficientDataError as e:
        logger.info(f"Forecast skipped: {e.message}")
        raise HTTPException(
            status_code=422,
            detail=e.to_dict(),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Forecast failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Forecast failed: {str(e)}",
        )
