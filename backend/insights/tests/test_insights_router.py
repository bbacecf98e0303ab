from __future__ import annotations

import importlib.util
import io

import pytest
from fastapi import HTTPException
from starlette.datastructures import UploadFile

from insights.routers import insights_router as router
from shared.config.settings import ServiceSettings, get_settings
from shared.models.forecast import ForecastMethod, ForecastRequest, SeriesPoint
from shared.models.table import ColumnRole, TableInferenceRequest, TableRowsRequest

SALES_CSV = (
    "Monthly sales export,,,\n"
    ",,,\n"
    "order_id,Month,Region,Revenue\n"
    "1,2024-01-01,North,100\n"
    "2,2024-02-01,South,120\n"
    "3,2024-03-01,North,90\n"
    ",,,\n"
    ",,,\n"
    ",,,\n"
    "Generated by finance,,,\n"
).encode("utf-8")


@pytest.mark.asyncio
async def test_infer_table_from_grid() -> None:
    request = TableInferenceRequest(
        grid=[
            ["Report generated 2024-01-01"],
            ["Name", "Revenue", "Region"],
            ["Alice", 100, "East"],
            ["Bob", 200, "West"],
        ]
    )

    table = await router.infer_table_from_grid(request, settings=get_settings())
    assert table.header_row_index == 1
    assert table.headers == ["Name", "Revenue", "Region"]
    assert len(table.rows) == 2


@pytest.mark.asyncio
async def test_infer_table_failure_is_500(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(router, "infer_table", _boom)

    with pytest.raises(HTTPException) as exc:
        await router.infer_table_from_grid(TableInferenceRequest(grid=[["a"]]), settings=get_settings())
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_roles_and_score_endpoints() -> None:
    rows = [{"customer_id": i, "day": f"2024-01-{i:02d}", "amount": i * 3.5} for i in range(1, 11)]

    roles = await router.infer_roles(TableRowsRequest(rows=rows), settings=get_settings())
    assert roles.roles == {
        "customer_id": ColumnRole.ID,
        "day": ColumnRole.DATE,
        "amount": ColumnRole.METRIC,
    }

    score = await router.score_rows(TableRowsRequest(rows=rows), settings=get_settings())
    assert score.score == 2


@pytest.mark.asyncio
async def test_analyze_csv_upload() -> None:
    upload = UploadFile(file=io.BytesIO(SALES_CSV), filename="sales.csv")

    response = await router.analyze_workbook(file=upload, sheet_name=None, settings=get_settings())
    assert response.source == "csv"
    assert response.selected_sheet == "sales.csv"
    assert response.available_sheets == ["sales.csv"]
    assert response.table.header_row_index == 2
    assert response.table.headers == ["order_id", "Month", "Region", "Revenue"]
    assert len(response.table.rows) == 5
    assert response.table.trimmed_footer_rows == 2
    assert response.roles["order_id"] == ColumnRole.ID
    assert response.roles["Month"] == ColumnRole.DATE
    assert response.roles["Region"] == ColumnRole.CATEGORY
    assert response.roles["Revenue"] == ColumnRole.METRIC
    assert len(response.scores) == 1


@pytest.mark.asyncio
async def test_analyze_rejects_bad_uploads() -> None:
    settings = get_settings()

    with pytest.raises(HTTPException) as exc:
        await router.analyze_workbook(
            file=UploadFile(file=io.BytesIO(b"data"), filename="notes.txt"), sheet_name=None, settings=settings
        )
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await router.analyze_workbook(
            file=UploadFile(file=io.BytesIO(b""), filename="empty.csv"), sheet_name=None, settings=settings
        )
    assert exc.value.status_code == 400

    small = settings.model_copy(update={"service": ServiceSettings(max_upload_bytes=16)})
    with pytest.raises(HTTPException) as exc:
        await router.analyze_workbook(
            file=UploadFile(file=io.BytesIO(SALES_CSV), filename="sales.csv"), sheet_name=None, settings=small
        )
    assert exc.value.status_code == 413


@pytest.mark.asyncio
async def test_analyze_parse_failure_is_400(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args, **kwargs):
        raise ValueError("corrupt workbook")

    monkeypatch.setattr(router, "_parse_upload", _boom)

    upload = UploadFile(file=io.BytesIO(b"PK\x03\x04"), filename="book.xlsx")
    with pytest.raises(HTTPException) as exc:
        await router.analyze_workbook(file=upload, sheet_name=None, settings=get_settings())
    assert exc.value.status_code == 400
    assert "corrupt workbook" in exc.value.detail


@pytest.mark.asyncio
async def test_forecast_endpoint() -> None:
    request = ForecastRequest(series=[SeriesPoint(t=f"2024-{m:02d}", y=100 + 10 * m) for m in range(1, 11)])

    result = await router.forecast_series(request, settings=get_settings())
    assert result.methodology == ForecastMethod.HOLT_LINEAR_TREND
    assert [p.t for p in result.forecast] == ["2024-11", "2024-12", "2025-01"]


@pytest.mark.asyncio
async def test_forecast_insufficient_data_is_422() -> None:
    request = ForecastRequest(series=[SeriesPoint(t=i, y=i) for i in range(3)])

    with pytest.raises(HTTPException) as exc:
        await router.forecast_series(request, settings=get_settings())
    assert exc.value.status_code == 422
    assert exc.value.detail["code"] == "INSUFFICIENT_DATA"
    assert exc.value.detail["details"] == {"required": 8, "available": 3}


@pytest.mark.asyncio
async def test_analyze_unknown_sheet_is_400() -> None:
    if importlib.util.find_spec("openpyxl") is None:
        pytest.skip("openpyxl not installed")

    from openpyxl import Workbook

    wb = Workbook()
    wb.active.title = "Data"
    wb.active.append(["Region", "Revenue"])
    wb.active.append(["North", 100])
    bio = io.BytesIO()
    wb.save(bio)

    upload = UploadFile(file=io.BytesIO(bio.getvalue()), filename="book.xlsx")
    with pytest.raises(HTTPException) as exc:
        await router.analyze_workbook(file=upload, sheet_name="Summary", settings=get_settings())
    assert exc.value.status_code == 400
    assert "Summary" in exc.value.detail


@pytest.mark.asyncio
async def test_forecast_runs_off_the_event_loop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    async def _to_thread(func, *args, **kwargs):
        calls.append(func)
        return func(*args, **kwargs)

    monkeypatch.setattr(router.asyncio, "to_thread", _to_thread)

    request = ForecastRequest(series=[SeriesPoint(t=i, y=50) for i in range(8)])
    result = await router.forecast_series(request, settings=get_settings())
    assert result.methodology == ForecastMethod.SIMPLE_EXPONENTIAL_SMOOTHING
    assert calls == [router.generate_smart_forecast]
