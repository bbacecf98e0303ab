import importlib.util
from datetime import datetime
from io import BytesIO

import pytest

from shared.services.sheet_grid_parser import SheetGridParseOptions, SheetGridParser


class TestCsvParsing:
    def test_csv_numbers_are_coerced(self):
        data = b"Region,Revenue,Share\nNorth,1200,0.25\nSouth,-300,1e-3\n"

        out = SheetGridParser.from_csv_bytes(data, sheet_name="sales.csv")
        assert out.source == "csv"
        assert out.sheet_name == "sales.csv"
        assert out.grid == [
            ["Region", "Revenue", "Share"],
            ["North", 1200, 0.25],
            ["South", -300, 0.001],
        ]
        assert out.metadata["rows"] == 3
        assert out.metadata["cols"] == 3

    def test_thousands_separators_inside_quotes(self):
        data = b'Item,Amount\nA,"1,200"\nB,"15,000.50"\n'

        out = SheetGridParser.from_csv_bytes(data)
        assert out.grid[1] == ["A", 1200]
        assert out.grid[2] == ["B", 15000.5]

    def test_semicolon_delimiter_is_sniffed(self):
        data = b"a;b\n1;2\n3;4\n"

        out = SheetGridParser.from_csv_bytes(data)
        assert out.grid == [["a", "b"], [1, 2], [3, 4]]

    def test_coercion_can_be_disabled(self):
        data = b"a,b\n1,2\n"
        out = SheetGridParser.from_csv_bytes(data, options=SheetGridParseOptions(csv_coerce_numbers=False))
        assert out.grid[1] == ["1", "2"]

    def test_trailing_empty_rows_are_trimmed(self):
        data = b"a,b\n1,2\n,\n3,4\n,\n,\n"

        out = SheetGridParser.from_csv_bytes(data)
        assert out.grid[-1] == [3, 4]
        # Internal empty row is preserved
        assert out.grid[2] == ["", ""]
        assert "Trailing empty rows/cols trimmed" in out.warnings

    def test_row_limit(self):
        data = b"a,b\n" + b"".join(f"{i},{i}\n".encode() for i in range(100))
        out = SheetGridParser.from_csv_bytes(data, options=SheetGridParseOptions(max_rows=10))
        assert len(out.grid) == 10

    def test_non_utf8_falls_back_to_latin1(self):
        data = "name\ncafé\n".encode("latin-1")

        out = SheetGridParser.from_csv_bytes(data)
        assert out.grid == [["name"], ["café"]]
        assert any("latin-1" in w for w in out.warnings)


class TestExcelParsing:
    def test_excel_parser_optional_dependency(self):
        if importlib.util.find_spec("openpyxl") is not None:
            pytest.skip("openpyxl installed; this environment can run full Excel parser tests")

        with pytest.raises(RuntimeError) as exc:
            SheetGridParser.from_excel_bytes(b"not-an-xlsx")
        assert "openpyxl" in str(exc.value).lower()

    @pytest.mark.filterwarnings(
        "ignore:datetime\\.datetime\\.utcnow\\(\\) is deprecated.*:DeprecationWarning:openpyxl\\..*"
    )
    def test_excel_workbook_yields_one_grid_per_sheet(self):
        if importlib.util.find_spec("openpyxl") is None:
            pytest.skip("openpyxl not installed")

        from openpyxl import Workbook

        wb = Workbook()
        cover = wb.active
        cover.title = "Cover"
        cover["A1"] = "매출 보고서"

        data = wb.create_sheet("Data")
        data.append(["상품", "금액", "날짜", "판매중"])
        data.append(["셔츠", 150, datetime(2024, 1, 1), True])
        data.append(["바지", 99.5, datetime(2024, 1, 2, 9, 30), False])

        bio = BytesIO()
        wb.save(bio)

        assert SheetGridParser.sheet_names_from_excel_bytes(bio.getvalue()) == ["Cover", "Data"]

        grids = SheetGridParser.from_excel_bytes(bio.getvalue())
        assert [g.sheet_name for g in grids] == ["Cover", "Data"]
        assert all(g.source == "excel" for g in grids)
        assert grids[0].grid == [["매출 보고서"]]

        sheet = grids[1]
        assert sheet.grid[0] == ["상품", "금액", "날짜", "판매중"]
        assert sheet.grid[1] == ["셔츠", 150, "2024-01-01", "true"]
        assert sheet.grid[2] == ["바지", 99.5, "2024-01-02 09:30:00", "false"]

        only_data = SheetGridParser.from_excel_bytes(bio.getvalue(), sheet_name="Data")
        assert [g.sheet_name for g in only_data] == ["Data"]

        with pytest.raises(ValueError) as exc:
            SheetGridParser.from_excel_bytes(bio.getvalue(), sheet_name="Summary")
        assert "Summary" in str(exc.value)

        capped = SheetGridParser.from_excel_bytes(
            bio.getvalue(), options=SheetGridParseOptions(max_sheets=1)
        )
        assert [g.sheet_name for g in capped] == ["Cover"]
