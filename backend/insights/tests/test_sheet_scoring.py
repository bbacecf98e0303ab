from insights.services.sheet_scoring import score_table, select_best_sheet
from insights.services.table_inference import infer_table
from shared.config.settings import SheetScoringSettings
from shared.models.table import InferredTable


def _rows(count, numeric_cols, text_cols):
    rows = []
    for i in range(count):
        row = {f"n{c}": i * 10 + c for c in range(numeric_cols)}
        row.update({f"t{c}": f"label-{i}" for c in range(text_cols)})
        rows.append(row)
    return rows


def _table(rows):
    return InferredTable(headers=list(rows[0].keys()) if rows else [], rows=rows)


class TestScoreTable:
    def test_small_table_scores_low(self):
        rows = [{"name": "a", "value": 1}, {"name": "b", "value": 2}, {"name": "c", "value": 3}]
        assert score_table(rows) <= 2

    def test_wide_long_table_gets_both_bonuses(self):
        rows = _rows(25, numeric_cols=3, text_cols=3)
        assert score_table(rows) == 23

    def test_empty_rows_score_zero(self):
        assert score_table([]) == 0
        assert score_table([{}]) == 0

    def test_sparse_numeric_column_below_ratio_is_not_counted(self):
        rows = [{"label": "x", "value": 1 if i < 2 else "n/a"} for i in range(10)]
        assert score_table(rows) == 0

    def test_only_sample_rows_are_inspected(self):
        config = SheetScoringSettings(scoring_sample_rows=5)
        rows = [{"value": "text"} for _ in range(5)] + [{"value": 1} for _ in range(20)]

        assert score_table(rows, config) == 10
        assert score_table(rows) == 11

    def test_scores_are_never_negative(self):
        for rows in ([], [{"a": None}], _rows(3, 0, 1)):
            assert score_table(rows) >= 0


class TestSelectBestSheet:
    def test_tabular_sheet_beats_cover_page(self):
        cover = infer_table([["Annual report"], ["Prepared by finance"]])
        data = infer_table(
            [["Region", "Month", "Units", "Revenue", "Cost"]]
            + [["North", f"2024-{m:02d}-01", m, m * 100, m * 40] for m in range(1, 13)] * 2
        )

        selection = select_best_sheet([("Cover", cover), ("Data", data)])
        assert selection.sheet_name == "Data"
        assert selection.table.headers == ["Region", "Month", "Units", "Revenue", "Cost"]
        assert [s.sheet_name for s in selection.scores] == ["Cover", "Data"]
        assert selection.scores[1].score == 23

    def test_ties_keep_first_seen(self):
        table = _table(_rows(3, 1, 1))
        selection = select_best_sheet([("First", table), ("Second", table)])
        assert selection.sheet_name == "First"

    def test_candidates_beyond_cap_are_skipped(self):
        config = SheetScoringSettings(max_candidate_sheets=2)
        weak = _table(_rows(2, 0, 1))
        strong = _table(_rows(30, 3, 3))

        selection = select_best_sheet(
            [("a", weak), ("b", weak), ("c", strong)],
            config,
        )
        assert selection.sheet_name == "a"
        assert selection.skipped_sheets == ["c"]
        assert len(selection.scores) == 2

    def test_no_candidates(self):
        selection = select_best_sheet([])
        assert selection.sheet_name is None
        assert selection.table.rows == []
        assert selection.scores == []
