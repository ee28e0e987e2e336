"""
Тесты импорта листа целиком
"""
from datetime import datetime

import pytest

from tea_import.models import FAILURE_NO_DATA, FAILURE_NO_ROWS
from tea_import.pipeline import (
    STATE_COLUMNS_CLASSIFIED, STATE_DONE, STATE_FAILED, STATE_IDLE,
    STATE_LAYOUT_DETECTED, STATE_ROWS_ASSEMBLED,
    ImportRun, import_sheet,
)
from tea_import.warehouses import MAIN_WAREHOUSE_ID


class TestEndToEnd:
    """Сквозной сценарий импорта"""

    def test_single_row_scenario(self, make_grid):
        grid = make_grid([
            ["Код", "Назва", "Од.вим.", "Група", "залишки на 30.11 база", "жовтень 2024"],
            ["TEA-001", "Чай чорний", "кг", "чай", "120", "15"],
        ])

        result = import_sheet(grid, now=datetime(2025, 1, 15))

        assert result.ok
        assert len(result.items) == 1
        item = result.items[0]
        assert item.code == "TEA-001"
        assert item.name == "Чай чорний"
        assert item.unit == "кг"
        assert item.category == "tea_bulk"
        assert item.main_stock == 120.0
        assert item.warehouse_stocks == {}
        assert [(c.year_month, c.quantity, c.is_actual) for c in item.consumption] == [("2024-10", 15.0, True)]

    def test_realistic_sheet(self, make_grid, stock_sheet_rows, import_now):
        result = import_sheet(make_grid(stock_sheet_rows), now=import_now)

        assert result.ok
        items = {item.code: item for item in result.items}
        assert list(items) == ["A-001", "A-002", "L-100", "T-001"]

        flavor = items["A-001"]
        assert flavor.category == "flavor"
        assert flavor.main_stock == 12.5
        assert flavor.warehouse_stocks == {"wh-fito": 2.0}
        assert [(c.year_month, c.quantity) for c in flavor.consumption] == [("2024-11", 4.0)]

        assert items["A-002"].category == "flavor"
        assert items["A-002"].consumption[0].year_month == "2024-12"

        label = items["L-100"]
        assert label.category == "label"
        assert label.unit == "шт"
        assert label.main_stock == 2124.0
        assert label.warehouse_stocks == {"wh-fito": 500.0}

        tea = items["T-001"]
        assert tea.main_stock == 1250.75
        assert tea.warehouse_stocks == {"wh-fito": 0.0}
        assert [(c.year_month, c.quantity) for c in tea.consumption] == [("2024-11", 100.0), ("2024-12", 80.0)]

        assert [s.name for s in result.suppliers] == ["ТОВ Аромат", "Друкарня Принт", "Ceylon Tea Co."]
        assert result.diagnostics.skipped_row_count == 2
        assert result.diagnostics.header_row_index == 2
        assert result.diagnostics.used_default_header_row is False
        assert result.diagnostics.unresolved_warehouse_headers == []

    def test_unresolved_warehouse_in_diagnostics(self, make_grid, import_now):
        grid = make_grid([
            ["Код", "Назва", "Залишки на 30.11 Склад Одеса", "Залишки на 30.11 база"],
            ["A", "Чай", "5", "7"],
        ])
        result = import_sheet(grid, now=import_now)
        assert result.diagnostics.unresolved_warehouse_headers == ["Залишки на 30.11 Склад Одеса"]
        assert result.items[0].warehouse_stocks == {}
        assert result.items[0].main_stock == 7.0

    def test_undated_legacy_stock_column_dropped(self, make_grid, import_now):
        """Остатки "на 1 число" без строки месяцев не попадают в расход"""
        grid = make_grid([
            ["Код", "Назва", "Залишок на 1 число, Май"],
            ["A", "Чай", "500"],
        ])
        result = import_sheet(grid, now=import_now)
        assert result.ok
        item = result.items[0]
        assert item.consumption == []
        assert item.warehouse_stocks == {}
        assert item.main_stock == 0.0
        assert result.diagnostics.unresolved_warehouse_headers == ["Залишок на 1 число, Май"]

    def test_default_header_row(self, make_grid, import_now):
        """Заголовок не найден: первая строка без колонки кода, строк не остается"""
        grid = make_grid([["Позиція", "Опис"], ["A", "Чай"]])
        result = import_sheet(grid, now=import_now)
        assert not result.ok
        assert result.reason == FAILURE_NO_ROWS


class TestFailures:
    """Структурные отказы"""

    def test_empty_sheet(self, make_grid):
        result = import_sheet(make_grid([[None, ""], ["  ", None]]))
        assert not result.ok
        assert result.reason == FAILURE_NO_DATA
        assert result.columns == []

    def test_no_grid_rows(self, make_grid):
        assert import_sheet(make_grid([])).reason == FAILURE_NO_DATA

    def test_no_rows_after_header(self, make_grid, import_now):
        grid = make_grid([
            ["Код", "Назва", "Залишки на 30.11 база"],
            ["", "Без коду", "1"],
            ["A", "0", "1"],
        ])
        result = import_sheet(grid, now=import_now)
        assert not result.ok
        assert result.reason == FAILURE_NO_ROWS
        assert result.columns == ["Код", "Назва", "Залишки на 30.11 база"]
        assert "Проверьте заголовки" in result.message


class TestImportRunStates:
    """Состояния запуска импорта"""

    def test_success_path(self, make_grid, import_now):
        run = ImportRun(make_grid([["Код", "Назва"], ["A", "Чай"]]), now=import_now)
        assert run.state == STATE_IDLE
        run.run()
        assert run.state == STATE_DONE
        assert run.history == [
            STATE_IDLE, STATE_LAYOUT_DETECTED, STATE_COLUMNS_CLASSIFIED, STATE_ROWS_ASSEMBLED, STATE_DONE,
        ]

    def test_no_data_fails_after_layout(self, make_grid):
        run = ImportRun(make_grid([[None]]))
        run.run()
        assert run.history == [STATE_IDLE, STATE_LAYOUT_DETECTED, STATE_FAILED]

    def test_no_rows_fails_after_columns(self, make_grid):
        run = ImportRun(make_grid([["Код", "Назва"], ["A", "0"]]))
        run.run()
        assert run.history == [STATE_IDLE, STATE_LAYOUT_DETECTED, STATE_COLUMNS_CLASSIFIED, STATE_FAILED]

    def test_run_is_single_use(self, make_grid):
        run = ImportRun(make_grid([["Код", "Назва"], ["A", "Чай"]]))
        run.run()
        with pytest.raises(RuntimeError):
            run.run()

    def test_independent_runs(self, make_grid, import_now):
        """Повторный импорт другого листа не зависит от предыдущего"""
        first = import_sheet(make_grid([["Код", "Назва", "Група"], ["A", "Бергамот", "Ароматизатори"]]), now=import_now)
        second = import_sheet(make_grid([["Код", "Назва", "Група"], ["B", "Щось", ""]]), now=import_now)
        assert first.items[0].category == "flavor"
        assert second.items[0].category == "other"


class TestConfig:
    """Настройки импорта"""

    def test_header_scan_rows(self, make_grid, import_now):
        rows = [["..."]] * 3 + [["Код", "Назва"], ["A", "Чай"]]
        assert import_sheet(make_grid(rows), now=import_now, config={"header_scan_rows": 2}).reason == FAILURE_NO_ROWS
        assert import_sheet(make_grid(rows), now=import_now, config={"header_scan_rows": 5}).ok

    def test_main_warehouse_and_aliases(self, make_grid, import_now):
        grid = make_grid([
            ["Код", "Назва", "Залишки на 30.11 цех", "Залишки на 30.11 база"],
            ["A", "Чай", "3", "4"],
        ])
        config = {
            "main_warehouse": "wh-shop",
            "warehouse_aliases": [{"contains": "цех", "warehouse": "wh-shop"}],
        }
        item = import_sheet(grid, now=import_now, config=config).items[0]
        assert item.main_stock == 3.0
        assert item.warehouse_stocks == {MAIN_WAREHOUSE_ID: 4.0}

    def test_rules_json(self, make_grid, import_now, temp_dir):
        rules = temp_dir / "rules.json"
        rules.write_text('[{"category": "gift_sets", "contains": "подарунк"}]', encoding="utf-8")
        grid = make_grid([["Код", "Назва", "Група"], ["G", "Набір", "Подарункові набори"]])
        result = import_sheet(grid, now=import_now, config={"rules_json": str(rules)})
        assert result.items[0].category == "gift_sets"

    def test_verbose_output(self, make_grid, import_now, capsys):
        grid = make_grid([["Код", "Назва", "Залишки на 30.11 Нема"], ["A", "Чай", "1"]])
        import_sheet(grid, now=import_now, verbose=True)
        out = capsys.readouterr().out
        assert "[ЗАГОЛОВОК]" in out
        assert "[СКЛАД]" in out
        assert "[OK]" in out

    def test_quiet_by_default(self, make_grid, import_now, capsys):
        import_sheet(make_grid([["Код", "Назва"], ["A", "Чай"]]), now=import_now)
        assert capsys.readouterr().out == ""
