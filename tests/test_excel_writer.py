"""
Тесты для записи предпросмотра в Excel
"""
from openpyxl import load_workbook

from tea_import.excel_writer import (
    SHEET_CONSUMPTION, SHEET_DIAGNOSTICS, SHEET_ITEMS, SHEET_STOCKS, SHEET_SUPPLIERS,
    stocks_frame, write_preview_excel,
)
from tea_import.pipeline import import_sheet
from tea_import.warehouses import MAIN_WAREHOUSE_ID


class TestPreviewExcel:
    """Листы предпросмотра"""

    def test_all_sheets_written(self, make_grid, stock_sheet_rows, import_now, temp_dir):
        result = import_sheet(make_grid(stock_sheet_rows), now=import_now)
        output = temp_dir / "preview.xlsx"

        written = write_preview_excel(result, str(output), MAIN_WAREHOUSE_ID)

        assert output.exists()
        assert list(written) == [SHEET_ITEMS, SHEET_STOCKS, SHEET_CONSUMPTION, SHEET_SUPPLIERS, SHEET_DIAGNOSTICS]
        assert written[SHEET_ITEMS] == 4
        assert written[SHEET_SUPPLIERS] == 3

        wb = load_workbook(output)
        ws = wb[SHEET_ITEMS]
        assert [c.value for c in ws[1]][:4] == ["Код", "Назва", "Од. вим.", "Категорія"]
        assert ws.cell(row=2, column=1).value == "A-001"
        assert ws.cell(row=1, column=1).font.bold
        assert ws.cell(row=2, column=2).alignment.horizontal == "left"
        assert ws.cell(row=2, column=1).border.left.style == "thin"

    def test_empty_sections_skipped(self, make_grid, import_now, temp_dir):
        result = import_sheet(make_grid([["Код", "Назва"], ["A", "Чай"]]), now=import_now)
        output = temp_dir / "preview.xlsx"

        written = write_preview_excel(result, str(output), MAIN_WAREHOUSE_ID)

        assert SHEET_CONSUMPTION not in written
        assert SHEET_SUPPLIERS not in written
        assert set(load_workbook(output).sheetnames) == {SHEET_ITEMS, SHEET_STOCKS, SHEET_DIAGNOSTICS}

    def test_stocks_frame_main_first(self, make_grid, stock_sheet_rows, import_now):
        result = import_sheet(make_grid(stock_sheet_rows), now=import_now)
        df = stocks_frame(result, MAIN_WAREHOUSE_ID)
        assert list(df.columns) == ["Код", "Назва", MAIN_WAREHOUSE_ID, "wh-fito"]
        assert df.loc[df["Код"] == "A-002", "wh-fito"].iloc[0] == 0.0

    def test_diagnostics_lists_unresolved(self, make_grid, import_now, temp_dir):
        grid = make_grid([["Код", "Назва", "Залишки на 30.11 Нема"], ["A", "Чай", "1"]])
        result = import_sheet(grid, now=import_now)
        output = temp_dir / "preview.xlsx"
        write_preview_excel(result, str(output), MAIN_WAREHOUSE_ID)

        ws = load_workbook(output)[SHEET_DIAGNOSTICS]
        values = [(row[0].value, row[1].value) for row in ws.iter_rows(min_row=2)]
        assert ("Склад або дату не розпізнано", "Залишки на 30.11 Нема") in values
        assert ("Пропущено рядків", 0) in values
