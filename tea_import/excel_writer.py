# -*- coding: utf-8 -*-
"""
Запись предпросмотра импорта в Excel

Основные функции:
- write_preview_excel: главная функция записи
- items_frame / stocks_frame / consumption_frame / suppliers_frame /
  diagnostics_frame: таблицы для листов
- apply_excel_styles: применение стилей к ячейкам
"""

from typing import Dict, List

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from .models import ImportResult


SHEET_ITEMS = "Матеріали"
SHEET_STOCKS = "Залишки"
SHEET_CONSUMPTION = "Витрати"
SHEET_SUPPLIERS = "Постачальники"
SHEET_DIAGNOSTICS = "Діагностика"

# Колонки с текстом выравниваются по левому краю
LEFT_ALIGNED_HEADERS = ("назва", "постачальник", "значення", "місце зберігання")


def items_frame(result: ImportResult) -> pd.DataFrame:
    rows = []
    for item in result.items:
        rows.append({
            "Код": item.code,
            "Назва": item.name,
            "Од. вим.": item.unit,
            "Категорія": item.category,
            "Залишок (основний склад)": item.main_stock,
            "Місце зберігання": item.storage_location or "",
            "Норма": item.base_norm if item.base_norm is not None else "",
        })
    return pd.DataFrame(rows, columns=[
        "Код", "Назва", "Од. вим.", "Категорія",
        "Залишок (основний склад)", "Місце зберігання", "Норма",
    ])


def stocks_frame(result: ImportResult, main_warehouse_id: str) -> pd.DataFrame:
    """Остатки в широком виде: одна колонка на склад, основной склад первым"""
    warehouses: List[str] = [main_warehouse_id]
    for item in result.items:
        for warehouse_id in item.warehouse_stocks:
            if warehouse_id not in warehouses:
                warehouses.append(warehouse_id)

    rows = []
    for item in result.items:
        row = {"Код": item.code, "Назва": item.name}
        row[main_warehouse_id] = item.main_stock
        for warehouse_id in warehouses[1:]:
            row[warehouse_id] = item.warehouse_stocks.get(warehouse_id, 0.0)
        rows.append(row)
    return pd.DataFrame(rows, columns=["Код", "Назва"] + warehouses)


def consumption_frame(result: ImportResult) -> pd.DataFrame:
    rows = []
    for item in result.items:
        for entry in item.consumption:
            rows.append({
                "Код": item.code,
                "Назва": item.name,
                "Місяць": entry.year_month,
                "Кількість": entry.quantity,
                "Тип": "факт" if entry.is_actual else "план",
            })
    return pd.DataFrame(rows, columns=["Код", "Назва", "Місяць", "Кількість", "Тип"])


def suppliers_frame(result: ImportResult) -> pd.DataFrame:
    return pd.DataFrame([{"Постачальник": s.name} for s in result.suppliers], columns=["Постачальник"])


def diagnostics_frame(result: ImportResult) -> pd.DataFrame:
    diagnostics = result.diagnostics
    rows = [
        ("Лист", result.sheet_name),
        ("Рядок заголовків", diagnostics.header_row_index + 1),
        ("Заголовок за замовчуванням", "так" if diagnostics.used_default_header_row else "ні"),
        ("Позицій", len(result.items)),
        ("Постачальників", len(result.suppliers)),
        ("Пропущено рядків", diagnostics.skipped_row_count),
    ]
    for header in diagnostics.unresolved_warehouse_headers:
        rows.append(("Склад або дату не розпізнано", header))
    return pd.DataFrame(rows, columns=["Параметр", "Значення"])


def apply_excel_styles(writer: pd.ExcelWriter):
    """
    Применяет стили к Excel файлу:
    - Жирный заголовок
    - Выравнивание (left для текстовых колонок, center для остальных)
    - Тонкие границы и автоматическая ширина столбцов

    Args:
        writer: ExcelWriter с уже записанными данными
    """
    thin_border = Border(
        left=Side(style='thin', color='000000'),
        right=Side(style='thin', color='000000'),
        top=Side(style='thin', color='000000'),
        bottom=Side(style='thin', color='000000')
    )

    for sheet_name in writer.book.sheetnames:
        ws = writer.book[sheet_name]

        left_columns = set()
        for idx, cell in enumerate(ws[1], start=1):
            cell_val = str(cell.value).lower() if cell.value else ''
            if cell_val in LEFT_ALIGNED_HEADERS:
                left_columns.add(idx)
            # Коды вида 00123 не должны превращаться в числа
            if cell_val == 'код':
                for row_idx in range(2, ws.max_row + 1):
                    ws.cell(row=row_idx, column=idx).number_format = '@'

        for row_idx, row in enumerate(ws.iter_rows(), start=1):
            for col_idx, cell in enumerate(row, start=1):
                if col_idx in left_columns:
                    cell.alignment = Alignment(horizontal='left', vertical='center')
                else:
                    cell.alignment = Alignment(horizontal='center', vertical='center')
                if row_idx == 1:
                    cell.font = Font(bold=True)
                cell.border = thin_border

        for column in ws.columns:
            max_length = 0
            column_letter = column[0].column_letter
            for cell in column:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
            ws.column_dimensions[column_letter].width = min(max_length + 2, 100)


def write_preview_excel(result: ImportResult, output_xlsx: str, main_warehouse_id: str) -> Dict[str, int]:
    """
    Записывает предпросмотр результата импорта в Excel

    Листы Залишки, Витрати и Постачальники пропускаются, если данных нет.

    Args:
        result: Успешный результат импорта листа
        output_xlsx: Путь к выходному файлу
        main_warehouse_id: Основной склад (первая колонка остатков)

    Returns:
        Словарь {имя листа: число строк данных}
    """
    sheets = {
        SHEET_ITEMS: items_frame(result),
        SHEET_STOCKS: stocks_frame(result, main_warehouse_id),
        SHEET_CONSUMPTION: consumption_frame(result),
        SHEET_SUPPLIERS: suppliers_frame(result),
        SHEET_DIAGNOSTICS: diagnostics_frame(result),
    }

    written: Dict[str, int] = {}
    with pd.ExcelWriter(output_xlsx, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            if len(df) == 0 and sheet_name not in (SHEET_ITEMS, SHEET_DIAGNOSTICS):
                continue
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            written[sheet_name] = len(df)
        apply_excel_styles(writer)

    return written
