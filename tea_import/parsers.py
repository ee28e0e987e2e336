# -*- coding: utf-8 -*-
"""
Чтение листов Excel и определение разметки листа

- list_sheets / read_sheet_grid: чтение книги в RawGrid
- grid_from_dataframe: RawGrid из уже загруженного DataFrame
- detect_layout: поиск строки заголовков и строки месяцев над ней
"""

import math
import os
from collections import namedtuple
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

import pandas as pd
from openpyxl import load_workbook

from .models import RawGrid
from .utils import has_any


HEADER_SCAN_ROWS = 10

# Признаки строки заголовков: артикул/код, наименование, SKU
HEADER_KEYWORDS = (
    "артикул", "арт.", "код", "code", "sku",
    "назва", "найменування", "наименование", "название", "name",
)

LayoutInfo = namedtuple("LayoutInfo", ["header_row_index", "month_row_index", "used_default"])


def normalize_dashes(text: str) -> str:
    """
    Нормализует различные виды тире и дефисов к обычному дефису

    В заголовках вида "Залишки на 01–11" встречаются типографские тире.
    """
    if not text:
        return text

    # U+2013 EN DASH, U+2014 EM DASH, U+2212 MINUS SIGN, U+2010 HYPHEN, U+2011 NON-BREAKING HYPHEN
    for dash in ("–", "—", "−", "‐", "‑"):
        text = text.replace(dash, "-")
    return text


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def normalize_cell(value: Any) -> str:
    """
    Приводит значение ячейки к тексту

    - None / NaN -> ""
    - 1001.0 -> "1001" (коды, прочитанные Excel как числа)
    - даты -> "DD.MM.YYYY" (заголовки-даты становятся явным токеном даты)
    """
    if is_blank(value):
        return ""
    if isinstance(value, datetime) or isinstance(value, date):
        return value.strftime("%d.%m.%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = normalize_dashes(str(value).strip())
    # Удаляем непечатные символы (включая неразрывные пробелы в начале/конце)
    text = "".join(char if char.isprintable() else " " for char in text)
    return text.strip()


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(is_blank(value) for value in row)


def detect_layout(grid: RawGrid, max_scan: int = HEADER_SCAN_ROWS) -> LayoutInfo:
    """
    Определяет индекс строки-заголовка и строки месяцев над ней

    Args:
        grid: Лист книги
        max_scan: Сколько первых строк просматривать

    Returns:
        LayoutInfo(header_row_index, month_row_index, used_default).
        Если заголовок не найден, заголовком считается строка 0.
    """
    for i, row in enumerate(grid.rows[:max_scan]):
        if any(has_any(normalize_cell(value).lower(), HEADER_KEYWORDS) for value in row):
            month_row = i - 1 if i > 0 else None
            return LayoutInfo(i, month_row, False)
    return LayoutInfo(0, None, True)


def list_sheets(path: str) -> List[str]:
    """
    Возвращает имена листов книги

    Raises:
        FileNotFoundError: Если файла нет
        ValueError: Если файл не является книгой Excel
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Файл Excel не найден: {path}")
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except Exception as exc:
        raise ValueError(f"Не удалось прочитать Excel '{path}' (файл поврежден или неверный формат?): {exc}")
    try:
        return list(wb.sheetnames)
    finally:
        wb.close()


def grid_from_dataframe(df: pd.DataFrame, sheet_name: str) -> RawGrid:
    """
    Строит RawGrid из DataFrame, прочитанного с header=None

    NaN превращаются в None, остальные значения сохраняются как есть.
    """
    rows = []
    for values in df.itertuples(index=False, name=None):
        rows.append([None if is_blank(value) else value for value in values])
    return RawGrid.from_rows(sheet_name, rows)


def read_sheet_grid(path: str, sheet: Optional[str] = None) -> RawGrid:
    """
    Читает лист книги в RawGrid (значения формул уже вычислены Excel)

    Args:
        path: Путь к xlsx/xls файлу
        sheet: Имя листа (по умолчанию первый лист)

    Returns:
        RawGrid выбранного листа

    Raises:
        FileNotFoundError: Если файла нет
        ValueError: Если файл не читается или листа нет
    """
    sheets = list_sheets(path)
    if not sheets:
        raise ValueError(f"В книге '{path}' нет листов")
    sheet_name = sheet if sheet is not None else sheets[0]
    if sheet_name not in sheets:
        raise ValueError(f"Вкладка \"{sheet_name}\" не найдена. Доступные: {', '.join(sheets)}")

    try:
        df = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object)
    except Exception as exc:
        raise ValueError(f"Не удалось прочитать лист '{sheet_name}' из '{path}': {exc}")

    return grid_from_dataframe(df, sheet_name)
