# -*- coding: utf-8 -*-
"""
Извлечение списка поставщиков из колонки "Постачальник" / "Поставщик"
"""

from typing import List, Optional

from .models import ParsedSupplier, RawGrid
from .parsers import normalize_cell
from .utils import normalize_text


def extract_suppliers(
    grid: RawGrid,
    header_row_index: int,
    supplier_index: Optional[int],
) -> List[ParsedSupplier]:
    """
    Собирает поставщиков из строк после заголовка

    Дубликаты определяются без учета регистра, сохраняется написание
    первого вхождения. Пустые значения и "0" пропускаются.

    Args:
        grid: Лист книги
        header_row_index: Индекс строки заголовков
        supplier_index: Индекс колонки поставщика (None - колонки нет)

    Returns:
        Список ParsedSupplier в порядке первого появления
    """
    if supplier_index is None:
        return []

    seen = set()
    suppliers: List[ParsedSupplier] = []
    for row in grid.rows[header_row_index + 1:]:
        if supplier_index >= len(row):
            continue
        name = normalize_cell(row[supplier_index])
        if not name or name == "0":
            continue
        key = normalize_text(name)
        if key in seen:
            continue
        seen.add(key)
        suppliers.append(ParsedSupplier(name))
    return suppliers
