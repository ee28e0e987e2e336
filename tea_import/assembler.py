# -*- coding: utf-8 -*-
"""
Сборка нормализованных позиций из строк листа

Для каждой строки после заголовка:
- код и наименование (строка без них отбрасывается и считается пропущенной)
- единица измерения (синонимы "штук" сводятся к "шт")
- категория с наследованием от предыдущей строки
- остатки по складам: побеждает самый свежий снимок
- расход по месяцам: не больше одной записи на месяц
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .classifiers import DEFAULT_CATEGORY, UserRule, classify_category
from .columns import ColumnMap
from .models import (
    ConsumptionEntry, ParsedItem, RawGrid,
    IDENTIFIER, NAME, UNIT, CATEGORY, STORAGE, BASE_NORM, STOCK, CONSUMPTION,
)
from .numbers import is_integer_count_item, parse_stock_value
from .parsers import is_blank_row, normalize_cell
from .utils import normalize_text
from .warehouses import MAIN_WAREHOUSE_ID


PIECE_UNIT = "шт"

# Синонимы единиц: (варианты, каноническое обозначение)
UNIT_SYNONYMS: List[Tuple[Tuple[str, ...], str]] = [
    (("шт", "шт.", "штук", "штука", "штуки", "pcs", "pcs.", "pc", "piece", "pieces", "од.", "од"), PIECE_UNIT),
    (("кг", "кг.", "kg"), "кг"),
    (("г", "г.", "гр", "гр.", "g"), "г"),
    (("л", "л.", "l"), "л"),
    (("м", "м.", "m"), "м"),
]

# Наименование-заглушка, которое не считается позицией
PLACEHOLDER_NAME = "0"


@dataclass
class AssemblyResult:
    items: List[ParsedItem]
    skipped_row_count: int


def cell_at(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def normalize_unit(value: Any) -> str:
    """
    Нормализует единицу измерения

    Пустое значение -> "шт", "pcs"/"штук"/"шт." -> "шт", "кг." -> "кг".
    Неизвестные единицы возвращаются как есть (без пробелов по краям).
    """
    text = normalize_cell(value)
    if not text:
        return PIECE_UNIT
    key = normalize_text(text)
    for variants, canonical in UNIT_SYNONYMS:
        if key in variants:
            return canonical
    return text


def collect_stocks(
    row: Sequence[Any],
    columns: ColumnMap,
    integer_count: bool,
) -> Dict[str, float]:
    """
    Собирает остатки строки по складам

    Колонка с большей оценкой даты перезаписывает значение, при равной
    оценке побеждает колонка правее. Пустые и неразборчивые значения
    ничего не перезаписывают.
    """
    stocks: Dict[str, float] = {}
    best_scores: Dict[str, int] = {}
    for index in columns.indices(STOCK):
        role = columns.roles[index]
        value = parse_stock_value(cell_at(row, index), integer_count)
        if value is None:
            continue
        best = best_scores.get(role.warehouse_id)
        if best is None or role.date_score >= best:
            stocks[role.warehouse_id] = value
            best_scores[role.warehouse_id] = role.date_score
    return stocks


def collect_consumption(row: Sequence[Any], columns: ColumnMap) -> List[ConsumptionEntry]:
    """Расход по месяцам: только значения > 0, для месяца побеждает последняя колонка"""
    by_month: Dict[str, ConsumptionEntry] = {}
    for index in columns.indices(CONSUMPTION):
        role = columns.roles[index]
        value = parse_stock_value(cell_at(row, index))
        if value is None or value <= 0:
            continue
        by_month[role.year_month] = ConsumptionEntry(role.year_month, value, role.is_actual)
    return [by_month[year_month] for year_month in sorted(by_month)]


def assemble_row(
    row: Sequence[Any],
    columns: ColumnMap,
    previous_category: Optional[str],
    main_warehouse_id: str = MAIN_WAREHOUSE_ID,
    user_rules: Sequence[UserRule] = (),
) -> Tuple[Optional[ParsedItem], Optional[str]]:
    """
    Собирает одну позицию из строки данных

    Args:
        row: Ячейки строки
        columns: Роли колонок листа
        previous_category: Категория предыдущей принятой строки
        main_warehouse_id: Склад, остаток которого идет в main_stock
        user_rules: Пользовательские правила категорий

    Returns:
        (ParsedItem или None, категория для следующей строки).
        Отброшенная строка не меняет наследуемую категорию.
    """
    code = normalize_cell(cell_at(row, columns.first_index(IDENTIFIER)))
    name = normalize_cell(cell_at(row, columns.first_index(NAME)))
    if not code or not name or name == PLACEHOLDER_NAME:
        return None, previous_category

    group_text = normalize_cell(cell_at(row, columns.first_index(CATEGORY)))
    category = classify_category(group_text, name, previous_category, user_rules)

    stocks = collect_stocks(row, columns, is_integer_count_item(category, name))
    main_stock = stocks.pop(main_warehouse_id, 0.0)

    storage = normalize_cell(cell_at(row, columns.first_index(STORAGE)))
    base_norm = parse_stock_value(cell_at(row, columns.first_index(BASE_NORM)))

    item = ParsedItem(
        code=code,
        name=name,
        unit=normalize_unit(cell_at(row, columns.first_index(UNIT))),
        category=category,
        main_stock=main_stock,
        warehouse_stocks=stocks,
        storage_location=storage or None,
        base_norm=base_norm,
        consumption=collect_consumption(row, columns),
    )
    return item, category


def assemble_items(
    grid: RawGrid,
    header_row_index: int,
    columns: ColumnMap,
    main_warehouse_id: str = MAIN_WAREHOUSE_ID,
    user_rules: Sequence[UserRule] = (),
) -> AssemblyResult:
    """
    Собирает позиции из всех строк после заголовка

    Полностью пустые строки пропускаются без учета, отброшенные строки
    считаются в skipped_row_count.
    """
    items: List[ParsedItem] = []
    skipped = 0
    previous_category: Optional[str] = None

    for row in grid.rows[header_row_index + 1:]:
        if is_blank_row(row):
            continue
        item, previous_category = assemble_row(
            row, columns, previous_category, main_warehouse_id, user_rules
        )
        if item is None:
            skipped += 1
            continue
        items.append(item)

    return AssemblyResult(items=items, skipped_row_count=skipped)


def summarize_categories(items: Sequence[ParsedItem]) -> Dict[str, int]:
    """Количество позиций по категориям (для сводки в консоли)"""
    counts: Dict[str, int] = {}
    for item in items:
        key = item.category or DEFAULT_CATEGORY
        counts[key] = counts.get(key, 0) + 1
    return counts
