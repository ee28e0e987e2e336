# -*- coding: utf-8 -*-
"""
Определение ролей колонок по заголовкам

Для каждой колонки по порядку приоритета:
1. Простые роли по ключевым словам (код, наименование, ед. изм., группа,
   место хранения, норма)
2. Остатки: "Залишки на 30.11 база" -> склад + оценка свежести даты
   (устаревший формат "Залишок на 1 число, ТС" берет месяц из строки месяцев;
   заголовок остатков без склада или без даты отбрасывается в диагностику)
3. Явная дата DD.MM.YYYY -> расход за месяц
4. Название месяца (+ год) -> расход за месяц
5. "План витрат" + месяц в строке месяцев -> расход за месяц
6. Поставщик
7. Неизвестная колонка

Роли определяются один раз на лист и дальше не меняются.
"""

import re
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .models import (
    ColumnRole, UNKNOWN_ROLE,
    IDENTIFIER, NAME, UNIT, CATEGORY, STORAGE, BASE_NORM,
    STOCK, CONSUMPTION, SUPPLIER,
)
from .parsers import normalize_cell
from .utils import DATE_TOKEN_RE, WORD_RE, YEAR_RE, has_any, normalize_text
from .warehouses import WAREHOUSE_ALIASES, WarehouseAlias, date_score, resolve_warehouse


# ===================================================================
# ТАБЛИЦЫ КЛЮЧЕВЫХ СЛОВ ЗАГОЛОВКОВ (RU/UK/EN)
# ===================================================================

SUPPLIER_KEYWORDS = ("постачальник", "поставщик", "supplier", "vendor")

RoleKeywords = namedtuple("RoleKeywords", ["role", "contains", "exact", "excludes"], defaults=((), ()))

# Порядок важен: "Назва групи" - группа, а не наименование
SCALAR_ROLE_KEYWORDS: List[RoleKeywords] = [
    RoleKeywords(IDENTIFIER, ("артикул", "арт.", "код", "шифр", "sku", "code"),
                 exact=("арт",), excludes=SUPPLIER_KEYWORDS),
    RoleKeywords(CATEGORY, ("груп", "категор", "category", "group")),
    RoleKeywords(UNIT, ("од.вим", "од. вим", "од вим", "ед.изм", "ед. изм", "ед изм",
                        "одиниц", "единиц", "unit", "uom"),
                 exact=("од", "од.", "ед", "ед.")),
    RoleKeywords(STORAGE, ("місце зберігання", "место хранения", "зберіган", "хранени",
                           "стелаж", "стеллаж", "комірк", "ячейк", "location")),
    RoleKeywords(BASE_NORM, ("норма", "норматив", "norm")),
    RoleKeywords(NAME, ("найменування", "наименование", "назва", "название",
                        "номенклатур", "товар", "name"),
                 excludes=SUPPLIER_KEYWORDS),
]

# Плановые расходы имеют приоритет над "залишки"
PLANNED_KEYWORDS = ("план", "витрат", "расход", "потреб", "planned", "spend")

_STOCK_KEYWORD = r"(?:залишк\w*|залишок|остатк\w*|остаток|stock)"

# Вставки между словом "залишки" и датой: "станом на", "по складу на", "as of"
_STOCK_FILLER = r"(?:\s+(?:станом|по\s+склад\w*|as\s+of))*"

# "Залишки на 30.11 база", "Остатки 1/06 Фито", "stock on 05-12 тс"
STOCK_HEADER_RE = re.compile(
    _STOCK_KEYWORD + _STOCK_FILLER
    + r"\s*(?:на|on)?\s*(\d{1,2})\s*[./-]\s*(\d{1,2})(?:\s*[./-]\s*\d{2,4}(?!\d))?(?!\d)\s*(.*)$"
)

# Устаревший формат без даты: "Залишок на 1 число, ТС", "Остаток на 1-е ТС"
LEGACY_STOCK_HEADER_RE = re.compile(
    _STOCK_KEYWORD + _STOCK_FILLER
    + r"\s*(?:на|on)?\s*1(?![\d./])\s*-?\s*(?:ше|го|е|st)?\s*(?:числ\w*)?\s*[,:;]?\s*(.*)$"
)

MONTH_WORDS = {
    1: ("січень", "січня", "січ", "январь", "января", "янв"),
    2: ("лютий", "лютого", "лют", "февраль", "февраля", "фев"),
    3: ("березень", "березня", "бер", "март", "марта", "мар"),
    4: ("квітень", "квітня", "квіт", "апрель", "апреля", "апр"),
    5: ("травень", "травня", "май", "мая"),
    6: ("червень", "червня", "черв", "июнь", "июня", "июн"),
    7: ("липень", "липня", "лип", "июль", "июля", "июл"),
    8: ("серпень", "серпня", "серп", "август", "августа", "авг"),
    9: ("вересень", "вересня", "вер", "сентябрь", "сентября", "сен", "сент"),
    10: ("жовтень", "жовтня", "жовт", "октябрь", "октября", "окт"),
    11: ("листопад", "листопада", "ноябрь", "ноября", "нояб"),
    12: ("грудень", "грудня", "груд", "декабрь", "декабря", "дек"),
}

_MONTH_BY_WORD = {word: month for month, words in MONTH_WORDS.items() for word in words}


@dataclass
class ColumnMap:
    """Роли всех колонок листа и диагностика по заголовкам"""
    headers: List[str]
    roles: List[ColumnRole]
    unresolved_warehouse_headers: List[str] = field(default_factory=list)

    def first_index(self, kind: str) -> Optional[int]:
        for i, role in enumerate(self.roles):
            if role.kind == kind:
                return i
        return None

    def indices(self, kind: str) -> List[int]:
        return [i for i, role in enumerate(self.roles) if role.kind == kind]


def format_year_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def find_month_word(text: str) -> Optional[int]:
    """Ищет название месяца среди слов текста (целыми словами)"""
    for word in WORD_RE.findall(text):
        month = _MONTH_BY_WORD.get(word)
        if month:
            return month
    return None


def parse_month_cell(text: Optional[str], default_year: int) -> Optional[Tuple[int, int]]:
    """
    Определяет (год, месяц) по тексту ячейки

    Args:
        text: "Жовтень 2024", "листопад", "01.11.2024"
        default_year: Год, если в тексте его нет

    Returns:
        (year, month) или None
    """
    normalized = normalize_text(text)
    if not normalized:
        return None

    date_match = DATE_TOKEN_RE.search(normalized)
    if date_match:
        month = int(date_match.group(2))
        if 1 <= month <= 12:
            return int(date_match.group(3)), month

    month = find_month_word(normalized)
    if month is None:
        return None
    year_match = YEAR_RE.search(normalized)
    year = int(year_match.group(1)) if year_match else default_year
    return year, month


def carry_month_row(month_cells: Sequence[object], column_count: int) -> List[str]:
    """
    Растягивает строку месяцев вправо через пустые ячейки

    В объединенных ячейках значение есть только в левой верхней,
    поэтому пустая ячейка получает ближайшее значение слева.
    """
    carried: List[str] = []
    current = ""
    for i in range(column_count):
        value = normalize_cell(month_cells[i]) if i < len(month_cells) else ""
        if value:
            current = value
        carried.append(current)
    return carried


def consumption_role(year: int, month: int, now: datetime) -> ColumnRole:
    """Роль расхода: месяцы раньше текущего - факт, текущий и будущие - план"""
    year_month = format_year_month(year, month)
    current = format_year_month(now.year, now.month)
    return ColumnRole(CONSUMPTION, year_month=year_month, is_actual=year_month < current)


def match_scalar_role(header: str) -> Optional[str]:
    for entry in SCALAR_ROLE_KEYWORDS:
        if header in entry.exact:
            return entry.role
        if has_any(header, entry.contains) and not has_any(header, entry.excludes):
            return entry.role
    return None


def _clean_fragment(fragment: str) -> str:
    return fragment.strip(" ,.:;-()[]\"'")


def match_stock_header(
    header: str,
    month_cell: str,
    now: datetime,
    aliases: Sequence[WarehouseAlias],
) -> Tuple[Optional[ColumnRole], bool]:
    """
    Проверяет заголовок остатков

    Заголовок, совпавший с шаблоном остатков, дальше не разбирается как
    расход, даже если дату или склад определить не удалось: такая колонка
    отбрасывается и попадает в диагностику.

    Returns:
        (роль, не_распознан). (None, False) - это не заголовок остатков.
    """
    match = STOCK_HEADER_RE.search(header)
    if match:
        day, month = int(match.group(1)), int(match.group(2))
        if not (1 <= day <= 31 and 1 <= month <= 12):
            return None, True
        fragment = _clean_fragment(match.group(3))
        warehouse_id = resolve_warehouse(fragment, day, month, aliases)
        if warehouse_id is None:
            return None, True
        return ColumnRole(STOCK, warehouse_id=warehouse_id, date_score=date_score(day, month)), False

    legacy = LEGACY_STOCK_HEADER_RE.search(header)
    if legacy:
        parsed = parse_month_cell(month_cell, now.year)
        if parsed is None:
            return None, True
        month = parsed[1]
        warehouse_id = resolve_warehouse(_clean_fragment(legacy.group(1)), 1, month, aliases)
        if warehouse_id is None:
            return None, True
        return ColumnRole(STOCK, warehouse_id=warehouse_id, date_score=date_score(1, month)), False

    return None, False


def classify_header(
    header_text: Optional[str],
    month_cell: Optional[str],
    now: datetime,
    aliases: Sequence[WarehouseAlias] = WAREHOUSE_ALIASES,
) -> Tuple[ColumnRole, bool]:
    """
    Определяет роль одной колонки

    Args:
        header_text: Текст заголовка колонки
        month_cell: Текст строки месяцев над заголовком (уже растянутый)
        now: Момент импорта (для признака факт/план)
        aliases: Таблица псевдонимов складов

    Returns:
        (ColumnRole, заголовок_остатков_не_распознан)
    """
    header = normalize_text(header_text)
    if not header:
        return UNKNOWN_ROLE, False

    scalar = match_scalar_role(header)
    if scalar:
        return ColumnRole(scalar), False

    is_planned = has_any(header, PLANNED_KEYWORDS)

    if not is_planned:
        role, unresolved = match_stock_header(header, month_cell or "", now, aliases)
        if role is not None or unresolved:
            return (role or UNKNOWN_ROLE), unresolved

    date_match = DATE_TOKEN_RE.search(header)
    if date_match:
        month = int(date_match.group(2))
        if 1 <= month <= 12:
            return consumption_role(int(date_match.group(3)), month, now), False

    month = find_month_word(header)
    if month is not None:
        year_match = YEAR_RE.search(header)
        year = int(year_match.group(1)) if year_match else now.year
        return consumption_role(year, month, now), False

    if is_planned:
        parsed = parse_month_cell(month_cell, now.year)
        if parsed is not None:
            return consumption_role(parsed[0], parsed[1], now), False

    if has_any(header, SUPPLIER_KEYWORDS):
        return ColumnRole(SUPPLIER), False

    return UNKNOWN_ROLE, False


def classify_columns(
    header_cells: Sequence[object],
    month_cells: Optional[Sequence[object]],
    column_count: int,
    now: datetime,
    aliases: Sequence[WarehouseAlias] = WAREHOUSE_ALIASES,
) -> ColumnMap:
    """
    Определяет роли всех колонок листа

    Args:
        header_cells: Ячейки строки заголовков
        month_cells: Ячейки строки месяцев (или None)
        column_count: Число колонок листа
        now: Момент импорта
        aliases: Таблица псевдонимов складов

    Returns:
        ColumnMap с ролями и списком заголовков с нераспознанным складом
    """
    headers = [normalize_cell(header_cells[i]) if i < len(header_cells) else "" for i in range(column_count)]
    months = carry_month_row(month_cells or (), column_count)

    roles: List[ColumnRole] = []
    unresolved: List[str] = []
    for header, month_cell in zip(headers, months):
        role, warehouse_unresolved = classify_header(header, month_cell, now, aliases)
        roles.append(role)
        if warehouse_unresolved:
            unresolved.append(header)

    return ColumnMap(headers=headers, roles=roles, unresolved_warehouse_headers=unresolved)
