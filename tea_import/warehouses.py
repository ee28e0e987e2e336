# -*- coding: utf-8 -*-
"""
Определение склада по фрагменту заголовка колонки остатков

Заголовки вида "Залишки на 30.11 база" или "Остатки на 01.06 Фито"
содержат свободный текст склада. Текст сравнивается с упорядоченной
таблицей псевдонимов (первое совпадение выигрывает), поэтому
длинные и специфичные псевдонимы стоят раньше коротких.
"""

from collections import namedtuple
from typing import Iterable, List, Optional, Sequence, Tuple

from .utils import WORD_RE, normalize_text


MAIN_WAREHOUSE_ID = "wh-kotsyubinske"

# override: (cutoff_month, cutoff_day, warehouse_id после даты отсечения)
# whole_word: короткий псевдоним совпадает только целым словом ("май", но не "майстерня")
WarehouseAlias = namedtuple(
    "WarehouseAlias", ["fragment", "warehouse_id", "override", "whole_word"], defaults=(None, False)
)

# Склад подрядчика "Май" с 01.11 переименован в "ТС"
MAI_RENAME_CUTOFF = (10, 31)

WAREHOUSE_ALIASES: List[WarehouseAlias] = [
    # Основной склад (база)
    WarehouseAlias("склад коцюбинське", MAIN_WAREHOUSE_ID),
    WarehouseAlias("коцюбинськ", MAIN_WAREHOUSE_ID),
    WarehouseAlias("коцюбинск", MAIN_WAREHOUSE_ID),
    WarehouseAlias("основний склад", MAIN_WAREHOUSE_ID),
    WarehouseAlias("основной склад", MAIN_WAREHOUSE_ID),
    WarehouseAlias("база", MAIN_WAREHOUSE_ID),
    WarehouseAlias("базі", MAIN_WAREHOUSE_ID),
    WarehouseAlias("базе", MAIN_WAREHOUSE_ID),
    # Подрядчик Фитопродукт
    WarehouseAlias("фітопродукт", "wh-fito"),
    WarehouseAlias("фитопродукт", "wh-fito"),
    WarehouseAlias("фіто", "wh-fito"),
    WarehouseAlias("фито", "wh-fito"),
    WarehouseAlias("fito", "wh-fito"),
    # Подрядчик Май / ТС
    WarehouseAlias("май", "wh-mai", (MAI_RENAME_CUTOFF[0], MAI_RENAME_CUTOFF[1], "wh-ts"), whole_word=True),
    WarehouseAlias("тс", "wh-ts", whole_word=True),
]


def build_alias_table(extra_aliases: Iterable[dict] = ()) -> List[WarehouseAlias]:
    """
    Собирает таблицу псевдонимов: пользовательские псевдонимы из
    конфигурации проверяются раньше встроенных

    Args:
        extra_aliases: Список словарей {"contains": ..., "warehouse": ...}

    Returns:
        Упорядоченный список WarehouseAlias
    """
    table: List[WarehouseAlias] = []
    for alias in extra_aliases:
        fragment = normalize_text(alias.get("contains", ""))
        warehouse_id = str(alias.get("warehouse", "")).strip()
        if fragment and warehouse_id:
            table.append(WarehouseAlias(fragment, warehouse_id))
    table.extend(WAREHOUSE_ALIASES)
    return table


def alias_matches(alias: WarehouseAlias, text: str, words: Sequence[str]) -> bool:
    if alias.whole_word:
        return alias.fragment in words
    return alias.fragment in text


def resolve_warehouse(
    fragment: Optional[str],
    day: int,
    month: int,
    aliases: Sequence[WarehouseAlias] = WAREHOUSE_ALIASES,
) -> Optional[str]:
    """
    Определяет идентификатор склада по тексту из заголовка

    Args:
        fragment: Текст склада из заголовка ("база", "Фіто", "Май")
        day: День даты остатков из того же заголовка
        month: Месяц даты остатков
        aliases: Упорядоченная таблица псевдонимов

    Returns:
        Идентификатор склада или None, если склад не распознан
    """
    text = normalize_text(fragment)
    if not text:
        return None

    words = WORD_RE.findall(text)
    for alias in aliases:
        if not alias_matches(alias, text, words):
            continue
        if alias.override is None:
            return alias.warehouse_id
        cutoff_month, cutoff_day, after_id = alias.override
        if (month, day) <= (cutoff_month, cutoff_day):
            return alias.warehouse_id
        return after_id
    return None


def date_score(day: int, month: int) -> int:
    """Сравнимая оценка свежести снимка остатков"""
    return month * 32 + day


def describe_alias_table(aliases: Sequence[WarehouseAlias]) -> List[Tuple[str, str]]:
    """Пары (фрагмент, склад) для вывода в диагностике"""
    rows = []
    for alias in aliases:
        target = alias.warehouse_id
        if alias.override is not None:
            cutoff_month, cutoff_day, after_id = alias.override
            target = f"{alias.warehouse_id} (до {cutoff_day:02d}.{cutoff_month:02d}), затем {after_id}"
        rows.append((alias.fragment, target))
    return rows
