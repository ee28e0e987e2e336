# -*- coding: utf-8 -*-
"""
Разбор числовых ячеек остатков и расходов

В украинской/русской записи точка бывает и разделителем тысяч,
и десятичной точкой. Для штучных позиций (ярлыки, стикеры, конверты,
картон) дробных значений не бывает, поэтому точки там всегда
считаются разделителями тысяч:
    "2.124"     -> 2124     (ярлык)
    "1.500"     -> 1.5      (кг)
    "1.500.000" -> 1500000  (несколько точек - всегда тысячи)
    "1.500,50"  -> 1500.5   (запятая - всегда десятичный разделитель)
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from .utils import has_any, normalize_text


# Категории, которые считаются только в штуках
COUNT_CATEGORIES = ("label", "sticker", "envelope", "packaging_cardboard")

# Ключевые слова в наименовании штучных позиций
COUNT_NAME_KEYWORDS = (
    "ярлик", "ярлык",
    "етикетк", "этикетк",
    "стикер", "стікер", "наклейк", "наліпк",
    "конверт",
)


def is_integer_count_item(category: Optional[str], name: Optional[str]) -> bool:
    """
    Определяет, считается ли позиция только в штуках

    Args:
        category: Код категории позиции
        name: Наименование позиции

    Returns:
        True для ярлыков, стикеров, конвертов и картона
    """
    if normalize_text(category) in COUNT_CATEGORIES:
        return True
    return has_any(normalize_text(name), COUNT_NAME_KEYWORDS)


def parse_stock_value(value: Any, integer_count: bool = False) -> Optional[float]:
    """
    Преобразует значение ячейки в число

    Args:
        value: Значение ячейки (строка, число или None)
        integer_count: Позиция штучная (точки - разделители тысяч)

    Returns:
        Число или None, если значения нет или оно не разбирается.
        None отличается от нуля: "-" означает 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, date)):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value).strip()
    if text == "":
        return None
    if text in ("-", "–", "—"):
        return 0.0

    # Пробелы (включая неразрывные) - разделители тысяч
    text = re.sub(r"\s", "", text)

    if integer_count:
        text = text.replace(".", "").replace(",", ".", 1)
    elif "," in text:
        text = text.replace(".", "").replace(",", ".", 1)
    elif text.count(".") > 1:
        text = text.replace(".", "")
    # Одна точка без запятой: десятичная точка ("1.500" -> 1.5)

    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
