# -*- coding: utf-8 -*-
"""
Классификация материалов по категориям

Основная функция: classify_category()
Классификация основана на:
- Тексте колонки "Група" / "Группа" (упорядоченная таблица правил)
- Ключевых словах в наименовании (если группа не распознана)
- Пользовательских правилах из rules.json
- Динамической категории из текста группы (если ничего не подошло)

Пустая группа наследует категорию предыдущей строки.
"""

import json
import os
import re
from collections import namedtuple
from typing import List, Optional, Sequence

from .utils import has_any, normalize_text


DEFAULT_CATEGORY = "other"
SLUG_MAX_LENGTH = 50

CategoryRule = namedtuple("CategoryRule", ["category", "contains", "excludes", "exact"], defaults=((), ()))

# Ключевые слова семейств категорий (RU/UK/EN)
FLAVOR_KEYWORDS = ("ароматизатор", "flavor", "flavour")
LABEL_KEYWORDS = ("ярлик", "ярлык", "етикетк", "этикетк", "label")
STICKER_KEYWORDS = ("стикер", "стікер", "наклейк", "наліпк", "sticker")
CARDBOARD_KEYWORDS = ("картон", "пачк", "carton", "cardboard")
ENVELOPE_KEYWORDS = ("конверт", "envelope")
CRATE_KEYWORDS = ("гофро", "ящик", "короб", "crate")
SOFT_KEYWORDS = (
    "м'яка упаковка", "мягкая упаковка", "м'як", "мягк",
    "дой-пак", "дойпак", "дой пак", "doypack", "doy-pack", "soft",
)
CONSUMABLE_KEYWORDS = (
    "плівк", "пленк", "пакет", "нитк", "нить", "нити",
    "папір", "бумаг", "фільтр", "фильтр", "скоба", "дріт", "проволок",
    "целофан", "целлофан", "упаковк", "пакув", "film",
)
TEA_KEYWORDS = (
    "чай", "трав", "сировин", "сырь", "сирь", "листов", "tea", "herb",
)

# ===================================================================
# ТАБЛИЦА ПРАВИЛ ПО ТЕКСТУ ГРУППЫ
# Порядок важен: первое совпадение выигрывает.
# Картон проверяется ПЕРЕД конвертами и общей упаковкой.
# ===================================================================
CATEGORY_RULES: List[CategoryRule] = [
    CategoryRule("flavor", FLAVOR_KEYWORDS),
    CategoryRule("label", LABEL_KEYWORDS),
    CategoryRule("sticker", STICKER_KEYWORDS),
    CategoryRule("packaging_cardboard", CARDBOARD_KEYWORDS, excludes=("гофро",)),
    CategoryRule("envelope", ENVELOPE_KEYWORDS),
    CategoryRule("packaging_crate", CRATE_KEYWORDS),
    CategoryRule("soft_packaging", SOFT_KEYWORDS),
    CategoryRule(
        "packaging_consumable",
        CONSUMABLE_KEYWORDS,
        excludes=CARDBOARD_KEYWORDS + CRATE_KEYWORDS + SOFT_KEYWORDS,
    ),
    CategoryRule("tea_bulk", TEA_KEYWORDS, exact=("чай", "tea")),
]

# Запасной поиск по наименованию (узкий набор)
NAME_RULES: List[CategoryRule] = [
    CategoryRule("label", LABEL_KEYWORDS),
    CategoryRule("sticker", STICKER_KEYWORDS),
    CategoryRule("flavor", FLAVOR_KEYWORDS),
    CategoryRule("envelope", ENVELOPE_KEYWORDS),
]

UserRule = namedtuple("UserRule", ["category", "contains", "regex"])

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9_\u0400-\u04ff]+")


def match_rule(text: str, rule: CategoryRule) -> bool:
    """Проверяет одно правило таблицы против нормализованного текста"""
    if text in rule.exact:
        return True
    if not has_any(text, rule.contains):
        return False
    return not has_any(text, rule.excludes)


def first_match(text: str, rules: Sequence[CategoryRule]) -> Optional[str]:
    for rule in rules:
        if match_rule(text, rule):
            return rule.category
    return None


def make_category_slug(text: str) -> str:
    """
    Строит динамическую категорию из нераспознанного текста группы

    Примеры:
        "Подарункові набори" -> "подарункові_набори"
        "Misc. (old)"        -> "misc_old"

    Args:
        text: Текст группы

    Returns:
        Слаг не длиннее 50 символов или "other", если слаг пустой
    """
    slug = _SLUG_INVALID_RE.sub("_", normalize_text(text)).strip("_")
    slug = slug[:SLUG_MAX_LENGTH].strip("_")
    return slug or DEFAULT_CATEGORY


def load_category_rules(rules_json: Optional[str]) -> List[UserRule]:
    """
    Загружает пользовательские правила классификации из JSON файла

    Формат: [{"category": "gift_sets", "contains": "набір"}, {"category": "...", "regex": "..."}]

    Returns:
        Список правил (пустой, если файла нет или он поврежден)
    """
    if not rules_json or not os.path.exists(rules_json):
        return []

    try:
        with open(rules_json, "r", encoding="utf-8") as f:
            raw_rules = json.load(f)
    except (OSError, ValueError) as exc:
        print(f"[!] Не удалось прочитать правила из {rules_json}: {exc}")
        return []

    if not isinstance(raw_rules, list):
        return []

    rules: List[UserRule] = []
    for raw in raw_rules:
        if not isinstance(raw, dict):
            continue
        category = str(raw.get("category", "")).strip()
        contains = normalize_text(raw.get("contains", ""))
        pattern = raw.get("regex")
        if not category or (not contains and not pattern):
            continue
        regex = None
        if pattern:
            try:
                regex = re.compile(pattern, re.IGNORECASE)
            except re.error as exc:
                print(f"[!] Неверное регулярное выражение в правиле '{category}': {exc}")
                continue
        rules.append(UserRule(category, contains, regex))
    return rules


def apply_user_rules(group_text: str, name_text: str, rules: Sequence[UserRule]) -> Optional[str]:
    blob = f"{group_text} {name_text}".strip()
    for rule in rules:
        if rule.contains and rule.contains not in blob:
            continue
        if rule.regex is not None and not rule.regex.search(blob):
            continue
        return rule.category
    return None


def classify_category(
    group_text: Optional[str],
    name: Optional[str] = None,
    previous: Optional[str] = None,
    user_rules: Sequence[UserRule] = (),
) -> str:
    """
    Классифицирует материал по категории

    Args:
        group_text: Текст колонки группы для строки (может быть пустым)
        name: Наименование материала
        previous: Категория предыдущей строки (наследование)
        user_rules: Пользовательские правила из rules.json

    Returns:
        Код категории: встроенный ("flavor", "tea_bulk", ...) или
        динамический слаг из текста группы
    """
    group = normalize_text(group_text)
    if not group:
        return previous or DEFAULT_CATEGORY

    category = first_match(group, CATEGORY_RULES)
    if category:
        return category

    name_text = normalize_text(name)
    category = first_match(name_text, NAME_RULES)
    if category:
        return category

    category = apply_user_rules(group, name_text, user_rules)
    if category:
        return category

    return make_category_slug(group)
