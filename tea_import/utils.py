# -*- coding: utf-8 -*-
"""
Утилиты и вспомогательные функции

Содержит:
- Нормализация текста ячеек и заголовков
- Проверка наличия ключевых слов
- Безопасный вывод сообщений в консоль
- Регулярные выражения для распознавания дат и годов в заголовках
"""

import re
import sys
from typing import Iterable, Optional


# Разные виды апострофов в украинских словах (м'яка, м’яка, мʼяка)
_APOSTROPHES = ("’", "ʼ", "‘", "`", "´")


def normalize_text(text: Optional[str]) -> str:
    """
    Нормализует текст для сравнения с ключевыми словами

    lowercase, strip, схлопывание пробелов, единый апостроф, ё -> е

    Args:
        text: Исходный текст

    Returns:
        Нормализованный текст (пустая строка для None)
    """
    if text is None:
        return ""
    result = str(text).lower().strip()
    for ch in _APOSTROPHES:
        result = result.replace(ch, "'")
    result = result.replace("ё", "е")
    result = re.sub(r"\s+", " ", result)
    return result


def has_any(text: str, keywords: Iterable[str]) -> bool:
    """
    Проверяет наличие хотя бы одного ключевого слова в тексте

    Args:
        text: Текст для проверки
        keywords: Список ключевых слов (в нижнем регистре)

    Returns:
        True если хотя бы одно слово найдено
    """
    if not isinstance(text, str):
        return False
    lower = text.lower()
    return any(k in lower for k in keywords)


def safe_print(message: str, file=None):
    """
    Безопасный вывод сообщений в консоль.
    Обрабатывает ошибки кодировки на Windows.
    """
    stream = file or sys.stdout
    try:
        print(message, file=stream)
    except UnicodeEncodeError:
        safe_message = message.replace("✅", "[OK]").replace("❌", "[ERROR]").replace("⚠️", "[WARNING]")
        stream.write(safe_message.encode("ascii", errors="replace").decode("ascii") + "\n")


# Явная дата в заголовке: 01.10.2024, 1/10/2024, 01-10-2024
DATE_TOKEN_RE = re.compile(r"(?<!\d)(\d{1,2})\s*[./-]\s*(\d{1,2})\s*[./-]\s*(\d{4})(?!\d)")

# Четырехзначный год рядом с названием месяца
YEAR_RE = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")

# Слова заголовка (кириллица, латиница, апостроф)
WORD_RE = re.compile(r"[a-zа-яёіїєґ']+")
