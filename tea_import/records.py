# -*- coding: utf-8 -*-
"""
Подготовка записей для сохранения в базу

Результат импорта листа превращается в наборы записей таблиц:
items, stock_levels, planned_consumption, stock_movements, contractors.
Все функции чистые: база данных здесь не используется.
"""

import re
from typing import Any, Dict, List, Sequence

from .assembler import normalize_unit
from .models import ImportResult, ParsedItem, ParsedSupplier
from .utils import normalize_text
from .warehouses import MAIN_WAREHOUSE_ID


IMPORT_NOTE = "Импортировано из Excel"

# Фактический расход записывается серединой месяца
ACTUAL_MOVEMENT_DAY = 15

SUPPLIER_ID_PREFIX = "supplier-"
SUPPLIER_ID_SLUG_LENGTH = 30
SUPPLIER_CODE_LENGTH = 20
SUPPLIER_CODE_MIN_LENGTH = 3

TRANSLIT_MAP = {
    "А": "A", "Б": "B", "В": "V", "Г": "G", "Д": "D", "Е": "E", "Ё": "E",
    "Ж": "ZH", "З": "Z", "И": "I", "Й": "Y", "К": "K", "Л": "L", "М": "M",
    "Н": "N", "О": "O", "П": "P", "Р": "R", "С": "S", "Т": "T", "У": "U",
    "Ф": "F", "Х": "H", "Ц": "TS", "Ч": "CH", "Ш": "SH", "Щ": "SCH",
    "Ъ": "", "Ы": "Y", "Ь": "", "Э": "E", "Ю": "YU", "Я": "YA",
    # Украинские буквы
    "І": "I", "Ї": "YI", "Є": "YE", "Ґ": "G",
}

_CODE_INVALID_RE = re.compile(r"[^A-Z0-9_А-ЯЁІЇЄҐ]")
_ID_INVALID_RE = re.compile(r"[^a-z0-9]")


def transliterate(text: str) -> str:
    """
    Транслитерация заглавной кириллицы в латиницу

    Латиница, цифры и "_" не меняются, прочие символы удаляются.
    """
    return "".join(TRANSLIT_MAP.get(char, char) for char in text)


def _unique(value: str, used: Dict[str, int], separator: str) -> str:
    """Делает значение уникальным в пределах пакета: X, X-2, X-3..."""
    if value not in used:
        used[value] = 1
        return value
    while True:
        used[value] += 1
        candidate = f"{value}{separator}{used[value]}"
        # Суффиксное значение может совпасть с уже выданным ("a-b" + "-2" и "a-b-2")
        if candidate not in used:
            used[candidate] = 1
            return candidate


def build_item_records(items: Sequence[ParsedItem]) -> List[Dict[str, Any]]:
    """
    Записи таблицы items

    Код позиции используется как id и sku. При повторе кода побеждает
    последняя строка (позиция в списке сохраняется от первой).
    """
    records: Dict[str, Dict[str, Any]] = {}
    for item in items:
        code = item.code.strip()
        if not code:
            continue
        records[code] = {
            "id": code,
            "sku": code,
            "name": item.name.strip() or "Без названия",
            "category": item.category or "other",
            "unit": normalize_unit(item.unit),
            "min_stock_level": 0,
            "storage_location": item.storage_location or None,
        }
    return list(records.values())


def build_stock_records(
    items: Sequence[ParsedItem],
    main_warehouse_id: str = MAIN_WAREHOUSE_ID,
) -> List[Dict[str, Any]]:
    """Записи stock_levels: только положительные остатки, ключ - позиция + склад"""
    records: Dict[str, Dict[str, Any]] = {}

    def put(item_id: str, warehouse_id: str, quantity: float):
        if quantity > 0:
            records[f"{item_id}_{warehouse_id}"] = {
                "item_id": item_id,
                "warehouse_id": warehouse_id,
                "quantity": quantity,
            }

    for item in items:
        code = item.code.strip()
        if not code:
            continue
        put(code, main_warehouse_id, item.main_stock or 0)
        for warehouse_id, quantity in item.warehouse_stocks.items():
            put(code, warehouse_id, quantity or 0)
    return list(records.values())


def build_planned_consumption_records(items: Sequence[ParsedItem]) -> List[Dict[str, Any]]:
    """Записи planned_consumption: плановый расход на первое число месяца"""
    records: Dict[str, Dict[str, Any]] = {}
    for item in items:
        code = item.code.strip()
        for entry in item.consumption:
            if entry.is_actual or entry.quantity <= 0:
                continue
            planned_date = f"{entry.year_month}-01"
            records[f"{code}_{planned_date}"] = {
                "item_id": code,
                "planned_date": planned_date,
                "quantity": entry.quantity,
                "notes": IMPORT_NOTE,
            }
    return list(records.values())


def build_actual_consumption_records(
    items: Sequence[ParsedItem],
    main_warehouse_id: str = MAIN_WAREHOUSE_ID,
) -> List[Dict[str, Any]]:
    """
    Записи stock_movements для фактического расхода

    Расход за месяц списывается с основного склада 15-м числом.
    Повторы по позиции и дате суммируются.
    """
    records: Dict[str, Dict[str, Any]] = {}
    for item in items:
        code = item.code.strip()
        for entry in item.consumption:
            if not entry.is_actual or entry.quantity <= 0:
                continue
            movement_date = f"{entry.year_month}-{ACTUAL_MOVEMENT_DAY:02d}"
            key = f"{code}_{movement_date}"
            if key in records:
                records[key]["quantity"] += entry.quantity
                continue
            records[key] = {
                "item_id": code,
                "quantity": entry.quantity,
                "date": movement_date,
                "type": "out",
                "comment": f"{IMPORT_NOTE} (фактический расход за {entry.year_month})",
                "source_warehouse_id": main_warehouse_id,
            }
    return list(records.values())


def make_supplier_code(name: str, supplier_id: str) -> str:
    """
    Код поставщика из названия: "ТОВ Чайна Лавка" -> "TOV_CHAYNA_LAVKA"

    Если код короче 3 символов, используется SUP_<хвост id>.
    """
    code = re.sub(r"\s+", "_", name[:SUPPLIER_CODE_LENGTH].upper())
    code = transliterate(_CODE_INVALID_RE.sub("", code))
    if len(code) < SUPPLIER_CODE_MIN_LENGTH:
        code = f"SUP_{supplier_id[-8:]}"
    return code


def build_supplier_records(suppliers: Sequence[ParsedSupplier]) -> List[Dict[str, Any]]:
    """
    Записи contractors для поставщиков

    id и code уникальны в пределах пакета (суффиксы -2 / _2).
    """
    used_ids: Dict[str, int] = {}
    used_codes: Dict[str, int] = {}
    seen_names = set()
    records: List[Dict[str, Any]] = []

    for supplier in suppliers:
        name = (supplier.name or "").strip()
        key = normalize_text(name)
        if not name or key in seen_names:
            continue
        seen_names.add(key)

        slug = _ID_INVALID_RE.sub("-", name.lower())[:SUPPLIER_ID_SLUG_LENGTH]
        supplier_id = _unique(f"{SUPPLIER_ID_PREFIX}{slug}", used_ids, "-")
        code = _unique(make_supplier_code(name, supplier_id), used_codes, "_")

        records.append({
            "id": supplier_id,
            "name": name,
            "code": code,
            "contact_person": None,
            "phone": None,
            "email": None,
        })
    return records


def build_records(
    result: ImportResult,
    main_warehouse_id: str = MAIN_WAREHOUSE_ID,
) -> Dict[str, List[Dict[str, Any]]]:
    """Все наборы записей для одного результата импорта"""
    return {
        "items": build_item_records(result.items),
        "stock_levels": build_stock_records(result.items, main_warehouse_id),
        "planned_consumption": build_planned_consumption_records(result.items),
        "stock_movements": build_actual_consumption_records(result.items, main_warehouse_id),
        "contractors": build_supplier_records(result.suppliers),
    }
