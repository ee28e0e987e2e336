# -*- coding: utf-8 -*-
"""
Модуль для управления конфигурационными файлами
"""
import json
import os
import shutil
from typing import Any, Dict, Optional

from .parsers import HEADER_SCAN_ROWS
from .warehouses import MAIN_WAREHOUSE_ID


DEFAULT_CONFIG: Dict[str, Any] = {
    "header_scan_rows": HEADER_SCAN_ROWS,
    "main_warehouse": MAIN_WAREHOUSE_ID,
    "warehouse_aliases": [],
    "rules_json": "rules.json",
}


def project_dir() -> str:
    """Корень проекта (каталог над пакетом tea_import)"""
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def default_config() -> Dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_CONFIG))


def initialize_config_from_template(config_name: str = "config.json", base_dir: Optional[str] = None) -> bool:
    """
    Инициализирует конфиг из шаблона при первом запуске.

    Args:
        config_name: Имя конфига
        base_dir: Каталог конфига (по умолчанию корень проекта)

    Returns:
        bool: True если конфиг был создан, False если уже существовал
    """
    base_dir = base_dir or project_dir()
    config_path = os.path.join(base_dir, config_name)
    template_path = os.path.join(base_dir, f"{config_name}.template")

    # Если конфиг уже есть - ничего не делаем
    if os.path.exists(config_path):
        return False

    if os.path.exists(template_path):
        shutil.copy2(template_path, config_path)
        print(f"[OK] Создан конфигурационный файл из шаблона: {config_name}")
        return True

    # Если шаблона нет - создаем базовый конфиг
    print(f"[!] Шаблон не найден: {template_path}")
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(default_config(), f, indent=2, ensure_ascii=False)
    print(f"[OK] Создан минимальный конфиг: {config_name}")
    return True


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Загружает настройки импорта поверх значений по умолчанию

    Отсутствующий или поврежденный файл не является ошибкой:
    выводится предупреждение и используются значения по умолчанию.
    Относительный путь rules_json считается от каталога конфига.

    Args:
        config_path: Путь к config.json

    Returns:
        Словарь настроек
    """
    config = default_config()
    if not config_path:
        return config
    if not os.path.exists(config_path):
        print(f"[!] Конфиг не найден: {config_path}, используются настройки по умолчанию")
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        print(f"[!] Не удалось прочитать конфиг {config_path}: {exc}")
        return config

    if not isinstance(raw, dict):
        print(f"[!] Неверный формат конфига {config_path}: ожидается объект JSON")
        return config

    scan_rows = raw.get("header_scan_rows")
    if isinstance(scan_rows, int) and not isinstance(scan_rows, bool) and scan_rows > 0:
        config["header_scan_rows"] = scan_rows

    main_warehouse = raw.get("main_warehouse")
    if isinstance(main_warehouse, str) and main_warehouse.strip():
        config["main_warehouse"] = main_warehouse.strip()

    aliases = raw.get("warehouse_aliases")
    if isinstance(aliases, list):
        config["warehouse_aliases"] = [a for a in aliases if isinstance(a, dict)]

    rules_json = raw.get("rules_json")
    if isinstance(rules_json, str):
        config["rules_json"] = rules_json

    if config["rules_json"] and not os.path.isabs(config["rules_json"]):
        config["rules_json"] = os.path.join(os.path.dirname(os.path.abspath(config_path)), config["rules_json"])

    return config
