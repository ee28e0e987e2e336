# -*- coding: utf-8 -*-
"""
Главная функция CLI: импорт листа складской книги

Пример:
    tea-import --input Залишки.xlsx --sheet "Листопад" --xlsx preview.xlsx --json records.json
"""

import argparse
import json
import os
import sys
from datetime import datetime
from typing import Optional

from .assembler import summarize_categories
from .config_manager import initialize_config_from_template, load_config, project_dir
from .excel_writer import write_preview_excel
from .parsers import list_sheets, read_sheet_grid
from .pipeline import import_sheet
from .records import build_records
from .utils import safe_print
from .warehouses import build_alias_table, describe_alias_table


def parse_month(value: str) -> datetime:
    """--month YYYY-MM -> момент импорта (первое число месяца)"""
    try:
        return datetime.strptime(value, "%Y-%m")
    except ValueError:
        raise argparse.ArgumentTypeError(f"неверный месяц '{value}', ожидается YYYY-MM")


def print_summary(result):
    """Сводка по результату импорта листа"""
    print(f"\n[ИТОГО] Лист '{result.sheet_name}'")
    print(f"  Позиций: {len(result.items)}")
    for category, count in sorted(summarize_categories(result.items).items()):
        print(f"    {category}: {count}")
    print(f"  Поставщиков: {len(result.suppliers)}")
    print(f"  Пропущено строк: {result.diagnostics.skipped_row_count}")
    if result.diagnostics.used_default_header_row:
        print("  [!] Строка заголовков не найдена, использована первая строка")
    for header in result.diagnostics.unresolved_warehouse_headers:
        print(f"  [СКЛАД] Не распознан склад или дата в колонке: '{header}'")


def main(argv: Optional[list] = None) -> int:
    """
    Главная функция CLI

    Returns:
        Код возврата: 0 - успех, 1 - ошибка
    """
    parser = argparse.ArgumentParser(description="Импорт складской книги Excel")
    parser.add_argument("--input", help="Входной файл Excel (xlsx)")
    parser.add_argument("--sheet", help="Лист Excel (по умолчанию первый)")
    parser.add_argument("--list-sheets", action="store_true", help="Показать листы книги и выйти")
    parser.add_argument("--xlsx", help="Выходной Excel файл предпросмотра")
    parser.add_argument("--json", help="Выходной JSON файл с записями для базы")
    parser.add_argument("--config", help="Файл настроек (по умолчанию config.json проекта)")
    parser.add_argument("--month", type=parse_month, help="Месяц импорта YYYY-MM (для признака факт/план)")
    parser.add_argument("--show-warehouses", action="store_true", help="Показать таблицу псевдонимов складов")
    parser.add_argument("--verbose", action="store_true", help="Подробный вывод")

    args = parser.parse_args(argv)

    config_path = args.config
    if not config_path:
        initialize_config_from_template("config.json")
        config_path = os.path.join(project_dir(), "config.json")
    config = load_config(config_path)

    if args.show_warehouses:
        for fragment, target in describe_alias_table(build_alias_table(config["warehouse_aliases"])):
            print(f"  '{fragment}' -> {target}")
        return 0

    if not args.input:
        print("[ОШИБКА] укажите --input с файлом Excel", file=sys.stderr)
        return 1

    try:
        if args.list_sheets:
            for name in list_sheets(args.input):
                print(f"  {name}")
            return 0
        grid = read_sheet_grid(args.input, args.sheet)
    except (FileNotFoundError, ValueError) as exc:
        print(f"[ОШИБКА] {exc}", file=sys.stderr)
        return 1

    print(f"[ОБРАБОТКА] Файл: {args.input}, лист: {grid.sheet_name}")
    result = import_sheet(grid, now=args.month, config=config, verbose=args.verbose)

    if not result.ok:
        print(f"[ОШИБКА] {result.message}", file=sys.stderr)
        if result.columns:
            print(f"  Найденные колонки: {', '.join(result.columns)}", file=sys.stderr)
        return 1

    print_summary(result)

    if args.xlsx:
        written = write_preview_excel(result, args.xlsx, config["main_warehouse"])
        safe_print(f"[OK] Предпросмотр сохранен: {args.xlsx} ({', '.join(written)})")

    if args.json:
        records = build_records(result, config["main_warehouse"])
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        safe_print(f"[OK] Записи для базы сохранены: {args.json}")

    print("Готово.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nПрервано пользователем.")
        sys.exit(1)
    except Exception as e:
        print(f"\nОШИБКА: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
