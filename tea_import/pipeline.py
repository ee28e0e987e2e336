# -*- coding: utf-8 -*-
"""
Импорт одного листа книги

Состояния: idle -> layout_detected -> columns_classified -> rows_assembled -> done
или failed, если в листе нет данных или ни одна строка не прошла сборку.
Строки, отброшенные по отдельности, не считаются ошибкой импорта.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from .assembler import assemble_items
from .classifiers import UserRule, load_category_rules
from .columns import ColumnMap, classify_columns
from .models import (
    ImportDiagnostics, ImportFailure, ImportResult, RawGrid,
    FAILURE_NO_DATA, FAILURE_NO_ROWS, SUPPLIER,
)
from .parsers import HEADER_SCAN_ROWS, LayoutInfo, detect_layout, is_blank_row
from .suppliers import extract_suppliers
from .utils import safe_print
from .warehouses import MAIN_WAREHOUSE_ID, build_alias_table


STATE_IDLE = "idle"
STATE_LAYOUT_DETECTED = "layout_detected"
STATE_COLUMNS_CLASSIFIED = "columns_classified"
STATE_ROWS_ASSEMBLED = "rows_assembled"
STATE_DONE = "done"
STATE_FAILED = "failed"

NO_DATA_MESSAGE = "Лист пуст: не найдено ни одной непустой строки."
NO_ROWS_MESSAGE = (
    "Не удалось найти данные. Проверьте заголовки "
    "(Код, Назва/Наименование, Од. вим./Ед. изм., Залишки на ДД.ММ <склад>)."
)


class ImportRun:
    """
    Один запуск импорта листа

    Объект не переиспользуется: для другого листа создается новый ImportRun.
    """

    def __init__(
        self,
        grid: RawGrid,
        now: Optional[datetime] = None,
        config: Optional[Dict[str, Any]] = None,
        user_rules: Optional[Sequence[UserRule]] = None,
        verbose: bool = False,
    ):
        config = config or {}
        self.grid = grid
        self.now = now or datetime.now()
        self.header_scan_rows = int(config.get("header_scan_rows", HEADER_SCAN_ROWS))
        self.main_warehouse_id = config.get("main_warehouse") or MAIN_WAREHOUSE_ID
        self.aliases = build_alias_table(config.get("warehouse_aliases") or ())
        if user_rules is None:
            user_rules = load_category_rules(config.get("rules_json"))
        self.user_rules = list(user_rules)
        self.verbose = verbose

        self.state = STATE_IDLE
        self.history: List[str] = [STATE_IDLE]
        self.layout: Optional[LayoutInfo] = None
        self.columns: Optional[ColumnMap] = None

    def _log(self, message: str):
        if self.verbose:
            safe_print(message)

    def _enter(self, state: str):
        self.state = state
        self.history.append(state)

    def _fail(self, reason: str, message: str) -> ImportFailure:
        self._enter(STATE_FAILED)
        headers = [h for h in (self.columns.headers if self.columns else []) if h]
        self._log(f"[!] Импорт листа '{self.grid.sheet_name}' прерван: {reason}")
        return ImportFailure(
            sheet_name=self.grid.sheet_name,
            reason=reason,
            columns=headers,
            message=message,
        )

    def run(self) -> Union[ImportResult, ImportFailure]:
        """
        Выполняет импорт листа

        Returns:
            ImportResult с позициями, поставщиками и диагностикой
            или ImportFailure со списком найденных заголовков
        """
        if self.state != STATE_IDLE:
            raise RuntimeError("ImportRun уже выполнен, создайте новый для повторного импорта")

        self.layout = detect_layout(self.grid, self.header_scan_rows)
        self._enter(STATE_LAYOUT_DETECTED)

        if all(is_blank_row(row) for row in self.grid.rows):
            return self._fail(FAILURE_NO_DATA, NO_DATA_MESSAGE)

        header_index = self.layout.header_row_index
        if self.layout.used_default:
            self._log(f"[!] Строка заголовков не найдена в первых {self.header_scan_rows} строках, используется строка 1")
        else:
            self._log(f"[ЗАГОЛОВОК] Строка заголовков: {header_index + 1}")

        header_cells = self.grid.rows[header_index] if header_index < len(self.grid.rows) else ()
        month_cells = None
        if self.layout.month_row_index is not None:
            month_cells = self.grid.rows[self.layout.month_row_index]

        self.columns = classify_columns(
            header_cells, month_cells, self.grid.column_count, self.now, self.aliases
        )
        self._enter(STATE_COLUMNS_CLASSIFIED)

        for header in self.columns.unresolved_warehouse_headers:
            self._log(f"[СКЛАД] Склад или дата не распознаны, колонка пропущена: '{header}'")

        assembly = assemble_items(
            self.grid, header_index, self.columns, self.main_warehouse_id, self.user_rules
        )
        if not assembly.items:
            return self._fail(FAILURE_NO_ROWS, NO_ROWS_MESSAGE)
        self._enter(STATE_ROWS_ASSEMBLED)

        suppliers = extract_suppliers(self.grid, header_index, self.columns.first_index(SUPPLIER))

        diagnostics = ImportDiagnostics(
            skipped_row_count=assembly.skipped_row_count,
            unresolved_warehouse_headers=list(self.columns.unresolved_warehouse_headers),
            header_row_index=header_index,
            used_default_header_row=self.layout.used_default,
        )
        self._enter(STATE_DONE)
        self._log(
            f"[OK] Лист '{self.grid.sheet_name}': позиций {len(assembly.items)}, "
            f"поставщиков {len(suppliers)}, пропущено строк {assembly.skipped_row_count}"
        )
        return ImportResult(
            sheet_name=self.grid.sheet_name,
            items=assembly.items,
            suppliers=suppliers,
            diagnostics=diagnostics,
        )


def import_sheet(
    grid: RawGrid,
    now: Optional[datetime] = None,
    config: Optional[Dict[str, Any]] = None,
    user_rules: Optional[Sequence[UserRule]] = None,
    verbose: bool = False,
) -> Union[ImportResult, ImportFailure]:
    """
    Импортирует один лист книги

    Args:
        grid: Лист книги (RawGrid)
        now: Момент импорта (по умолчанию текущее время)
        config: Настройки (header_scan_rows, main_warehouse, warehouse_aliases, rules_json)
        user_rules: Готовые пользовательские правила категорий (вместо rules_json)
        verbose: Печатать диагностические сообщения

    Returns:
        ImportResult или ImportFailure
    """
    return ImportRun(grid, now=now, config=config, user_rules=user_rules, verbose=verbose).run()
