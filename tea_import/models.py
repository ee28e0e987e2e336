# -*- coding: utf-8 -*-
"""
Структуры данных конвейера импорта

RawGrid - входная сетка ячеек одного листа (неизменяемая)
ColumnRole - смысл колонки листа (определяется один раз на лист)
ParsedItem / ParsedSupplier - нормализованные записи
ImportResult / ImportFailure - результат импорта листа
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple


# Роли колонок
IDENTIFIER = "identifier"
NAME = "name"
UNIT = "unit"
CATEGORY = "category"
STORAGE = "storage"
BASE_NORM = "base_norm"
STOCK = "stock"
CONSUMPTION = "consumption"
SUPPLIER = "supplier"
UNKNOWN = "unknown"

SCALAR_ROLES = (IDENTIFIER, NAME, UNIT, CATEGORY, STORAGE, BASE_NORM)


@dataclass(frozen=True)
class RawGrid:
    """Один лист книги: имя листа и строки со значениями ячеек"""
    sheet_name: str
    rows: Tuple[Tuple[Any, ...], ...]

    @classmethod
    def from_rows(cls, sheet_name: str, rows: Sequence[Sequence[Any]]) -> "RawGrid":
        return cls(str(sheet_name), tuple(tuple(row) for row in rows))

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


@dataclass(frozen=True)
class ColumnRole:
    """
    Роль колонки с индексом index

    Для kind == STOCK заполнены warehouse_id и date_score,
    для kind == CONSUMPTION - year_month ("YYYY-MM") и is_actual.
    """
    kind: str
    warehouse_id: Optional[str] = None
    date_score: Optional[int] = None
    year_month: Optional[str] = None
    is_actual: Optional[bool] = None


UNKNOWN_ROLE = ColumnRole(UNKNOWN)


@dataclass
class ConsumptionEntry:
    year_month: str
    quantity: float
    is_actual: bool


@dataclass
class ParsedItem:
    code: str
    name: str
    unit: str
    category: str
    main_stock: float = 0.0
    warehouse_stocks: Dict[str, float] = field(default_factory=dict)
    storage_location: Optional[str] = None
    base_norm: Optional[float] = None
    consumption: List[ConsumptionEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ParsedSupplier:
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ImportDiagnostics:
    skipped_row_count: int = 0
    # Колонки остатков, для которых не удалось определить склад или дату
    unresolved_warehouse_headers: List[str] = field(default_factory=list)
    header_row_index: int = 0
    used_default_header_row: bool = False


@dataclass
class ImportResult:
    """Успешный импорт листа"""
    sheet_name: str
    items: List[ParsedItem]
    suppliers: List[ParsedSupplier]
    diagnostics: ImportDiagnostics

    ok = True


# Причины структурного отказа
FAILURE_NO_DATA = "no-data"
FAILURE_NO_ROWS = "no-rows-after-header"


@dataclass
class ImportFailure:
    """
    Структурный отказ: лист слишком испорчен для импорта

    columns - найденные заголовки колонок, чтобы UI мог объяснить,
    почему ничего не найдено.
    """
    sheet_name: str
    reason: str
    columns: List[str]
    message: str

    ok = False
