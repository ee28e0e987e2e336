"""
Конфигурация pytest и общие фикстуры
"""
import sys
import pytest
import tempfile
import shutil
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tea_import.models import RawGrid  # noqa: E402


@pytest.fixture
def temp_dir():
    """Временная директория для тестов"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    # Cleanup
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def import_now():
    """Момент импорта: январь 2025 (октябрь-декабрь 2024 - факт)"""
    return datetime(2025, 1, 15, 10, 30)


@pytest.fixture
def make_grid():
    """Построитель RawGrid из списка строк"""
    def _make(rows, sheet_name="Залишки"):
        return RawGrid.from_rows(sheet_name, rows)
    return _make


@pytest.fixture
def stock_sheet_rows():
    """
    Типичный лист складского учета:
    заголовок таблицы, строка месяцев (объединенные ячейки), заголовки, данные
    """
    return [
        ["Складський облік матеріалів", None, None, None, None, None, None, None, None, None],
        [None, None, None, None, None, None, None, "Листопад 2024", None, None],
        ["Код", "Назва", "Од.вим.", "Група", "Залишки на 01.06 Фіто",
         "Залишки на 30.11 база", "Залишки на 30.11 Фіто", "План витрат", "грудень 2024", "Постачальник"],
        ["A-001", "Ароматизатор бергамот", "кг", "Ароматизатори", "3,5", "12,5", "2", "4", None, "ТОВ Аромат"],
        ["A-002", "Ароматизатор лимон", "кг", None, None, "7", None, None, "1.5", "тов аромат"],
        ["L-100", "Ярлик Чорний чай", "pcs", "Ярлики", "1.000", "2.124", "500", None, None, "Друкарня Принт"],
        [None, None, None, None, None, None, None, None, None, None],
        ["", "Без коду", "шт", "Ярлики", "10", "10", None, None, None, None],
        ["T-010", "0", "кг", "Чай", "1", "1", None, None, None, None],
        ["T-001", "Чай чорний цейлонський", "кг", "Чай", None, "1 250,75", "-", "100", "80", "Ceylon Tea Co."],
    ]


@pytest.fixture
def write_workbook(temp_dir):
    """Записывает книгу Excel с листами {имя: строки} и возвращает путь"""
    def _write(sheets, filename="stock.xlsx"):
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, rows in sheets.items():
            ws = wb.create_sheet(sheet_name)
            for row in rows:
                ws.append(list(row))
        path = temp_dir / filename
        wb.save(path)
        return path
    return _write
