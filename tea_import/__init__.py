# -*- coding: utf-8 -*-
"""
Tea Import - импорт и нормализация складских книг Excel для чайного производства

Модули:
- utils: утилиты и вспомогательные функции
- models: структуры данных конвейера
- numbers: разбор числовых ячеек
- warehouses: определение складов по заголовкам
- classifiers: классификация материалов по категориям
- parsers: чтение листов Excel и поиск строки заголовков
- columns: определение ролей колонок
- assembler: сборка позиций из строк
- suppliers: извлечение поставщиков
- pipeline: импорт одного листа
- records: записи для сохранения в базу
- excel_writer: предпросмотр импорта в Excel
- config_manager: настройки импорта
- main: главная функция CLI
"""

from .pipeline import ImportRun, import_sheet

__version__ = "1.2.0"
__all__ = ["ImportRun", "import_sheet"]
