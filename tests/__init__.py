"""
Тесты для Tea Import

Структура тестов:
- test_numbers.py - разбор числовых ячеек
- test_warehouses.py - определение складов
- test_classifiers.py - классификация материалов
- test_parsers.py - чтение книги и поиск строки заголовков
- test_columns.py - роли колонок
- test_assembler.py - сборка позиций
- test_suppliers.py - поставщики
- test_pipeline.py - импорт листа целиком
- test_records.py - записи для базы
- test_excel_writer.py - предпросмотр в Excel
- test_config.py - настройки
- test_main.py - командная строка
"""
