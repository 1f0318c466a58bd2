"""
model

Доменные типы движка: перечисления символик, абстрактные символы,
конфигурация кодирования и записи пакетных заданий.
"""
