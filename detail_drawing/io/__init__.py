"""Ввод-вывод: документ чертежа (JSON) и проверка его целостности."""
