"""Исключения пакета detail_drawing."""


class DrawingError(Exception):
    """Базовое исключение пакета."""


class InvalidArgumentError(DrawingError, ValueError):
    """Недопустимый аргумент движка (неизвестный id, глубина <= 0, стиль)."""


class DrawingFormatError(DrawingError):
    """Документ чертежа повреждён или имеет неверный формат."""
