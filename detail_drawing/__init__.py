"""
detail_drawing: автоматическое оразмеривание и ортогональные проекции
для 2D-чертежей деталей.

Командная строка: main.py. Пакетная обработка: detail_drawing.batch.
"""

from detail_drawing.logging_config import (
    setup_logging,
    get_logger,
    configure_default_logging,
    log_timing,
    timed,
    LogContext,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_default_logging",
    "log_timing",
    "timed",
    "LogContext",
]
