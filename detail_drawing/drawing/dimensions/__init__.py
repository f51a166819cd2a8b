"""
Пакет автоматического оразмеривания 2D-чертежей деталей.

Модули:
  - auto:     размеры фигур, габариты контура, координатные размеры
  - placer:   поиск смещения размерной линии без наложений
  - dedup:    отсев дубликатов и похожих размеров
  - symbols:  тексты размеров (ø, приращения)
"""

from detail_drawing.drawing.dimensions.auto import (
    auto_dimension_all,
    auto_dimension_circle,
    auto_dimension_line,
    auto_dimension_rectangle,
    auto_dimension_shape,
)
from detail_drawing.drawing.dimensions.dedup import (
    DimensionRegistry,
    is_duplicate_dimension,
    is_similar_dimension,
)
from detail_drawing.drawing.dimensions.placer import find_optimal_offset
from detail_drawing.drawing.dimensions.symbols import delta_label, diameter_label

__all__ = [
    'auto_dimension_all',
    'auto_dimension_shape',
    'auto_dimension_circle',
    'auto_dimension_rectangle',
    'auto_dimension_line',
    'find_optimal_offset',
    'is_duplicate_dimension',
    'is_similar_dimension',
    'DimensionRegistry',
    'diameter_label',
    'delta_label',
]
