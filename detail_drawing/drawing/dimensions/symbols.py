"""
Форматирование текстов размеров.

  - diameter_label: "ø{2r}" с одним знаком после запятой
  - delta_label: знаковое приращение координаты от базы
"""

from detail_drawing.config import DIAMETER_SYMBOL
from detail_drawing.geometry.kernel import format_length


def diameter_label(radius: float) -> str:
    """Текст диаметрального размера: ø и диаметр."""
    return f"{DIAMETER_SYMBOL}{format_length(2 * radius)}"


def delta_label(delta: float) -> str:
    """Текст координатного размера: знаковое приращение от базы.

    Отрицательная координата (элемент левее/ниже базы) сохраняет знак.
    """
    text = format_length(delta)
    # -0.0 → 0.0
    return text[1:] if text.startswith('-') and float(text) == 0 else text
