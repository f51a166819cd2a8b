"""
Определение внешнего контура детали.

Контуром считается прямоугольник наибольшей площади среди всех прямоугольников
чертежа. Его левый нижний угол служит базой (datum) для координатных
размеров, а габариты контура подавляют равные им размеры других
прямоугольников (см. matches_contour_extent).
"""

import logging
from typing import Optional, Sequence

from detail_drawing.config import CONTOUR_EXTENT_TOLERANCE, CONTOUR_INSIDE_MARGIN
from detail_drawing.geometry.kernel import BoundingBox, shape_bounding_box
from detail_drawing.model import Point, Rectangle, Shape

logger = logging.getLogger(__name__)

HORIZONTAL = 'horizontal'
VERTICAL = 'vertical'


def detect_contour(shapes: Sequence[Shape]) -> Optional[Rectangle]:
    """Найти прямоугольник наибольшей площади.

    При равных площадях побеждает встреченный раньше (замена только
    при строго большей площади).

    Args:
        shapes: список фигур.

    Returns:
        Rectangle-контур или None, если прямоугольников нет.
    """
    contour: Optional[Rectangle] = None
    max_area = -1.0
    for shape in shapes:
        if isinstance(shape, Rectangle) and shape.area > max_area:
            max_area = shape.area
            contour = shape

    if contour is not None:
        logger.debug("Контур: %s (%.1f x %.1f)", contour.id, contour.width, contour.height)
    return contour


def contour_bbox(contour: Rectangle) -> BoundingBox:
    return shape_bounding_box(contour)


def contour_datum(contour: Rectangle) -> Point:
    """База координатных размеров: минимальный (левый нижний) угол."""
    return contour_bbox(contour).min_corner


def is_inside_contour(shape: Shape, contour: Optional[Rectangle]) -> bool:
    """Лежит ли фигура внутри контура (с запасом 1 мм).

    Сам контур внутри себя не лежит.
    """
    if contour is None or shape.id == contour.id:
        return False
    zone = contour_bbox(contour).expand(CONTOUR_INSIDE_MARGIN)
    return zone.contains(shape_bounding_box(shape))


def matches_contour_extent(
    value: float,
    orientation: str,
    contour: Optional[Rectangle],
) -> bool:
    """Равно ли значение габариту контура в том же направлении.

    Единственная точка связи детектора контура с синтезом размеров
    прямоугольников: ширина сравнивается с шириной контура, высота
    с высотой. Без контура всегда False.
    """
    if contour is None:
        return False
    if orientation == HORIZONTAL:
        extent = contour.width
    elif orientation == VERTICAL:
        extent = contour.height
    else:
        raise ValueError(f"Unknown orientation: {orientation!r}")
    return abs(value - extent) <= CONTOUR_EXTENT_TOLERANCE
