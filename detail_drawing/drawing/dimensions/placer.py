"""
Поиск смещения размерной линии без наложений.

Алгоритм:
  1. Начальное смещение initial_offset (знак задаёт сторону).
  2. Bbox размерной линии кандидата с запасом DIM_COLLISION_PADDING
     проверяется на пересечение (AABB) со всеми уже размещёнными.
  3. При коллизии делается шаг increment в ту же сторону.
  4. Не более PLACEMENT_MAX_ATTEMPTS попыток; если все заняты,
     возвращается последнее опробованное смещение (наложение возможно).

Перебор O(n²); для десятков размеров этого достаточно.
"""

import logging
from typing import Iterable, List, Sequence

from detail_drawing.config import (
    DIM_COLLISION_PADDING,
    PLACEMENT_DEFAULT_INCREMENT,
    PLACEMENT_DEFAULT_OFFSET,
    PLACEMENT_MAX_ATTEMPTS,
)
from detail_drawing.geometry.kernel import BoundingBox, bounding_box_of_points, offset_baseline
from detail_drawing.model import Dimension, Point

logger = logging.getLogger(__name__)


def collision_bbox(p1: Point, p2: Point, offset: float) -> BoundingBox:
    """Bbox размерной линии (базовая линия, сдвинутая на offset) с запасом."""
    dim_p1, dim_p2 = offset_baseline(p1, p2, offset)
    return bounding_box_of_points([dim_p1, dim_p2]).expand(DIM_COLLISION_PADDING)


def dimension_collision_bbox(dim: Dimension) -> BoundingBox:
    return collision_bbox(dim.p1, dim.p2, dim.offset)


def has_collision(box: BoundingBox, existing_boxes: Iterable[BoundingBox]) -> bool:
    """Пересекается ли bbox хотя бы с одним из существующих."""
    return any(box.intersects(other) for other in existing_boxes)


def find_optimal_offset(
    p1: Point,
    p2: Point,
    existing_dimensions: Sequence[Dimension],
    initial_offset: float = PLACEMENT_DEFAULT_OFFSET,
    increment: float = PLACEMENT_DEFAULT_INCREMENT,
    max_attempts: int = PLACEMENT_MAX_ATTEMPTS,
) -> float:
    """Найти смещение размерной линии p1–p2 без наложения на существующие.

    Шаг всегда идёт в сторону знака initial_offset, независимо от
    знака increment.

    Args:
        p1, p2: измеряемые точки кандидата.
        existing_dimensions: уже размещённые размеры.
        initial_offset: начальное смещение.
        increment: шаг сдвига при коллизии.
        max_attempts: число попыток.

    Returns:
        Первое свободное смещение или последнее опробованное.
    """
    step = abs(increment) if initial_offset >= 0 else -abs(increment)
    existing_boxes: List[BoundingBox] = [
        dimension_collision_bbox(d) for d in existing_dimensions
    ]

    offset = initial_offset
    for attempt in range(max_attempts):
        offset = initial_offset + attempt * step
        if not has_collision(collision_bbox(p1, p2, offset), existing_boxes):
            return offset

    logger.debug(
        "Свободное смещение не найдено за %d попыток (%.1f,%.1f)-(%.1f,%.1f), "
        "используется %.1f",
        max_attempts, p1.x, p1.y, p2.x, p2.y, offset,
    )
    return offset
