"""
Дедупликация автоматически создаваемых размеров.

Два уровня проверки кандидата против уже имеющихся (прежних и новых):
  1. Дубликат: те же измеряемые точки (допуск 0.5 мм) в любом порядке.
  2. Похожий: то же направление (горизонталь/вертикаль), то же значение,
     положение в пределах 5 мм (визуально избыточный размер).
"""

import logging
from typing import Iterable, List, Optional, Sequence

from detail_drawing.config import DUPLICATE_TOLERANCE, SIMILAR_POSITION_TOLERANCE
from detail_drawing.geometry.contour import HORIZONTAL, VERTICAL
from detail_drawing.geometry.kernel import dimension_label
from detail_drawing.model import Dimension, Point

logger = logging.getLogger(__name__)

_AXIS_EPS = 1e-6


def _same_point(a: Point, b: Point, tolerance: float) -> bool:
    return abs(a.x - b.x) <= tolerance and abs(a.y - b.y) <= tolerance


def is_duplicate_dimension(
    p1: Point,
    p2: Point,
    dimensions: Iterable[Dimension],
    tolerance: float = DUPLICATE_TOLERANCE,
) -> bool:
    """Есть ли размер с теми же концами (в любом направлении)."""
    for d in dimensions:
        if _same_point(p1, d.p1, tolerance) and _same_point(p2, d.p2, tolerance):
            return True
        if _same_point(p1, d.p2, tolerance) and _same_point(p2, d.p1, tolerance):
            return True
    return False


def dimension_orientation(dim: Dimension) -> Optional[str]:
    """'horizontal', 'vertical' или None для наклонного размера."""
    dx = abs(dim.p2.x - dim.p1.x)
    dy = abs(dim.p2.y - dim.p1.y)
    if dy < _AXIS_EPS and dx >= _AXIS_EPS:
        return HORIZONTAL
    if dx < _AXIS_EPS and dy >= _AXIS_EPS:
        return VERTICAL
    return None


def is_similar_dimension(
    candidate: Dimension,
    dimensions: Iterable[Dimension],
    position_tolerance: float = SIMILAR_POSITION_TOLERANCE,
) -> bool:
    """Есть ли размер того же значения и направления рядом с кандидатом.

    Горизонтальные: базовые линии по Y и начала по X в пределах допуска.
    Вертикальные симметрично.
    """
    orientation = dimension_orientation(candidate)
    if orientation is None:
        return False
    label = dimension_label(candidate)

    for d in dimensions:
        if dimension_orientation(d) != orientation:
            continue
        if dimension_label(d) != label:
            continue
        if orientation == HORIZONTAL:
            cross = abs(candidate.p1.y - d.p1.y)
            along = abs(min(candidate.p1.x, candidate.p2.x) - min(d.p1.x, d.p2.x))
        else:
            cross = abs(candidate.p1.x - d.p1.x)
            along = abs(min(candidate.p1.y, candidate.p2.y) - min(d.p1.y, d.p2.y))
        if cross <= position_tolerance and along <= position_tolerance:
            return True
    return False


class DimensionRegistry:
    """Накопитель размеров: прежние + созданные в текущем вызове.

    При deduplicate=True кандидат принимается, только если он не дубликат
    и не похож на уже имеющийся; при False принимается любой.
    """

    def __init__(self, existing: Sequence[Dimension] = (), deduplicate: bool = True):
        self._all: List[Dimension] = list(existing)
        self._new: List[Dimension] = []
        self.deduplicate = deduplicate
        self.skipped = 0

    @property
    def all_dimensions(self) -> List[Dimension]:
        return list(self._all)

    @property
    def new_dimensions(self) -> List[Dimension]:
        return list(self._new)

    def accepts(self, candidate: Dimension) -> bool:
        """Проверить кандидата (счётчик пропусков увеличивается при отказе)."""
        if not self.deduplicate:
            return True
        if is_duplicate_dimension(candidate.p1, candidate.p2, self._all):
            logger.debug("Пропущен дубликат размера %s", dimension_label(candidate))
        elif is_similar_dimension(candidate, self._all):
            logger.debug("Пропущен похожий размер %s", dimension_label(candidate))
        else:
            return True
        self.skipped += 1
        return False

    def add(self, dim: Dimension) -> None:
        self._all.append(dim)
        self._new.append(dim)
