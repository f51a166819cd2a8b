"""
Компоновка чертежа на листе печати (масштаб «вписать»).

Алгоритм:
  1. Объединённый bbox фигур, размеров (с выносными линиями и текстом)
     и надписей.
  2. Запас LAYOUT_PADDING со всех сторон.
  3. Пустой чертёж → bbox 100×100; нулевая ширина/высота → 1 мм.
  4. Единый масштаб min(avail_w / w, avail_h / h), пропорции сохраняются.
  5. Смещение: центр чертежа → центр доступной области (+ поле).

Результат зависит только от входной геометрии.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from detail_drawing.config import (
    DEFAULT_FONT_SIZE,
    LAYOUT_EMPTY_EXTENT,
    LAYOUT_MIN_EXTENT,
    LAYOUT_PADDING,
    LEADER_FONT_SIZE,
    PAGE_FORMATS,
    PAGE_MARGIN,
    TEXT_WIDTH_FACTOR,
    TITLE_BLOCK_GAP,
    TITLE_BLOCK_H,
)
from detail_drawing.errors import InvalidArgumentError
from detail_drawing.geometry.kernel import (
    BoundingBox,
    bounding_box_of_points,
    dimension_geometry_bbox,
    shape_bounding_box,
    union_bounding_boxes,
)
from detail_drawing.model import (
    Annotation,
    Dimension,
    DrawingState,
    LeaderAnnotation,
    Point,
    Shape,
    TextAnnotation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrintLayout:
    """Преобразование «чертёж → лист»: X = x * scale + offset_x.

    Attributes:
        scale: единый масштаб.
        offset_x, offset_y: смещение (мм листа).
        bbox: учтённый bbox чертежа (с запасом).
    """
    scale: float
    offset_x: float
    offset_y: float
    bbox: BoundingBox

    def transform(self, p: Point) -> Tuple[float, float]:
        return p.x * self.scale + self.offset_x, p.y * self.scale + self.offset_y


def text_extent(text: str, font_size: float) -> Tuple[float, float]:
    """Приближённые ширина и высота текста."""
    return len(text) * font_size * TEXT_WIDTH_FACTOR, font_size


def annotation_bounding_box(annotation: Annotation) -> BoundingBox:
    """Bbox надписи.

    Текст: от точки привязки вправо на ширину и вверх на высоту шрифта.
    Выноска: три точки плюс поле текста у полки.
    """
    if isinstance(annotation, TextAnnotation):
        font_size = annotation.font_size or DEFAULT_FONT_SIZE
        w, h = text_extent(annotation.text, font_size)
        pos = annotation.position
        return BoundingBox(pos.x, pos.y, pos.x + w, pos.y + h)
    if isinstance(annotation, LeaderAnnotation):
        w, h = text_extent(annotation.text, LEADER_FONT_SIZE)
        tp = annotation.text_point
        return bounding_box_of_points([
            annotation.arrow_point,
            annotation.elbow_point,
            tp,
            Point(tp.x + w, tp.y + h),
        ])
    raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")


def drawing_extent(
    shapes: Sequence[Shape],
    dimensions: Sequence[Dimension] = (),
    annotations: Sequence[Annotation] = (),
) -> Optional[BoundingBox]:
    """Объединённый bbox всех элементов или None для пустого чертежа."""
    boxes: List[BoundingBox] = []
    boxes.extend(shape_bounding_box(s) for s in shapes)
    boxes.extend(dimension_geometry_bbox(d) for d in dimensions)
    boxes.extend(annotation_bounding_box(a) for a in annotations)
    return union_bounding_boxes(boxes)


def compute_print_layout(
    drawing_state: DrawingState,
    avail_w: float,
    avail_h: float,
    margin: float = 0.0,
) -> PrintLayout:
    """Вычислить масштаб и смещение для вписывания чертежа в область.

    Args:
        drawing_state: состояние чертежа (только чтение).
        avail_w, avail_h: доступная область листа (мм).
        margin: поле слева/сверху доступной области (мм).

    Returns:
        PrintLayout.

    Raises:
        InvalidArgumentError: доступная область не положительна.
    """
    if avail_w <= 0 or avail_h <= 0:
        raise InvalidArgumentError(
            f"Available area must be positive, got {avail_w} x {avail_h}"
        )

    extent = drawing_extent(
        drawing_state.shapes, drawing_state.dimensions, drawing_state.annotations,
    )
    if extent is None:
        bbox = BoundingBox(0.0, 0.0, LAYOUT_EMPTY_EXTENT, LAYOUT_EMPTY_EXTENT)
    else:
        bbox = extent.expand(LAYOUT_PADDING)

    width = max(bbox.width, LAYOUT_MIN_EXTENT)
    height = max(bbox.height, LAYOUT_MIN_EXTENT)
    center_x = bbox.min_x + width / 2
    center_y = bbox.min_y + height / 2

    scale = min(avail_w / width, avail_h / height)

    page_center_x = margin + avail_w / 2
    page_center_y = margin + avail_h / 2

    layout = PrintLayout(
        scale=scale,
        offset_x=page_center_x - center_x * scale,
        offset_y=page_center_y - center_y * scale,
        bbox=bbox,
    )
    logger.debug(
        "Компоновка: bbox %.1f x %.1f мм, масштаб %.4g",
        bbox.width, bbox.height, scale,
    )
    return layout


def page_drawing_area(page_size: str, margin: float = PAGE_MARGIN) -> Tuple[float, float, float, float]:
    """Размеры листа и доступная область над основной надписью.

    Returns:
        (page_w, page_h, avail_w, avail_h) в мм.
    """
    try:
        page_w, page_h = PAGE_FORMATS[page_size.upper()]
    except KeyError:
        raise InvalidArgumentError(
            f"Unknown page size {page_size!r} (expected one of: {', '.join(PAGE_FORMATS)})"
        ) from None
    avail_w = page_w - 2 * margin
    avail_h = page_h - 2 * margin - TITLE_BLOCK_H - TITLE_BLOCK_GAP
    return page_w, page_h, avail_w, avail_h
