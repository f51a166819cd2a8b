"""
Ортогональные проекции профиля с глубиной выдавливания.

Вид сбоку (справа от главного, x = max_x + 30):
  - окружность → прямоугольник depth × диаметр + ось отверстия
  - прямоугольник → прямоугольник depth × высота
  - горизонтальный отрезок (|dy| < |dx|) → отрезок длиной depth на средней Y
  - прочий отрезок → прямоугольник depth × высота отрезка

Вид сверху (над главным, y = max_y + 30) строится симметрично, с заменой осей.

Оси (слой 'axes') главного вида проходят через центр bbox профиля
с выходом 10 мм; у каждого вида своя пара осей.

Все созданные фигуры получают id с префиксом 'proj-', что позволяет
удалить их одним вызовом clear_projections.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from detail_drawing.config import (
    AXES_LAYER_ID,
    CENTERLINE_EXTEND,
    CONTOUR_LAYER_ID,
    HOLE_AXIS_EXTEND,
    LAYOUT_EMPTY_EXTENT,
    PROJECTION_GAP,
    PROJECTION_ID_PREFIX,
    SIDE_VIEW_LABEL,
    TOP_VIEW_LABEL,
)
from detail_drawing.geometry.kernel import BoundingBox, shape_bounding_box, shapes_bounding_box
from detail_drawing.ids import IdGenerator, reserve_ids
from detail_drawing.io.validator import validate_projection_depth
from detail_drawing.model import Circle, Line, Point, Rectangle, Shape

logger = logging.getLogger(__name__)

SIDE = 'side'
TOP = 'top'
MAIN = 'main'


@dataclass(frozen=True)
class ProjectionResult:
    """Результат построения вида.

    Attributes:
        shapes: новые фигуры вида (контур и оси).
        view_offset: левый нижний угол вида.
        label: подпись вида.
    """
    shapes: List[Shape]
    view_offset: Point
    label: str


def is_projection_id(shape_id: str) -> bool:
    return shape_id.startswith(PROJECTION_ID_PREFIX)


def clear_projections(shapes: Sequence[Shape]) -> List[Shape]:
    """Фигуры без построенных проекций (id без префикса 'proj-')."""
    return [s for s in shapes if not is_projection_id(s.id)]


def _profile_bbox(shapes: Sequence[Shape]) -> BoundingBox:
    box = shapes_bounding_box(shapes)
    if box is None:
        return BoundingBox(0.0, 0.0, LAYOUT_EMPTY_EXTENT, LAYOUT_EMPTY_EXTENT)
    return box


def _axis(id_gen: IdGenerator, name: str, p1: Point, p2: Point) -> Line:
    return Line(
        id=id_gen.next_id(f"{PROJECTION_ID_PREFIX}axis-{name}"),
        p1=p1, p2=p2, layer_id=AXES_LAYER_ID,
    )


def _centerlines(
    box: BoundingBox,
    depth: float,
    view: str,
    origin: float,
    id_gen: IdGenerator,
) -> List[Line]:
    """Пара осей вида.

    origin: x вида сбоку или y вида сверху; для главного вида не используется.
    """
    ext = CENTERLINE_EXTEND
    cx, cy = box.center.x, box.center.y

    if view == MAIN:
        return [
            _axis(id_gen, 'main-h', Point(box.min_x - ext, cy), Point(box.max_x + ext, cy)),
            _axis(id_gen, 'main-v', Point(cx, box.min_y - ext), Point(cx, box.max_y + ext)),
        ]
    if view == SIDE:
        mid = origin + depth / 2
        return [
            _axis(id_gen, 'side-h', Point(origin - ext, cy), Point(origin + depth + ext, cy)),
            _axis(id_gen, 'side-v', Point(mid, box.min_y - ext), Point(mid, box.max_y + ext)),
        ]
    if view == TOP:
        mid = origin + depth / 2
        return [
            _axis(id_gen, 'top-v', Point(cx, origin - ext), Point(cx, origin + depth + ext)),
            _axis(id_gen, 'top-h', Point(box.min_x - ext, mid), Point(box.max_x + ext, mid)),
        ]
    raise ValueError(f"Unknown view: {view!r}")


def _project_side(
    shape: Shape,
    x0: float,
    depth: float,
    layer_id: str,
    id_gen: IdGenerator,
) -> List[Shape]:
    shape_id = id_gen.next_id(f"{PROJECTION_ID_PREFIX}side")
    x1 = x0 + depth

    if isinstance(shape, Circle):
        c, r = shape.center, shape.radius
        return [
            Rectangle(shape_id, Point(x0, c.y - r), Point(x1, c.y + r), layer_id),
            Line(
                id_gen.claim(f"{shape_id}-axis"),
                Point(x0 - HOLE_AXIS_EXTEND, c.y),
                Point(x1 + HOLE_AXIS_EXTEND, c.y),
                AXES_LAYER_ID,
            ),
        ]

    box = shape_bounding_box(shape)
    if isinstance(shape, Line):
        dx = abs(shape.p1.x - shape.p2.x)
        dy = abs(shape.p1.y - shape.p2.y)
        if dy < dx:
            y = (shape.p1.y + shape.p2.y) / 2
            return [Line(shape_id, Point(x0, y), Point(x1, y), layer_id)]
    return [Rectangle(shape_id, Point(x0, box.min_y), Point(x1, box.max_y), layer_id)]


def _project_top(
    shape: Shape,
    y0: float,
    depth: float,
    layer_id: str,
    id_gen: IdGenerator,
) -> List[Shape]:
    shape_id = id_gen.next_id(f"{PROJECTION_ID_PREFIX}top")
    y1 = y0 + depth

    if isinstance(shape, Circle):
        c, r = shape.center, shape.radius
        return [
            Rectangle(shape_id, Point(c.x - r, y0), Point(c.x + r, y1), layer_id),
            Line(
                id_gen.claim(f"{shape_id}-axis"),
                Point(c.x, y0 - HOLE_AXIS_EXTEND),
                Point(c.x, y1 + HOLE_AXIS_EXTEND),
                AXES_LAYER_ID,
            ),
        ]

    box = shape_bounding_box(shape)
    if isinstance(shape, Line):
        dx = abs(shape.p1.x - shape.p2.x)
        dy = abs(shape.p1.y - shape.p2.y)
        if dx < dy:
            x = (shape.p1.x + shape.p2.x) / 2
            return [Line(shape_id, Point(x, y0), Point(x, y1), layer_id)]
    return [Rectangle(shape_id, Point(box.min_x, y0), Point(box.max_x, y1), layer_id)]


def _build_view(
    view: str,
    shapes: Sequence[Shape],
    depth: float,
    layer_id: str,
    id_gen: IdGenerator,
    with_main_axes: bool,
) -> ProjectionResult:
    box = _profile_bbox(shapes)
    if view == SIDE:
        origin = box.max_x + PROJECTION_GAP
        view_offset, label, project = Point(origin, box.min_y), SIDE_VIEW_LABEL, _project_side
    else:
        origin = box.max_y + PROJECTION_GAP
        view_offset, label, project = Point(box.min_x, origin), TOP_VIEW_LABEL, _project_top

    if not shapes:
        return ProjectionResult(shapes=[], view_offset=view_offset, label=label)

    result: List[Shape] = []
    if with_main_axes:
        result.extend(_centerlines(box, depth, MAIN, origin, id_gen))
    result.extend(_centerlines(box, depth, view, origin, id_gen))
    for shape in shapes:
        result.extend(project(shape, origin, depth, layer_id, id_gen))

    logger.debug("Вид '%s': %d фигур, начало %.1f", view, len(result), origin)
    return ProjectionResult(shapes=result, view_offset=view_offset, label=label)


def generate_side_view(
    shapes: Sequence[Shape],
    depth: float,
    layer_id: str = CONTOUR_LAYER_ID,
    id_gen: Optional[IdGenerator] = None,
) -> ProjectionResult:
    """Вид сбоку с осями главного вида и вида сбоку.

    Raises:
        InvalidArgumentError: depth <= 0.
    """
    validate_projection_depth(depth)
    id_gen = reserve_ids(id_gen, shapes)
    return _build_view(SIDE, shapes, depth, layer_id, id_gen, with_main_axes=True)


def generate_top_view(
    shapes: Sequence[Shape],
    depth: float,
    layer_id: str = CONTOUR_LAYER_ID,
    id_gen: Optional[IdGenerator] = None,
) -> ProjectionResult:
    """Вид сверху с осями главного вида и вида сверху.

    Raises:
        InvalidArgumentError: depth <= 0.
    """
    validate_projection_depth(depth)
    id_gen = reserve_ids(id_gen, shapes)
    return _build_view(TOP, shapes, depth, layer_id, id_gen, with_main_axes=True)


def generate_all_projections(
    shapes: Sequence[Shape],
    depth: float,
    layer_id: str = CONTOUR_LAYER_ID,
    id_gen: Optional[IdGenerator] = None,
) -> Dict[str, ProjectionResult]:
    """Оба вида; оси главного вида выдаются один раз, в составе вида сбоку.

    Returns:
        {'side': ProjectionResult, 'top': ProjectionResult}
    """
    validate_projection_depth(depth)
    id_gen = reserve_ids(id_gen, shapes)
    side = _build_view(SIDE, shapes, depth, layer_id, id_gen, with_main_axes=True)
    top = _build_view(TOP, shapes, depth, layer_id, id_gen, with_main_axes=False)
    logger.info(
        "Проекции: вид сбоку %d фигур, вид сверху %d фигур (глубина %.1f)",
        len(side.shapes), len(top.shapes), depth,
    )
    return {SIDE: side, TOP: top}
