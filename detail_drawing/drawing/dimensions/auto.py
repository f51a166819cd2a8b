"""
Автоматическое оразмеривание чертежа.

Размеры фигур:
  - Окружность: диаметр по горизонтали через центр, текст "ø{2r}"
  - Прямоугольник: ширина по нижней кромке, высота по левой
    (наружу, отрицательное смещение, поиск без наложений);
    размеры, равные габаритам контура, подавляются
  - Отрезок: длина по концам
  - Контур: ширина над верхней кромкой, высота справа, смещение +25,
    без поиска коллизий

Координатные размеры отсчитываются от базы контура (левый нижний угол):
  - одиночная фигура: горизонтальный и вертикальный размер до точки
    привязки (центр окружности, минимальный угол прямоугольника)
  - весь чертёж: уникальные координаты всех внутренних фигур
    сортируются и укладываются рядами с фиксированным шагом

Все функции чистые: входные списки не изменяются, возвращаются новые
Dimension со свежими идентификаторами.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Union

from detail_drawing.config import (
    CONTOUR_DIM_OFFSET,
    COORDINATE_DECIMALS,
    DIAMETER_INCREMENT,
    DIAMETER_OFFSET_MARGIN,
    LINE_LENGTH_INCREMENT,
    LINE_LENGTH_OFFSET,
    POSITIONAL_INCREMENT,
    POSITIONAL_OFFSET,
    POSITIONAL_ROW_START,
    POSITIONAL_ROW_STEP,
    RECT_SIZE_INCREMENT,
    RECT_SIZE_OFFSET,
)
from detail_drawing.drawing.dimensions.dedup import DimensionRegistry
from detail_drawing.drawing.dimensions.placer import find_optimal_offset
from detail_drawing.drawing.dimensions.symbols import delta_label, diameter_label
from detail_drawing.errors import InvalidArgumentError
from detail_drawing.geometry.contour import (
    HORIZONTAL,
    VERTICAL,
    contour_datum,
    detect_contour,
    is_inside_contour,
    matches_contour_extent,
)
from detail_drawing.geometry.kernel import (
    distance,
    format_length,
    shape_bounding_box,
    shapes_bounding_box,
)
from detail_drawing.ids import IdGenerator, reserve_ids
from detail_drawing.logging_config import timed
from detail_drawing.model import (
    Circle,
    Dimension,
    DimensionStyle,
    DrawingState,
    Line,
    Point,
    Rectangle,
    Shape,
)

logger = logging.getLogger(__name__)

_EPS = 1e-9


# ---------------------------------------------------------------------------
# Выпуск размера
# ---------------------------------------------------------------------------

def _emit(
    registry: DimensionRegistry,
    id_gen: IdGenerator,
    prefix: str,
    p1: Point,
    p2: Point,
    offset: float,
    text: Optional[str] = None,
) -> Optional[Dimension]:
    """Создать размер, если реестр его принимает. Id выдаётся только принятому."""
    candidate = Dimension(id='', p1=p1, p2=p2, offset=offset, text=text)
    if not registry.accepts(candidate):
        return None
    dim = replace(candidate, id=id_gen.next_id(prefix))
    registry.add(dim)
    return dim


# ---------------------------------------------------------------------------
# Размеры отдельных фигур
# ---------------------------------------------------------------------------

def _dimension_diameter(circle: Circle, registry: DimensionRegistry, id_gen: IdGenerator) -> None:
    c, r = circle.center, circle.radius
    p1 = Point(c.x - r, c.y)
    p2 = Point(c.x + r, c.y)
    offset = find_optimal_offset(
        p1, p2, registry.all_dimensions,
        initial_offset=r + DIAMETER_OFFSET_MARGIN,
        increment=DIAMETER_INCREMENT,
    )
    _emit(registry, id_gen, f"dim-{circle.id}-dia", p1, p2, offset, diameter_label(r))


def _dimension_rectangle_size(
    rect: Rectangle,
    contour: Optional[Rectangle],
    registry: DimensionRegistry,
    id_gen: IdGenerator,
) -> None:
    """Ширина по нижней кромке, высота по левой, обе наружу."""
    box = shape_bounding_box(rect)
    # Контур, размечаемый как обычный прямоугольник, сам себя не подавляет
    reference = None if contour is not None and contour.id == rect.id else contour

    if box.width > _EPS and not matches_contour_extent(box.width, HORIZONTAL, reference):
        p1 = Point(box.min_x, box.min_y)
        p2 = Point(box.max_x, box.min_y)
        offset = find_optimal_offset(
            p1, p2, registry.all_dimensions, RECT_SIZE_OFFSET, RECT_SIZE_INCREMENT,
        )
        _emit(registry, id_gen, f"dim-{rect.id}-w", p1, p2, offset)

    if box.height > _EPS and not matches_contour_extent(box.height, VERTICAL, reference):
        # Сверху вниз: отрицательное смещение уводит линию влево
        p1 = Point(box.min_x, box.max_y)
        p2 = Point(box.min_x, box.min_y)
        offset = find_optimal_offset(
            p1, p2, registry.all_dimensions, RECT_SIZE_OFFSET, RECT_SIZE_INCREMENT,
        )
        _emit(registry, id_gen, f"dim-{rect.id}-h", p1, p2, offset)


def _dimension_line_length(line: Line, registry: DimensionRegistry, id_gen: IdGenerator) -> None:
    length = distance(line.p1, line.p2)
    if length <= _EPS:
        return
    offset = find_optimal_offset(
        line.p1, line.p2, registry.all_dimensions,
        LINE_LENGTH_OFFSET, LINE_LENGTH_INCREMENT,
    )
    _emit(registry, id_gen, f"dim-{line.id}-len", line.p1, line.p2, offset, format_length(length))


def _dimension_contour(contour: Rectangle, registry: DimensionRegistry, id_gen: IdGenerator) -> None:
    """Габариты контура: фиксированное положение снаружи, без поиска коллизий."""
    box = shape_bounding_box(contour)
    if box.width > _EPS:
        _emit(
            registry, id_gen, f"dim-{contour.id}-w",
            Point(box.min_x, box.max_y), Point(box.max_x, box.max_y),
            CONTOUR_DIM_OFFSET,
        )
    if box.height > _EPS:
        # Сверху вниз: положительное смещение уводит линию вправо
        _emit(
            registry, id_gen, f"dim-{contour.id}-h",
            Point(box.max_x, box.max_y), Point(box.max_x, box.min_y),
            CONTOUR_DIM_OFFSET,
        )


def reference_point(shape: Shape) -> Optional[Point]:
    """Точка привязки координатных размеров.

    Для окружности это центр, для прямоугольника минимальный угол bbox.
    Отрезки координатными размерами не привязываются.
    """
    if isinstance(shape, Circle):
        return shape.center
    if isinstance(shape, Rectangle):
        return shape_bounding_box(shape).min_corner
    return None


def _dimension_position(
    shape: Shape,
    datum: Point,
    registry: DimensionRegistry,
    id_gen: IdGenerator,
) -> None:
    """Горизонтальный и вертикальный размер от базы до точки привязки."""
    ref = reference_point(shape)
    if ref is None:
        return

    dx = ref.x - datum.x
    if abs(dx) > _EPS:
        p1 = datum
        p2 = Point(ref.x, datum.y)
        offset = find_optimal_offset(
            p1, p2, registry.all_dimensions, POSITIONAL_OFFSET, POSITIONAL_INCREMENT,
        )
        _emit(registry, id_gen, f"dim-{shape.id}-x", p1, p2, offset, delta_label(dx))

    dy = ref.y - datum.y
    if abs(dy) > _EPS:
        p1 = Point(datum.x, ref.y)
        p2 = datum
        offset = find_optimal_offset(
            p1, p2, registry.all_dimensions, POSITIONAL_OFFSET, POSITIONAL_INCREMENT,
        )
        _emit(registry, id_gen, f"dim-{shape.id}-y", p1, p2, offset, delta_label(dy))


# ---------------------------------------------------------------------------
# Одиночная фигура
# ---------------------------------------------------------------------------

def auto_dimension_circle(
    circle: Circle,
    shapes: Sequence[Shape],
    existing_dimensions: Sequence[Dimension],
    id_gen: Optional[IdGenerator] = None,
) -> List[Dimension]:
    """Диаметр окружности и, если она внутри контура, её координаты."""
    id_gen = reserve_ids(id_gen, shapes, existing_dimensions)
    registry = DimensionRegistry(existing_dimensions, deduplicate=False)
    contour = detect_contour(shapes)

    _dimension_diameter(circle, registry, id_gen)
    if is_inside_contour(circle, contour):
        _dimension_position(circle, contour_datum(contour), registry, id_gen)
    return registry.new_dimensions


def auto_dimension_rectangle(
    rect: Rectangle,
    shapes: Sequence[Shape],
    existing_dimensions: Sequence[Dimension],
    id_gen: Optional[IdGenerator] = None,
) -> List[Dimension]:
    """Размеры прямоугольника.

    Контур получает фиксированные габариты; остальные прямоугольники получают
    ширину/высоту (кроме равных габаритам контура) и координаты, если
    лежат внутри контура.
    """
    id_gen = reserve_ids(id_gen, shapes, existing_dimensions)
    registry = DimensionRegistry(existing_dimensions, deduplicate=False)
    contour = detect_contour(shapes)

    if contour is not None and contour.id == rect.id:
        _dimension_contour(rect, registry, id_gen)
        return registry.new_dimensions

    _dimension_rectangle_size(rect, contour, registry, id_gen)
    if is_inside_contour(rect, contour):
        _dimension_position(rect, contour_datum(contour), registry, id_gen)
    return registry.new_dimensions


def auto_dimension_line(
    line: Line,
    shapes: Sequence[Shape],
    existing_dimensions: Sequence[Dimension],
    id_gen: Optional[IdGenerator] = None,
) -> List[Dimension]:
    """Длина отрезка."""
    id_gen = reserve_ids(id_gen, shapes, existing_dimensions)
    registry = DimensionRegistry(existing_dimensions, deduplicate=False)
    _dimension_line_length(line, registry, id_gen)
    return registry.new_dimensions


def auto_dimension_shape(
    shape_id: str,
    shapes: Sequence[Shape],
    existing_dimensions: Sequence[Dimension],
    id_gen: Optional[IdGenerator] = None,
) -> List[Dimension]:
    """Оразмерить одну фигуру по её id.

    Raises:
        InvalidArgumentError: фигура с таким id не найдена.
    """
    shape = next((s for s in shapes if s.id == shape_id), None)
    if shape is None:
        raise InvalidArgumentError(f"Shape not found: {shape_id!r}")

    if isinstance(shape, Circle):
        result = auto_dimension_circle(shape, shapes, existing_dimensions, id_gen)
    elif isinstance(shape, Rectangle):
        result = auto_dimension_rectangle(shape, shapes, existing_dimensions, id_gen)
    elif isinstance(shape, Line):
        result = auto_dimension_line(shape, shapes, existing_dimensions, id_gen)
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    logger.info("Фигура %s: добавлено %d размеров", shape_id, len(result))
    return result


# ---------------------------------------------------------------------------
# Весь чертёж
# ---------------------------------------------------------------------------

def _unique_sorted(values) -> List[float]:
    return sorted({round(v, COORDINATE_DECIMALS) for v in values})


def _dimension_position_rows(
    datum: Point,
    targets: Sequence[Shape],
    registry: DimensionRegistry,
    id_gen: IdGenerator,
) -> None:
    """Координатные размеры рядами от базы.

    Каждая уникальная координата даёт один размер; ряд n лежит на смещении
    -(POSITIONAL_ROW_START + n * POSITIONAL_ROW_STEP), поэтому ряды не
    перекрываются по построению.
    """
    refs = [p for p in (reference_point(s) for s in targets) if p is not None]

    level = 0
    for x in _unique_sorted(p.x for p in refs):
        if abs(x - datum.x) <= _EPS:
            continue
        offset = -(POSITIONAL_ROW_START + level * POSITIONAL_ROW_STEP)
        if _emit(registry, id_gen, "dim-pos-x", datum, Point(x, datum.y),
                 offset, delta_label(x - datum.x)):
            level += 1

    level = 0
    for y in _unique_sorted(p.y for p in refs):
        if abs(y - datum.y) <= _EPS:
            continue
        offset = -(POSITIONAL_ROW_START + level * POSITIONAL_ROW_STEP)
        if _emit(registry, id_gen, "dim-pos-y", Point(datum.x, y), datum,
                 offset, delta_label(y - datum.y)):
            level += 1


def _wants_positional(
    style: DimensionStyle,
    contour: Optional[Rectangle],
    interior: Sequence[Shape],
) -> bool:
    if style is DimensionStyle.SHAPES_ONLY:
        return False
    if style is DimensionStyle.FULL:
        return True
    return contour is not None and bool(interior)


@timed()
def auto_dimension_all(
    drawing_state: DrawingState,
    style: Union[DimensionStyle, str] = DimensionStyle.AUTO,
    id_gen: Optional[IdGenerator] = None,
) -> List[Dimension]:
    """Оразмерить весь чертёж.

    Порядок: габариты контура → координатные ряды → размеры фигур.
    Каждый кандидат проверяется на дубликаты и похожие размеры среди
    прежних и уже созданных.

    Args:
        drawing_state: состояние чертежа (только чтение).
        style: стиль оразмеривания (DimensionStyle или строка).
        id_gen: генератор идентификаторов.

    Returns:
        Список новых размеров.

    Raises:
        InvalidArgumentError: неизвестный стиль.
    """
    style = DimensionStyle.parse(style)
    shapes = drawing_state.shapes
    if not shapes:
        return []

    id_gen = reserve_ids(id_gen, shapes, drawing_state.dimensions)
    registry = DimensionRegistry(drawing_state.dimensions, deduplicate=True)

    contour = detect_contour(shapes)
    interior = [s for s in shapes if is_inside_contour(s, contour)]
    with_contour_dims = contour is not None and style is not DimensionStyle.SHAPES_ONLY

    if with_contour_dims:
        _dimension_contour(contour, registry, id_gen)

    if _wants_positional(style, contour, interior):
        if contour is not None:
            datum, targets = contour_datum(contour), interior
        else:
            # FULL без контура: база в углу общего bbox
            datum, targets = shapes_bounding_box(shapes).min_corner, list(shapes)
        _dimension_position_rows(datum, targets, registry, id_gen)

    for shape in shapes:
        if with_contour_dims and shape.id == contour.id:
            continue
        if isinstance(shape, Circle):
            _dimension_diameter(shape, registry, id_gen)
        elif isinstance(shape, Rectangle):
            _dimension_rectangle_size(shape, contour, registry, id_gen)
        elif isinstance(shape, Line):
            _dimension_line_length(shape, registry, id_gen)

    result = registry.new_dimensions
    logger.info(
        "Автоматическое оразмеривание (%s): добавлено %d, пропущено %d",
        style.value, len(result), registry.skipped,
    )
    return result
