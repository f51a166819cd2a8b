"""
Модель данных чертежа.

Типы:
  - Point: точка плоскости (мм, ось Y вверх)
  - Line / Circle / Rectangle: варианты фигуры (Shape)
  - Dimension: измеряемые точки p1/p2 и смещение размерной линии
  - TextAnnotation / LeaderAnnotation: варианты надписи (Annotation)
  - Layer, TitleBlock, DrawingState
  - DimensionStyle: стиль пакетного оразмеривания

Фигуры и надписи устроены как размеченные объединения: каждый вариант
является отдельным неизменяемым dataclass, диспетчеризация через isinstance.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Union

from detail_drawing.config import (
    ANNOTATIONS_LAYER_ID,
    AUXILIARY_LAYER_ID,
    AXES_LAYER_ID,
    CONTOUR_LAYER_ID,
    DIMENSIONS_LAYER_ID,
    LAYER_COLORS,
)
from detail_drawing.errors import InvalidArgumentError


# ---------------------------------------------------------------------------
# Перечисления
# ---------------------------------------------------------------------------

class ShapeType(Enum):
    """Тег варианта фигуры (используется при сериализации)."""
    LINE = "line"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


class AnnotationType(Enum):
    """Тег варианта надписи."""
    TEXT = "text"
    LEADER = "leader"


class DimensionStyle(Enum):
    """Стиль пакетного оразмеривания.

      - AUTO: координатные размеры, только если есть контур
        и внутри него хотя бы одна фигура
      - SHAPES_ONLY: только размеры самих фигур
      - FULL: всегда координатные размеры (и габариты контура)
    """
    AUTO = "auto"
    SHAPES_ONLY = "shapes-only"
    FULL = "full"

    @classmethod
    def parse(cls, value: Union[str, 'DimensionStyle']) -> 'DimensionStyle':
        """Преобразовать строку в стиль.

        Raises:
            InvalidArgumentError: неизвестное значение.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise InvalidArgumentError(
                f"Unknown dimension style {value!r} (expected one of: {allowed})"
            ) from None


# ---------------------------------------------------------------------------
# Точка
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """Точка плоскости чертежа (мм)."""
    x: float
    y: float

    def as_tuple(self):
        return (self.x, self.y)


# ---------------------------------------------------------------------------
# Фигуры
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Line:
    """Отрезок p1–p2."""
    id: str
    p1: Point
    p2: Point
    layer_id: str = CONTOUR_LAYER_ID

    type: ClassVar[ShapeType] = ShapeType.LINE


@dataclass(frozen=True)
class Circle:
    """Окружность. Радиус строго положителен."""
    id: str
    center: Point
    radius: float
    layer_id: str = CONTOUR_LAYER_ID

    type: ClassVar[ShapeType] = ShapeType.CIRCLE

    def __post_init__(self):
        if not self.radius > 0:
            raise InvalidArgumentError(
                f"Circle {self.id!r}: radius must be positive, got {self.radius}"
            )


@dataclass(frozen=True)
class Rectangle:
    """Прямоугольник по двум противоположным углам (порядок не важен)."""
    id: str
    p1: Point
    p2: Point
    layer_id: str = CONTOUR_LAYER_ID

    type: ClassVar[ShapeType] = ShapeType.RECTANGLE

    @property
    def width(self) -> float:
        return abs(self.p2.x - self.p1.x)

    @property
    def height(self) -> float:
        return abs(self.p2.y - self.p1.y)

    @property
    def area(self) -> float:
        return self.width * self.height


Shape = Union[Line, Circle, Rectangle]


# ---------------------------------------------------------------------------
# Размер
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Dimension:
    """Размер.

    Attributes:
        id: уникальный идентификатор.
        p1, p2: измеряемые точки (базовая линия).
        offset: знаковое смещение размерной линии от базовой, вдоль
            перпендикуляра, повёрнутого на +90° от направления p1→p2.
        text: текст вместо вычисленного значения (None: по длине).
        layer_id: всегда 'dimensions'.
    """
    id: str
    p1: Point
    p2: Point
    offset: float = 0.0
    text: Optional[str] = None
    layer_id: str = DIMENSIONS_LAYER_ID


# ---------------------------------------------------------------------------
# Надписи
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextAnnotation:
    """Текстовая надпись."""
    id: str
    position: Point
    text: str
    font_size: Optional[float] = None
    color: Optional[str] = None
    layer_id: str = ANNOTATIONS_LAYER_ID

    type: ClassVar[AnnotationType] = AnnotationType.TEXT


@dataclass(frozen=True)
class LeaderAnnotation:
    """Линия-выноска: стрелка → излом → полка с текстом."""
    id: str
    arrow_point: Point
    elbow_point: Point
    text_point: Point
    text: str
    layer_id: str = ANNOTATIONS_LAYER_ID

    type: ClassVar[AnnotationType] = AnnotationType.LEADER


Annotation = Union[TextAnnotation, LeaderAnnotation]


# ---------------------------------------------------------------------------
# Слои, штамп, состояние
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Layer:
    """Слой чертежа. Видимость учитывают только экспорт и отрисовка."""
    id: str
    name: str
    color: str
    visible: bool = True
    locked: bool = False


INITIAL_LAYERS = (
    Layer(CONTOUR_LAYER_ID, 'Contour', LAYER_COLORS[CONTOUR_LAYER_ID]),
    Layer(DIMENSIONS_LAYER_ID, 'Dimensions', LAYER_COLORS[DIMENSIONS_LAYER_ID]),
    Layer(ANNOTATIONS_LAYER_ID, 'Annotations', LAYER_COLORS[ANNOTATIONS_LAYER_ID]),
    Layer(AXES_LAYER_ID, 'Axes', LAYER_COLORS[AXES_LAYER_ID]),
    Layer(AUXILIARY_LAYER_ID, 'Auxiliary', LAYER_COLORS[AUXILIARY_LAYER_ID]),
)


@dataclass(frozen=True)
class TitleBlock:
    """Данные основной надписи (штампа)."""
    detail_name: str = 'Untitled Detail'
    material: str = ''
    thickness: str = ''
    author: str = ''
    date: str = ''


@dataclass
class DrawingState:
    """Состояние чертежа. Принадлежит вызывающей стороне.

    Движки только читают его и возвращают новые списки.
    """
    shapes: List[Shape] = field(default_factory=list)
    dimensions: List[Dimension] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    layers: List[Layer] = field(default_factory=lambda: list(INITIAL_LAYERS))

    def find_shape(self, shape_id: str) -> Optional[Shape]:
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def layer(self, layer_id: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def is_layer_visible(self, layer_id: str) -> bool:
        """Слой виден? Ссылка на неизвестный слой считается невидимой."""
        layer = self.layer(layer_id)
        return layer is not None and layer.visible

    def is_empty(self) -> bool:
        return not (self.shapes or self.dimensions or self.annotations)
