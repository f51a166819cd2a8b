"""
Чтение и запись документа чертежа (JSON).

Формат совместим с файлами .qcad редактора:

    {
      "drawingState": {"shapes": [...], "dimensions": [...],
                       "annotations": [...], "layers": [...]},
      "titleBlock": {"detailName": ..., "material": ..., ...}
    }

Ключи в camelCase (layerId, arrowPoint, fontSize, detailName).
Необязательные поля (text, fontSize, color) пишутся только при наличии
и читаются без потерь. Ошибки формата дают DrawingFormatError.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from detail_drawing.config import ANNOTATIONS_LAYER_ID, CONTOUR_LAYER_ID, DIMENSIONS_LAYER_ID
from detail_drawing.errors import DrawingError, DrawingFormatError
from detail_drawing.model import (
    INITIAL_LAYERS,
    Annotation,
    AnnotationType,
    Circle,
    Dimension,
    DrawingState,
    Layer,
    LeaderAnnotation,
    Line,
    Point,
    Rectangle,
    Shape,
    ShapeType,
    TextAnnotation,
    TitleBlock,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Запись
# ---------------------------------------------------------------------------

def _point_to_dict(p: Point) -> Dict[str, float]:
    return {"x": p.x, "y": p.y}


def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": shape.id, "type": shape.type.value, "layerId": shape.layer_id}
    if isinstance(shape, Circle):
        data["center"] = _point_to_dict(shape.center)
        data["radius"] = shape.radius
    else:
        data["p1"] = _point_to_dict(shape.p1)
        data["p2"] = _point_to_dict(shape.p2)
    return data


def dimension_to_dict(dim: Dimension) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": dim.id,
        "layerId": dim.layer_id,
        "p1": _point_to_dict(dim.p1),
        "p2": _point_to_dict(dim.p2),
        "offset": dim.offset,
    }
    if dim.text is not None:
        data["text"] = dim.text
    return data


def annotation_to_dict(annotation: Annotation) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": annotation.id,
        "type": annotation.type.value,
        "layerId": annotation.layer_id,
        "text": annotation.text,
    }
    if isinstance(annotation, TextAnnotation):
        data["position"] = _point_to_dict(annotation.position)
        if annotation.font_size is not None:
            data["fontSize"] = annotation.font_size
        if annotation.color is not None:
            data["color"] = annotation.color
    else:
        data["arrowPoint"] = _point_to_dict(annotation.arrow_point)
        data["elbowPoint"] = _point_to_dict(annotation.elbow_point)
        data["textPoint"] = _point_to_dict(annotation.text_point)
    return data


def layer_to_dict(layer: Layer) -> Dict[str, Any]:
    return {
        "id": layer.id,
        "name": layer.name,
        "color": layer.color,
        "visible": layer.visible,
        "locked": layer.locked,
    }


def title_block_to_dict(title_block: TitleBlock) -> Dict[str, str]:
    return {
        "detailName": title_block.detail_name,
        "material": title_block.material,
        "thickness": title_block.thickness,
        "author": title_block.author,
        "date": title_block.date,
    }


def document_to_dict(state: DrawingState, title_block: TitleBlock = TitleBlock()) -> Dict[str, Any]:
    """Документ в виде словаря, готового к json.dump."""
    return {
        "drawingState": {
            "shapes": [shape_to_dict(s) for s in state.shapes],
            "dimensions": [dimension_to_dict(d) for d in state.dimensions],
            "annotations": [annotation_to_dict(a) for a in state.annotations],
            "layers": [layer_to_dict(layer) for layer in state.layers],
        },
        "titleBlock": title_block_to_dict(title_block),
    }


def save_document(
    path: PathLike,
    state: DrawingState,
    title_block: TitleBlock = TitleBlock(),
) -> Path:
    """Записать документ в файл (UTF-8, отступ 2).

    Returns:
        Путь к записанному файлу.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document_to_dict(state, title_block), f, indent=2, ensure_ascii=False)
    logger.info(
        "Документ сохранён: %s (%d фигур, %d размеров)",
        path, len(state.shapes), len(state.dimensions),
    )
    return path


# ---------------------------------------------------------------------------
# Чтение
# ---------------------------------------------------------------------------

def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DrawingFormatError(f"{where}: missing field {key!r}") from None
    except TypeError:
        raise DrawingFormatError(f"{where}: expected an object, got {type(data).__name__}") from None


def _point_from_dict(data: Any, where: str) -> Point:
    try:
        return Point(float(data["x"]), float(data["y"]))
    except (KeyError, TypeError, ValueError):
        raise DrawingFormatError(f"{where}: invalid point {data!r}") from None


def _float(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise DrawingFormatError(f"{where}: expected a number, got {value!r}") from None


def shape_from_dict(data: Mapping[str, Any]) -> Shape:
    shape_id = str(_require(data, "id", "shape"))
    where = f"shape {shape_id!r}"
    layer_id = str(data.get("layerId", CONTOUR_LAYER_ID))
    try:
        shape_type = ShapeType(_require(data, "type", where))
    except ValueError:
        raise DrawingFormatError(f"{where}: unknown type {data.get('type')!r}") from None

    if shape_type is ShapeType.CIRCLE:
        center = _point_from_dict(_require(data, "center", where), where)
        radius = _float(_require(data, "radius", where), where)
        try:
            return Circle(shape_id, center, radius, layer_id)
        except DrawingError as exc:
            raise DrawingFormatError(str(exc)) from exc

    p1 = _point_from_dict(_require(data, "p1", where), where)
    p2 = _point_from_dict(_require(data, "p2", where), where)
    if shape_type is ShapeType.LINE:
        return Line(shape_id, p1, p2, layer_id)
    return Rectangle(shape_id, p1, p2, layer_id)


def dimension_from_dict(data: Mapping[str, Any]) -> Dimension:
    dim_id = str(_require(data, "id", "dimension"))
    where = f"dimension {dim_id!r}"
    text = data.get("text")
    return Dimension(
        id=dim_id,
        p1=_point_from_dict(_require(data, "p1", where), where),
        p2=_point_from_dict(_require(data, "p2", where), where),
        offset=_float(data.get("offset", 0.0), where),
        text=None if text is None else str(text),
        layer_id=str(data.get("layerId", DIMENSIONS_LAYER_ID)),
    )


def annotation_from_dict(data: Mapping[str, Any]) -> Annotation:
    ann_id = str(_require(data, "id", "annotation"))
    where = f"annotation {ann_id!r}"
    layer_id = str(data.get("layerId", ANNOTATIONS_LAYER_ID))
    text = str(_require(data, "text", where))
    try:
        ann_type = AnnotationType(_require(data, "type", where))
    except ValueError:
        raise DrawingFormatError(f"{where}: unknown type {data.get('type')!r}") from None

    if ann_type is AnnotationType.TEXT:
        font_size = data.get("fontSize")
        color = data.get("color")
        return TextAnnotation(
            id=ann_id,
            position=_point_from_dict(_require(data, "position", where), where),
            text=text,
            font_size=None if font_size is None else _float(font_size, where),
            color=None if color is None else str(color),
            layer_id=layer_id,
        )
    return LeaderAnnotation(
        id=ann_id,
        arrow_point=_point_from_dict(_require(data, "arrowPoint", where), where),
        elbow_point=_point_from_dict(_require(data, "elbowPoint", where), where),
        text_point=_point_from_dict(_require(data, "textPoint", where), where),
        text=text,
        layer_id=layer_id,
    )


def layer_from_dict(data: Mapping[str, Any]) -> Layer:
    layer_id = str(_require(data, "id", "layer"))
    return Layer(
        id=layer_id,
        name=str(data.get("name", layer_id)),
        color=str(data.get("color", "#ffffff")),
        visible=bool(data.get("visible", True)),
        locked=bool(data.get("locked", False)),
    )


def title_block_from_dict(data: Mapping[str, Any]) -> TitleBlock:
    defaults = TitleBlock()
    return TitleBlock(
        detail_name=str(data.get("detailName", defaults.detail_name)),
        material=str(data.get("material", defaults.material)),
        thickness=str(data.get("thickness", defaults.thickness)),
        author=str(data.get("author", defaults.author)),
        date=str(data.get("date", defaults.date)),
    )


def _list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise DrawingFormatError(f"drawingState.{key}: expected a list")
    return value


def document_from_dict(data: Mapping[str, Any]) -> Tuple[DrawingState, TitleBlock]:
    """Разобрать словарь документа.

    Отсутствующий список слоёв заменяется набором слоёв по умолчанию.

    Raises:
        DrawingFormatError: структура документа некорректна.
    """
    if not isinstance(data, Mapping):
        raise DrawingFormatError("Document root must be a JSON object")
    state_data = _require(data, "drawingState", "document")
    if not isinstance(state_data, Mapping):
        raise DrawingFormatError("drawingState must be a JSON object")

    layers = [layer_from_dict(item) for item in _list(state_data, "layers")]
    state = DrawingState(
        shapes=[shape_from_dict(item) for item in _list(state_data, "shapes")],
        dimensions=[dimension_from_dict(item) for item in _list(state_data, "dimensions")],
        annotations=[annotation_from_dict(item) for item in _list(state_data, "annotations")],
        layers=layers or list(INITIAL_LAYERS),
    )
    title_data = data.get("titleBlock") or {}
    if not isinstance(title_data, Mapping):
        raise DrawingFormatError("titleBlock must be a JSON object")
    return state, title_block_from_dict(title_data)


def load_document(path: PathLike) -> Tuple[DrawingState, TitleBlock]:
    """Прочитать документ из файла.

    Raises:
        FileNotFoundError: файл не найден.
        DrawingFormatError: файл не является документом чертежа.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Drawing not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DrawingFormatError(f"{path}: not a UTF-8 JSON document ({exc})") from exc

    state, title_block = document_from_dict(data)
    logger.debug(
        "Документ загружен: %s (%d фигур, %d размеров, %d надписей)",
        path, len(state.shapes), len(state.dimensions), len(state.annotations),
    )
    return state, title_block
