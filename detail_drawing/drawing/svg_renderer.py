"""
SVG-лист для печати: рамка, основная надпись, чертёж в масштабе «вписать».

Модель листа:
  - A4 297×210 / A3 420×297, альбомная ориентация
  - поле 10 мм, рамка по полю
  - основная надпись 120×25 мм в правом нижнем углу рамки
  - чертёж над надписью с зазором 8 мм

Масштаб и смещение считает compute_print_layout. Ось Y чертежа направлена
вверх, у SVG вниз: Y_листа = поле + avail_h − (y·scale + offset_y).

Рисуются только элементы видимых слоёв.
"""

import logging
import math
from pathlib import Path
from typing import Optional, Tuple, Union

import svgwrite

from detail_drawing.config import (
    AXES_LAYER_ID,
    CONTOUR_LAYER_ID,
    PAGE_MARGIN,
    TITLE_BLOCK_H,
    TITLE_BLOCK_W,
)
from detail_drawing.drawing.layout import PrintLayout, compute_print_layout, page_drawing_area
from detail_drawing.geometry.kernel import dimension_label, dimension_line_points, perpendicular
from detail_drawing.model import (
    Circle,
    Dimension,
    DrawingState,
    LeaderAnnotation,
    Line,
    Point,
    Rectangle,
    TextAnnotation,
    TitleBlock,
)

logger = logging.getLogger(__name__)

PagePoint = Tuple[float, float]

FRAME_STROKE = 0.5
TITLE_STROKE = 0.7
TITLE_INNER_STROKE = 0.3
CONTOUR_STROKE = 0.3
THIN_STROKE = 0.1
LEADER_STROKE = 0.15

TITLE_ROW1_H = 10.0     # строка с наименованием детали
TITLE_COL1_W = 60.0     # левая колонка нижней части

DIM_FONT = 2.8          # мм на листе
DIM_ARROW = 2.0
DIM_EXT_OVERSHOOT = 1.0
LEADER_ARROW = 1.5
LEADER_FONT = 2.8
TEXT_FONT_MIN = 2.0
TEXT_FONT_MAX = 5.0
DEFAULT_TEXT_FONT = 12.0  # единицы чертежа

AXIS_DASHARRAY = "6,1.5,1,1.5"


def print_color(color: str) -> str:
    """Белый цвет экрана печатается чёрным."""
    return '#000000' if color.lower() in ('#ffffff', '#fff', 'white') else color


def format_scale(scale: float) -> str:
    """Масштаб вида 1:N (уменьшение) или N:1 (увеличение)."""
    if scale <= 0:
        return "-"
    if scale < 1:
        inv = 1.0 / scale
        return f"1:{int(round(inv))}" if abs(inv - round(inv)) < 0.01 else f"1:{inv:.2g}"
    return f"{int(round(scale))}:1" if abs(scale - round(scale)) < 0.01 else f"{scale:.2g}:1"


class SheetTransform:
    """Перевод точек чертежа в мм листа (ось Y вниз)."""

    def __init__(self, layout: PrintLayout, avail_h: float, margin: float = PAGE_MARGIN):
        self.layout = layout
        self.avail_h = avail_h
        self.margin = margin

    @property
    def scale(self) -> float:
        return self.layout.scale

    def __call__(self, p: Point) -> PagePoint:
        x, y = self.layout.transform(p)
        return self.margin + x, self.margin + self.avail_h - y


# ---------------------------------------------------------------------------
# Рамка и основная надпись
# ---------------------------------------------------------------------------

def add_frame(dwg: svgwrite.Drawing, page_w: float, page_h: float, margin: float = PAGE_MARGIN) -> None:
    dwg.add(dwg.rect(
        insert=(margin, margin),
        size=(page_w - 2 * margin, page_h - 2 * margin),
        fill='none', stroke='black', stroke_width=FRAME_STROKE,
    ))


def _text(g, dwg, x, y, text, size, weight='normal', anchor='start', fill='black') -> None:
    g.add(dwg.text(
        text, insert=(x, y),
        font_size=size, font_family='Helvetica, Arial, sans-serif',
        font_weight=weight, text_anchor=anchor, fill=fill,
    ))


def add_title_block(
    dwg: svgwrite.Drawing,
    page_w: float,
    page_h: float,
    title_block: TitleBlock,
    scale: Optional[float] = None,
    margin: float = PAGE_MARGIN,
) -> None:
    """Основная надпись 120×25 мм в правом нижнем углу рамки.

    Верхняя строка 10 мм отведена под наименование; ниже две колонки по 60 мм:
    материал и толщина слева, автор, дата и масштаб справа.
    """
    x0 = page_w - margin - TITLE_BLOCK_W
    y0 = page_h - margin - TITLE_BLOCK_H
    bottom = y0 + TITLE_BLOCK_H

    g = dwg.g(id='title-block')
    g.add(dwg.rect(
        insert=(x0, y0), size=(TITLE_BLOCK_W, TITLE_BLOCK_H),
        fill='white', stroke='black', stroke_width=TITLE_STROKE,
    ))
    g.add(dwg.line(
        start=(x0, y0 + TITLE_ROW1_H), end=(x0 + TITLE_BLOCK_W, y0 + TITLE_ROW1_H),
        stroke='black', stroke_width=TITLE_INNER_STROKE,
    ))
    g.add(dwg.line(
        start=(x0 + TITLE_COL1_W, y0 + TITLE_ROW1_H), end=(x0 + TITLE_COL1_W, bottom),
        stroke='black', stroke_width=TITLE_INNER_STROKE,
    ))

    _text(g, dwg, x0 + 3, y0 + 7, title_block.detail_name or 'Untitled', 4.2, weight='bold')

    left = x0 + 3
    right = x0 + TITLE_COL1_W + 3
    row = y0 + TITLE_ROW1_H
    _text(g, dwg, left, row + 5, f"Material: {title_block.material or '-'}", 2.8)
    _text(g, dwg, left, row + 11, f"Thickness: {title_block.thickness or '-'}", 2.8)
    _text(g, dwg, right, row + 5, f"Author: {title_block.author or '-'}", 2.8)
    _text(g, dwg, right, row + 11, f"Date: {title_block.date or '-'}", 2.8)
    if scale:
        _text(g, dwg, right, row + 14.5, f"Scale: {format_scale(scale)}", 2.8)

    dwg.add(g)


# ---------------------------------------------------------------------------
# Элементы чертежа
# ---------------------------------------------------------------------------

def _arrow(dwg, tip: PagePoint, tail: PagePoint, size: float, color: str):
    """Залитая стрелка с остриём в tip, направленная от tail."""
    angle = math.atan2(tip[1] - tail[1], tip[0] - tail[0])
    spread = math.pi / 8
    return dwg.polygon(
        points=[
            tip,
            (tip[0] - size * math.cos(angle - spread), tip[1] - size * math.sin(angle - spread)),
            (tip[0] - size * math.cos(angle + spread), tip[1] - size * math.sin(angle + spread)),
        ],
        fill=color, stroke='none',
    )


def render_shapes(dwg: svgwrite.Drawing, state: DrawingState, tr: SheetTransform):
    group = dwg.g(id='shapes', fill='none')
    for shape in state.shapes:
        layer = state.layer(shape.layer_id)
        if layer is None or not layer.visible:
            continue
        attrs = {
            'stroke': print_color(layer.color),
            'stroke_width': CONTOUR_STROKE if layer.id == CONTOUR_LAYER_ID else THIN_STROKE,
        }
        if layer.id == AXES_LAYER_ID:
            attrs['stroke_dasharray'] = AXIS_DASHARRAY

        if isinstance(shape, Line):
            el = dwg.line(start=tr(shape.p1), end=tr(shape.p2), **attrs)
        elif isinstance(shape, Circle):
            el = dwg.circle(center=tr(shape.center), r=shape.radius * tr.scale, **attrs)
        elif isinstance(shape, Rectangle):
            (x1, y1), (x2, y2) = tr(shape.p1), tr(shape.p2)
            el = dwg.rect(
                insert=(min(x1, x2), min(y1, y2)),
                size=(abs(x2 - x1), abs(y2 - y1)),
                **attrs,
            )
        else:
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")
        el['data-id'] = shape.id
        group.add(el)
    return group


def _readable_angle(a: PagePoint, b: PagePoint) -> float:
    """Угол текста вдоль a→b в градусах, не вверх ногами."""
    angle = math.degrees(math.atan2(b[1] - a[1], b[0] - a[0]))
    if angle > 90:
        angle -= 180
    elif angle < -90:
        angle += 180
    return angle


def _render_dimension(dwg, group, dim: Dimension, tr: SheetTransform, color: str) -> None:
    line_p1, line_p2 = dimension_line_points(dim)
    d1, d2 = tr(line_p1), tr(line_p2)
    b1, b2 = tr(dim.p1), tr(dim.p2)

    # выносные линии продлеваются за размерную на DIM_EXT_OVERSHOOT
    px, py = perpendicular(dim.p1, dim.p2)
    direction = 1.0 if dim.offset >= 0 else -1.0
    ox, oy = px * direction * DIM_EXT_OVERSHOOT, -py * direction * DIM_EXT_OVERSHOOT
    group.add(dwg.line(start=b1, end=(d1[0] + ox, d1[1] + oy)))
    group.add(dwg.line(start=b2, end=(d2[0] + ox, d2[1] + oy)))

    group.add(dwg.line(start=d1, end=d2))
    group.add(_arrow(dwg, d1, d2, DIM_ARROW, color))
    group.add(_arrow(dwg, d2, d1, DIM_ARROW, color))

    mid = ((d1[0] + d2[0]) / 2, (d1[1] + d2[1]) / 2)
    angle = _readable_angle(d1, d2)
    label = dwg.text(
        dimension_label(dim), insert=(mid[0], mid[1] - 1),
        font_size=DIM_FONT, text_anchor='middle', fill=color, stroke='none',
    )
    label.rotate(angle, center=mid)
    label['data-id'] = dim.id
    group.add(label)


def render_dimensions(dwg: svgwrite.Drawing, state: DrawingState, tr: SheetTransform):
    group = dwg.g(id='dimensions')
    for dim in state.dimensions:
        layer = state.layer(dim.layer_id)
        if layer is None or not layer.visible:
            continue
        if dim.p1 == dim.p2:
            continue
        color = print_color(layer.color)
        dim_group = dwg.g(stroke=color, stroke_width=THIN_STROKE)
        _render_dimension(dwg, dim_group, dim, tr, color)
        group.add(dim_group)
    return group


def render_annotations(dwg: svgwrite.Drawing, state: DrawingState, tr: SheetTransform):
    group = dwg.g(id='annotations')
    for annotation in state.annotations:
        layer = state.layer(annotation.layer_id)
        if layer is None or not layer.visible:
            continue
        color = print_color(layer.color)

        if isinstance(annotation, TextAnnotation):
            size = (annotation.font_size or DEFAULT_TEXT_FONT) * tr.scale
            size = max(TEXT_FONT_MIN, min(size, TEXT_FONT_MAX))
            group.add(dwg.text(
                annotation.text, insert=tr(annotation.position),
                font_size=size, fill=print_color(annotation.color or color),
            ))
        elif isinstance(annotation, LeaderAnnotation):
            arrow, elbow, text_pt = (
                tr(annotation.arrow_point), tr(annotation.elbow_point), tr(annotation.text_point),
            )
            group.add(dwg.polyline(
                points=[arrow, elbow, text_pt],
                fill='none', stroke=color, stroke_width=LEADER_STROKE,
            ))
            group.add(_arrow(dwg, arrow, elbow, LEADER_ARROW, color))
            to_right = text_pt[0] > elbow[0]
            group.add(dwg.text(
                annotation.text,
                insert=(text_pt[0] + (1 if to_right else -1), text_pt[1] - 0.5),
                font_size=LEADER_FONT, fill=color,
                text_anchor='start' if to_right else 'end',
            ))
        else:
            raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")
    return group


# ---------------------------------------------------------------------------
# Лист
# ---------------------------------------------------------------------------

def render_print_sheet(
    state: DrawingState,
    title_block: TitleBlock = TitleBlock(),
    page_size: str = 'A4',
    filename: str = 'drawing.svg',
    margin: float = PAGE_MARGIN,
) -> svgwrite.Drawing:
    """Построить SVG-лист (без записи на диск).

    Raises:
        InvalidArgumentError: неизвестный формат листа.
    """
    page_w, page_h, avail_w, avail_h = page_drawing_area(page_size, margin)
    layout = compute_print_layout(state, avail_w, avail_h, 0.0)
    tr = SheetTransform(layout, avail_h, margin)

    dwg = svgwrite.Drawing(
        filename,
        size=(f"{page_w:g}mm", f"{page_h:g}mm"),
        viewBox=f"0 0 {page_w:g} {page_h:g}",
        debug=False,
    )
    dwg.add(dwg.rect(insert=(0, 0), size=(page_w, page_h), fill='white'))
    add_frame(dwg, page_w, page_h, margin)
    dwg.add(render_shapes(dwg, state, tr))
    dwg.add(render_dimensions(dwg, state, tr))
    dwg.add(render_annotations(dwg, state, tr))
    add_title_block(dwg, page_w, page_h, title_block, layout.scale, margin)

    logger.debug("Лист %s: масштаб %s", page_size.upper(), format_scale(layout.scale))
    return dwg


def export_svg(
    state: DrawingState,
    output_path: Union[str, Path],
    title_block: TitleBlock = TitleBlock(),
    page_size: str = 'A4',
    margin: float = PAGE_MARGIN,
) -> Path:
    """Сохранить лист для печати в SVG-файл."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    dwg = render_print_sheet(state, title_block, page_size, str(path), margin)
    dwg.save(pretty=True)
    logger.info("Лист для печати сохранён: %s", path)
    return path
