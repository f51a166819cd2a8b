"""
DXF output renderer for detail drawings.

Generates DXF files readable by AutoCAD, LibreCAD, QCAD and other CAD
systems. Uses the ezdxf library.

Layer mapping:
- one DXF layer per drawing layer, named after it
- ACI color = position of the layer in the drawing + 1
- the axes layer is drawn with the DASHDOT linetype
- hidden layers are not exported at all

Entity mapping:
- Line -> LINE, Circle -> CIRCLE, Rectangle -> closed LWPOLYLINE
- Dimension -> aligned DIMENSION with the same signed offset
- TextAnnotation -> TEXT, LeaderAnnotation -> LWPOLYLINE + TEXT

Usage:
    from detail_drawing.drawing.dxf_renderer import export_dxf

    export_dxf(state, 'plate.dxf')
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import ezdxf
from ezdxf import units
from ezdxf.enums import TextEntityAlignment

from detail_drawing.config import AXES_LAYER_ID, DIM_LABEL_DECIMALS
from detail_drawing.model import (
    Circle,
    Dimension,
    DrawingState,
    Layer,
    LeaderAnnotation,
    Line,
    Rectangle,
    Shape,
    TextAnnotation,
)

logger = logging.getLogger(__name__)

TEXT_STYLE = 'DETAIL'
DIM_STYLE = 'DETAIL'
DEFAULT_TEXT_HEIGHT = 3.5
LEADER_TEXT_HEIGHT = 3.0

Point2 = Tuple[float, float]


def layer_color(index: int) -> int:
    """ACI color for the layer at ``index`` (1..255)."""
    return index % 255 + 1


@dataclass
class DxfStyle:
    """Style parameters for DXF entities."""
    layer: str = '0'
    color: Optional[int] = None  # None = ByLayer
    lineweight: Optional[int] = None  # None = ByLayer (in 0.01mm units)
    linetype: Optional[str] = None  # None = ByLayer

    def attribs(self) -> Dict[str, object]:
        result: Dict[str, object] = {'layer': self.layer}
        if self.color is not None:
            result['color'] = self.color
        if self.lineweight is not None:
            result['lineweight'] = self.lineweight
        if self.linetype is not None:
            result['linetype'] = self.linetype
        return result


class DxfRenderer:
    """DXF drawing renderer using ezdxf."""

    def __init__(self):
        self.doc: Optional[ezdxf.document.Drawing] = None
        self.msp = None  # Modelspace
        self.layer_names: Dict[str, str] = {}  # drawing layer id -> DXF layer name

    def _require_doc(self) -> None:
        if self.msp is None:
            raise RuntimeError("Drawing not created. Call create_drawing() first.")

    def create_drawing(self, layers: Sequence[Layer] = (), dxf_version: str = 'R2010') -> None:
        """Create a new DXF document with the given drawing layers.

        Args:
            layers: Drawing layers; hidden ones are skipped.
            dxf_version: DXF version (R2000, R2004, R2007, R2010, R2013, R2018)
        """
        # setup=True loads the standard linetypes (DASHDOT for axes)
        self.doc = ezdxf.new(dxf_version, setup=True, units=units.MM)
        self.msp = self.doc.modelspace()
        self.layer_names = {}

        for index, layer in enumerate(layers):
            if layer.visible:
                self.add_layer(layer, layer_color(index))

        self._setup_styles()
        logger.info("Created DXF drawing with %d layers", len(self.layer_names))

    def add_layer(self, layer: Layer, color: int) -> str:
        self._require_doc()
        name = layer.name or layer.id
        if name not in self.doc.layers:
            linetype = 'DASHDOT' if layer.id == AXES_LAYER_ID else 'CONTINUOUS'
            self.doc.layers.add(name, color=color, linetype=linetype)
        self.layer_names[layer.id] = name
        return name

    def _setup_styles(self) -> None:
        if TEXT_STYLE not in self.doc.styles:
            self.doc.styles.add(TEXT_STYLE, font='arial.ttf')

        dimstyle = self.doc.dimstyles.new(DIM_STYLE)
        dimstyle.dxf.dimtxsty = TEXT_STYLE
        dimstyle.dxf.dimtxt = DEFAULT_TEXT_HEIGHT
        dimstyle.dxf.dimgap = 1.0
        dimstyle.dxf.dimasz = 2.5
        dimstyle.dxf.dimtsz = 0
        dimstyle.dxf.dimexe = 2.0
        dimstyle.dxf.dimexo = 1.5
        dimstyle.dxf.dimdec = DIM_LABEL_DECIMALS

    def style_for(self, layer_id: str) -> Optional[DxfStyle]:
        """Entity style for a drawing layer, or None if it is not exported."""
        name = self.layer_names.get(layer_id)
        return DxfStyle(layer=name) if name is not None else None

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def add_line(self, start: Point2, end: Point2, style: Optional[DxfStyle] = None) -> None:
        self._require_doc()
        self.msp.add_line(start, end, dxfattribs=(style or DxfStyle()).attribs())

    def add_polyline(
        self,
        points: List[Point2],
        closed: bool = False,
        style: Optional[DxfStyle] = None,
    ) -> None:
        self._require_doc()
        if len(points) < 2:
            return
        self.msp.add_lwpolyline(points, close=closed, dxfattribs=(style or DxfStyle()).attribs())

    def add_circle(self, center: Point2, radius: float, style: Optional[DxfStyle] = None) -> None:
        self._require_doc()
        self.msp.add_circle(center, radius, dxfattribs=(style or DxfStyle()).attribs())

    def add_rectangle(self, corner1: Point2, corner2: Point2, style: Optional[DxfStyle] = None) -> None:
        """Closed polyline through the four corners of an axis-aligned box."""
        (x1, y1), (x2, y2) = corner1, corner2
        self.add_polyline([(x1, y1), (x2, y1), (x2, y2), (x1, y2)], closed=True, style=style)

    def add_text(
        self,
        text: str,
        position: Point2,
        height: float = DEFAULT_TEXT_HEIGHT,
        style: Optional[DxfStyle] = None,
    ) -> None:
        self._require_doc()
        attribs = (style or DxfStyle()).attribs()
        attribs.update({'style': TEXT_STYLE, 'height': height})
        self.msp.add_text(text, dxfattribs=attribs).set_placement(
            position, align=TextEntityAlignment.LEFT
        )

    def add_aligned_dimension(
        self,
        p1: Point2,
        p2: Point2,
        distance: float,
        text: Optional[str] = None,
        style: Optional[DxfStyle] = None,
    ) -> None:
        """Aligned dimension; positive distance is left of p1 -> p2."""
        self._require_doc()
        dim = self.msp.add_aligned_dim(
            p1=p1,
            p2=p2,
            distance=distance,
            dimstyle=DIM_STYLE,
            dxfattribs=(style or DxfStyle()).attribs(),
        )
        if text:
            dim.set_text(text)
        dim.render()

    def save(self, path: Union[str, Path]) -> Path:
        if self.doc is None:
            raise RuntimeError("Drawing not created. Call create_drawing() first.")
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.doc.saveas(str(path))
        logger.info("DXF saved: %s", path)
        return path

    # ------------------------------------------------------------------
    # Drawing elements
    # ------------------------------------------------------------------

    def add_shape(self, shape: Shape) -> bool:
        """Add a shape; returns False when its layer is not exported."""
        style = self.style_for(shape.layer_id)
        if style is None:
            return False
        if isinstance(shape, Line):
            self.add_line(shape.p1.as_tuple(), shape.p2.as_tuple(), style)
        elif isinstance(shape, Circle):
            self.add_circle(shape.center.as_tuple(), shape.radius, style)
        elif isinstance(shape, Rectangle):
            self.add_rectangle(shape.p1.as_tuple(), shape.p2.as_tuple(), style)
        else:
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")
        return True

    def add_dimension(self, dim: Dimension) -> bool:
        style = self.style_for(dim.layer_id)
        if style is None:
            return False
        if dim.p1 == dim.p2:
            logger.warning("Skipping zero-length dimension %s", dim.id)
            return False
        self.add_aligned_dimension(dim.p1.as_tuple(), dim.p2.as_tuple(), dim.offset, dim.text, style)
        return True

    def add_annotation(self, annotation) -> bool:
        style = self.style_for(annotation.layer_id)
        if style is None:
            return False
        if isinstance(annotation, TextAnnotation):
            self.add_text(annotation.text, annotation.position.as_tuple(), DEFAULT_TEXT_HEIGHT, style)
        elif isinstance(annotation, LeaderAnnotation):
            self.add_polyline(
                [annotation.arrow_point.as_tuple(),
                 annotation.elbow_point.as_tuple(),
                 annotation.text_point.as_tuple()],
                style=style,
            )
            self.add_text(annotation.text, annotation.text_point.as_tuple(), LEADER_TEXT_HEIGHT, style)
        else:
            raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")
        return True


def render_drawing(state: DrawingState, dxf_version: str = 'R2010') -> DxfRenderer:
    """Build a DXF document from the visible part of a drawing."""
    renderer = DxfRenderer()
    renderer.create_drawing(state.layers, dxf_version)

    n_shapes = sum(renderer.add_shape(s) for s in state.shapes)
    n_dims = sum(renderer.add_dimension(d) for d in state.dimensions)
    n_notes = sum(renderer.add_annotation(a) for a in state.annotations)
    logger.debug("DXF entities: %d shapes, %d dimensions, %d annotations", n_shapes, n_dims, n_notes)
    return renderer


def export_dxf(state: DrawingState, output_path: Union[str, Path], dxf_version: str = 'R2010') -> Path:
    """Export the visible part of a drawing to a DXF file."""
    return render_drawing(state, dxf_version).save(output_path)
