"""
Unit tests for detail_drawing.model module.
"""

import dataclasses

import pytest

from detail_drawing.errors import InvalidArgumentError
from detail_drawing.model import (
    INITIAL_LAYERS,
    Circle,
    DimensionStyle,
    DrawingState,
    Layer,
    Point,
    Rectangle,
    ShapeType,
)


class TestShapes:
    """Tests for shape variants."""

    @pytest.mark.parametrize("radius", [0, -1])
    def test_circle_radius_must_be_positive(self, radius):
        """Test circle radius must be positive."""
        with pytest.raises(InvalidArgumentError):
            Circle('c', Point(0, 0), radius)

    def test_invalid_argument_is_value_error(self):
        """Test invalid argument is value error."""
        with pytest.raises(ValueError):
            Circle('c', Point(0, 0), 0)

    def test_rectangle_size_ignores_corner_order(self):
        """Test rectangle size ignores corner order."""
        rect = Rectangle('r', Point(10, 8), Point(2, 3))
        assert (rect.width, rect.height, rect.area) == (8, 5, 40)

    def test_shapes_are_frozen(self, hole):
        """Test shapes are frozen."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            hole.radius = 5

    def test_type_tags(self, contour, hole, slot_line):
        """Test type tags."""
        assert contour.type == ShapeType.RECTANGLE
        assert hole.type == ShapeType.CIRCLE
        assert slot_line.type == ShapeType.LINE


class TestDimensionStyle:
    """Tests for DimensionStyle.parse."""

    @pytest.mark.parametrize("value,expected", [
        ("auto", DimensionStyle.AUTO),
        ("Shapes-Only", DimensionStyle.SHAPES_ONLY),
        (" full ", DimensionStyle.FULL),
        (DimensionStyle.FULL, DimensionStyle.FULL),
    ])
    def test_parse(self, value, expected):
        """Test parse."""
        assert DimensionStyle.parse(value) == expected

    def test_unknown(self):
        """Test unknown."""
        with pytest.raises(InvalidArgumentError, match="shapes-only"):
            DimensionStyle.parse("everything")


class TestDrawingState:
    """Tests for DrawingState helpers."""

    def test_default_layers(self):
        """Test default layers."""
        state = DrawingState()
        assert [layer.id for layer in state.layers] == [
            'contour', 'dimensions', 'annotations', 'axes', 'auxiliary',
        ]
        assert state.layers is not DrawingState().layers

    def test_find_shape(self, plate_state, hole):
        """Test find shape."""
        assert plate_state.find_shape('hole') == hole
        assert plate_state.find_shape('missing') is None

    def test_layer_visibility(self):
        """Test layer visibility."""
        state = DrawingState(layers=[
            Layer('contour', 'Contour', '#000000'),
            Layer('axes', 'Axes', '#0000ff', visible=False),
        ])
        assert state.is_layer_visible('contour')
        assert not state.is_layer_visible('axes')
        assert not state.is_layer_visible('ghost')

    def test_is_empty(self, plate_state):
        """Test is empty."""
        assert DrawingState().is_empty()
        assert not plate_state.is_empty()

    def test_initial_layers_visible(self):
        """Test initial layers visible."""
        assert all(layer.visible and not layer.locked for layer in INITIAL_LAYERS)
