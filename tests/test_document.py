"""
Unit tests for detail_drawing.io.document module.

Tests:
- Document save/load round trip
- camelCase keys and optional fields
- Malformed documents
"""

import json

import pytest

from detail_drawing.errors import DrawingFormatError
from detail_drawing.io.document import (
    document_from_dict,
    document_to_dict,
    load_document,
    save_document,
    shape_from_dict,
)
from detail_drawing.model import INITIAL_LAYERS, Circle, Dimension, Point, TitleBlock


class TestRoundTrip:
    """Tests for saving and loading documents."""

    def test_plate_round_trip(self, tmp_path, annotated_state, title_block):
        """Test plate round trip."""
        path = save_document(tmp_path / 'out' / 'plate.json', annotated_state, title_block)
        state, loaded_title = load_document(path)

        assert state.shapes == annotated_state.shapes
        assert state.dimensions == annotated_state.dimensions
        assert state.annotations == annotated_state.annotations
        assert state.layers == annotated_state.layers
        assert loaded_title == title_block

    def test_dimension_text_kept(self, tmp_path, plate_state):
        """Test dimension text kept."""
        plate_state.dimensions.append(
            Dimension('d', Point(0, 0), Point(10, 0), offset=-5, text='ø10.0')
        )
        path = save_document(tmp_path / 'd.json', plate_state)
        state, _ = load_document(path)
        assert state.dimensions[0].text == 'ø10.0'

    def test_unicode_written_verbatim(self, tmp_path, plate_state):
        """Test unicode written verbatim."""
        plate_state.dimensions.append(Dimension('d', Point(0, 0), Point(1, 0), text='ø1.0'))
        path = save_document(tmp_path / 'u.json', plate_state)
        assert 'ø1.0' in path.read_text(encoding='utf-8')


class TestSerialization:
    """Tests for the dictionary form."""

    def test_camel_case_keys(self, annotated_state, title_block):
        """Test camel case keys."""
        data = document_to_dict(annotated_state, title_block)
        assert set(data) == {'drawingState', 'titleBlock'}
        assert data['titleBlock']['detailName'] == 'Mounting plate'

        leader = data['drawingState']['annotations'][1]
        assert {'arrowPoint', 'elbowPoint', 'textPoint', 'layerId'} <= set(leader)

        note = data['drawingState']['annotations'][0]
        assert note['fontSize'] == 10.0
        assert note['color'] == '#ff0000'

    def test_optional_fields_omitted(self, plate_state):
        """Test optional fields omitted."""
        plate_state.dimensions.append(Dimension('d', Point(0, 0), Point(10, 0)))
        data = document_to_dict(plate_state)
        assert 'text' not in data['drawingState']['dimensions'][0]

    def test_circle_shape(self):
        """Test circle shape."""
        circle_dict = {'id': 'c', 'type': 'circle', 'layerId': 'contour',
                       'center': {'x': 1, 'y': 2}, 'radius': 3}
        assert shape_from_dict(circle_dict) == Circle('c', Point(1, 2), 3)

    def test_missing_layer_id_defaults_to_contour(self):
        """Test missing layer id defaults to contour."""
        shape = shape_from_dict({'id': 'l', 'type': 'line',
                                 'p1': {'x': 0, 'y': 0}, 'p2': {'x': 1, 'y': 0}})
        assert shape.layer_id == 'contour'

    def test_missing_layers_use_defaults(self):
        """Test missing layers use defaults."""
        state, title = document_from_dict({'drawingState': {'shapes': []}})
        assert state.layers == list(INITIAL_LAYERS)
        assert title == TitleBlock()


class TestMalformedDocuments:
    """Tests for DrawingFormatError cases."""

    def test_missing_drawing_state(self, broken_document):
        """Test missing drawing state."""
        with pytest.raises(DrawingFormatError):
            load_document(broken_document)

    def test_invalid_json(self, tmp_path):
        """Test invalid json."""
        path = tmp_path / 'bad.json'
        path.write_text('{not json', encoding='utf-8')
        with pytest.raises(DrawingFormatError):
            load_document(path)

    def test_invalid_utf8(self, tmp_path):
        """Test bytes that are not UTF-8 are a format error."""
        path = tmp_path / 'latin.json'
        path.write_bytes(b'{"drawingState": {"shapes": [], "x": "\xff\xfe"}}')
        with pytest.raises(DrawingFormatError):
            load_document(path)

    def test_missing_file(self, tmp_path):
        """Test missing file."""
        with pytest.raises(FileNotFoundError):
            load_document(tmp_path / 'nope.json')

    def test_unknown_shape_type(self):
        """Test unknown shape type."""
        with pytest.raises(DrawingFormatError):
            shape_from_dict({'id': 's', 'type': 'spline'})

    def test_bad_point(self):
        """Test bad point."""
        with pytest.raises(DrawingFormatError):
            shape_from_dict({'id': 'l', 'type': 'line', 'p1': {'x': 'a'}, 'p2': {'x': 0, 'y': 0}})

    def test_non_positive_radius(self):
        """Test non positive radius."""
        with pytest.raises(DrawingFormatError):
            shape_from_dict({'id': 'c', 'type': 'circle', 'center': {'x': 0, 'y': 0}, 'radius': 0})

    def test_shapes_must_be_list(self):
        """Test shapes must be list."""
        with pytest.raises(DrawingFormatError):
            document_from_dict({'drawingState': {'shapes': {}}})

    def test_root_must_be_object(self, tmp_path):
        """Test root must be object."""
        path = tmp_path / 'list.json'
        path.write_text(json.dumps([1, 2]), encoding='utf-8')
        with pytest.raises(DrawingFormatError):
            load_document(path)
