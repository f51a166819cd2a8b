"""
Pytest configuration and fixtures for the detail drawing engines.

Provides:
- A reference plate drawing (contour 100x60 with a hole, a pocket and a line)
- Drawing document fixtures written to a temporary directory
- Package logger reset between tests
"""

import json
import logging
from pathlib import Path

import pytest

from detail_drawing.io.document import save_document
from detail_drawing.logging_config import PACKAGE_LOGGER
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


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog keeps working in later tests."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.filters.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ============================================================================
# Shapes
# ============================================================================

@pytest.fixture
def contour() -> Rectangle:
    """Outer plate contour (0,0)-(100,60)."""
    return Rectangle('plate', Point(0, 0), Point(100, 60))


@pytest.fixture
def hole() -> Circle:
    """Hole of radius 10 centred at (30, 30)."""
    return Circle('hole', Point(30, 30), 10)


@pytest.fixture
def pocket() -> Rectangle:
    """Inner rectangle 20x15 with its min corner at (60, 20)."""
    return Rectangle('pocket', Point(60, 20), Point(80, 35))


@pytest.fixture
def slot_line() -> Line:
    """Horizontal line of length 30 inside the contour."""
    return Line('slot', Point(55, 50), Point(85, 50))


@pytest.fixture
def plate_shapes(contour, hole, pocket, slot_line):
    return [contour, hole, pocket, slot_line]


@pytest.fixture
def plate_state(plate_shapes) -> DrawingState:
    """Plate drawing without dimensions or annotations."""
    return DrawingState(shapes=list(plate_shapes))


@pytest.fixture
def annotated_state(plate_shapes) -> DrawingState:
    """Plate drawing with one dimension and both annotation kinds."""
    return DrawingState(
        shapes=list(plate_shapes),
        dimensions=[Dimension('dim-manual', Point(0, 0), Point(100, 0), -40.0)],
        annotations=[
            TextAnnotation('note', Point(5, 70), 'Break sharp edges', font_size=10.0, color='#ff0000'),
            LeaderAnnotation('leader', Point(30, 40), Point(40, 80), Point(60, 80), '4 holes'),
        ],
    )


@pytest.fixture
def title_block() -> TitleBlock:
    return TitleBlock(
        detail_name='Mounting plate',
        material='S235',
        thickness='5 mm',
        author='J. Smith',
        date='2024-05-01',
    )


# ============================================================================
# Documents on disk
# ============================================================================

@pytest.fixture
def plate_document(tmp_path: Path, plate_state, title_block) -> Path:
    """Plate drawing saved as a JSON document."""
    return save_document(tmp_path / 'plate.json', plate_state, title_block)


@pytest.fixture
def broken_document(tmp_path: Path) -> Path:
    """A JSON file that is not a drawing document."""
    path = tmp_path / 'broken.json'
    path.write_text(json.dumps({'shapes': []}), encoding='utf-8')
    return path


# ============================================================================
# Assertion helpers
# ============================================================================

def assert_unique_ids(items) -> None:
    """Assert that no id occurs twice."""
    ids = [item.id for item in items]
    assert len(ids) == len(set(ids)), f"Duplicate ids: {ids}"
