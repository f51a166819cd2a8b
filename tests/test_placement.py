"""
Unit tests for dimension placement, deduplication and label symbols.

Tests:
- find_optimal_offset collision search
- Duplicate / similar dimension detection
- DimensionRegistry bookkeeping
- Diameter and delta labels
"""

import pytest

from detail_drawing.drawing.dimensions.dedup import (
    DimensionRegistry,
    dimension_orientation,
    is_duplicate_dimension,
    is_similar_dimension,
)
from detail_drawing.drawing.dimensions.placer import (
    collision_bbox,
    dimension_collision_bbox,
    find_optimal_offset,
    has_collision,
)
from detail_drawing.drawing.dimensions.symbols import delta_label, diameter_label
from detail_drawing.model import Dimension, Point


class TestFindOptimalOffset:
    """Tests for find_optimal_offset."""

    def test_no_existing_returns_initial(self):
        """Test no existing returns initial."""
        offset = find_optimal_offset(Point(0, 0), Point(50, 0), [], 20, 15)
        assert offset == 20

    def test_steps_away_from_collision(self):
        """Test steps away from collision."""
        taken = Dimension('a', Point(0, 0), Point(50, 0), offset=20)
        offset = find_optimal_offset(Point(0, 0), Point(50, 0), [taken], 20, 15)
        assert offset > 20
        box = collision_bbox(Point(0, 0), Point(50, 0), offset)
        assert not has_collision(box, [dimension_collision_bbox(taken)])

    def test_negative_initial_steps_outward(self):
        """Steps follow the sign of the initial offset, not of the increment."""
        taken = Dimension('a', Point(0, 0), Point(50, 0), offset=-25)
        offset = find_optimal_offset(Point(0, 0), Point(50, 0), [taken], -25, 18)
        assert offset < -25

    def test_exhausted_returns_last_tried(self):
        """With every slot taken the last attempt is returned."""
        # a vertical wall crossing every candidate position
        blocker = [Dimension('wall', Point(25, -1000), Point(25, 1000))]
        offset = find_optimal_offset(Point(0, 0), Point(50, 0), blocker, 10, 5, max_attempts=4)
        assert offset == pytest.approx(10 + 3 * 5)

    def test_distant_dimensions_do_not_interfere(self):
        """Test distant dimensions do not interfere."""
        far = Dimension('far', Point(500, 500), Point(600, 500), offset=20)
        assert find_optimal_offset(Point(0, 0), Point(50, 0), [far], 20, 15) == 20

    def test_low_density_results_are_collision_free(self):
        """Six stacked dimensions placed one by one never overlap."""
        placed = []
        for i in range(6):
            p1, p2 = Point(0, 0), Point(40 + i, 0)
            offset = find_optimal_offset(p1, p2, placed, 20, 15, max_attempts=15)
            placed.append(Dimension(f'd{i}', p1, p2, offset))

        boxes = [dimension_collision_bbox(d) for d in placed]
        for i, box in enumerate(boxes):
            assert not has_collision(box, boxes[:i] + boxes[i + 1:])


class TestDuplicateDetection:
    """Tests for is_duplicate_dimension and is_similar_dimension."""

    def test_same_endpoints(self):
        """Test same endpoints."""
        dims = [Dimension('a', Point(0, 0), Point(10, 0))]
        assert is_duplicate_dimension(Point(0.3, 0), Point(10, 0.4), dims)

    def test_reversed_endpoints(self):
        """Test reversed endpoints."""
        dims = [Dimension('a', Point(0, 0), Point(10, 0))]
        assert is_duplicate_dimension(Point(10, 0), Point(0, 0), dims)

    def test_outside_tolerance(self):
        """Test outside tolerance."""
        dims = [Dimension('a', Point(0, 0), Point(10, 0))]
        assert not is_duplicate_dimension(Point(0, 0), Point(10.6, 0), dims)

    def test_orientation(self):
        """Test orientation."""
        assert dimension_orientation(Dimension('h', Point(0, 0), Point(5, 0))) == 'horizontal'
        assert dimension_orientation(Dimension('v', Point(0, 5), Point(0, 0))) == 'vertical'
        assert dimension_orientation(Dimension('s', Point(0, 0), Point(5, 5))) is None

    def test_similar_nearby_same_value(self):
        """Test similar nearby same value."""
        existing = [Dimension('a', Point(0, 0), Point(20, 0))]
        candidate = Dimension('', Point(3, 4), Point(23, 4))
        assert is_similar_dimension(candidate, existing)

    def test_similar_requires_same_label(self):
        """Test similar requires same label."""
        existing = [Dimension('a', Point(0, 0), Point(20, 0))]
        candidate = Dimension('', Point(0, 2), Point(21, 2))
        assert not is_similar_dimension(candidate, existing)

    def test_similar_requires_proximity(self):
        """Test similar requires proximity."""
        existing = [Dimension('a', Point(0, 0), Point(20, 0))]
        candidate = Dimension('', Point(0, 10), Point(20, 10))
        assert not is_similar_dimension(candidate, existing)

    def test_similar_requires_same_orientation(self):
        """Test similar requires same orientation."""
        existing = [Dimension('a', Point(0, 0), Point(0, 20))]
        candidate = Dimension('', Point(0, 0), Point(20, 0))
        assert not is_similar_dimension(candidate, existing)


class TestDimensionRegistry:
    """Tests for DimensionRegistry."""

    def test_accepts_and_tracks_new(self):
        """Test accepts and tracks new."""
        prior = Dimension('old', Point(0, 0), Point(10, 0))
        registry = DimensionRegistry([prior])
        dim = Dimension('new', Point(0, 0), Point(0, 10))

        assert registry.accepts(dim)
        registry.add(dim)

        assert registry.new_dimensions == [dim]
        assert registry.all_dimensions == [prior, dim]

    def test_rejects_duplicate_and_counts(self):
        """Test rejects duplicate and counts."""
        registry = DimensionRegistry([Dimension('old', Point(0, 0), Point(10, 0))])
        assert not registry.accepts(Dimension('', Point(10, 0), Point(0, 0)))
        assert registry.skipped == 1

    def test_no_dedup_accepts_everything(self):
        """Test no dedup accepts everything."""
        registry = DimensionRegistry(
            [Dimension('old', Point(0, 0), Point(10, 0))], deduplicate=False,
        )
        assert registry.accepts(Dimension('', Point(0, 0), Point(10, 0)))
        assert registry.skipped == 0

    def test_existing_list_not_modified(self):
        """Test existing list not modified."""
        existing = [Dimension('old', Point(0, 0), Point(10, 0))]
        registry = DimensionRegistry(existing)
        registry.add(Dimension('new', Point(0, 0), Point(0, 10)))
        assert len(existing) == 1


class TestLabels:
    """Tests for dimension text symbols."""

    @pytest.mark.parametrize("radius,expected", [
        (10, "ø20.0"),
        (2.5, "ø5.0"),
        (3.75, "ø7.5"),
    ])
    def test_diameter_label(self, radius, expected):
        """Test diameter label."""
        assert diameter_label(radius) == expected

    def test_delta_label_keeps_sign(self):
        """Test delta label keeps sign."""
        assert delta_label(30) == "30.0"
        assert delta_label(-12.34) == "-12.3"

    def test_delta_label_no_negative_zero(self):
        """Test delta label no negative zero."""
        assert delta_label(-0.01) == "0.0"
