"""Ортогональные проекции: вид сбоку и вид сверху по профилю и глубине."""

from detail_drawing.projection.orthographic import (
    ProjectionResult,
    clear_projections,
    generate_all_projections,
    generate_side_view,
    generate_top_view,
)

__all__ = [
    "ProjectionResult",
    "clear_projections",
    "generate_all_projections",
    "generate_side_view",
    "generate_top_view",
]
