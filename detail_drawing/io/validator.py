"""
Drawing Validation Module.

Performs integrity checks on a loaded drawing before the engines run:
- Duplicate ids within shapes, dimensions, annotations and layers
- References to layers that do not exist
- Degenerate geometry (zero-length lines and dimensions, zero-size rectangles)

Non-critical problems are reported as warnings and don't block processing.
Also hosts the argument checks for the projection engine.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from detail_drawing.errors import InvalidArgumentError
from detail_drawing.geometry.kernel import distance
from detail_drawing.model import DrawingState, Line, Rectangle

logger = logging.getLogger(__name__)

_DEGENERATE_EPS = 1e-9


class ValidationSeverity(Enum):
    """Severity level of validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single validation issue found in the drawing."""
    code: str
    severity: ValidationSeverity
    message: str
    count: int = 1
    details: List[str] = field(default_factory=list)  # offending ids

    def __str__(self) -> str:
        text = f"[{self.severity.value.upper()}] {self.code}: {self.message}"
        if self.count > 1:
            text += f" ({self.count} occurrences)"
        return text


@dataclass
class ValidationReport:
    """Complete validation report for a drawing."""
    n_shapes: int
    n_dimensions: int
    n_annotations: int
    n_layers: int
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """A drawing is valid when it has no error-level issues."""
        return not self.errors

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Drawing Validation Report",
            "=" * 40,
            f"Shapes: {self.n_shapes}",
            f"Dimensions: {self.n_dimensions}",
            f"Annotations: {self.n_annotations}",
            f"Layers: {self.n_layers}",
        ]
        if self.issues:
            lines.append("")
            lines.append("Issues:")
            lines.extend(f"  - {issue}" for issue in self.issues)
        lines.append("")
        lines.append(f"Overall: {'VALID' if self.is_valid else 'INVALID'}")
        return "\n".join(lines)


def _duplicate_ids(collection: str, items: Iterable) -> List[ValidationIssue]:
    counts = Counter(item.id for item in items)
    duplicates = sorted(item_id for item_id, n in counts.items() if n > 1)
    if not duplicates:
        return []
    logger.error("Duplicate %s ids: %s", collection, ", ".join(duplicates))
    return [ValidationIssue(
        code=f"DUPLICATE_{collection.upper()}_IDS",
        severity=ValidationSeverity.ERROR,
        message=f"{len(duplicates)} {collection} id(s) used more than once",
        count=len(duplicates),
        details=duplicates[:10],
    )]


def _unknown_layers(state: DrawingState) -> List[ValidationIssue]:
    known = {layer.id for layer in state.layers}
    orphans = [
        item.id
        for item in (*state.shapes, *state.dimensions, *state.annotations)
        if item.layer_id not in known
    ]
    if not orphans:
        return []
    logger.warning("%d element(s) reference unknown layers", len(orphans))
    return [ValidationIssue(
        code="UNKNOWN_LAYER",
        severity=ValidationSeverity.WARNING,
        message=f"{len(orphans)} element(s) reference a layer that does not exist",
        count=len(orphans),
        details=orphans[:10],
    )]


def _degenerate_geometry(state: DrawingState) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    zero_shapes = []
    for shape in state.shapes:
        if isinstance(shape, Line) and distance(shape.p1, shape.p2) <= _DEGENERATE_EPS:
            zero_shapes.append(shape.id)
        elif isinstance(shape, Rectangle) and (
            shape.width <= _DEGENERATE_EPS or shape.height <= _DEGENERATE_EPS
        ):
            zero_shapes.append(shape.id)
    if zero_shapes:
        issues.append(ValidationIssue(
            code="DEGENERATE_SHAPES",
            severity=ValidationSeverity.WARNING,
            message=f"{len(zero_shapes)} zero-length line(s) or zero-size rectangle(s)",
            count=len(zero_shapes),
            details=zero_shapes[:10],
        ))
        logger.warning("Drawing has %d degenerate shapes", len(zero_shapes))

    zero_dims = [d.id for d in state.dimensions if distance(d.p1, d.p2) <= _DEGENERATE_EPS]
    if zero_dims:
        issues.append(ValidationIssue(
            code="DEGENERATE_DIMENSIONS",
            severity=ValidationSeverity.WARNING,
            message=f"{len(zero_dims)} dimension(s) measure a zero distance",
            count=len(zero_dims),
            details=zero_dims[:10],
        ))
        logger.warning("Drawing has %d zero-length dimensions", len(zero_dims))

    return issues


def validate_drawing(state: DrawingState) -> ValidationReport:
    """Validate drawing integrity.

    Checks performed:
    1. Ids are unique within each collection (error)
    2. Every element references an existing layer (warning)
    3. No degenerate lines, rectangles or dimensions (warning)

    Returns:
        ValidationReport with all findings
    """
    logger.debug(
        "Validating drawing: %d shapes, %d dimensions, %d annotations",
        len(state.shapes), len(state.dimensions), len(state.annotations),
    )

    issues: List[ValidationIssue] = []
    issues += _duplicate_ids("shape", state.shapes)
    issues += _duplicate_ids("dimension", state.dimensions)
    issues += _duplicate_ids("annotation", state.annotations)
    issues += _duplicate_ids("layer", state.layers)
    issues += _unknown_layers(state)
    issues += _degenerate_geometry(state)

    report = ValidationReport(
        n_shapes=len(state.shapes),
        n_dimensions=len(state.dimensions),
        n_annotations=len(state.annotations),
        n_layers=len(state.layers),
        issues=issues,
    )
    logger.info("Validation complete: %s", "VALID" if report.is_valid else "INVALID")
    return report


def validate_projection_depth(depth: float) -> float:
    """Check the extrusion depth of a projection.

    Raises:
        InvalidArgumentError: depth is not a finite positive number.
    """
    try:
        value = float(depth)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Projection depth must be a number, got {depth!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidArgumentError(f"Projection depth must be positive, got {depth!r}")
    return value


def validate_document_file(filepath: str) -> ValidationReport:
    """Load a drawing document and validate it.

    Raises:
        DrawingFormatError: the file is not a valid drawing document.
    """
    from detail_drawing.io.document import load_document

    state, _ = load_document(filepath)
    return validate_drawing(state)
