"""Shape records and their kind-specific geometry payloads.

A :class:`Shape` pairs identity (``id``, ``created_at``, ``name``) with one of
three payloads:

- :class:`PolygonGeometry` for polygons and rectangles
- :class:`CircleGeometry` for circles (centre plus radius, discretized on
  demand by the kernel)
- :class:`LineGeometry` for open line strings

Records are immutable; trimming produces a replaced copy.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional, Sequence, Tuple, Union

from shapely.geometry import LineString, MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry

from .core.errors import ValidationError
from .core.geometry_utils import Region
from .core.types import ShapeKind
from .core.validation_utils import validate_circle, validate_path, validate_ring
from .kernel import GeometryKernel


@dataclass(frozen=True)
class PolygonGeometry:
    """Ring-based payload; after trimming may hold several disjoint regions."""

    region: Region

    def effective_region(self, kernel: GeometryKernel) -> Region:
        return self.region

    @property
    def output_geometry(self) -> BaseGeometry:
        return self.region

    def with_region(self, region: Region) -> "PolygonGeometry":
        return PolygonGeometry(region)


@dataclass(frozen=True)
class CircleGeometry:
    """Circle payload.

    ``center`` and ``radius`` always describe the circle as drawn. Once the
    circle has been trimmed, ``trimmed`` holds the remaining region and
    replaces the discretized circle in every later overlap check.
    """

    center: Tuple[float, float]
    radius: float
    trimmed: Optional[Region] = None

    def effective_region(self, kernel: GeometryKernel) -> Region:
        if self.trimmed is not None:
            return self.trimmed
        return kernel.discretize_circle(self.center, self.radius)

    @property
    def output_geometry(self) -> BaseGeometry:
        if self.trimmed is not None:
            return self.trimmed
        return Point(self.center)

    def with_region(self, region: Region) -> "CircleGeometry":
        return replace(self, trimmed=region)


@dataclass(frozen=True)
class LineGeometry:
    """Open path payload; exempt from overlap checks."""

    line: LineString

    def effective_region(self, kernel: GeometryKernel) -> None:
        return None

    @property
    def output_geometry(self) -> BaseGeometry:
        return self.line

    def with_region(self, region: Region) -> "LineGeometry":
        raise TypeError("Line strings cannot be trimmed")


ShapeGeometry = Union[PolygonGeometry, CircleGeometry, LineGeometry]

_PAYLOAD_TYPES = {
    ShapeKind.POLYGON: PolygonGeometry,
    ShapeKind.RECTANGLE: PolygonGeometry,
    ShapeKind.CIRCLE: CircleGeometry,
    ShapeKind.LINESTRING: LineGeometry,
}


@dataclass(frozen=True)
class Shape:
    """An accepted (or candidate) shape.

    Attributes:
        id: Opaque identifier assigned at acceptance time
        kind: Shape kind tag
        geometry: Kind-specific payload
        created_at: Acceptance timestamp (UTC)
        name: Optional user label
        trimmed: True if the stored geometry is the result of trimming
    """

    id: str
    kind: ShapeKind
    geometry: ShapeGeometry
    created_at: datetime
    name: Optional[str] = None
    trimmed: bool = False

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.kind]
        if not isinstance(self.geometry, expected):
            raise ValidationError(
                f"{self.kind.value} shapes need a {expected.__name__}, "
                f"got {type(self.geometry).__name__}"
            )

    @property
    def is_polygonal(self) -> bool:
        return self.kind.is_polygonal

    @property
    def output_geometry(self) -> BaseGeometry:
        """Geometry exposed to rendering and export."""
        return self.geometry.output_geometry

    def region(self, kernel: GeometryKernel) -> Optional[Region]:
        """Polygonal region used for overlap checks (None for line strings)."""
        return self.geometry.effective_region(kernel)

    def with_region(self, region: Region) -> "Shape":
        """Return a copy whose geometry is replaced by a trimmed ``region``."""
        return replace(self, geometry=self.geometry.with_region(region), trimmed=True)

    def renamed(self, name: Optional[str]) -> "Shape":
        return replace(self, name=name)


def rectangle_ring(
    corner_a: Sequence[float],
    corner_b: Sequence[float],
) -> list:
    """Closed ring of the axis-aligned rectangle spanned by two opposite corners.

    Examples:
        >>> rectangle_ring((0, 0), (2, 1))
        [(0.0, 0.0), (2.0, 0.0), (2.0, 1.0), (0.0, 1.0), (0.0, 0.0)]
    """
    x1, y1 = float(corner_a[0]), float(corner_a[1])
    x2, y2 = float(corner_b[0]), float(corner_b[1])
    return [(x1, y1), (x2, y1), (x2, y2), (x1, y2), (x1, y1)]


def build_geometry(kind: Union[ShapeKind, str], payload: Any) -> ShapeGeometry:
    """Turn a raw construction payload into the payload type for ``kind``.

    Accepted payloads:
        - polygon / rectangle: ``PolygonGeometry``, a shapely Polygon or
          MultiPolygon, or a sequence of ring vertices (closed or open)
        - circle: ``CircleGeometry`` or a ``(center, radius)`` pair
        - linestring: ``LineGeometry``, a shapely LineString, or a point
          sequence

    Raises:
        ValidationError: If the payload is malformed for ``kind``
    """
    try:
        kind = ShapeKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unknown shape kind: {kind!r}") from e

    if kind is ShapeKind.CIRCLE:
        if isinstance(payload, CircleGeometry):
            # Candidates always start from the full disc
            center, radius = validate_circle(payload.center, payload.radius)
            return CircleGeometry(center=center, radius=radius)
        try:
            center, radius = payload
        except (TypeError, ValueError) as e:
            raise ValidationError("Circle payload must be a (center, radius) pair") from e
        center, radius = validate_circle(center, radius)
        return CircleGeometry(center=center, radius=radius)

    if kind is ShapeKind.LINESTRING:
        if isinstance(payload, LineGeometry):
            payload = payload.line
        if isinstance(payload, LineString):
            payload = list(payload.coords)
        return LineGeometry(LineString(validate_path(payload)))

    if isinstance(payload, PolygonGeometry):
        payload = payload.region
    if isinstance(payload, (Polygon, MultiPolygon)):
        if payload.is_empty:
            raise ValidationError(f"{kind.value} geometry is empty")
        return PolygonGeometry(payload)
    return PolygonGeometry(Polygon(validate_ring(payload)))


__all__ = [
    'PolygonGeometry',
    'CircleGeometry',
    'LineGeometry',
    'ShapeGeometry',
    'Shape',
    'rectangle_ring',
    'build_geometry',
]
