"""Geometry kernel adapter.

Wraps the shapely primitives the resolution engine needs (intersection and
containment predicates, set difference, area, circle discretization) behind a
small interface with fail-safe semantics: a failing predicate answers
``False``, a failing difference reports ``KernelStatus.FAILED`` so callers can
tell it apart from an empty result. Every failure emits a
:class:`~polyfence.core.errors.KernelWarning`.

Boundary convention: regions that only touch along edges or at vertices do
not overlap, and containment is non-strict (an inner region may touch the
outer boundary) unless ``KernelConfig.strict_containment`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence
import warnings

import numpy as np
import shapely
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

from .config import KernelConfig
from .core.errors import KernelWarning
from .core.geometry_utils import Region, polygonal_part
from .core.types import KernelStatus

EARTH_RADIUS_M = 6371008.8


class _InvalidOperand(Exception):
    """Operand cannot be used in a boolean operation."""
    pass


@dataclass(frozen=True)
class DifferenceResult:
    """Outcome of :meth:`GeometryKernel.difference`.

    Attributes:
        status: OK, EMPTY or FAILED
        region: The remaining region when status is OK, otherwise None
        error: Failure description when status is FAILED
    """
    status: KernelStatus
    region: Optional[Region] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is KernelStatus.OK

    @property
    def empty(self) -> bool:
        return self.status is KernelStatus.EMPTY

    @property
    def failed(self) -> bool:
        return self.status is KernelStatus.FAILED


class GeometryKernel:
    """Planar polygon operations with fail-safe error handling.

    Examples:
        >>> kernel = GeometryKernel()
        >>> a = Polygon([(0, 0), (10, 0), (10, 10), (0, 10)])
        >>> b = Polygon([(10, 0), (20, 0), (20, 10), (10, 10)])
        >>> kernel.overlaps(a, b)  # shared edge only
        False
        >>> kernel.difference(a, b).region.equals(a)
        True
    """

    def __init__(self, config: Optional[KernelConfig] = None):
        self.config = config or KernelConfig()

    def __repr__(self) -> str:
        return f"GeometryKernel({self.config!r})"

    def discretize_circle(
        self,
        center: Sequence[float],
        radius: float,
        steps: Optional[int] = None,
    ) -> Polygon:
        """Approximate a circle as a regular ``steps``-sided polygon.

        Args:
            center: Circle centre in the kernel's coordinate space
            radius: Radius in metres (planar mode: in coordinate units)
            steps: Number of sides (default: ``KernelConfig.circle_steps``)

        Returns:
            Closed counter-clockwise polygon whose vertices lie on the circle

        Examples:
            >>> ring = GeometryKernel().discretize_circle((0, 0), 1.0)
            >>> len(ring.exterior.coords)
            65
        """
        steps = steps or self.config.circle_steps
        cx, cy = float(center[0]), float(center[1])
        angles = np.linspace(0.0, 2.0 * np.pi, steps, endpoint=False)
        dx = radius * np.cos(angles)
        dy = radius * np.sin(angles)

        if self.config.geographic:
            # Local equirectangular approximation around the centre
            cos_lat = max(np.cos(np.radians(cy)), 1e-12)
            dx = np.degrees(dx / (EARTH_RADIUS_M * cos_lat))
            dy = np.degrees(dy / EARTH_RADIUS_M)

        return Polygon(np.column_stack([cx + dx, cy + dy]))

    def overlaps(self, a: Region, b: Region) -> bool:
        """Return True if ``a`` and ``b`` share an intersection with positive area.

        Touching boundaries do not count. On kernel failure returns False.
        """
        try:
            self._check_operands(a, b)
            if not a.intersects(b) or a.touches(b):
                return False
            return self.area(a.intersection(b)) > self.config.min_overlap_area
        except Exception as e:
            self._warn("overlaps", e, "False")
            return False

    def contains(self, outer: Region, inner: Region) -> bool:
        """Return True if ``inner`` lies entirely within ``outer``'s closed region.

        On kernel failure returns False.
        """
        try:
            self._check_operands(outer, inner)
            if inner.is_empty:
                return False
            if self.config.strict_containment:
                return bool(outer.contains_properly(inner))
            return bool(outer.covers(inner))
        except Exception as e:
            self._warn("contains", e, "False")
            return False

    def difference(self, minuend: Region, subtrahend: Region) -> DifferenceResult:
        """Subtract ``subtrahend`` from ``minuend``.

        Non-polygonal debris (collapsed slivers, shared edges) is dropped from
        the result. A result with no area above ``min_overlap_area`` (measured
        by :meth:`area`) is EMPTY.
        """
        try:
            self._check_operands(minuend, subtrahend)
            raw = minuend.difference(subtrahend)
        except Exception as e:
            self._warn("difference", e, "FAILED")
            return DifferenceResult(KernelStatus.FAILED, error=str(e))

        region = polygonal_part(raw)
        if region.is_empty or self.area(region) <= self.config.min_overlap_area:
            return DifferenceResult(KernelStatus.EMPTY)

        if not region.is_valid:
            reason = explain_validity(region)
            self._warn("difference", reason, "FAILED")
            return DifferenceResult(KernelStatus.FAILED, error=reason)

        return DifferenceResult(KernelStatus.OK, region=region)

    def area(self, region: BaseGeometry) -> float:
        """Area of ``region`` in square metres (planar mode: square units).

        In geographic mode the region is projected onto a local plane
        centred on its centroid before measuring.
        """
        if region is None or region.is_empty:
            return 0.0
        try:
            if not self.config.geographic:
                return float(region.area)
            return float(self._to_local_plane(region).area)
        except Exception as e:
            self._warn("area", e, "0.0")
            return 0.0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _to_local_plane(region: BaseGeometry) -> BaseGeometry:
        origin = region.centroid
        lon0, lat0 = origin.x, origin.y
        cos_lat = np.cos(np.radians(lat0))

        def project(coords: np.ndarray) -> np.ndarray:
            px = EARTH_RADIUS_M * np.radians(coords[:, 0] - lon0) * cos_lat
            py = EARTH_RADIUS_M * np.radians(coords[:, 1] - lat0)
            return np.column_stack([px, py])

        return shapely.transform(region, project)

    @staticmethod
    def _check_operands(*operands: BaseGeometry) -> None:
        for geom in operands:
            if not isinstance(geom, (Polygon, MultiPolygon)):
                raise _InvalidOperand(f"expected a polygonal region, got {type(geom).__name__}")
            if not geom.is_valid:
                raise _InvalidOperand(explain_validity(geom))

    @staticmethod
    def _warn(operation: str, error, fallback: str) -> None:
        warnings.warn(
            f"Geometry {operation} failed ({error}); using {fallback}",
            KernelWarning,
            stacklevel=3,
        )


__all__ = [
    'EARTH_RADIUS_M',
    'DifferenceResult',
    'GeometryKernel',
]
