"""Shared measurement helpers for polyfence shapes.

Areas are measured through the geometry kernel so geographic stores report
square metres. ``total_overlap_area`` is the quantity the non-overlap policy
keeps at zero.
"""

from __future__ import annotations

from typing import Iterable, Optional

from shapely.ops import unary_union

from .kernel import GeometryKernel
from .shapes import Shape


def shape_area(shape: Shape, kernel: Optional[GeometryKernel] = None) -> float:
    """Area of a shape's effective region (0.0 for line strings)."""
    kernel = kernel or GeometryKernel()
    region = shape.region(kernel)
    if region is None:
        return 0.0
    return kernel.area(region)


def total_area(shapes: Iterable[Shape], kernel: Optional[GeometryKernel] = None) -> float:
    """Sum of :func:`shape_area` over ``shapes``."""
    kernel = kernel or GeometryKernel()
    return sum(shape_area(shape, kernel) for shape in shapes)


def total_overlap_area(shapes: Iterable[Shape], kernel: Optional[GeometryKernel] = None) -> float:
    """Compute the total overlapping area among polygonal ``shapes``.

    Measured in the shapes' own coordinate units.
    """
    kernel = kernel or GeometryKernel()
    regions = [shape.region(kernel) for shape in shapes if shape.is_polygonal]
    regions = [region for region in regions if region is not None and not region.is_empty]
    if len(regions) < 2:
        return 0.0
    union = unary_union(regions)
    combined_area = sum(region.area for region in regions)
    return max(0.0, combined_area - union.area)


__all__ = [
    'shape_area',
    'total_area',
    'total_overlap_area',
]
