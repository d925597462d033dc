"""Common validation utilities.

Payload checks performed before a candidate is handed to the resolution
engine. These enforce data validity only (vertex counts, closed rings,
finite coordinates); geometric validity is the kernel's business.
"""

from typing import Sequence, Tuple

import numpy as np

from .errors import ValidationError


def as_coords(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Convert a point sequence into an Nx2 float array.

    Raises:
        ValidationError: If points are not 2D or contain NaN/inf
    """
    try:
        coords = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Coordinates are not numeric: {e}") from e

    if coords.ndim != 2 or coords.shape[1] < 2:
        raise ValidationError(f"Expected a sequence of (x, y) points, got shape {coords.shape}")
    coords = coords[:, :2]

    if not np.all(np.isfinite(coords)):
        raise ValidationError("Coordinates must be finite")
    return coords


def is_ring_closed(
    coords: np.ndarray,
    tolerance: float = 1e-10
) -> bool:
    """Check if coordinate ring is closed (first == last).

    Examples:
        >>> is_ring_closed(np.array([[0, 0], [1, 0], [1, 1], [0, 0]]))
        True
        >>> is_ring_closed(np.array([[0, 0], [1, 0], [1, 1]]))
        False
    """
    if len(coords) < 2:
        return False

    return np.allclose(coords[0], coords[-1], atol=tolerance)


def ensure_ring_closed(coords: np.ndarray) -> np.ndarray:
    """Ensure coordinate ring is closed by appending first point if needed."""
    if len(coords) < 3:
        return coords

    if not is_ring_closed(coords):
        coords = np.vstack([coords, coords[0:1]])

    return coords


def count_distinct_vertices(
    coords: np.ndarray,
    tolerance: float = 1e-10
) -> int:
    """Count unique vertices, snapped to a ``tolerance`` grid.

    Examples:
        >>> count_distinct_vertices(np.array([[0, 0], [1, 0], [0, 0], [1, 0]]))
        2
    """
    if len(coords) == 0:
        return 0
    snapped = np.round(np.asarray(coords, dtype=float) / tolerance)
    return len(np.unique(snapped, axis=0))


def validate_ring(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Validate a polygon ring payload and return it closed.

    Args:
        points: Ring vertices, closed or open

    Returns:
        Nx2 closed coordinate array

    Raises:
        ValidationError: If the ring has fewer than 3 distinct vertices

    Examples:
        >>> validate_ring([(0, 0), (1, 0), (1, 1)]).tolist()
        [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]]
    """
    coords = as_coords(points)
    if count_distinct_vertices(coords) < 3:
        raise ValidationError("A polygon ring needs at least 3 distinct vertices")
    return ensure_ring_closed(coords)


def validate_path(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Validate an open line-string payload (at least 2 distinct points)."""
    coords = as_coords(points)
    if len(coords) < 2 or count_distinct_vertices(coords) < 2:
        raise ValidationError("A line string needs at least 2 distinct points")
    return coords


def validate_circle(
    center: Sequence[float],
    radius: float
) -> Tuple[Tuple[float, float], float]:
    """Validate a circle payload.

    Raises:
        ValidationError: If the centre is not a finite 2D point or the
            radius is not a positive finite number
    """
    coords = as_coords([center])
    try:
        radius = float(radius)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Radius is not numeric: {radius!r}") from e
    if not np.isfinite(radius) or radius <= 0:
        raise ValidationError(f"Radius must be positive, got {radius}")
    return (float(coords[0, 0]), float(coords[0, 1])), radius


__all__ = [
    'as_coords',
    'is_ring_closed',
    'ensure_ring_closed',
    'count_distinct_vertices',
    'validate_ring',
    'validate_path',
    'validate_circle',
]
