"""Configuration dataclasses for the kernel and the feature store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Union

from .core.errors import ConfigurationError
from .core.types import ShapeKind

CIRCLE_STEPS = 64
"""Number of sides used when approximating a circle as a polygon."""

DEFAULT_MIN_OVERLAP_AREA = 1e-10


@dataclass(frozen=True)
class ShapeLimits:
    """Maximum number of concurrently held shapes per kind.

    Examples:
        >>> limits = ShapeLimits()
        >>> limits.limit_for(ShapeKind.CIRCLE)
        5
        >>> limits.updated(circle=1).circle
        1
    """

    polygon: int = 10
    rectangle: int = 10
    circle: int = 5
    linestring: int = 20

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"Limit for {f.name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"Limit for {f.name} must be non-negative, got {value}")

    def limit_for(self, kind: Union[ShapeKind, str]) -> int:
        return getattr(self, ShapeKind(kind).value)

    def updated(self, **changes: int) -> "ShapeLimits":
        """Return a copy with the given per-kind limits replaced."""
        unknown = set(changes) - {k.value for k in ShapeKind}
        if unknown:
            raise ConfigurationError(f"Unknown shape kind(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def as_dict(self) -> Dict[ShapeKind, int]:
        return {ShapeKind(name): value for name, value in asdict(self).items()}


@dataclass(frozen=True)
class KernelConfig:
    """Settings for :class:`polyfence.kernel.GeometryKernel`.

    Attributes:
        geographic: Coordinates are (longitude, latitude) degrees; circle radii
            and areas are converted through a local metric plane
        strict_containment: Use ``contains_properly`` instead of ``covers``, so
            regions touching the outer boundary are not considered enclosed
        min_overlap_area: Intersections or differences at or below this area
            are treated as empty. Square metres in geographic mode, square
            coordinate units otherwise
        circle_steps: Sides of the circle approximation
    """

    geographic: bool = False
    strict_containment: bool = False
    min_overlap_area: float = DEFAULT_MIN_OVERLAP_AREA
    circle_steps: int = CIRCLE_STEPS

    def __post_init__(self):
        if self.min_overlap_area < 0:
            raise ConfigurationError("min_overlap_area must be non-negative")
        if self.circle_steps < 3:
            raise ConfigurationError("circle_steps must be at least 3")


__all__ = [
    'CIRCLE_STEPS',
    'DEFAULT_MIN_OVERLAP_AREA',
    'ShapeLimits',
    'KernelConfig',
]
