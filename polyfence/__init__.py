"""Polyfence - Non-overlapping shape placement on a plane.

This library places polygons, rectangles, circles and line strings on a 2D
plane while keeping every polygonal shape disjoint from the others: a new
shape that overlaps accepted ones is trimmed, or rejected when it would
enclose, be enclosed by, or be consumed by them. Geometry is handled with
Shapely.
"""


# Geometry kernel
from .kernel import GeometryKernel, DifferenceResult

# Shapes
from .shapes import (
    Shape,
    PolygonGeometry,
    CircleGeometry,
    LineGeometry,
    build_geometry,
    rectangle_ring,
)

# Resolution engine
from .engine import Outcome, validate_and_trim

# Feature store
from .store import FeatureStore, AddResult

# Configuration
from .config import ShapeLimits, KernelConfig, CIRCLE_STEPS

# Export and measurement
from .export import create_feature_collection, dumps, export_filename
from .metrics import shape_area, total_area, total_overlap_area

# Core types (enums)
from .core import (
    ShapeKind,
    OutcomeKind,
    KernelStatus,
    RejectionReason,
)

# Core exceptions
from .core import (
    PolyfenceError,
    ValidationError,
    ConfigurationError,
    ShapeRejectedError,
    KernelWarning,
)

__all__ = [

    # Geometry kernel
    'GeometryKernel',
    'DifferenceResult',

    # Shapes
    'Shape',
    'PolygonGeometry',
    'CircleGeometry',
    'LineGeometry',
    'build_geometry',
    'rectangle_ring',

    # Resolution engine
    'Outcome',
    'validate_and_trim',

    # Feature store
    'FeatureStore',
    'AddResult',

    # Configuration
    'ShapeLimits',
    'KernelConfig',
    'CIRCLE_STEPS',

    # Export and measurement
    'create_feature_collection',
    'dumps',
    'export_filename',
    'shape_area',
    'total_area',
    'total_overlap_area',

    # Core types (enums)
    'ShapeKind',
    'OutcomeKind',
    'KernelStatus',
    'RejectionReason',

    # Core exceptions
    'PolyfenceError',
    'ValidationError',
    'ConfigurationError',
    'ShapeRejectedError',
    'KernelWarning',
]
