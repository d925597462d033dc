"""GeoJSON interchange export for accepted shapes.

Each shape becomes a Feature whose geometry is its stored (possibly trimmed)
geometry, with a flat property bag. Circles additionally carry their
original ``center`` and ``radius``; an untrimmed circle is exported as its
centre Point, a trimmed one as the trimmed polygon.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional
import json

from shapely.geometry import mapping

from .shapes import CircleGeometry, Shape


def shape_to_feature(shape: Shape) -> Dict[str, Any]:
    """Convert one shape to a GeoJSON Feature dict."""
    properties: Dict[str, Any] = {
        'id': shape.id,
        'shapeType': shape.kind.value,
        'createdAt': shape.created_at.isoformat(),
        'name': shape.name,
    }
    if isinstance(shape.geometry, CircleGeometry):
        properties['radius'] = shape.geometry.radius
        properties['center'] = list(shape.geometry.center)

    return {
        'type': 'Feature',
        'geometry': mapping(shape.output_geometry),
        'properties': properties,
    }


def create_feature_collection(shapes: Iterable[Shape]) -> Dict[str, Any]:
    """Build a GeoJSON FeatureCollection from ``shapes`` (insertion order kept).

    Examples:
        >>> from polyfence import FeatureStore
        >>> store = FeatureStore()
        >>> _ = store.add_circle((0, 0), 10)
        >>> create_feature_collection(store)['features'][0]['geometry']['type']
        'Point'
    """
    return {
        'type': 'FeatureCollection',
        'features': [shape_to_feature(shape) for shape in shapes],
    }


def dumps(shapes: Iterable[Shape], indent: Optional[int] = 2) -> str:
    """Serialize ``shapes`` as GeoJSON text."""
    return json.dumps(create_feature_collection(shapes), indent=indent)


def export_filename(now: Optional[datetime] = None) -> str:
    """Timestamped file name for an export, e.g. ``map-features-2024-01-31T12-00-00.geojson``."""
    now = now or datetime.now(timezone.utc)
    return f"map-features-{now.strftime('%Y-%m-%dT%H-%M-%S')}.geojson"


__all__ = [
    'shape_to_feature',
    'create_feature_collection',
    'dumps',
    'export_filename',
]
