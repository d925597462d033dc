"""Common geometry manipulation utilities.

Helpers shared by the kernel adapter and the shape payloads for normalizing
shapely results into polygonal regions.
"""

from typing import Iterator, List, Union

from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

Region = Union[Polygon, MultiPolygon]


def iter_polygons(geometry: BaseGeometry) -> Iterator[Polygon]:
    """Yield every non-empty Polygon contained in ``geometry``.

    Recurses into MultiPolygons and GeometryCollections; lines and points are
    skipped.

    Examples:
        >>> poly = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        >>> len(list(iter_polygons(GeometryCollection([poly, poly.exterior]))))
        1
    """
    if geometry is None or geometry.is_empty:
        return
    if isinstance(geometry, Polygon):
        yield geometry
    elif isinstance(geometry, (MultiPolygon, GeometryCollection)):
        for part in geometry.geoms:
            yield from iter_polygons(part)


def polygonal_part(geometry: BaseGeometry) -> Region:
    """Collapse ``geometry`` into a Polygon or MultiPolygon.

    Unlike taking the largest piece, every polygon is kept: a trimmed shape
    may legitimately consist of several disjoint regions. Returns an empty
    Polygon when nothing polygonal remains.

    Args:
        geometry: Any shapely geometry (typically a boolean-operation result)

    Returns:
        Polygon when one piece remains, MultiPolygon for several, empty
        Polygon for none
    """
    pieces: List[Polygon] = list(iter_polygons(geometry))
    if not pieces:
        return Polygon()
    if len(pieces) == 1:
        return pieces[0]
    return MultiPolygon(pieces)


def is_ccw(region: Region) -> bool:
    """Return True if the (first) exterior ring of ``region`` runs counter-clockwise."""
    for poly in iter_polygons(region):
        return poly.exterior.is_ccw
    return True


def match_orientation(region: Region, reference: Region) -> Region:
    """Orient every ring of ``region`` the way ``reference``'s exterior runs.

    Boolean operations in GEOS normalize winding; downstream consumers expect
    the winding the user drew.

    Examples:
        >>> cw = Polygon([(0, 0), (0, 1), (1, 1), (1, 0)])
        >>> ccw = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        >>> match_orientation(ccw, cw).exterior.is_ccw
        False
    """
    sign = 1.0 if is_ccw(reference) else -1.0
    oriented = [orient(poly, sign=sign) for poly in iter_polygons(region)]
    if not oriented:
        return region
    if isinstance(region, Polygon):
        return oriented[0]
    return MultiPolygon(oriented)


__all__ = [
    'Region',
    'iter_polygons',
    'polygonal_part',
    'is_ccw',
    'match_orientation',
]
