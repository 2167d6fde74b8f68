"""
Polygon primitives and boolean operators on the integer board grid.

A polygon set is a plain list of shapely Polygons. Every operator here
returns such a list, snapped to the integer grid, with empty, degenerate
and non-areal pieces silently discarded.
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely import intersection, make_valid, union_all
from shapely.geometry import LineString, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import LinearRing, orient
from shapely.ops import split

Point = Tuple[int, int]

# Board coordinates are integers
GRID_SIZE = 1


def explode(geometry: Optional[BaseGeometry]) -> List[Polygon]:
    """
    Flatten any shapely result into a list of non-empty polygons.

    Args:
        geometry: Polygon, MultiPolygon, GeometryCollection or anything else

    Returns:
        Counter-clockwise oriented polygons with positive area
    """
    if geometry is None or geometry.is_empty:
        return []

    if geometry.geom_type == 'Polygon':
        if geometry.area <= 0:
            return []
        return [orient(geometry, sign=1.0)]

    if geometry.geom_type in ('MultiPolygon', 'GeometryCollection'):
        polygons = []
        for part in geometry.geoms:
            polygons.extend(explode(part))
        return polygons

    # Points and lines left over from touching shapes
    return []


def to_polygons(points: Sequence[Tuple[float, float]],
                holes: Iterable[Sequence[Tuple[float, float]]] = ()) -> List[Polygon]:
    """
    Create polygons from a vertex list, closed or open.

    Self-touching input is repaired, which may split it into several pieces.

    Args:
        points: Outline vertices
        holes: Optional hole vertex lists

    Returns:
        List of valid polygons (empty if the input is degenerate)
    """
    if len(set(map(tuple, points))) < 3:
        return []

    valid_holes = [hole for hole in holes if len(set(map(tuple, hole))) >= 3]
    polygon = Polygon(points, valid_holes)

    if not polygon.is_valid:
        # Try to fix it
        polygon = make_valid(polygon)

    return explode(polygon)


def ring_points(ring: LinearRing) -> List[Point]:
    """
    Return the integer vertices of a ring without the closing duplicate.

    Args:
        ring: Exterior or interior ring of a shapely Polygon

    Returns:
        Open vertex list
    """
    points: List[Point] = []
    for x, y in ring.coords:
        point = (int(round(x)), int(round(y)))
        if not points or points[-1] != point:
            points.append(point)

    if len(points) > 1 and points[0] == points[-1]:
        points.pop()

    return points


def union(polygons: Iterable[Polygon]) -> List[Polygon]:
    """
    Merge overlapping polygons into maximal islands.

    Args:
        polygons: Polygon set to merge

    Returns:
        Disjoint polygons covering the same area
    """
    polygons = [p for p in polygons if p is not None and not p.is_empty]
    polygons = [p if p.is_valid else make_valid(p) for p in polygons]
    if not polygons:
        return []

    return explode(union_all(polygons, grid_size=GRID_SIZE))


def intersect(first: Iterable[Polygon], second: Iterable[Polygon]) -> List[Polygon]:
    """
    Intersect two polygon sets.

    Args:
        first: First polygon set
        second: Second polygon set

    Returns:
        Disjoint polygons covered by both sets
    """
    a = union(first)
    b = union(second)
    if not a or not b:
        return []

    left = union_all(a)
    right = union_all(b)
    if not left.intersects(right):
        return []

    return explode(intersection(left, right, grid_size=GRID_SIZE))


def inset(polygons: Iterable[Polygon], distance: float) -> List[Polygon]:
    """
    Offset a polygon set along its normals.

    Args:
        polygons: Polygon set to offset
        distance: Offset distance; negative values shrink the set inward

    Returns:
        Every piece left after the offset (may be empty)
    """
    merged = union(polygons)
    if not merged:
        return []

    # Shapely's buffer creates offset; negative = inward
    shrunk = union_all(merged).buffer(
        distance,
        join_style='mitre',
        mitre_limit=2.0
    )
    return union(explode(shrunk))


def bounding_box(polygon: BaseGeometry) -> Tuple[int, int, int, int]:
    """
    Calculate the integer bounding box of a polygon.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y)
    """
    if polygon.is_empty:
        return (0, 0, 0, 0)

    min_x, min_y, max_x, max_y = polygon.bounds
    return (math.floor(min_x), math.floor(min_y), math.ceil(max_x), math.ceil(max_y))


def diamond(x: int, y: int, half_width: int) -> Polygon:
    """
    Build a rhombus centred on (x, y) with the given half diagonal.

    Vertices are listed top, right, bottom, left.
    """
    return Polygon([
        (x, y - half_width),
        (x + half_width, y),
        (x, y + half_width),
        (x - half_width, y),
    ])


def split_holes(polygon: Polygon) -> List[Polygon]:
    """
    Cut a polygon into hole-free pieces covering the same area.

    Each remaining hole is cut by a vertical line through a point inside
    it, which opens the hole into the outlines of the pieces on either side.

    Args:
        polygon: Polygon, possibly with interiors

    Returns:
        Pieces without interiors
    """
    if not polygon.interiors:
        return [polygon]

    x = Polygon(polygon.interiors[0]).representative_point().x
    _, min_y, _, max_y = polygon.bounds
    blade = LineString([(x, min_y - 1), (x, max_y + 1)])

    pieces = explode(split(polygon, blade))
    if len(pieces) < 2:
        return [polygon]

    return [part for piece in pieces for part in split_holes(piece)]
