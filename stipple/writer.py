"""
Writing stippled regions back to the board.

Once all of the regions of a layer have been calculated with shapely,
they are converted to board polygon records. Every write to a layer
happens under that layer's lock, since each layer job runs in its own
thread.
"""

import logging
from typing import Iterable, List

from shapely.geometry import Polygon
from shapely.geometry.polygon import LinearRing

from .base import StippledRegion
from .board import Board, Layer, PolygonFlag, PolygonRecord
from .geometry import ring_points, split_holes

logger = logging.getLogger(__name__)


def _add_outline(board: Board, record: PolygonRecord, polygon: Polygon) -> None:
    for x, y in ring_points(polygon.exterior):
        board.add_outline_point(record, x, y)


def _add_holes(board: Board, record: PolygonRecord, rings: Iterable[LinearRing]) -> None:
    for ring in rings:
        board.add_hole(record)
        for x, y in ring_points(ring):
            board.add_hole_point(record, x, y)


def delete_regions(board: Board, layer: Layer) -> int:
    """
    Remove all polygons from a stipple layer.

    Returns:
        Number of records removed
    """
    with layer.lock:
        removed = len(board.clear_polygons(layer))
    logger.info("Deleted %d polygons from %r", removed, layer.name)
    return removed


def write_regions(board: Board, layer: Layer, regions: List[StippledRegion],
                  replace_existing: bool = True) -> int:
    """
    Insert stippled regions into a layer as polygon records.

    Each region becomes one clearing polygon whose holes are the island's
    own holes followed by the cut-outs. A cut-out that itself encloses
    copper is written as several hole-free pieces. Overlays are written
    afterwards as separate solid polygons, keeping any holes they have,
    so they sit over the stippled base.

    Args:
        board: Board owning the layer
        layer: Target (stipple) layer
        regions: Regions to write, in order
        replace_existing: Remove every existing polygon on the layer first

    Returns:
        Number of records created
    """
    created = 0

    with layer.lock:
        if replace_existing:
            removed = len(board.clear_polygons(layer))
            logger.debug("Removed %d existing polygons from %r", removed, layer.name)

        for region in regions:
            # FULLPOLY would make bisection of stippled areas occur
            record = board.create_polygon(layer, PolygonFlag.CLEARPOLY)
            _add_outline(board, record, region.outline)
            _add_holes(board, record, region.outline.interiors)

            pieces = [piece for cutout in region.cutouts for piece in split_holes(cutout)]
            _add_holes(board, record, (piece.exterior for piece in pieces))
            created += 1

        # Again for overlays for lines, vias and pads
        for region in regions:
            for overlay in region.overlays:
                record = board.create_polygon(layer, PolygonFlag.FULLPOLY | PolygonFlag.CLEARPOLY)
                _add_outline(board, record, overlay)
                _add_holes(board, record, overlay.interiors)
                created += 1

        layer.invalidate_index()

    logger.info("Wrote %d polygons for %d areas to %r", created, len(regions), layer.name)
    return created
