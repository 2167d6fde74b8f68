"""
Keepout shapes around existing board features.

Vias, pins, lines and pads that sit inside a stippled area must stay
surrounded by solid copper. Each feature is inflated by the stipple trace
plus its own clearance and returned as a polygon; these polygons later
become forced-solid overlays.
"""

import logging
from typing import List

import numpy as np
from shapely.geometry import Polygon

from constants import (
    CIRCLE_SEGMENTS,
    COMPONENT_STIPPLE,
    CORNER_SEGMENTS,
    SOLDER_STIPPLE,
    SOURCE_LAYER_FOR,
)
from .board import Board
from .geometry import explode

logger = logging.getLogger(__name__)


def _polygon_from_arrays(xs: np.ndarray, ys: np.ndarray) -> Polygon:
    """Round coordinate arrays onto the board grid and build a polygon."""
    xs = np.rint(xs).astype(np.int64)
    ys = np.rint(ys).astype(np.int64)
    return Polygon(list(zip(xs.tolist(), ys.tolist())))


def make_circular_overlay(x: int, y: int, radius: int, segments: int = CIRCLE_SEGMENTS) -> Polygon:
    """
    Approximate a circle with a regular polygon.

    Args:
        x, y: Centre
        radius: Circle radius
        segments: Number of polygon sides

    Returns:
        Polygon with ``segments`` vertices (empty if radius <= 0)
    """
    if radius <= 0 or segments < 3:
        return Polygon()

    theta = np.linspace(-np.pi, np.pi, segments, endpoint=False)
    return _polygon_from_arrays(x + radius * np.cos(theta), y + radius * np.sin(theta))


def make_rectangular_overlay(x0: int, y0: int, x1: int, y1: int, thickness: int) -> Polygon:
    """
    Build the body of a capsule around the segment (x0, y0)-(x1, y1).

    Args:
        x0, y0: First endpoint
        x1, y1: Second endpoint
        thickness: Half width of the rectangle, measured perpendicular
            to the segment

    Returns:
        Four-sided polygon (empty for a zero-length segment)
    """
    length = np.hypot(x1 - x0, y1 - y0)
    if length == 0 or thickness <= 0:
        return Polygon()

    # Unit normal scaled to the half width
    dx = -(y1 - y0) / length * thickness
    dy = (x1 - x0) / length * thickness

    xs = np.array([x0 + dx, x0 - dx, x1 - dx, x1 + dx])
    ys = np.array([y0 + dy, y0 - dy, y1 - dy, y1 + dy])
    return _polygon_from_arrays(xs, ys)


def make_rounded_rectangle(x0: int, y0: int, x1: int, y1: int, radius: int,
                           smoothness: int = CORNER_SEGMENTS) -> Polygon:
    """
    Make a rectangle whose corners are rounded with line segments.

    Args:
        x0, y0, x1, y1: Opposite corners of the rectangle
        radius: Corner radius, clamped to half the shorter side
        smoothness: Segments per 90 degree corner

    Returns:
        Polygon approximating the rounded rectangle
    """
    x0, x1 = min(x0, x1), max(x0, x1)
    y0, y1 = min(y0, y1), max(y0, y1)
    if x1 == x0 or y1 == y0:
        return Polygon()

    radius = max(0, min(radius, (x1 - x0) // 2, (y1 - y0) // 2))
    if radius == 0:
        return Polygon([(x0, y0), (x1, y0), (x1, y1), (x0, y1)])

    # Corner centres, counter-clockwise from the lower right, with the
    # angle at which each corner's arc starts
    corners = [
        (x1 - radius, y0 + radius, -np.pi / 2),
        (x1 - radius, y1 - radius, 0.0),
        (x0 + radius, y1 - radius, np.pi / 2),
        (x0 + radius, y0 + radius, np.pi),
    ]

    xs, ys = [], []
    for cx, cy, start in corners:
        theta = start + np.linspace(0.0, np.pi / 2, smoothness + 1)
        xs.append(cx + radius * np.cos(theta))
        ys.append(cy + radius * np.sin(theta))

    return _polygon_from_arrays(np.concatenate(xs), np.concatenate(ys))


def build_keepouts(board: Board, layer_name: str, trace: int) -> List[Polygon]:
    """
    Read all the keepout information for a stipple layer.

    Vias and pins are always included. Lines come from the copper layer
    paired with the stipple layer, and pads from elements on the matching
    side of the board.

    Args:
        board: Board to read
        layer_name: Target (stipple) layer name
        trace: Stipple trace width, added to every feature's clearance

    Returns:
        Keepout polygons, possibly overlapping
    """
    overlays: List[Polygon] = []

    for via in board.vias:
        overlays.append(make_circular_overlay(
            via.x, via.y, trace + (via.thickness + via.clearance) // 2))

    source_name = SOURCE_LAYER_FOR.get(layer_name)
    source = board.find_layer_by_name(source_name) if source_name else None
    if source is not None:
        # Each line is an area without holes: a bloated body plus two barbells
        for line in source.lines:
            thickness = trace + (line.thickness + line.clearance) // 2
            (x0, y0), (x1, y1) = line.point1, line.point2
            overlays.append(make_rectangular_overlay(x0, y0, x1, y1, thickness))
            overlays.append(make_circular_overlay(x0, y0, thickness))
            overlays.append(make_circular_overlay(x1, y1, thickness))
    elif source_name:
        logger.warning("Layer %r not found; no line keepouts for %r", source_name, layer_name)

    for element in board.elements:
        if ((layer_name == COMPONENT_STIPPLE and element.front) or
                (layer_name == SOLDER_STIPPLE and not element.front)):
            for pad in element.pads:
                clear = trace + pad.thickness // 2 + pad.clearance // 2
                xl, yl, xh, yh = pad.extents()
                overlays.append(make_rounded_rectangle(
                    xl - clear, yl - clear, xh + clear, yh + clear,
                    trace + pad.clearance // 2))

        # Pins for this element are on both sides
        for pin in element.pins:
            overlays.append(make_circular_overlay(
                pin.x, pin.y, trace + (pin.thickness + pin.clearance) // 2))

    keepouts = [p for overlay in overlays for p in explode(overlay)]
    logger.debug("Built %d keepouts for %r", len(keepouts), layer_name)
    return keepouts
