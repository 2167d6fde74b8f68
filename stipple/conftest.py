"""
Shared test fixtures for the stipple tests.

Provides boards with the perimeter, stipple and copper layers in place
and a few board features to keep out.
"""

import pytest
from typing import List, Tuple

from constants import (
    COMPONENT_COPPER,
    COMPONENT_PERIMETER,
    COMPONENT_STIPPLE,
    SOLDER_COPPER,
    SOLDER_PERIMETER,
    SOLDER_STIPPLE,
)
from stipple.board import Board, PolygonRecord


def rectangle(x0: int, y0: int, x1: int, y1: int) -> List[Tuple[int, int]]:
    """Open, counter-clockwise vertex list of an axis-aligned rectangle."""
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]


@pytest.fixture
def empty_board() -> Board:
    """A board with every layer the stipple pipeline touches, all empty."""
    board = Board()
    for name in (COMPONENT_PERIMETER, COMPONENT_STIPPLE, COMPONENT_COPPER,
                 SOLDER_PERIMETER, SOLDER_STIPPLE, SOLDER_COPPER):
        board.add_layer(name)
    return board


@pytest.fixture
def rectangle_board(empty_board) -> Board:
    """One rectangular template polygon on each perimeter layer."""
    empty_board.find_layer_by_name(COMPONENT_PERIMETER).polygons.append(
        PolygonRecord(points=rectangle(0, 0, 100000, 60000)))
    empty_board.find_layer_by_name(SOLDER_PERIMETER).polygons.append(
        PolygonRecord(points=rectangle(0, 0, 80000, 40000)))
    return empty_board


@pytest.fixture
def rectangle_points():
    """Factory for rectangle vertex lists."""
    return rectangle
