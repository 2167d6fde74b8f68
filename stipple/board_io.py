"""
Loading and saving boards as JSON documents.

Document layout::

    {
      "layers": [{"name": ..., "polygons": [{"points": [[x, y], ...],
                   "holes": [[[x, y], ...]], "flags": 1, "selected": false}],
                  "lines": [{"point1": [x, y], "point2": [x, y],
                             "thickness": t, "clearance": c}]}],
      "vias": [{"x": x, "y": y, "thickness": t, "clearance": c}],
      "elements": [{"name": ..., "front": true, "pads": [...], "pins": [...]}]
    }

Pads use the same keys as lines and pins the same keys as vias.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from .board import Board, Element, Layer, Line, Pad, Pin, PolygonFlag, PolygonRecord, Via

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BoardFormatError(ValueError):
    """Raised when a board document cannot be interpreted."""


def _point(value: Any) -> tuple:
    x, y = value
    return (int(x), int(y))


def _points(values: Any) -> List[tuple]:
    return [_point(v) for v in values]


def _segment(data: Dict[str, Any], cls):
    return cls(
        point1=_point(data['point1']),
        point2=_point(data['point2']),
        thickness=int(data.get('thickness', 0)),
        clearance=int(data.get('clearance', 0)),
    )


def _hole(data: Dict[str, Any], cls):
    return cls(
        x=int(data['x']),
        y=int(data['y']),
        thickness=int(data.get('thickness', 0)),
        clearance=int(data.get('clearance', 0)),
    )


def board_from_dict(data: Dict[str, Any]) -> Board:
    """
    Build a Board from a decoded JSON document.

    Raises:
        BoardFormatError: On missing keys or badly typed values
    """
    try:
        board = Board()
        for layer_data in data.get('layers', []):
            layer = Layer(str(layer_data['name']))
            for poly in layer_data.get('polygons', []):
                layer.polygons.append(PolygonRecord(
                    points=_points(poly['points']),
                    holes=[_points(h) for h in poly.get('holes', [])],
                    flags=PolygonFlag(int(poly.get('flags', PolygonFlag.CLEARPOLY))),
                    selected=bool(poly.get('selected', False)),
                ))
            layer.lines = [_segment(line, Line) for line in layer_data.get('lines', [])]
            board.layers.append(layer)

        board.vias = [_hole(via, Via) for via in data.get('vias', [])]

        for element_data in data.get('elements', []):
            board.elements.append(Element(
                name=str(element_data.get('name', '')),
                front=bool(element_data.get('front', True)),
                pads=[_segment(pad, Pad) for pad in element_data.get('pads', [])],
                pins=[_hole(pin, Pin) for pin in element_data.get('pins', [])],
            ))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise BoardFormatError(f"Invalid board document: {e}") from e

    return board


def board_to_dict(board: Board) -> Dict[str, Any]:
    """Convert a Board to a JSON-serializable dictionary."""
    def segment(s):
        return {'point1': list(s.point1), 'point2': list(s.point2),
                'thickness': s.thickness, 'clearance': s.clearance}

    def hole(h):
        return {'x': h.x, 'y': h.y, 'thickness': h.thickness, 'clearance': h.clearance}

    return {
        'layers': [
            {
                'name': layer.name,
                'polygons': [
                    {
                        'points': [list(p) for p in record.points],
                        'holes': [[list(p) for p in h] for h in record.holes],
                        'flags': int(record.flags),
                        'selected': record.selected,
                    }
                    for record in layer.polygons
                ],
                'lines': [segment(line) for line in layer.lines],
            }
            for layer in board.layers
        ],
        'vias': [hole(via) for via in board.vias],
        'elements': [
            {
                'name': element.name,
                'front': element.front,
                'pads': [segment(pad) for pad in element.pads],
                'pins': [hole(pin) for pin in element.pins],
            }
            for element in board.elements
        ],
    }


def load_board(path: PathLike) -> Board:
    """
    Load a board from a JSON file.

    Raises:
        OSError: If the file cannot be read
        BoardFormatError: If the content is not a valid board document
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise BoardFormatError(f"{path}: {e}") from e

    if not isinstance(data, dict):
        raise BoardFormatError(f"{path}: top level must be an object")

    board = board_from_dict(data)
    logger.info("Loaded board %s: %d layers, %d vias, %d elements",
                path, len(board.layers), len(board.vias), len(board.elements))
    return board


def save_board(board: Board, path: PathLike) -> None:
    """Write a board to a JSON file."""
    path = Path(path)
    with open(path, 'w') as f:
        json.dump(board_to_dict(board), f, indent=2)
    logger.info("Saved board to %s", path)
