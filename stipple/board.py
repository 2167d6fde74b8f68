"""
Board Model

An in-process model of the host board: named layers owning polygon and
line records, board-level vias and elements, and an undo log recording
every polygon created or removed. Coordinates are integer nanometres.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import IntFlag
from typing import List, Optional, Tuple

from shapely.geometry import box
from shapely.strtree import STRtree

logger = logging.getLogger(__name__)

Point = Tuple[int, int]


class PolygonFlag(IntFlag):
    """Polygon record flags, as understood by the host."""
    NONE = 0
    CLEARPOLY = 1  # Polygon clears around foreign copper
    FULLPOLY = 2  # Keep every island of the polygon, not just the largest


@dataclass
class Via:
    """A plated hole through every layer."""
    x: int
    y: int
    thickness: int  # Annulus diameter
    clearance: int


@dataclass
class Pin:
    """A through-hole element pin; present on both sides."""
    x: int
    y: int
    thickness: int
    clearance: int


@dataclass
class Pad:
    """An SMD element pad, drawn as a thick segment from point1 to point2."""
    point1: Point
    point2: Point
    thickness: int
    clearance: int

    def extents(self) -> Tuple[int, int, int, int]:
        """Return (min_x, min_y, max_x, max_y) of the pad's centre segment."""
        (x0, y0), (x1, y1) = self.point1, self.point2
        return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


@dataclass
class Line:
    """A copper track segment on a layer."""
    point1: Point
    point2: Point
    thickness: int
    clearance: int


@dataclass
class Element:
    """A placed footprint owning pads (one side) and pins (both sides)."""
    name: str = ""
    front: bool = True
    pads: List[Pad] = field(default_factory=list)
    pins: List[Pin] = field(default_factory=list)


@dataclass(eq=False)
class PolygonRecord:
    """
    A polygon stored on a layer.

    Outline and hole vertex lists are open: the first point is not
    repeated at the end.
    """
    points: List[Point] = field(default_factory=list)
    holes: List[List[Point]] = field(default_factory=list)
    flags: PolygonFlag = PolygonFlag.CLEARPOLY
    selected: bool = False

    @property
    def bounding_box(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) of the outline."""
        if not self.points:
            return (0, 0, 0, 0)
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))


@dataclass
class UndoEntry:
    """One reversible board mutation."""
    action: str  # "create" or "remove"
    layer_name: str
    record: PolygonRecord


class UndoLog:
    """Thread-safe, append-only history of polygon creations and removals."""

    def __init__(self):
        self._entries: List[UndoEntry] = []
        self._lock = threading.Lock()

    def record_create(self, layer: "Layer", record: PolygonRecord) -> None:
        with self._lock:
            self._entries.append(UndoEntry("create", layer.name, record))

    def record_remove(self, layer: "Layer", record: PolygonRecord) -> None:
        with self._lock:
            self._entries.append(UndoEntry("remove", layer.name, record))

    @property
    def entries(self) -> List[UndoEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(eq=False)
class Layer:
    """
    A named board layer.

    Writers must hold ``lock`` while mutating the layer's polygons; the
    spatial index is rebuilt lazily after any mutation.
    """
    name: str
    polygons: List[PolygonRecord] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _tree: Optional[STRtree] = field(default=None, init=False, repr=False)
    _indexed: List[PolygonRecord] = field(default_factory=list, init=False, repr=False)

    def invalidate_index(self) -> None:
        self._tree = None
        self._indexed = []

    def query(self, bounds: Tuple[int, int, int, int]) -> List[PolygonRecord]:
        """
        Find polygon records whose bounding boxes touch the given box.

        Args:
            bounds: (min_x, min_y, max_x, max_y)

        Returns:
            Matching records in layer order
        """
        if self._tree is None:
            self._indexed = [p for p in self.polygons if p.points]
            if not self._indexed:
                return []
            self._tree = STRtree([box(*p.bounding_box) for p in self._indexed])

        hits = self._tree.query(box(*bounds))
        return [self._indexed[i] for i in sorted(int(h) for h in hits)]


@dataclass
class Board:
    """The whole board: layers plus board-level vias and elements."""
    layers: List[Layer] = field(default_factory=list)
    vias: List[Via] = field(default_factory=list)
    elements: List[Element] = field(default_factory=list)
    undo: UndoLog = field(default_factory=UndoLog, repr=False)
    changed: bool = False

    def find_layer_by_name(self, name: str) -> Optional[Layer]:
        """Return the layer with the given name, or None."""
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def add_layer(self, name: str) -> Layer:
        """Return the named layer, creating it if needed."""
        layer = self.find_layer_by_name(name)
        if layer is None:
            layer = Layer(name)
            self.layers.append(layer)
        return layer

    # Mutation API; callers hold layer.lock

    def create_polygon(self, layer: Layer, flags: PolygonFlag = PolygonFlag.CLEARPOLY) -> PolygonRecord:
        """Create an empty polygon record on a layer and log it for undo."""
        record = PolygonRecord(flags=flags)
        layer.polygons.append(record)
        layer.invalidate_index()
        self.undo.record_create(layer, record)
        return record

    def add_outline_point(self, record: PolygonRecord, x: int, y: int) -> None:
        record.points.append((int(x), int(y)))

    def add_hole(self, record: PolygonRecord) -> None:
        """Start a new hole; following add_hole_point calls extend it."""
        record.holes.append([])

    def add_hole_point(self, record: PolygonRecord, x: int, y: int) -> None:
        if not record.holes:
            raise ValueError("add_hole_point called before add_hole")
        record.holes[-1].append((int(x), int(y)))

    def remove_polygon(self, layer: Layer, record: PolygonRecord) -> None:
        """Remove a polygon record from a layer and log it for undo."""
        for index, candidate in enumerate(layer.polygons):
            if candidate is record:
                del layer.polygons[index]
                break
        layer.invalidate_index()
        self.undo.record_remove(layer, record)

    def clear_polygons(self, layer: Layer) -> List[PolygonRecord]:
        """
        Remove every polygon record from a layer in one pass.

        Each record still gets its own undo entry, in layer order.

        Returns:
            The removed records
        """
        records = layer.polygons
        layer.polygons = []
        layer.invalidate_index()
        for record in records:
            self.undo.record_remove(layer, record)
        return records

    def mark_dirty(self) -> None:
        self.changed = True
