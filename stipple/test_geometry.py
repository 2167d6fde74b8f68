"""
Tests for the polygon primitives.

Run with: python -m pytest stipple/test_geometry.py
"""

from shapely.geometry import LineString, Polygon, box

from stipple.geometry import (
    bounding_box,
    diamond,
    explode,
    inset,
    intersect,
    ring_points,
    split_holes,
    to_polygons,
    union,
)


def test_union_merges_overlapping():
    """Overlapping squares become one island."""
    merged = union([box(0, 0, 10, 10), box(5, 5, 15, 15)])

    assert len(merged) == 1, "Overlapping squares should merge"
    assert merged[0].area == 175, f"Unexpected area {merged[0].area}"
    print("✓ Union merge test passed")


def test_union_keeps_disjoint_apart():
    merged = union([box(0, 0, 10, 10), box(20, 0, 30, 10)])

    assert len(merged) == 2, "Disjoint squares should stay separate"
    print("✓ Union disjoint test passed")


def test_union_ignores_winding():
    """Clockwise and counter-clockwise input give the same result."""
    ccw = Polygon([(0, 0), (10, 0), (10, 10), (0, 10)])
    cw = Polygon([(0, 0), (0, 10), (10, 10), (10, 0)])

    a = union([ccw])
    b = union([cw])

    assert len(a) == len(b) == 1
    assert a[0].equals(b[0]), "Winding order should not matter"
    assert a[0].exterior.is_ccw, "Results should be counter-clockwise"
    print("✓ Union winding test passed")


def test_union_drops_degenerate():
    merged = union([Polygon(), Polygon([(0, 0), (10, 0), (20, 0)])])
    assert merged == [], "Degenerate input should vanish"


def test_intersect_clips():
    result = intersect([box(0, 0, 10, 10)], [box(5, 0, 20, 10)])

    assert len(result) == 1
    assert result[0].bounds == (5.0, 0.0, 10.0, 10.0)
    print("✓ Intersect clip test passed")


def test_intersect_disjoint_is_empty():
    assert intersect([box(0, 0, 10, 10)], [box(20, 20, 30, 30)]) == []
    assert intersect([], [box(0, 0, 10, 10)]) == []


def test_intersect_touching_edge_is_empty():
    """Shared edges leave no area."""
    assert intersect([box(0, 0, 10, 10)], [box(10, 0, 20, 10)]) == []


def test_inset_shrinks_with_negative_distance():
    shrunk = inset([box(0, 0, 1000, 1000)], -100)

    assert len(shrunk) == 1
    assert shrunk[0].bounds == (100.0, 100.0, 900.0, 900.0), f"Got {shrunk[0].bounds}"
    print("✓ Inset shrink test passed")


def test_inset_grows_with_positive_distance():
    grown = inset([box(0, 0, 1000, 1000)], 100)

    assert len(grown) == 1
    assert grown[0].bounds == (-100.0, -100.0, 1100.0, 1100.0), f"Got {grown[0].bounds}"


def test_inset_keeps_all_pieces():
    """A dumbbell whose neck closes splits in two."""
    dumbbell = union([box(0, 0, 1000, 1000), box(1000, 450, 2000, 550), box(2000, 0, 3000, 1000)])
    assert len(dumbbell) == 1

    pieces = inset(dumbbell, -100)
    assert len(pieces) == 2, f"Expected two pieces, got {len(pieces)}"


def test_inset_collapse_is_empty():
    assert inset([box(0, 0, 100, 100)], -60) == []


def test_bounding_box_is_integer():
    bounds = bounding_box(Polygon([(0.5, 1.2), (10.1, 1.2), (10.1, 9.8)]))
    assert bounds == (0, 1, 11, 10), f"Got {bounds}"
    assert all(isinstance(v, int) for v in bounds)


def test_ring_points_is_open():
    points = ring_points(box(0, 0, 10, 10).exterior)

    assert len(points) == 4, "Closing point should be removed"
    assert points[0] != points[-1]
    assert all(isinstance(v, int) for p in points for v in p)


def test_to_polygons_accepts_closed_and_open():
    open_loop = to_polygons([(0, 0), (10, 0), (10, 10), (0, 10)])
    closed_loop = to_polygons([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)])

    assert len(open_loop) == len(closed_loop) == 1
    assert open_loop[0].equals(closed_loop[0])


def test_to_polygons_repairs_bowtie():
    """A self-crossing outline is split rather than rejected."""
    pieces = to_polygons([(0, 0), (10, 10), (10, 0), (0, 10)])

    assert len(pieces) == 2, f"Expected bow tie halves, got {len(pieces)}"
    assert all(p.is_valid for p in pieces)


def test_to_polygons_degenerate():
    assert to_polygons([]) == []
    assert to_polygons([(0, 0), (10, 0), (0, 0)]) == []


def test_explode_drops_lines():
    assert explode(LineString([(0, 0), (1, 1)])) == []
    assert explode(None) == []


def test_diamond_vertices():
    d = diamond(100, 200, 10)

    assert list(d.exterior.coords)[:4] == [(100, 190), (110, 200), (100, 210), (90, 200)]
    assert d.area == 200


def test_split_holes_opens_every_hole():
    """Pieces have no interiors and still cover the same area."""
    frame = Polygon(
        [(0, 0), (3000, 0), (3000, 1000), (0, 1000)],
        [[(400, 400), (600, 400), (600, 600), (400, 600)],
         [(2400, 400), (2600, 400), (2600, 600), (2400, 600)]],
    )

    pieces = split_holes(frame)

    assert len(pieces) >= 3, f"Two holes need at least two cuts, got {len(pieces)} pieces"
    assert all(len(piece.interiors) == 0 for piece in pieces), "A hole survived the split"
    assert abs(sum(piece.area for piece in pieces) - frame.area) < 1e-6
    print("✓ Split holes test passed")


def test_split_holes_without_interiors():
    square = box(0, 0, 10, 10)
    assert split_holes(square) == [square]
