"""
Stipple ground-plane generation for PCB layouts.

This package cross-hatches the polygons drawn on a board's perimeter
layers with a staggered lattice of diamond cut-outs, keeps solid copper
around vias, pins, pads and lines, and writes the result to the matching
stipple layers.

Usage:
    from stipple import StippleJob, StippleMode, WorkOrder
    from stipple.board_io import load_board, save_board

    board = load_board("board.json")
    order = WorkOrder.from_user_values(StippleMode.BOTH, 700, 4500, 700, 7000)
    result = StippleJob(board, order).run()
    save_board(board, "board.json")
"""

from .base import (
    CancellationToken,
    JobState,
    StippledRegion,
    StippleMode,
    WorkOrder,
    WorkOrderError,
)
from .board import Board, Element, Layer, Line, Pad, Pin, PolygonFlag, PolygonRecord, Via
from .board_io import BoardFormatError, load_board, save_board
from .lattice import StippleGenerator, compute_stipples, percent_fill
from .orchestrator import JobResult, StippleJob, run_work_order

__all__ = [
    'CancellationToken',
    'JobState',
    'StippledRegion',
    'StippleMode',
    'WorkOrder',
    'WorkOrderError',
    'Board',
    'Element',
    'Layer',
    'Line',
    'Pad',
    'Pin',
    'PolygonFlag',
    'PolygonRecord',
    'Via',
    'BoardFormatError',
    'load_board',
    'save_board',
    'StippleGenerator',
    'compute_stipples',
    'percent_fill',
    'JobResult',
    'StippleJob',
    'run_work_order',
]
