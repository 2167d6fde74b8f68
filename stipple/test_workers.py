"""
Tests for the background worker and the command-line entry point.

The worker's run() is called directly so signals are delivered on the
test thread.
"""

import json

import pytest
from PyQt6.QtCore import QCoreApplication

import main
from constants import COMPONENT_STIPPLE, PROGRESS_ABORTED, PROGRESS_DONE
from stipple.base import JobState, StippleMode, WorkOrder
from stipple.board_io import save_board
from workers import StippleWorker


@pytest.fixture(scope="module")
def qt_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def _connect(worker):
    events = {'progress': [], 'completed': [], 'error': []}
    worker.progress.connect(lambda f, m: events['progress'].append((f, m)))
    worker.completed.connect(lambda result: events['completed'].append(result))
    worker.error.connect(lambda message: events['error'].append(message))
    return events


def test_worker_completes(qt_app, rectangle_board):
    worker = StippleWorker(rectangle_board, WorkOrder(StippleMode.TOP, 700, 4500, 700, 7000))
    events = _connect(worker)

    worker.run()

    assert events['error'] == []
    assert len(events['completed']) == 1
    result = events['completed'][0]
    assert result.state is JobState.COMPLETED
    assert result.layers == {COMPONENT_STIPPLE: 1}
    assert events['progress'][-1] == (PROGRESS_DONE, "Polygon Stipple Ends")
    print("✓ Worker completion test passed")


def test_worker_cancelled_before_start(qt_app, rectangle_board):
    worker = StippleWorker(rectangle_board, WorkOrder(StippleMode.TOP, 700, 4500, 700, 7000))
    events = _connect(worker)

    worker.cancel()
    worker.run()

    assert events['completed'][0].state is JobState.CANCELLED
    # Only the terminal report gets through once cancelled
    assert events['progress'] == [(PROGRESS_ABORTED, "Polygon Stipple Cancelled")]
    assert rectangle_board.find_layer_by_name(COMPONENT_STIPPLE).polygons == []


def test_worker_reports_errors(qt_app, rectangle_board):
    worker = StippleWorker(rectangle_board, WorkOrder(StippleMode.TOP, 4500, 700, 700, 7000))
    events = _connect(worker)

    worker.run()

    assert events['completed'] == []
    assert len(events['error']) == 1
    assert "Pitch must exceed trace" in events['error'][0]


def test_cli_rejects_bad_parameters(tmp_path, rectangle_board):
    board_path = tmp_path / "board.json"
    save_board(rectangle_board, board_path)
    prefs_path = tmp_path / "prefs"

    code = main.main([str(board_path), "--mode", "top", "--component-trace", "abc",
                      "--preferences", str(prefs_path)])

    assert code == main.EXIT_USAGE
    assert not prefs_path.exists() or "abc" not in prefs_path.read_text()


def test_cli_rejects_missing_mode(tmp_path, rectangle_board):
    board_path = tmp_path / "board.json"
    save_board(rectangle_board, board_path)

    code = main.main([str(board_path), "--preferences", str(tmp_path / "prefs")])

    assert code == main.EXIT_USAGE


def test_cli_stipples_board(qt_app, tmp_path, rectangle_board):
    board_path = tmp_path / "board.json"
    output_path = tmp_path / "out.json"
    prefs_path = tmp_path / "prefs"
    save_board(rectangle_board, board_path)

    code = main.main([str(board_path), "--mode", "both", "-o", str(output_path),
                      "--component-trace", "800", "--preferences", str(prefs_path)])

    assert code == main.EXIT_OK
    data = json.loads(output_path.read_text())
    layers = {layer['name']: layer for layer in data['layers']}
    assert len(layers['comp-stipple']['polygons']) == 1
    assert len(layers['solder-stipple']['polygons']) == 1
    assert "ComponentTrace = 800" in prefs_path.read_text(), "Parameters should be remembered"
    print("✓ CLI end-to-end test passed")
