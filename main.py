"""Command-line interface for stippling a board file."""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QCoreApplication, QTimer

from preferences import StipplePreferences, read_preferences, write_preferences
from stipple import BoardFormatError, StippleMode, WorkOrder, WorkOrderError, load_board, percent_fill, save_board
from workers import StippleWorker

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 3


def build_parser(prefs: StipplePreferences) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cross-hatch the polygons of a board's perimeter layers into stipple layers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Trace and pitch are given in 1/100 mil and default to the stored preferences.

Examples:
  # Stipple both sides with the stored parameters
  python main.py board.json --mode both

  # Stipple only selected polygons on both sides, writing a new file
  python main.py board.json --mode selected -o stippled.json

  # Remove all stippling
  python main.py board.json --mode delete
        """
    )

    parser.add_argument(
        "board",
        type=Path,
        help="Board JSON file",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output board file (default: overwrite the input)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in StippleMode],
        help="Layers to stipple, or delete to clear the stipple layers",
    )
    parser.add_argument("--component-trace", default=str(prefs.component_trace),
                        help="Component side trace (default: %(default)s)")
    parser.add_argument("--component-pitch", default=str(prefs.component_pitch),
                        help="Component side pitch (default: %(default)s)")
    parser.add_argument("--solder-trace", default=str(prefs.solder_trace),
                        help="Solder side trace (default: %(default)s)")
    parser.add_argument("--solder-pitch", default=str(prefs.solder_pitch),
                        help="Solder side pitch (default: %(default)s)")
    parser.add_argument(
        "--preferences",
        type=Path,
        help="Preferences file (default: ~/.pcb/stipple_prefs)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug output",
    )
    return parser


def _preferences_path(argv: List[str]) -> Optional[Path]:
    """Find --preferences before the full parser exists, since it supplies defaults."""
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--preferences", type=Path)
    known, _ = pre.parse_known_args(argv)
    return known.preferences


def run_worker(worker: StippleWorker) -> int:
    """Run a worker under a Qt event loop and return an exit code."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    outcome = {'code': EXIT_FAILED}

    def on_progress(fraction: float, message: str):
        if 0.0 <= fraction <= 1.0:
            print(f"\r[{fraction * 100:5.1f}%] {message}", end="", file=sys.stderr, flush=True)
        else:
            print(f"\r{message}", file=sys.stderr)

    def on_completed(result):
        for name, count in result.layers.items():
            print(f"  {name}: {count}")
        outcome['code'] = EXIT_CANCELLED if result.cancelled else EXIT_OK

    def on_error(message: str):
        print(f"\nError: {message}", file=sys.stderr)
        outcome['code'] = EXIT_FAILED

    worker.progress.connect(on_progress)
    worker.completed.connect(on_completed)
    worker.error.connect(on_error)
    worker.finished.connect(app.quit)

    # Let Python see Ctrl+C while Qt owns the main loop
    previous = signal.signal(signal.SIGINT, lambda *_: worker.cancel())
    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(200)

    try:
        worker.start()
        app.exec()
        worker.wait()
    finally:
        timer.stop()
        signal.signal(signal.SIGINT, previous)

    return outcome['code']


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = sys.argv[1:] if argv is None else argv
    prefs_path = _preferences_path(argv)
    prefs = read_preferences(prefs_path)

    parser = build_parser(prefs)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        order = WorkOrder.from_user_values(
            args.mode,
            args.component_trace,
            args.component_pitch,
            args.solder_trace,
            args.solder_pitch,
        )
        order.validate()
    except WorkOrderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    write_preferences(StipplePreferences(
        component_trace=int(args.component_trace),
        component_pitch=int(args.component_pitch),
        solder_trace=int(args.solder_trace),
        solder_pitch=int(args.solder_pitch),
    ), prefs_path)

    if order.mode is not StippleMode.DELETE:
        for name in order.layer_names:
            trace, pitch = order.parameters_for(name)
            logger.info("%s: %d%% copper", order.stipple_layer_for(name), percent_fill(trace, pitch))

    try:
        board = load_board(args.board)
    except (OSError, BoardFormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    code = run_worker(StippleWorker(board, order))
    if code == EXIT_FAILED:
        return code

    output = args.output or args.board
    try:
        save_board(board, output)
    except OSError as e:
        print(f"Error: could not save {output}: {e}", file=sys.stderr)
        return EXIT_FAILED

    print(f"Saved {output}")
    return code


if __name__ == "__main__":
    sys.exit(main())
