"""
Running a work order across the stipple layers.

One job is started per target layer and all of them are joined before the
board is marked changed. Each layer job reads its template, builds
keepouts, computes the lattice and writes the result, or in delete mode
only clears the stipple layer.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from constants import PROGRESS_ABORTED, PROGRESS_DONE, PROGRESS_START
from .base import CancellationToken, JobState, StippleMode, WorkOrder, is_cancelled
from .board import Board
from .geometry import union
from .keepouts import build_keepouts
from .lattice import compute_stipples
from .template import read_template
from .writer import delete_regions, write_regions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


@dataclass
class JobResult:
    """
    Outcome of a stipple job.

    Attributes:
        state: Final job state
        layers: Stipple layer name -> regions written (or polygons removed
            in delete mode)
        elapsed: Wall clock seconds spent in run()
    """
    state: JobState
    layers: Dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def cancelled(self) -> bool:
        return self.state is JobState.CANCELLED


def format_elapsed(seconds: float) -> str:
    """Format a duration as HH:MM:SS."""
    seconds = int(seconds)
    return f"{seconds // 3600:02d}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"


class StippleJob:
    """
    Executes one WorkOrder against a board.

    A job runs once. The cancellation token can be shared with whatever
    issued the order; setting it makes every layer job unwind at the next
    row, diamond or template polygon.
    """

    def __init__(
        self,
        board: Board,
        order: WorkOrder,
        cancel: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self.board = board
        self.order = order
        self.cancel = cancel if cancel is not None else CancellationToken()
        self.progress_callback = progress_callback
        self.state = JobState.IDLE

    def run(self) -> JobResult:
        """
        Validate the order, run every layer job and wait for all of them.

        Returns:
            JobResult describing what was written

        Raises:
            WorkOrderError: If the order is invalid; the board is untouched
            RuntimeError: If the job has already been run
        """
        if self.state is not JobState.IDLE:
            raise RuntimeError("A stipple job can only be run once")

        self.order.validate()

        self.state = JobState.RUNNING
        start = time.monotonic()
        names = self.order.layer_names
        logger.info("Polygon stipple begins: mode=%s, layers=%s", self.order.mode.value, names)
        self._report(PROGRESS_START, "Polygon Stipple Begins...")

        result = JobResult(state=JobState.RUNNING)
        try:
            with ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="stipple") as executor:
                futures = {
                    executor.submit(self._run_layer, name, index, len(names)): name
                    for index, name in enumerate(names)
                }
                wait(futures)

            for future, name in futures.items():
                result.layers[self.order.stipple_layer_for(name)] = future.result()
        except Exception:
            self.state = JobState.FAILED
            self._report(PROGRESS_ABORTED, "Polygon Stipple Failed")
            raise
        finally:
            result.elapsed = time.monotonic() - start
            self.board.mark_dirty()

        if is_cancelled(self.cancel):
            self.state = JobState.CANCELLED
            self._report(PROGRESS_ABORTED, "Polygon Stipple Cancelled")
        else:
            self.state = JobState.COMPLETED
            self._report(PROGRESS_DONE, "Polygon Stipple Ends")

        result.state = self.state
        logger.info("Polygon stipple %s, elapsed time %s",
                    self.state.value, format_elapsed(result.elapsed))
        return result

    def _run_layer(self, name: str, index: int, count: int) -> int:
        """Run one layer job; returns the number of regions written or polygons removed."""
        target_name = self.order.stipple_layer_for(name)

        if self.order.mode is StippleMode.DELETE:
            target = self.board.find_layer_by_name(target_name)
            if target is None:
                logger.warning("Layer %r not found, nothing to delete", target_name)
                return 0
            return delete_regions(self.board, target)

        template = self.board.find_layer_by_name(name)
        target = self.board.find_layer_by_name(target_name)
        if template is None or target is None:
            logger.warning("Layer %r not found, skipping %r",
                           name if template is None else target_name, name)
            return 0

        trace, pitch = self.order.parameters_for(name)

        polygons = read_template(template, self.order.only_selected, self.cancel)
        if is_cancelled(self.cancel):
            return 0

        islands = union(polygons)
        logger.debug("%d template polygons on %r merged into %d areas",
                     len(polygons), name, len(islands))

        keepouts = build_keepouts(self.board, target_name, trace)
        regions = compute_stipples(
            islands, keepouts, trace, pitch,
            layer_name=target_name,
            layer_index=index,
            layer_count=count,
            cancel=self.cancel,
            progress_callback=self._report
        )

        # Nothing finished before cancellation; leave the layer alone
        if not regions and is_cancelled(self.cancel):
            return 0

        write_regions(self.board, target, regions, self.order.replace_existing)
        return len(regions)

    def _report(self, fraction: float, message: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(fraction, message)


def run_work_order(
    board: Board,
    order: WorkOrder,
    cancel: Optional[CancellationToken] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> JobResult:
    """Run a work order to completion on the calling thread."""
    return StippleJob(board, order, cancel, progress_callback).run()
