"""
Worker thread for running stipple jobs off the issuing thread.
"""
from typing import Optional

from PyQt6.QtCore import QThread, pyqtSignal

from stipple import Board, CancellationToken, JobState, StippleJob, WorkOrder


class StippleWorker(QThread):
    """
    Runs one work order in the background.

    The order must already be validated by the caller so input errors are
    reported before the thread starts.

    Signals:
        progress: Emitted with (fraction, message) during the job
        completed: Emitted with the JobResult when the job ends, including
            when it was cancelled
        error: Emitted with an error message when the job fails
    """
    progress = pyqtSignal(float, str)  # fraction, message
    completed = pyqtSignal(object)  # JobResult
    error = pyqtSignal(str)  # error message

    def __init__(self, board: Board, order: WorkOrder):
        """
        Initialize stipple worker.

        Args:
            board: Board to stipple; mutated in place
            order: Validated work order
        """
        super().__init__()
        self.board = board
        self.order = order
        self.token = CancellationToken()
        self.job: Optional[StippleJob] = None

    def run(self):
        """Run the stipple job in the background thread."""
        self.job = StippleJob(self.board, self.order, self.token, self.report_progress)
        try:
            result = self.job.run()
            self.completed.emit(result)
        except Exception as e:
            self.error.emit(str(e))

    def report_progress(self, fraction: float, message: str = ""):
        """Relay progress from the layer jobs."""
        # The terminal sentinel still goes out after cancellation
        if self.token.cancelled and self.job is not None and self.job.state is JobState.RUNNING:
            return
        self.progress.emit(fraction, message)

    def cancel(self):
        """Request cancellation of the job."""
        self.token.cancel()
