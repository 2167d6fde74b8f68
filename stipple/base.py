"""
Core data types shared by the stipple pipeline.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from shapely.geometry import Polygon

from constants import (
    CENTIMIL_TO_NANOMETER,
    COMPONENT_PERIMETER,
    COMPONENT_STIPPLE,
    SOLDER_PERIMETER,
    SOLDER_STIPPLE,
    STIPPLE_LAYER_FOR,
)


class StippleMode(Enum):
    """Enumeration of the work orders an operator can issue."""
    TOP = "top"
    BOTTOM = "bottom"
    BOTH = "both"
    SELECTED = "selected"
    DELETE = "delete"


class JobState(Enum):
    """Lifecycle of a stipple job."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class WorkOrderError(ValueError):
    """Raised when a work order cannot be run (bad mode or parameters)."""


@dataclass
class StippledRegion:
    """
    One merged template island ready to be written to the board.

    Attributes:
        outline: The island itself
        cutouts: Diamond holes, clipped to the island inset by the trace
        overlays: Forced-solid clearance shapes, clipped to the island
    """
    outline: Polygon
    cutouts: List[Polygon] = field(default_factory=list)
    overlays: List[Polygon] = field(default_factory=list)


class CancellationToken:
    """Cooperative cancellation flag shared between the caller and the jobs."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __bool__(self) -> bool:
        return self._event.is_set()


def is_cancelled(cancel: Optional[CancellationToken]) -> bool:
    """True when a token was supplied and has been triggered."""
    return cancel is not None and cancel.cancelled


@dataclass
class WorkOrder:
    """
    A single stipple request.

    All four parameters are board coordinates (nanometres).

    Attributes:
        mode: What to do and on which layers
        component_trace: Trace width used on the component side
        component_pitch: Lattice pitch used on the component side
        solder_trace: Trace width used on the solder side
        solder_pitch: Lattice pitch used on the solder side
    """
    mode: Optional[StippleMode]
    component_trace: int = 0
    component_pitch: int = 0
    solder_trace: int = 0
    solder_pitch: int = 0

    @property
    def layer_names(self) -> List[str]:
        """Template (perimeter) layers addressed by this order, in job order."""
        if self.mode is StippleMode.TOP:
            return [COMPONENT_PERIMETER]
        if self.mode is StippleMode.BOTTOM:
            return [SOLDER_PERIMETER]
        if self.mode is None:
            return []
        return [COMPONENT_PERIMETER, SOLDER_PERIMETER]

    @property
    def only_selected(self) -> bool:
        return self.mode is StippleMode.SELECTED

    @property
    def replace_existing(self) -> bool:
        return self.mode is not StippleMode.SELECTED

    def parameters_for(self, layer_name: str) -> Tuple[int, int]:
        """Return (trace, pitch) for a perimeter or stipple layer name."""
        if layer_name in (COMPONENT_PERIMETER, COMPONENT_STIPPLE):
            return self.component_trace, self.component_pitch
        if layer_name in (SOLDER_PERIMETER, SOLDER_STIPPLE):
            return self.solder_trace, self.solder_pitch
        raise KeyError(f"No stipple parameters for layer {layer_name!r}")

    @staticmethod
    def stipple_layer_for(layer_name: str) -> str:
        """Rename a perimeter layer to the stipple layer it feeds."""
        return STIPPLE_LAYER_FOR[layer_name]

    def validate(self) -> None:
        """
        Check the order before any board mutation happens.

        Raises:
            WorkOrderError: If no mode is set, a value is negative, or a
                stippled layer has a pitch that does not exceed its trace
        """
        if self.mode is None:
            raise WorkOrderError("No stipple mode selected")
        if self.mode is StippleMode.DELETE:
            return

        for name in self.layer_names:
            trace, pitch = self.parameters_for(name)
            if trace < 0 or pitch < 0:
                raise WorkOrderError(
                    f"Trace and pitch must be non-negative for {name!r} "
                    f"(trace={trace}, pitch={pitch})")
            if pitch <= trace:
                raise WorkOrderError(
                    f"Pitch must exceed trace for {name!r} "
                    f"(trace={trace}, pitch={pitch})")

    @classmethod
    def from_user_values(
        cls,
        mode: Union[StippleMode, str, None],
        component_trace: Union[int, str],
        component_pitch: Union[int, str],
        solder_trace: Union[int, str],
        solder_pitch: Union[int, str],
    ) -> "WorkOrder":
        """
        Build an order from operator input given in 1/100 mil.

        Raises:
            WorkOrderError: If the mode or any value cannot be parsed
        """
        if isinstance(mode, str):
            try:
                mode = StippleMode(mode.strip().lower())
            except ValueError:
                raise WorkOrderError(f"Unknown mode {mode!r}") from None

        values = []
        for raw in (component_trace, component_pitch, solder_trace, solder_pitch):
            try:
                values.append(int(str(raw).strip()) * CENTIMIL_TO_NANOMETER)
            except ValueError:
                raise WorkOrderError(f"Bad Trace/Pitch parameter input: {raw!r}") from None

        return cls(mode, *values)
