"""
Reading the template (perimeter) polygons of a layer.
"""

import logging
from typing import List, Optional

from shapely.geometry import Polygon

from .base import CancellationToken, is_cancelled
from .board import Layer
from .geometry import to_polygons

logger = logging.getLogger(__name__)


def read_template(layer: Layer, only_selected: bool = False,
                  cancel: Optional[CancellationToken] = None) -> List[Polygon]:
    """
    Read and store all polygons on the template layer.

    Only the outline of each record is used; holes in template polygons
    are ignored. Records that are degenerate are skipped.

    Args:
        layer: Template layer
        only_selected: Skip records that are not selected
        cancel: Checked once per record

    Returns:
        Template polygons. If cancellation was observed the list is
        partial and must be discarded by the caller.
    """
    polygons: List[Polygon] = []

    for record in list(layer.polygons):
        if is_cancelled(cancel):
            logger.debug("Template read of %r cancelled after %d polygons",
                         layer.name, len(polygons))
            return polygons

        if only_selected and not record.selected:
            continue

        pieces = to_polygons(record.points)
        if not pieces:
            logger.debug("Skipping degenerate polygon on %r", layer.name)
        polygons.extend(pieces)

    return polygons
