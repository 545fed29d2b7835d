"""
Bounding box helpers shared by the scorer and the layout transfer.
"""

import math
from typing import List, Sequence

import numpy as np

from layout_sync.models.layout import BoundingBox, TextBlock


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding, which would shift boxes that
    land exactly on a half pixel.
    """
    return int(math.floor(value + 0.5))


def sort_blocks_by_y(blocks: Sequence[TextBlock]) -> List[TextBlock]:
    """Return a new list of blocks ordered top to bottom (stable for equal y)."""
    return sorted(blocks, key=lambda b: b.bbox.y)


def scale_bbox(bbox: BoundingBox, scale_x: float, scale_y: float) -> BoundingBox:
    """Scale a box into another image's pixel space, rounded to whole pixels."""
    return BoundingBox(
        x=round_half_up(bbox.x * scale_x),
        y=round_half_up(bbox.y * scale_y),
        width=round_half_up(bbox.width * scale_x),
        height=round_half_up(bbox.height * scale_y),
    )


def normalized_boxes(blocks: Sequence[TextBlock], width: float, height: float) -> np.ndarray:
    """
    Stack boxes into an (n, 4) array of [x/W, y/H, width/W, height/H].

    Callers must guarantee width > 0 and height > 0.
    """
    if not blocks:
        return np.zeros((0, 4), dtype=np.float64)
    raw = np.array(
        [[b.bbox.x, b.bbox.y, b.bbox.width, b.bbox.height] for b in blocks],
        dtype=np.float64,
    )
    return raw / np.array([width, height, width, height], dtype=np.float64)
