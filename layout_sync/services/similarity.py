"""
Layout similarity between two images' text blocks.

Two layouts are compared position by position: both block lists are ordered
top to bottom, paired by index, and a pair matches when its x, y, width and
height all differ by less than MATCH_TOLERANCE of the reference image size.
"""

import logging
from typing import Sequence

import numpy as np

from layout_sync.models.layout import TextBlock
from layout_sync.utils.geometry import normalized_boxes, sort_blocks_by_y

logger = logging.getLogger(__name__)

# Fraction of the reference width/height a coordinate may drift and still match
MATCH_TOLERANCE = 0.1


def count_matching_pairs(
    blocks_a: Sequence[TextBlock],
    blocks_b: Sequence[TextBlock],
    width: float,
    height: float,
    tolerance: float = MATCH_TOLERANCE,
) -> int:
    """
    Count y-ordered block pairs whose normalized geometry agrees within tolerance.

    Both lists must have the same length and width/height must be positive.
    """
    norm_a = normalized_boxes(sort_blocks_by_y(blocks_a), width, height)
    norm_b = normalized_boxes(sort_blocks_by_y(blocks_b), width, height)
    diffs = np.abs(norm_a - norm_b)
    return int(np.all(diffs < tolerance, axis=1).sum())


def calculate_layout_similarity(
    blocks_a: Sequence[TextBlock],
    blocks_b: Sequence[TextBlock],
    width: float,
    height: float,
    tolerance: float = MATCH_TOLERANCE,
) -> float:
    """
    Score how closely two block layouts agree.

    Args:
        blocks_a: Blocks of the first image
        blocks_b: Blocks of the second image
        width: Normalization width (the reference image's width)
        height: Normalization height (the reference image's height)
        tolerance: Per-coordinate match tolerance as a fraction of width/height

    Returns:
        Fraction of matching pairs in [0, 1]. Different block counts score 0,
        two empty layouts score 1, and a non-positive width or height scores 0.
    """
    if len(blocks_a) != len(blocks_b):
        return 0.0

    if not blocks_a:
        return 1.0

    if width <= 0 or height <= 0:
        logger.debug(f"Cannot normalize layout with size {width}x{height}, scoring 0")
        return 0.0

    matches = count_matching_pairs(blocks_a, blocks_b, width, height, tolerance)
    return matches / len(blocks_a)
