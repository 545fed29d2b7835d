"""
Presentation helpers for the group confirmation step.
"""

import string
from typing import List, Sequence

from layout_sync.models.api import GroupSummary
from layout_sync.models.layout import LayoutGroup

INDEPENDENT_LABEL = "Independent"

HIGH_SIMILARITY = 0.85
MEDIUM_SIMILARITY = 0.7


def summarize_groups(groups: Sequence[LayoutGroup], total_images: int) -> GroupSummary:
    """
    Count grouped vs. independent images.

    Args:
        groups: Clustering result
        total_images: Size of the whole batch, including images without blocks

    Returns:
        GroupSummary where grouped_images counts members of groups with more
        than one image and independent_images is everything else.
    """
    grouped = sum(len(g.image_ids) for g in groups if len(g.image_ids) > 1)
    return GroupSummary(
        total_images=total_images,
        group_count=len(groups),
        grouped_images=grouped,
        independent_images=total_images - grouped,
    )


def group_label(index: int, group: LayoutGroup) -> str:
    """'Layout A', 'Layout B', ... by position; singletons are 'Independent'."""
    if len(group.image_ids) == 1:
        return INDEPENDENT_LABEL
    return f"Layout {_letters(index)}"


def _letters(index: int) -> str:
    # 0 -> A, 25 -> Z, 26 -> AA
    letters = ""
    index += 1
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters = string.ascii_uppercase[rem] + letters
    return letters


def default_unify_flags(groups: Sequence[LayoutGroup]) -> List[bool]:
    """Suggest unifying every group that has more than one image."""
    return [len(g.image_ids) > 1 for g in groups]


def similarity_tier(group: LayoutGroup) -> str:
    """Badge for the group's similarity: 'high' (>= 0.85), 'medium' (>= 0.7) or 'low'."""
    if group.similarity >= HIGH_SIMILARITY:
        return "high"
    if group.similarity >= MEDIUM_SIMILARITY:
        return "medium"
    return "low"
