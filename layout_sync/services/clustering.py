"""
Greedy, single-pass grouping of images that share a text layout.

Each image is compared only to the representative (first member) of every
existing group, in group creation order, and joins the first group that
scores at or above the threshold. Otherwise it starts a new group. The result
therefore depends on processing order; pass ``order_key`` to fix that order
explicitly instead of relying on the order of the input sequence.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Set

from layout_sync.models.layout import ImageRecord, LayoutGroup
from layout_sync.services.similarity import calculate_layout_similarity

logger = logging.getLogger(__name__)

DEFAULT_GROUP_THRESHOLD = 0.8


def running_mean(previous_mean: float, member_count: int, score: float) -> float:
    """
    Fold one more score into a mean.

    Args:
        previous_mean: Mean over the first member_count - 1 values
        member_count: Number of values including the new score (>= 1)
        score: The new value

    Returns:
        (previous_mean * (member_count - 1) + score) / member_count
    """
    return (previous_mean * (member_count - 1) + score) / member_count


def group_id_for(representative_id: str) -> str:
    """Deterministic group id: one group per representative within a batch."""
    return f"group-{representative_id}"


@dataclass
class _GroupDraft:
    """Group under construction during one clustering pass."""

    representative: ImageRecord
    image_ids: List[str] = field(default_factory=list)
    similarity: float = 1.0
    member_count: int = 1

    def add(self, image_id: str, score: float) -> None:
        self.image_ids.append(image_id)
        self.member_count += 1
        self.similarity = running_mean(self.similarity, self.member_count, score)

    def freeze(self, group_id: str) -> LayoutGroup:
        return LayoutGroup(
            id=group_id,
            representative_image_id=self.representative.id,
            image_ids=tuple(self.image_ids),
            similarity=self.similarity,
        )


def group_images_by_layout(
    images: Sequence[ImageRecord],
    threshold: float = DEFAULT_GROUP_THRESHOLD,
    order_key: Optional[Callable[[ImageRecord], Any]] = None,
) -> List[LayoutGroup]:
    """
    Partition images into layout groups.

    Args:
        images: Batch of images; those without blocks are left out entirely
        threshold: Minimum similarity to the representative needed to join a group
        order_key: Optional sort key fixing the processing order (stable sort);
            when omitted images are processed in the order given

    Returns:
        Groups in creation order. Each group's first image id is its
        representative, and every image with at least one block appears in
        exactly one group.
    """
    candidates = [img for img in images if img.blocks]
    if order_key is not None:
        candidates = sorted(candidates, key=order_key)

    if not candidates:
        return []

    drafts: List[_GroupDraft] = []

    for image in candidates:
        joined = False
        for draft in drafts:
            representative = draft.representative
            score = calculate_layout_similarity(
                image.blocks,
                representative.blocks,
                image.width,
                image.height,
            )
            logger.debug(
                f"Image {image.id} vs representative {representative.id}: score={score:.3f}"
            )
            if score >= threshold:
                draft.add(image.id, score)
                joined = True
                break

        if not joined:
            drafts.append(_GroupDraft(representative=image, image_ids=[image.id]))

    groups = _freeze_all(drafts)
    logger.info(
        f"Grouped {len(candidates)} images into {len(groups)} layout groups "
        f"(threshold={threshold}, skipped {len(images) - len(candidates)} without blocks)"
    )
    return groups


def _freeze_all(drafts: Sequence[_GroupDraft]) -> List[LayoutGroup]:
    # Duplicate image ids would give two groups the same id; later ones get the group index appended
    used: Set[str] = set()
    groups: List[LayoutGroup] = []
    for index, draft in enumerate(drafts):
        group_id = group_id_for(draft.representative.id)
        if group_id in used:
            logger.warning(f"Duplicate representative id {draft.representative.id} in batch; group {index} renamed")
            while group_id in used:
                group_id = f"{group_id}-{index}"
        used.add(group_id)
        groups.append(draft.freeze(group_id))
    return groups
