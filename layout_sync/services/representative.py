"""
Full pairwise helpers for re-evaluating a finished group.

The greedy clustering pass always keeps the first image as representative.
These helpers compare every member with every other one, which costs
O(n^2) scores, to pick a better representative on request.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from layout_sync.models.layout import ImageRecord, LayoutGroup
from layout_sync.services.similarity import calculate_layout_similarity

logger = logging.getLogger(__name__)


def _score(reference: ImageRecord, other: ImageRecord) -> float:
    # Normalized by the reference image of the pair
    return calculate_layout_similarity(reference.blocks, other.blocks, reference.width, reference.height)


def similarity_matrix(images: Sequence[ImageRecord]) -> np.ndarray:
    """
    Score every ordered pair of images.

    Returns:
        (n, n) array where [i, j] is image i vs image j normalized by image i's
        size; the diagonal is 1.0.
    """
    n = len(images)
    matrix = np.ones((n, n), dtype=np.float64)
    for i, reference in enumerate(images):
        for j, other in enumerate(images):
            if i != j:
                matrix[i, j] = _score(reference, other)
    return matrix


def calculate_group_average_similarity(images: Sequence[ImageRecord]) -> float:
    """Mean score over all unordered pairs; 1.0 for fewer than two images."""
    if len(images) < 2:
        return 1.0

    scores = [
        _score(images[i], images[j])
        for i in range(len(images))
        for j in range(i + 1, len(images))
    ]
    return float(np.mean(scores))


def find_best_representative(images: Sequence[ImageRecord]) -> Optional[str]:
    """
    Pick the image whose layout agrees best with the rest of the set.

    Args:
        images: Candidate images, usually the members of one group

    Returns:
        Id of the candidate with the highest mean similarity to all other
        images (first one wins ties). Candidates without blocks are not
        eligible; if none is eligible the first image's id is returned.
        None for an empty input.
    """
    if not images:
        return None

    if len(images) == 1:
        return images[0].id

    best_id = images[0].id
    best_score = -1.0

    for index, candidate in enumerate(images):
        if not candidate.blocks:
            continue

        scores = [_score(candidate, other) for k, other in enumerate(images) if k != index]
        mean_score = sum(scores) / len(scores)
        if mean_score > best_score:
            best_score = mean_score
            best_id = candidate.id

    return best_id


def resolve_group_images(group: LayoutGroup, images: Sequence[ImageRecord]) -> List[ImageRecord]:
    """Member records of a group in group order; ids missing from images are dropped."""
    by_id: Dict[str, ImageRecord] = {img.id: img for img in images}
    return [by_id[image_id] for image_id in group.image_ids if image_id in by_id]


def reelect_representative(group: LayoutGroup, images: Sequence[ImageRecord]) -> LayoutGroup:
    """
    Recompute a group's representative with the pairwise helpers.

    Args:
        group: A finished group
        images: Records for (at least) the group's members

    Returns:
        A new group with the same id whose first image is the elected
        representative (other members keep their relative order) and whose
        similarity is the mean score of the other members against it. The
        group is returned unchanged when none of its members can be resolved.
    """
    members = resolve_group_images(group, images)
    best_id = find_best_representative(members)
    if best_id is None:
        return group

    representative = next(m for m in members if m.id == best_id)
    others = [m for m in members if m.id != best_id]
    similarity = (
        float(np.mean([_score(other, representative) for other in others]))
        if others
        else 1.0
    )

    if best_id != group.representative_image_id:
        logger.info(f"Group {group.id}: representative {group.representative_image_id} -> {best_id}")

    return group.model_copy(
        update={
            "representative_image_id": best_id,
            "image_ids": (best_id,) + tuple(m.id for m in others),
            "similarity": similarity,
        }
    )
