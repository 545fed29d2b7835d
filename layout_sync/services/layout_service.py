"""
Layout service wrapping the similarity, clustering and transfer functions.
Provides a singleton used by the API layer.
"""

import logging
import time
from typing import List, Optional, Sequence

from layout_sync.config import get_settings
from layout_sync.models.api import (
    ApplyLayoutResultData,
    ClusterResultData,
    ConfirmResultData,
    MatrixResultData,
    RepresentativeResultData,
    SimilarityResultData,
)
from layout_sync.models.layout import ImageRecord, LayoutGroup, TextBlock
from layout_sync.services.clustering import group_images_by_layout
from layout_sync.services.representative import (
    calculate_group_average_similarity,
    find_best_representative,
    reelect_representative,
    resolve_group_images,
    similarity_matrix,
)
from layout_sync.services.similarity import calculate_layout_similarity
from layout_sync.services.summary import default_unify_flags, group_label, similarity_tier, summarize_groups
from layout_sync.services.transfer import apply_layout_to_images, confirmed_groups, unify_groups

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.perf_counter() * 1000)


class BatchTooLargeError(ValueError):
    """Raised when a request carries more images than MAX_BATCH_IMAGES."""

    def __init__(self, count: int, limit: int):
        super().__init__(f"Batch of {count} images exceeds the limit of {limit}")
        self.count = count
        self.limit = limit


class LayoutService:
    """
    Service for grouping images by layout and propagating layouts.
    All operations are pure and synchronous; the service only adds settings,
    batch limits, timing and logging.
    """

    _instance: Optional["LayoutService"] = None

    def __new__(cls) -> "LayoutService":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self._settings = get_settings()
        self._initialized = True

    def _check_batch(self, count: int) -> None:
        limit = self._settings.MAX_BATCH_IMAGES
        if count > limit:
            logger.warning(f"Rejected batch of {count} images (limit {limit})")
            raise BatchTooLargeError(count, limit)

    def similarity(
        self,
        blocks_a: Sequence[TextBlock],
        blocks_b: Sequence[TextBlock],
        width: float,
        height: float,
    ) -> SimilarityResultData:
        """
        Score two layouts.

        Args:
            blocks_a: Blocks of the first image
            blocks_b: Blocks of the second image
            width: Normalization width
            height: Normalization height

        Returns:
            SimilarityResultData with the score
        """
        start = now_ms()
        score = calculate_layout_similarity(blocks_a, blocks_b, width, height)
        return SimilarityResultData(similarity=score, time_ms=now_ms() - start)

    def cluster(
        self,
        images: Sequence[ImageRecord],
        threshold: Optional[float] = None,
    ) -> ClusterResultData:
        """
        Group a detected batch by layout.

        Args:
            images: Images in processing order
            threshold: Join threshold; LAYOUT_GROUP_THRESHOLD when None

        Returns:
            ClusterResultData with groups, display labels, default unify flags
            and summary counts
        """
        self._check_batch(len(images))
        if threshold is None:
            threshold = self._settings.LAYOUT_GROUP_THRESHOLD

        start = now_ms()
        groups = group_images_by_layout(images, threshold=threshold)
        elapsed = now_ms() - start

        logger.info(f"Clustered batch of {len(images)} images -> {len(groups)} groups in {elapsed}ms")
        return ClusterResultData(
            groups=groups,
            labels=[group_label(i, g) for i, g in enumerate(groups)],
            unify_flags=default_unify_flags(groups),
            tiers=[similarity_tier(g) for g in groups],
            summary=summarize_groups(groups, len(images)),
            threshold=threshold,
            time_ms=elapsed,
        )

    def apply_layout(
        self,
        source: ImageRecord,
        targets: Sequence[ImageRecord],
    ) -> ApplyLayoutResultData:
        """
        Propagate the source layout onto the targets.

        Args:
            source: Template image
            targets: Images that should take over the template's layout

        Returns:
            ApplyLayoutResultData with the resulting images and how many changed
        """
        self._check_batch(len(targets) + 1)

        start = now_ms()
        results = apply_layout_to_images(source, targets)
        updated = sum(1 for before, after in zip(targets, results) if after is not before)
        elapsed = now_ms() - start

        logger.info(f"Applied layout of {source.id} to {updated}/{len(targets)} images in {elapsed}ms")
        return ApplyLayoutResultData(images=results, updated=updated, time_ms=elapsed)

    def representative(
        self,
        images: Sequence[ImageRecord],
        group: Optional[LayoutGroup] = None,
    ) -> RepresentativeResultData:
        """
        Re-evaluate the representative of a set of images.

        Args:
            images: Candidate images (or the whole batch when group is given)
            group: Optional finished group to restrict and re-elect

        Returns:
            RepresentativeResultData with the best id, the pairwise average
            and, when a group was given, the re-elected group
        """
        self._check_batch(len(images))

        start = now_ms()
        members: List[ImageRecord] = (
            resolve_group_images(group, images) if group is not None else list(images)
        )
        result = RepresentativeResultData(
            representative_image_id=find_best_representative(members),
            average_similarity=calculate_group_average_similarity(members),
            group=reelect_representative(group, images) if group is not None else None,
        )
        result.time_ms = now_ms() - start
        return result

    def confirm(
        self,
        images: Sequence[ImageRecord],
        groups: Sequence[LayoutGroup],
        unify_flags: Optional[Sequence[bool]] = None,
    ) -> ConfirmResultData:
        """
        Apply the user's per-group unification choices.

        Args:
            images: The whole batch
            groups: Groups shown to the user
            unify_flags: Per-group decision; default_unify_flags when None

        Returns:
            ConfirmResultData with the batch after unification and the number
            of groups that were actually unified
        """
        self._check_batch(len(images))
        if unify_flags is None:
            unify_flags = default_unify_flags(groups)

        start = now_ms()
        selected = confirmed_groups(images, groups, unify_flags)
        results = unify_groups(images, selected)
        elapsed = now_ms() - start

        logger.info(f"Unified {len(selected)}/{len(groups)} groups in {elapsed}ms")
        return ConfirmResultData(images=results, unified_groups=len(selected), time_ms=elapsed)

    def matrix(self, images: Sequence[ImageRecord]) -> MatrixResultData:
        """Pairwise similarity matrix of a batch, for diagnostics."""
        self._check_batch(len(images))

        start = now_ms()
        matrix = similarity_matrix(images)
        return MatrixResultData(
            image_ids=[img.id for img in images],
            matrix=matrix.tolist(),
            time_ms=now_ms() - start,
        )


# Singleton accessor
def get_layout_service() -> LayoutService:
    """Get singleton LayoutService instance."""
    return LayoutService()
