"""
Copy one image's block geometry and style onto other images.

The target keeps what its blocks say (text, id, status); the source decides
where and how it is drawn (bbox, font size, color, direction), scaled into
the target's pixel space.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from layout_sync.models.layout import ImageRecord, LayoutGroup, TextBlock
from layout_sync.utils.geometry import round_half_up, scale_bbox, sort_blocks_by_y

logger = logging.getLogger(__name__)


def transfer_block(source_block: TextBlock, target_block: TextBlock, scale_x: float, scale_y: float) -> TextBlock:
    """Return a copy of target_block carrying source_block's scaled geometry and style."""
    return target_block.model_copy(
        update={
            "bbox": scale_bbox(source_block.bbox, scale_x, scale_y),
            # Uniform font scaling so glyphs are not distorted
            "estimated_font_size": round_half_up(source_block.estimated_font_size * min(scale_x, scale_y)),
            "estimated_color": source_block.estimated_color,
            "direction": source_block.direction,
        }
    )


def apply_layout_to_image(source: ImageRecord, target: ImageRecord) -> ImageRecord:
    """
    Apply source's layout to a single target.

    The target is returned unchanged when it has no blocks, when its block
    count differs from the source's, or when the source has no usable size.
    """
    if not source.blocks or not target.blocks:
        return target

    if len(target.blocks) != len(source.blocks):
        logger.debug(
            f"Skip layout transfer {source.id} -> {target.id}: "
            f"{len(source.blocks)} vs {len(target.blocks)} blocks"
        )
        return target

    if source.width <= 0 or source.height <= 0:
        logger.warning(f"Source image {source.id} has no usable size ({source.width}x{source.height})")
        return target

    scale_x = target.width / source.width
    scale_y = target.height / source.height

    sorted_source = sort_blocks_by_y(source.blocks)
    sorted_target = sort_blocks_by_y(target.blocks)

    new_blocks = tuple(
        transfer_block(src, dst, scale_x, scale_y)
        for src, dst in zip(sorted_source, sorted_target)
    )
    return target.model_copy(update={"blocks": new_blocks})


def apply_layout_to_images(source: ImageRecord, targets: Sequence[ImageRecord]) -> List[ImageRecord]:
    """
    Apply source's layout to every target.

    Args:
        source: Image whose (usually hand-edited) layout is the template
        targets: Images to receive the layout

    Returns:
        A new list, one entry per target in the same order. Targets that cannot
        be paired block-for-block with the source are passed through as is.
        Neither source nor targets are modified.
    """
    if not source.blocks:
        return list(targets)

    return [apply_layout_to_image(source, target) for target in targets]


def confirmed_groups(
    images: Sequence[ImageRecord],
    groups: Sequence[LayoutGroup],
    unify_flags: Optional[Sequence[bool]] = None,
) -> List[Tuple[LayoutGroup, ImageRecord]]:
    """
    Pair every flagged group with its representative's record.

    Missing flags count as False. Groups whose representative is not part
    of the batch are left out, so the result lists exactly the groups that
    will be unified.
    """
    flags = list(unify_flags or [])
    by_id: Dict[str, ImageRecord] = {img.id: img for img in images}
    selected: List[Tuple[LayoutGroup, ImageRecord]] = []

    for index, group in enumerate(groups):
        if index >= len(flags) or not flags[index]:
            continue

        source = by_id.get(group.representative_image_id)
        if source is None:
            logger.warning(f"Group {group.id}: representative {group.representative_image_id} not in batch")
            continue
        selected.append((group, source))

    return selected


def apply_confirmed_groups(
    images: Sequence[ImageRecord],
    groups: Sequence[LayoutGroup],
    unify_flags: Optional[Sequence[bool]] = None,
) -> List[ImageRecord]:
    """
    Unify every confirmed group on its representative's layout.

    Args:
        images: The full batch
        groups: Groups as produced by the clustering pass
        unify_flags: One flag per group; missing flags count as False

    Returns:
        The batch in its original order, with members of confirmed groups
        replaced by their transferred copies. Groups whose representative is
        not part of the batch are left alone.
    """
    return unify_groups(images, confirmed_groups(images, groups, unify_flags))


def unify_groups(
    images: Sequence[ImageRecord],
    selected: Sequence[Tuple[LayoutGroup, ImageRecord]],
) -> List[ImageRecord]:
    """Apply each (group, representative) pair from confirmed_groups to the batch."""
    by_id: Dict[str, ImageRecord] = {img.id: img for img in images}
    replaced: Dict[str, ImageRecord] = {}

    for group, source in selected:
        members = [
            by_id[image_id]
            for image_id in group.image_ids
            if image_id != source.id and image_id in by_id
        ]
        for updated in apply_layout_to_images(source, members):
            replaced[updated.id] = updated
        logger.info(f"Group {group.id}: applied layout of {source.id} to {len(members)} images")

    return [replaced.get(img.id, img) for img in images]
