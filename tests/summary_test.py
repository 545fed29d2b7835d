from layout_sync.models.layout import LayoutGroup
from layout_sync.services.summary import default_unify_flags, group_label, similarity_tier, summarize_groups


def group(*image_ids):
    return LayoutGroup(id=f"group-{image_ids[0]}", representative_image_id=image_ids[0], image_ids=image_ids)


def test_summarize_groups_counts_grouped_and_independent_images():
    groups = [group("a", "b", "c"), group("d"), group("e", "f")]

    summary = summarize_groups(groups, total_images=7)

    assert summary.total_images == 7
    assert summary.group_count == 3
    assert summary.grouped_images == 5
    # "d" plus one image that had no blocks
    assert summary.independent_images == 2


def test_summarize_empty():
    summary = summarize_groups([], total_images=0)
    assert (summary.group_count, summary.grouped_images, summary.independent_images) == (0, 0, 0)


def test_group_labels():
    groups = [group("a", "b"), group("c"), group("d", "e")]
    assert [group_label(i, g) for i, g in enumerate(groups)] == ["Layout A", "Independent", "Layout C"]
    assert group_label(26, group("x", "y")) == "Layout AA"


def test_default_unify_flags():
    assert default_unify_flags([group("a", "b"), group("c")]) == [True, False]


def test_summary_serializes_with_camel_case_keys():
    dumped = summarize_groups([group("a", "b")], total_images=2).model_dump(by_alias=True)
    assert dumped == {"totalImages": 2, "groupCount": 1, "groupedImages": 2, "independentImages": 0}


def test_similarity_tiers():
    def scored(similarity):
        return LayoutGroup(id="g", representative_image_id="a", image_ids=["a", "b"], similarity=similarity)

    assert similarity_tier(scored(1.0)) == "high"
    assert similarity_tier(scored(0.85)) == "high"
    assert similarity_tier(scored(0.84)) == "medium"
    assert similarity_tier(scored(0.7)) == "medium"
    assert similarity_tier(scored(0.69)) == "low"
