from layout_sync.models.layout import BoundingBox, ImageRecord, LayoutGroup, TextBlock
from layout_sync.services.transfer import apply_confirmed_groups, apply_layout_to_images, confirmed_groups


def block(block_id, x, y, width, height, text="", **style):
    return TextBlock(id=block_id, text=text, bbox=BoundingBox(x=x, y=y, width=width, height=height), **style)


def image(image_id, width, height, *blocks):
    return ImageRecord(id=image_id, width=width, height=height, blocks=blocks)


def bbox_tuple(blk):
    return (blk.bbox.x, blk.bbox.y, blk.bbox.width, blk.bbox.height)


def test_layout_is_scaled_onto_larger_target_and_text_is_kept():
    source = image("src", 800, 600, block("s1", 100, 100, 200, 40, text="Source"))
    target = image("tgt", 1600, 1200, block("t1", 90, 130, 180, 30, text="Hello"))

    [result] = apply_layout_to_images(source, [target])

    [out] = result.blocks
    assert bbox_tuple(out) == (200, 200, 400, 80)
    assert out.text == "Hello"
    assert out.id == "t1"


def test_style_is_copied_and_font_scales_uniformly():
    source = image(
        "src", 800, 600,
        block("s1", 100, 100, 200, 40, estimatedFontSize=20, estimatedColor="#ff0000", direction="vertical"),
    )
    target = image(
        "tgt", 1600, 900,
        block("t1", 0, 0, 10, 10, text="Hi", status="keep", estimatedColor="#000000"),
    )

    [result] = apply_layout_to_images(source, [target])

    [out] = result.blocks
    assert bbox_tuple(out) == (200, 150, 400, 60)
    assert out.estimated_font_size == 30  # 20 * min(2.0, 1.5)
    assert out.estimated_color == "#ff0000"
    assert out.direction == "vertical"
    assert out.status == "keep"
    assert out.text == "Hi"


def test_blocks_are_paired_by_vertical_order():
    source = image(
        "src", 100, 100,
        block("s-top", 10, 10, 50, 10),
        block("s-bottom", 20, 80, 30, 10),
    )
    target = image(
        "tgt", 100, 100,
        block("t-bottom", 0, 70, 5, 5, text="footer"),
        block("t-top", 0, 5, 5, 5, text="title"),
    )

    [result] = apply_layout_to_images(source, [target])

    by_text = {blk.text: blk for blk in result.blocks}
    assert bbox_tuple(by_text["title"]) == (10, 10, 50, 10)
    assert bbox_tuple(by_text["footer"]) == (20, 80, 30, 10)


def test_rounding_goes_half_up():
    source = image("src", 800, 800, block("s1", 5, 5, 5, 5, estimatedFontSize=5))
    target = image("tgt", 400, 400, block("t1", 0, 0, 1, 1))

    [result] = apply_layout_to_images(source, [target])

    assert bbox_tuple(result.blocks[0]) == (3, 3, 3, 3)
    assert result.blocks[0].estimated_font_size == 3


def test_source_without_blocks_returns_targets_unchanged():
    source = image("src", 800, 600)
    targets = [image("t", 800, 600, block("t1", 1, 2, 3, 4))]

    result = apply_layout_to_images(source, targets)

    assert result == targets
    assert result[0] is targets[0]


def test_targets_without_matching_block_count_pass_through():
    source = image("src", 800, 600, block("s1", 100, 100, 200, 40))
    empty = image("empty", 800, 600)
    mismatched = image("two", 800, 600, block("a", 1, 1, 1, 1), block("b", 1, 50, 1, 1))
    matching = image("one", 800, 600, block("c", 1, 1, 1, 1))

    result = apply_layout_to_images(source, [empty, mismatched, matching])

    assert result[0] is empty
    assert result[1] is mismatched
    assert bbox_tuple(result[2].blocks[0]) == (100, 100, 200, 40)


def test_inputs_are_not_modified():
    source = image("src", 800, 600, block("s1", 100, 100, 200, 40))
    target = image("tgt", 1600, 1200, block("t1", 90, 130, 180, 30, text="Hello"))
    targets = [target]

    apply_layout_to_images(source, targets)

    assert targets == [target]
    assert bbox_tuple(target.blocks[0]) == (90, 130, 180, 30)
    assert bbox_tuple(source.blocks[0]) == (100, 100, 200, 40)


def test_transfer_is_idempotent():
    source = image(
        "src", 800, 600,
        block("s1", 100, 100, 200, 40, estimatedFontSize=18),
        block("s2", 120, 400, 300, 60, estimatedFontSize=24),
    )
    targets = [
        image("t1", 1600, 1200, block("a", 0, 500, 5, 5, text="x"), block("b", 0, 0, 5, 5, text="y")),
        image("t2", 400, 300, block("c", 0, 0, 5, 5)),
    ]

    once = apply_layout_to_images(source, targets)
    twice = apply_layout_to_images(source, once)

    assert twice == once


def test_target_keeps_non_block_fields():
    source = image("src", 800, 600, block("s1", 100, 100, 200, 40))
    target = ImageRecord(id="tgt", width=800, height=600, name="page-2.png", blocks=[block("t1", 0, 0, 1, 1)])

    [result] = apply_layout_to_images(source, [target])

    assert (result.id, result.width, result.height, result.name) == ("tgt", 800, 600, "page-2.png")


def test_confirmed_groups_are_unified_on_representative():
    a = image("a", 800, 600, block("a1", 100, 100, 200, 40, text="A"))
    b = image("b", 800, 600, block("b1", 104, 98, 190, 44, text="B"))
    c = image("c", 800, 600, block("c1", 500, 300, 100, 20, text="C"))
    d = image("d", 800, 600, block("d1", 505, 302, 100, 20, text="D"))
    groups = [
        LayoutGroup(id="g1", representative_image_id="a", image_ids=["a", "b"]),
        LayoutGroup(id="g2", representative_image_id="c", image_ids=["c", "d"]),
    ]

    result = apply_confirmed_groups([a, b, c, d], groups, [True, False])

    assert [img.id for img in result] == ["a", "b", "c", "d"]
    assert result[0] is a
    assert bbox_tuple(result[1].blocks[0]) == (100, 100, 200, 40)
    assert result[1].blocks[0].text == "B"
    assert result[3] is d


def test_confirmed_groups_with_missing_flags_or_representative():
    a = image("a", 800, 600, block("a1", 100, 100, 200, 40))
    b = image("b", 800, 600, block("b1", 104, 98, 190, 44))
    groups = [
        LayoutGroup(id="g1", representative_image_id="gone", image_ids=["gone", "b"]),
        LayoutGroup(id="g2", representative_image_id="a", image_ids=["a", "b"]),
    ]

    assert apply_confirmed_groups([a, b], groups, [True]) == [a, b]
    assert apply_confirmed_groups([a, b], groups, None) == [a, b]


def test_source_without_usable_size_passes_targets_through():
    target = image("tgt", 1600, 1200, block("t1", 50, 60, 70, 80, text="Hello"))

    for width, height in ((0, 600), (800, -600)):
        source = image("src", width, height, block("s1", 100, 100, 200, 40))

        result = apply_layout_to_images(source, [target])

        assert result[0] is target


def test_confirmed_groups_lists_only_groups_that_will_be_unified():
    a = image("a", 800, 600, block("a1", 100, 100, 200, 40))
    b = image("b", 800, 600, block("b1", 104, 98, 190, 44))
    groups = [
        LayoutGroup(id="g1", representative_image_id="gone", image_ids=["gone", "b"]),
        LayoutGroup(id="g2", representative_image_id="a", image_ids=["a", "b"]),
        LayoutGroup(id="g3", representative_image_id="b", image_ids=["b"]),
    ]

    selected = confirmed_groups([a, b], groups, [True, True, False])

    assert [(group.id, source.id) for group, source in selected] == [("g2", "a")]
    assert confirmed_groups([a, b], groups, None) == []


def test_transferred_geometry_is_integral():
    source = image("src", 800, 600, block("s1", 100.4, 100, 200, 40, estimated_font_size=20.0))
    target = image("tgt", 1600, 1200, block("t1", 50, 60, 70, 80))

    [result] = apply_layout_to_images(source, [target])

    dumped = result.blocks[0].model_dump(by_alias=True)
    assert dumped["bbox"] == {"x": 201, "y": 200, "width": 400, "height": 80}
    assert all(type(value) is int for value in dumped["bbox"].values())
    assert type(dumped["estimatedFontSize"]) is int
