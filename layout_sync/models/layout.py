"""
Pydantic models for text blocks, images and layout groups.

Python attributes are snake_case; the JSON form uses the camelCase names the
detection service and the confirmation UI exchange (estimatedFontSize,
representativeImageId, ...). Either spelling is accepted on input.
"""

from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


BlockStatus = Literal["translate", "keep", "exclude"]


class LayoutModel(BaseModel):
    """Base for all layout models: immutable, populated by name or alias."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BoundingBox(LayoutModel):
    """Axis-aligned box in the owning image's pixel space; (x, y) is top-left."""

    # Integers stay integers on the wire; fractional input is kept as is
    x: Union[int, float]
    y: Union[int, float]
    width: Union[int, float]
    height: Union[int, float]


class TextBlock(LayoutModel):
    """One detected text region within one image."""

    id: str = Field(..., description="Opaque, stable block identifier")
    text: str = Field(default="", description="Recognized text, owned by the image")
    bbox: BoundingBox
    estimated_font_size: Union[int, float] = Field(
        default=16,
        alias="estimatedFontSize",
        description="Font size estimated at detection time (px)",
    )
    estimated_color: str = Field(
        default="#000000",
        alias="estimatedColor",
        description="Approximate dominant text color",
    )
    direction: str = Field(default="horizontal", description="Text flow tag, e.g. horizontal/vertical")
    status: BlockStatus = Field(default="translate", description="Per-block user intent")
    confidence: Optional[float] = Field(default=None, description="Detection confidence, if reported")


class ImageRecord(LayoutModel):
    """One image of the batch together with its detected blocks."""

    id: str
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    name: Optional[str] = Field(default=None, description="Original file name")
    blocks: Tuple[TextBlock, ...] = Field(default=(), description="Detected text blocks")


class LayoutGroup(LayoutModel):
    """A set of images sharing one layout, led by its representative."""

    id: str
    representative_image_id: str = Field(..., alias="representativeImageId")
    image_ids: Tuple[str, ...] = Field(..., alias="imageIds", min_length=1)
    similarity: float = Field(
        default=1.0,
        description="Mean similarity of the members to the representative when they joined",
    )
