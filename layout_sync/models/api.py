"""
Pydantic models for layout API request/response.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from layout_sync.models.layout import ImageRecord, LayoutGroup, TextBlock


class ApiModel(BaseModel):
    """Request/response base: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)


# -----------------------------
# Requests
# -----------------------------
class SimilarityRequest(ApiModel):
    """Compare two block lists on one normalization basis."""

    blocks_a: List[TextBlock] = Field(default_factory=list, alias="blocksA")
    blocks_b: List[TextBlock] = Field(default_factory=list, alias="blocksB")
    width: float = Field(..., description="Normalization width (reference image)")
    height: float = Field(..., description="Normalization height (reference image)")


class ClusterRequest(ApiModel):
    """Batch of detected images to group by layout."""

    images: List[ImageRecord] = Field(default_factory=list)
    threshold: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Minimum similarity to join a group (defaults to LAYOUT_GROUP_THRESHOLD)",
    )


class ApplyLayoutRequest(ApiModel):
    """Propagate the source image's layout onto the targets."""

    source: ImageRecord
    targets: List[ImageRecord] = Field(default_factory=list)


class RepresentativeRequest(ApiModel):
    """Pairwise re-evaluation of a set of images (optionally a finished group)."""

    images: List[ImageRecord] = Field(default_factory=list)
    group: Optional[LayoutGroup] = Field(
        default=None,
        description="When set, only its members are considered and the re-elected group is returned",
    )


class ConfirmGroupsRequest(ApiModel):
    """User decisions from the confirmation step."""

    images: List[ImageRecord] = Field(default_factory=list)
    groups: List[LayoutGroup] = Field(default_factory=list)
    unify_flags: Optional[List[bool]] = Field(
        default=None,
        alias="unifyFlags",
        description="One flag per group; defaults to unifying every multi-image group",
    )


class MatrixRequest(ApiModel):
    images: List[ImageRecord] = Field(default_factory=list)


# -----------------------------
# Results
# -----------------------------
class GroupSummary(ApiModel):
    """Counts shown above the group list in the confirmation step."""

    total_images: int = Field(default=0, alias="totalImages")
    group_count: int = Field(default=0, alias="groupCount")
    grouped_images: int = Field(default=0, alias="groupedImages", description="Images in groups of two or more")
    independent_images: int = Field(default=0, alias="independentImages")


class SimilarityResultData(ApiModel):
    similarity: float
    time_ms: int = Field(default=0, alias="timeMs")


class ClusterResultData(ApiModel):
    groups: List[LayoutGroup] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list, description="Display name per group")
    unify_flags: List[bool] = Field(default_factory=list, alias="unifyFlags", description="Suggested default per group")
    tiers: List[str] = Field(default_factory=list, description="Similarity tier per group: high, medium or low")
    summary: GroupSummary = Field(default_factory=GroupSummary)
    threshold: float
    time_ms: int = Field(default=0, alias="timeMs")


class ApplyLayoutResultData(ApiModel):
    images: List[ImageRecord] = Field(default_factory=list)
    updated: int = Field(default=0, description="Number of targets that received the layout")
    time_ms: int = Field(default=0, alias="timeMs")


class RepresentativeResultData(ApiModel):
    representative_image_id: Optional[str] = Field(default=None, alias="representativeImageId")
    average_similarity: float = Field(default=1.0, alias="averageSimilarity")
    group: Optional[LayoutGroup] = None
    time_ms: int = Field(default=0, alias="timeMs")


class ConfirmResultData(ApiModel):
    images: List[ImageRecord] = Field(default_factory=list)
    unified_groups: int = Field(default=0, alias="unifiedGroups", description="Flagged groups whose representative was found")
    time_ms: int = Field(default=0, alias="timeMs")


class MatrixResultData(ApiModel):
    image_ids: List[str] = Field(default_factory=list, alias="imageIds")
    matrix: List[List[float]] = Field(default_factory=list)
    time_ms: int = Field(default=0, alias="timeMs")


# -----------------------------
# Envelopes
# -----------------------------
class LayoutResponse(ApiModel):
    """Standard API response: success flag plus either data or error."""

    success: bool = Field(description="Whether the request was successful")
    error: Optional[str] = Field(default=None, description="Error message if success=false")


class SimilarityResponse(LayoutResponse):
    data: Optional[SimilarityResultData] = None


class ClusterResponse(LayoutResponse):
    data: Optional[ClusterResultData] = None


class ApplyLayoutResponse(LayoutResponse):
    data: Optional[ApplyLayoutResultData] = None


class RepresentativeResponse(LayoutResponse):
    data: Optional[RepresentativeResultData] = None


class ConfirmResponse(LayoutResponse):
    data: Optional[ConfirmResultData] = None


class MatrixResponse(LayoutResponse):
    data: Optional[MatrixResultData] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="ok")
    version: str = Field(default="0.1.0")
