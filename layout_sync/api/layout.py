"""
Layout grouping and transfer API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from layout_sync.config import get_settings
from layout_sync.models.api import (
    ApplyLayoutRequest,
    ApplyLayoutResponse,
    ClusterRequest,
    ClusterResponse,
    ConfirmGroupsRequest,
    ConfirmResponse,
    HealthResponse,
    MatrixRequest,
    MatrixResponse,
    RepresentativeRequest,
    RepresentativeResponse,
    SimilarityRequest,
    SimilarityResponse,
)
from layout_sync.services.layout_service import (
    BatchTooLargeError,
    LayoutService,
    get_layout_service,
)

logger = logging.getLogger(__name__)

settings = get_settings()
prefix = f"{settings.API_V1_STR}/layout"

router = APIRouter()


def _too_large(e: BatchTooLargeError) -> HTTPException:
    return HTTPException(status_code=413, detail=str(e))


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint.
    Returns service status and version.
    """
    return HealthResponse(status="ok", version=settings.VERSION)


@router.post(
    f"{prefix}/similarity",
    response_model=SimilarityResponse,
    tags=["Layout"],
    summary="Score two layouts",
    description="Compare two block lists, normalized by one reference width/height.",
)
def layout_similarity(
    request: SimilarityRequest,
    service: LayoutService = Depends(get_layout_service),
) -> SimilarityResponse:
    try:
        result = service.similarity(request.blocks_a, request.blocks_b, request.width, request.height)
        return SimilarityResponse(success=True, data=result)
    except Exception as e:
        logger.exception(f"Similarity failed: {e}")
        return SimilarityResponse(success=False, error=str(e))


@router.post(
    f"{prefix}/cluster",
    response_model=ClusterResponse,
    tags=["Layout"],
    summary="Group images by layout",
    description=(
        "Greedy single pass over the batch in the given order. Images without "
        "blocks are not grouped."
    ),
)
def cluster_images(
    request: ClusterRequest,
    service: LayoutService = Depends(get_layout_service),
) -> ClusterResponse:
    """
    Group a detected batch so the user can confirm layout unification.

    Returns groups with labels ("Layout A" / "Independent"), suggested
    unification flags and summary counts.
    """
    try:
        result = service.cluster(request.images, request.threshold)
        return ClusterResponse(success=True, data=result)
    except BatchTooLargeError as e:
        raise _too_large(e)
    except Exception as e:
        logger.exception(f"Clustering failed: {e}")
        return ClusterResponse(success=False, error=str(e))


@router.post(
    f"{prefix}/apply",
    response_model=ApplyLayoutResponse,
    tags=["Layout"],
    summary="Apply one image's layout to others",
    description="Copies scaled geometry and style; every target keeps its own text and status.",
)
def apply_layout(
    request: ApplyLayoutRequest,
    service: LayoutService = Depends(get_layout_service),
) -> ApplyLayoutResponse:
    try:
        result = service.apply_layout(request.source, request.targets)
        return ApplyLayoutResponse(success=True, data=result)
    except BatchTooLargeError as e:
        raise _too_large(e)
    except Exception as e:
        logger.exception(f"Layout transfer failed: {e}")
        return ApplyLayoutResponse(success=False, error=str(e))


@router.post(
    f"{prefix}/representative",
    response_model=RepresentativeResponse,
    tags=["Layout"],
    summary="Recompute the best representative",
    description="Full pairwise comparison; slower than clustering, intended for finished groups.",
)
def best_representative(
    request: RepresentativeRequest,
    service: LayoutService = Depends(get_layout_service),
) -> RepresentativeResponse:
    try:
        result = service.representative(request.images, request.group)
        return RepresentativeResponse(success=True, data=result)
    except BatchTooLargeError as e:
        raise _too_large(e)
    except Exception as e:
        logger.exception(f"Representative selection failed: {e}")
        return RepresentativeResponse(success=False, error=str(e))


@router.post(
    f"{prefix}/confirm",
    response_model=ConfirmResponse,
    tags=["Layout"],
    summary="Unify confirmed groups",
    description="Applies each confirmed group's representative layout to its other members.",
)
def confirm_groups(
    request: ConfirmGroupsRequest,
    service: LayoutService = Depends(get_layout_service),
) -> ConfirmResponse:
    try:
        result = service.confirm(request.images, request.groups, request.unify_flags)
        return ConfirmResponse(success=True, data=result)
    except BatchTooLargeError as e:
        raise _too_large(e)
    except Exception as e:
        logger.exception(f"Group confirmation failed: {e}")
        return ConfirmResponse(success=False, error=str(e))


@router.post(
    f"{prefix}/matrix",
    response_model=MatrixResponse,
    tags=["Layout"],
    summary="Pairwise similarity matrix",
)
def layout_matrix(
    request: MatrixRequest,
    service: LayoutService = Depends(get_layout_service),
) -> MatrixResponse:
    try:
        result = service.matrix(request.images)
        return MatrixResponse(success=True, data=result)
    except BatchTooLargeError as e:
        raise _too_large(e)
    except Exception as e:
        logger.exception(f"Similarity matrix failed: {e}")
        return MatrixResponse(success=False, error=str(e))
