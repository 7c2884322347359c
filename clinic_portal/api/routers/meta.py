"""
Meta router - marketing metric definitions.

Exposes the platform and timeline definitions from marketing_metrics.yaml
so the portal frontend can build its analytics tabs without hardcoding
Metricool metric ids.

No authentication required for read-only metadata access.
"""
import logging
from typing import List

from fastapi import APIRouter, HTTPException

from core.marketing_registry import PlatformDefinition, get_platform, list_platforms
from schemas.marketing import PlatformDefinitionResponse, TimelineDefinition

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/meta",
    tags=["Metadata"],
    # No authentication - these are public read-only endpoints
)


def _platform_to_response(platform: PlatformDefinition) -> PlatformDefinitionResponse:
    """Convert internal PlatformDefinition to API response model."""
    return PlatformDefinitionResponse(
        name=platform.name,
        display_name=platform.display_name,
        color=platform.color,
        network=platform.network,
        timelines=[
            TimelineDefinition(
                key=t.key,
                metric=t.metric,
                display_name=t.display_name,
                color=t.color,
            )
            for t in platform.timelines
        ],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/marketing-platforms",
    response_model=List[PlatformDefinitionResponse],
    summary="List marketing platforms",
    description="Get every Metricool platform and its timeline metrics, in configuration order."
)
async def list_marketing_platforms() -> List[PlatformDefinitionResponse]:
    return [_platform_to_response(p) for p in list_platforms().values()]


@router.get(
    "/marketing-platforms/{platform_name}",
    response_model=PlatformDefinitionResponse,
    summary="Get one marketing platform",
    description="Get a single platform definition by name (case-insensitive)."
)
async def get_marketing_platform(platform_name: str) -> PlatformDefinitionResponse:
    """
    Examples:
    - GET /api/v1/meta/marketing-platforms/facebook
    - GET /api/v1/meta/marketing-platforms/YouTube
    """
    try:
        platform = get_platform(platform_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown platform: {platform_name}")
    return _platform_to_response(platform)
