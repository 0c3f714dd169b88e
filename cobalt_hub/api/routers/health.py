"""Health check API router."""

from fastapi import APIRouter

from cobalt_hub.adapters.cobalt_client import normalize_base_url
from cobalt_hub.api.utils import default_policy
from cobalt_hub.infra.config import config
from cobalt_hub.infra.metrics import get_metrics_response

router = APIRouter()


@router.get("/health", tags=["Health"])
async def health_check():
    """Combined health check endpoint."""
    return {
        "status": "ok",
        "service": "cobalt-hub",
        "version": "1.0.0",
    }


@router.get("/health/live", tags=["Health"])
async def liveness_probe():
    """Liveness probe - indicates if the process is running."""
    return {"status": "alive"}


@router.get("/health/ready", tags=["Health"])
async def readiness_probe():
    """
    Readiness probe.

    The hub keeps no connections open; the connector is called per delivery.
    Reports the connector URL and content policy in effect.
    """
    return {
        "status": "ready",
        "connector": normalize_base_url(config.COBALT_API_BASE_URL),
        "content_policy": default_policy().value,
    }


@router.get("/metrics", tags=["Health"])
async def metrics():
    """Prometheus metrics endpoint."""
    return get_metrics_response()
