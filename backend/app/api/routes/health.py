"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Response

from backend.app.config import Settings, get_settings
from backend.app.llm.errors import ConfigurationError

router = APIRouter()


def check_credentials(settings: Settings) -> tuple[bool, str]:
    """Check that the generation credential pool can be built.

    Returns:
        (is_ok, status_message) - never includes credential values
    """
    try:
        pool = settings.credential_pool()
    except ConfigurationError:
        return (False, "not_configured")
    return (True, f"{len(pool)} credential(s)")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Readiness check.

    Returns:
        200 with component status if generation is configured
        503 otherwise
    """
    settings = get_settings()
    credentials_ok, credentials_status = check_credentials(settings)

    response_body = {
        "status": "ok" if credentials_ok else "degraded",
        "components": {
            "credentials": credentials_status,
            "model": settings.generation_model,
        },
    }

    if not credentials_ok:
        import json

        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
