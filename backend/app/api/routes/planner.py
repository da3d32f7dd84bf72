"""AI planner endpoint - POST /api/ai-planner.

Thin adapter over ItineraryGenerator.generate: the body is passed through
as-is and generation error kinds are mapped to HTTP status codes.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from backend.app.llm.errors import (
    FatalProviderError,
    MalformedOutputError,
    PoolExhaustedError,
    TripValidationError,
)
from backend.app.orchestration.generator import ItineraryGenerator, get_itinerary_generator

router = APIRouter(prefix="/api", tags=["planner"])
logger = logging.getLogger(__name__)


@router.post("/ai-planner", status_code=status.HTTP_200_OK)
async def create_itinerary(
    payload: Annotated[dict[str, Any], Body()],
    generator: Annotated[ItineraryGenerator, Depends(get_itinerary_generator)],
) -> dict[str, Any]:
    """Generate an itinerary, or apply a modification to an existing one.

    Args:
        payload: TripRequest or ModificationRequest JSON (camelCase)
        generator: Itinerary generator

    Returns:
        Annotated itinerary, or ``{"isTextResponse": true, "message": ...}``
    """
    try:
        return await generator.generate(payload)
    except TripValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid trip request", "problems": e.problems},
        ) from e
    except PoolExhaustedError as e:
        logger.error(f"Generation pool exhausted after {len(e.attempts)} attempt(s)")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": str(e)},
        ) from e
    except FatalProviderError as e:
        logger.error(f"Generation provider failed: {e} (status={e.status_code})")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Itinerary generation is unavailable right now"},
        ) from e
    except MalformedOutputError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Failed to generate itinerary: model returned malformed output"},
        ) from e
