"""Models package - re-exports for convenience."""

from backend.app.models.trip import (
    ConversationTurn,
    ModificationRequest,
    TextResponse,
    Travelers,
    TravelStyle,
    TripRequest,
)

__all__ = [
    # Trip input
    "TripRequest",
    "Travelers",
    "TravelStyle",
    # Modification
    "ModificationRequest",
    "ConversationTurn",
    # Output
    "TextResponse",
]
