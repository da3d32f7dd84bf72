"""Trip request models - structured input for itinerary generation.

Wire payloads use camelCase keys; snake_case field names are accepted too.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model accepting both camelCase aliases and field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TravelStyle(str, Enum):
    """Budget level of a structured trip request."""

    budget = "budget"
    moderate = "moderate"
    luxury = "luxury"


class Travelers(WireModel):
    """Traveler composition."""

    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)


class TripRequest(WireModel):
    """Structured description of a desired itinerary.

    Either ``days`` or a start/end date pair determines the trip length. A
    nested ``dateRange: {start, end}`` is accepted in place of
    ``startDate``/``endDate``. Dates stay strings so that an unparseable value
    degrades to an "unknown" duration instead of rejecting the request.
    """

    destination: str | None = None
    days: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    travelers: int | Travelers | None = None
    budget: str | int | float | None = None
    travel_type: str | None = None
    travel_style: TravelStyle | None = None
    pace: str = "moderate"
    travel_vibe: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    must_visit_places: list[str] = Field(default_factory=list)
    preferences: dict[str, str | list[str]] | None = None
    accommodation: str | None = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    include_transport: bool = True
    special_requests: str | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_date_range(cls, data: Any) -> Any:
        """Flatten ``dateRange: {start, end}`` into start/end dates."""
        if not isinstance(data, dict):
            return data
        date_range = data.get("dateRange") or data.get("date_range")
        if not isinstance(date_range, dict):
            return data
        data = {k: v for k, v in data.items() if k not in ("dateRange", "date_range")}
        bounds = (("start", "startDate", "start_date"), ("end", "endDate", "end_date"))
        for bound, alias, name in bounds:
            if date_range.get(bound) is not None and alias not in data and name not in data:
                data[alias] = date_range[bound]
        return data


class ConversationTurn(WireModel):
    """One prior message in a modification conversation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    role: str | None = None
    content: str | None = None


class ModificationRequest(WireModel):
    """Follow-up edit of an itinerary that was already generated.

    ``current_itinerary`` is opaque: it is re-serialized into the prompt and
    never reparsed.
    """

    context: dict[str, Any] = Field(default_factory=dict)
    current_itinerary: dict[str, Any] | None = None
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    user_said: str = ""

    @property
    def has_itinerary(self) -> bool:
        return bool(self.current_itinerary)


class TextResponse(WireModel):
    """Plain-text answer returned instead of an itinerary.

    Fields the model adds beyond ``message`` are kept as given.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    is_text_response: Literal[True] = True
    message: str
