"""Prompt construction for itinerary generation and modification.

Every builder here is a pure function of its input: no I/O, no clock, and
absent optional fields render as explicit placeholders so the model never
sees a silent gap.
"""

import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from backend.app.models.trip import ModificationRequest, Travelers, TripRequest

# Turns of conversation history included in a modification prompt
HISTORY_WINDOW = 10

NOT_SPECIFIED = "Not specified"
NONE_SPECIFIED = "None specified"
UNKNOWN = "unknown"

ITINERARY_FORMAT = """{
  "summary": "Brief 2-3 sentence overview of the trip",
  "destination": "Destination name",
  "duration": "X days",
  "totalBudget": "Approximate total budget in local currency",
  "budgetBreakdown": {
    "transportation": "amount",
    "accommodation": "amount",
    "food": "amount",
    "activities": "amount",
    "miscellaneous": "amount"
  },
  "itineraryTable": [
    {
      "day": 1,
      "theme": "Short theme or vibe of the day",
      "rows": [
        {
          "time": "9:00 AM",
          "activity": "Activity title",
          "description": "Detailed description of the activity",
          "distance": "Distance from the previous stop (or 'Starting point')",
          "pricing": "Price per person (or 'Free' or 'Included')"
        }
      ],
      "meals": {
        "breakfast": "Cafe name - recommended dish (price per person)",
        "lunch": "Restaurant name - recommended dish (price per person)",
        "dinner": "Restaurant name - recommended dish (price per person)"
      },
      "accommodation": "Stay name - brief description, rating, price per night",
      "dailyCost": "Total cost for the day"
    }
  ],
  "expenseSummary": {
    "perPersonBreakdown": {
      "transportation": {"amount": "amount", "details": ["Line item: amount"]},
      "accommodation": {"amount": "amount", "details": ["Line item: amount"]},
      "food": {"amount": "amount", "details": ["Line item: amount"]},
      "activities": {"amount": "amount", "details": ["Line item: amount"]},
      "miscellaneous": {"amount": "amount", "details": ["Line item: amount"]}
    },
    "totalPerPerson": "amount",
    "totalForGroup": "amount (for N travelers)",
    "costSavingTips": ["Practical tip for saving money"]
  },
  "localTips": [
    "Short cultural or local tip related to the area"
  ],
  "totalEstimatedCost": "Sum that fits within the budget"
}"""

TEXT_RESPONSE_FORMAT = """{
  "isTextResponse": true,
  "message": "Your answer here explaining something about the itinerary"
}"""

OUTPUT_RULES = """CRITICAL RULES:
1. "meals" must have plain string values for breakfast, lunch and dinner
2. "accommodation" must be a plain string
3. "dailyCost" must be included for each day
4. All arrays must contain at least one item
5. "expenseSummary" is MANDATORY with a complete breakdown
6. Include specific line items in "details" arrays for transparency
7. Return ONLY valid JSON: no prose, no markdown, no code fences, no commentary"""


def parse_trip_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_days(start: str | None, end: str | None) -> int | None:
    """Days between two dates, partial days rounded up, never less than 1.

    Returns:
        Day count, or None when either date is missing or unparseable
    """
    start_at = parse_trip_datetime(start)
    end_at = parse_trip_datetime(end)
    if start_at is None or end_at is None:
        return None
    elapsed = abs(end_at - start_at)
    return max(math.ceil(elapsed / timedelta(days=1)), 1)


def resolve_day_count(request: TripRequest) -> int | None:
    """Explicit day count if given, otherwise derived from the date range."""
    if request.days is not None:
        return request.days
    return calculate_days(request.start_date, request.end_date)


def describe_duration(request: TripRequest) -> str:
    days = resolve_day_count(request)
    if days is None:
        return UNKNOWN
    return f"{days} day{'s' if days != 1 else ''}"


def _describe_travelers(travelers: int | Travelers | None) -> str:
    if travelers is None:
        return "1 adult"
    if isinstance(travelers, Travelers):
        return f"{travelers.adults} adults, {travelers.children} children"
    return f"{travelers} traveler{'s' if travelers != 1 else ''}"


def _join(values: list[str], placeholder: str) -> str:
    return ", ".join(values) if values else placeholder


def _describe_preferences(preferences: dict[str, str | list[str]] | None) -> str:
    if not preferences:
        return NOT_SPECIFIED
    parts = []
    for key, value in preferences.items():
        rendered = ", ".join(value) if isinstance(value, list) else value
        parts.append(f"{key}: {rendered}")
    return "; ".join(parts)


def build_trip_details(request: TripRequest) -> str:
    """Render the labeled USER DETAILS block of an initial prompt."""
    style = request.travel_style.value if request.travel_style else NOT_SPECIFIED
    budget = request.budget if request.budget not in (None, "") else "Flexible / Not specified"

    lines = [
        f"- Destination: {request.destination or NOT_SPECIFIED}",
        f"- Travel Dates: {request.start_date or '?'} → {request.end_date or '?'}",
        f"- Duration: {describe_duration(request)}",
        f"- Travelers: {_describe_travelers(request.travelers)}",
        f"- Travel Type: {request.travel_type or NOT_SPECIFIED}",
        f"- Travel Style: {style}",
        f"- Pace: {request.pace}",
        f"- Expected Budget: {budget}",
        f"- Interests: {_join(request.interests, NOT_SPECIFIED)}",
        f"- Travel Vibe: {_join(request.travel_vibe, NOT_SPECIFIED)}",
        f"- Must Visit Places: {_join(request.must_visit_places, NONE_SPECIFIED)}",
        f"- Accommodation Preference: {request.accommodation or NOT_SPECIFIED}",
        f"- Dietary Restrictions: {_join(request.dietary_restrictions, NONE_SPECIFIED)}",
        f"- Preferences: {_describe_preferences(request.preferences)}",
        f"- Special Requests: {request.special_requests or NONE_SPECIFIED}",
    ]
    return "\n".join(lines)


def build_trip_prompt(request: TripRequest) -> str:
    """Build the prompt for generating a new itinerary."""
    transport = (
        "- Provides transportation options between activities.\n"
        if request.include_transport
        else ""
    )

    return f"""You are an expert travel planner and experience designer.
Generate a **detailed, budget-friendly, realistic travel itinerary**.

## USER DETAILS
{build_trip_details(request)}

## TASK
Create a personalized itinerary that:
- Follows a {request.pace} pace, balancing activities with rest time.
- Feels natural, location-accurate, and stays within the given budget.
- Groups nearby attractions logically with realistic timing between them.
- Mentions actual distances (e.g., "5.4 km from the hotel to the old town").
- Names real food spots (restaurants/cafes with cuisine type and price).
- Suggests specific stays (boutique hotels, homestays) with details.
{transport}- Adds daily activity breakdowns and total daily costs.
- Ensures the **total estimated cost fits the overall budget**.
- Provides local tips and insights.
- **INCLUDES A COMPREHENSIVE EXPENSE SUMMARY** with a detailed breakdown.

If you cannot generate valid JSON for any reason, respond with: {{}}

## OUTPUT FORMAT (strict JSON only - MUST match this exact structure)
{ITINERARY_FORMAT}

{OUTPUT_RULES}
"""


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_modification_prompt(request: ModificationRequest) -> str:
    """Build the prompt for editing an existing itinerary.

    Embeds the current itinerary, the original trip context, the last
    HISTORY_WINDOW conversation turns and the user's literal utterance.
    """
    history = [
        turn.model_dump(by_alias=True, exclude_none=True)
        for turn in request.conversation_history[-HISTORY_WINDOW:]
    ]

    return f"""You are an expert travel planner. A user has an existing itinerary and wants to modify it.

## CURRENT ITINERARY
{_dump(request.current_itinerary)}

## ORIGINAL TRIP DETAILS
{_dump(request.context)}

## CONVERSATION HISTORY (last {HISTORY_WINDOW} messages)
{_dump(history)}

## USER'S MODIFICATION REQUEST
"{request.user_said}"

## YOUR TASK
Understand what the user wants to change and generate an UPDATED itinerary that:
1. **Preserves unchanged elements** from the current itinerary
2. **Modifies only what the user requested** (e.g., "add a museum on day 2", "make it cheaper", "remove adventure activities")
3. **Maintains the same JSON structure** as the current itinerary
4. **Recalculates costs** if the budget or activities change
5. **Keeps it realistic and accurate**

Common modification types to detect:
- Budget changes: "reduce budget", "I have more money", "make it cheaper"
- Activity changes: "add", "remove", "replace", "skip", "include more"
- Day-specific changes: "on day 2", "first day", "last day"
- Preference changes: "more adventure", "less shopping", "vegetarian options"
- Accommodation changes: "better hotels", "budget stays", "luxury resorts"
- Time changes: "add one more day", "reduce to 5 days"

If the request is a question rather than a modification, respond with a text explanation in this format:
{TEXT_RESPONSE_FORMAT}

Otherwise, return the FULL UPDATED ITINERARY in the same JSON structure with all fields, for example:
{ITINERARY_FORMAT[:-2]},
  "modificationsApplied": ["Change 1", "Change 2"]
}}

CRITICAL: Return ONLY valid JSON: no prose, no markdown, no code fences, no commentary.
"""
