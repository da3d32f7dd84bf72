"""Itinerary generation orchestrator.

Two entry modes:
- initial: validate a TripRequest, prompt the model, return an annotated itinerary
- modification: edit an existing itinerary from a user utterance, or answer
  the utterance as text

Both modes share one remote-call policy: credentials are tried in pool order,
transient failures advance to the next credential, anything else fails fast.
"""

import logging
import re
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from backend.app.config import Settings, get_settings
from backend.app.llm.client import (
    DEFAULT_GENERATION_CONFIG,
    GenerationConfig,
    GenerationProvider,
    OpenAICompatibleProvider,
)
from backend.app.llm.credentials import (
    CredentialPool,
    FailureKind,
    classify_failure,
    failure_status,
    redact,
)
from backend.app.llm.errors import (
    ConfigurationError,
    FatalProviderError,
    GenerationError,
    MalformedOutputError,
    PoolExhaustedError,
    TransientProviderError,
    TripValidationError,
)
from backend.app.llm.extract import extract_generation_output
from backend.app.llm.prompts import (
    build_modification_prompt,
    build_trip_prompt,
    resolve_day_count,
)
from backend.app.models.trip import ModificationRequest, TextResponse, Travelers, TripRequest
from backend.app.utils.logging import StructuredGenerationLogger
from backend.app.utils.metrics import PrometheusGenerationMetrics

logger = logging.getLogger(__name__)

INITIAL = "initial"
MODIFICATION = "modification"

MIN_DAYS = 1
MAX_DAYS = 30

_CALENDAR_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REPHRASE_RESPONSE = TextResponse(
    message=(
        "I understood your request but had trouble generating the updated itinerary. "
        "Could you please rephrase your modification?"
    )
)


# Metrics interface (no-op default)
class GenerationMetrics:
    """Interface for generation metrics."""

    def record_attempt(self, outcome: str, latency_ms: float) -> None:
        """Record one remote call attempt."""
        pass

    def inc_result(self, mode: str, result: str) -> None:
        """Increment the per-request result counter."""
        pass


# Logging interface (no-op default)
class GenerationLogger:
    """Interface for structured attempt logging."""

    def log_attempt(
        self,
        mode: str,
        credential_index: int,
        outcome: str,
        latency_ms: float,
        status_code: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one remote generation attempt."""
        pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validation_problems(error: ValidationError) -> list[str]:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        problems.append(f"{location}: {err['msg']}" if location else err["msg"])
    return problems


def parse_trip_request(payload: Mapping[str, Any]) -> TripRequest:
    """Parse a raw trip payload, converting schema errors to TripValidationError."""
    try:
        return TripRequest.model_validate(payload)
    except ValidationError as e:
        raise TripValidationError(_validation_problems(e)) from e


def parse_generation_input(
    payload: TripRequest | ModificationRequest | Mapping[str, Any],
) -> TripRequest | ModificationRequest:
    """Select the generation mode for a payload.

    Modification mode requires a non-empty current itinerary; a modification
    request without one is generated from scratch from its trip context.
    """
    if isinstance(payload, TripRequest):
        return payload
    if isinstance(payload, ModificationRequest):
        if payload.has_itinerary:
            return payload
        return parse_trip_request(payload.context)

    if payload.get("currentItinerary") or payload.get("current_itinerary"):
        try:
            return ModificationRequest.model_validate(payload)
        except ValidationError as e:
            raise TripValidationError(_validation_problems(e)) from e
    context = payload.get("context")
    if isinstance(context, Mapping) and "destination" not in payload:
        return parse_trip_request(context)
    return parse_trip_request(payload)


def validate_trip_request(request: TripRequest) -> int:
    """Check required fields of a trip request before any remote call.

    Requests carrying a travel style are structured requests and additionally
    need a calendar start date and a traveler count.

    Returns:
        The resolved day count

    Raises:
        TripValidationError: Listing every problem found
    """
    problems: list[str] = []

    if not (request.destination and request.destination.strip()):
        problems.append("Missing required field: destination")

    days = resolve_day_count(request)
    if days is None:
        problems.append("Missing required field: days (or a valid start and end date)")
    elif not MIN_DAYS <= days <= MAX_DAYS:
        problems.append(f"Days must be between {MIN_DAYS} and {MAX_DAYS}")

    if not (request.interests or request.travel_vibe):
        problems.append("Interests must be a non-empty list")

    travelers = request.travelers
    if isinstance(travelers, Travelers):
        headcount = travelers.adults + travelers.children
    else:
        headcount = travelers
    if headcount is not None and headcount < 1:
        problems.append("Number of travelers must be at least 1")

    if request.travel_style is not None:
        if not request.start_date:
            problems.append("Missing required field: startDate")
        elif not _CALENDAR_DATE.match(request.start_date):
            problems.append("Start date must be in YYYY-MM-DD format")
        if travelers is None:
            problems.append("Missing required field: travelers")

    if problems:
        raise TripValidationError(problems)

    assert days is not None
    return days


class ItineraryGenerator:
    """Generates and modifies itineraries through a remote model."""

    def __init__(
        self,
        pool: CredentialPool,
        provider: GenerationProvider,
        model_name: str,
        config: GenerationConfig = DEFAULT_GENERATION_CONFIG,
        metrics: GenerationMetrics | PrometheusGenerationMetrics | None = None,
        logger: GenerationLogger | StructuredGenerationLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            pool: Ordered credentials tried on every call
            provider: Remote generation backend
            model_name: Canonical backend identifier reported in results
            config: Sampling configuration (policy constants)
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured attempt logger (optional, defaults to no-op)
            clock: Injectable clock for generatedAt (default: UTC now)
        """
        if not model_name:
            raise ConfigurationError("A generation model identifier is required")
        self._pool = pool
        self._provider = provider
        self.model_name = model_name
        self._config = config
        self._metrics = metrics or GenerationMetrics()
        self._logger = logger or GenerationLogger()
        self._clock = clock or _utc_now

    async def generate(
        self, payload: TripRequest | ModificationRequest | Mapping[str, Any]
    ) -> dict[str, Any]:
        """Generate a new itinerary or apply a modification.

        Returns:
            Annotated itinerary, or a TextResponse dict
            (``{"isTextResponse": true, "message": ...}``)

        Raises:
            TripValidationError: Request failed validation (no remote call made)
            FatalProviderError: Non-retryable provider failure
            PoolExhaustedError: Every credential failed transiently
            MalformedOutputError: Initial-mode output was not parseable
        """
        request = parse_generation_input(payload)
        mode = MODIFICATION if isinstance(request, ModificationRequest) else INITIAL

        try:
            if isinstance(request, ModificationRequest):
                result = await self._modify(request)
            else:
                result = await self._create(request)
        except GenerationError as e:
            self._metrics.inc_result(mode, type(e).__name__)
            raise

        self._metrics.inc_result(mode, "text" if result.get("isTextResponse") else "itinerary")
        return result

    async def _create(self, request: TripRequest) -> dict[str, Any]:
        days = validate_trip_request(request)
        logger.info(f"Generating {days}-day itinerary for {request.destination}")

        text = await self.call_with_fallback(build_trip_prompt(request), mode=INITIAL)
        output = extract_generation_output(text)
        if isinstance(output, TextResponse):
            return output.model_dump(by_alias=True)

        if not output:
            logger.warning("Model returned an empty itinerary object")

        return {
            **output,
            "generatedAt": self._timestamp(),
            "model": self.model_name,
            "input": request.model_dump(
                mode="json", by_alias=True, exclude_none=True, exclude={"special_requests"}
            ),
        }

    async def _modify(self, request: ModificationRequest) -> dict[str, Any]:
        text = await self.call_with_fallback(build_modification_prompt(request), mode=MODIFICATION)

        try:
            output = extract_generation_output(text)
        except MalformedOutputError:
            logger.warning("Modification output was not parseable, asking user to rephrase")
            return REPHRASE_RESPONSE.model_dump(by_alias=True)

        if isinstance(output, TextResponse):
            return output.model_dump(by_alias=True)

        return {
            **output,
            "generatedAt": self._timestamp(),
            "model": self.model_name,
            "isModified": True,
        }

    async def call_with_fallback(self, prompt: str, mode: str = INITIAL) -> str:
        """Run one prompt through the credential pool.

        Each call starts from the first credential. A transient failure
        advances to the next credential; any other failure is raised at once.

        Raises:
            FatalProviderError: First non-transient failure
            PoolExhaustedError: Every credential failed transiently
        """
        failures: list[TransientProviderError] = []

        for index, credential in enumerate(self._pool, start=1):
            attempt_start = time.monotonic()
            try:
                text = await self._provider.generate_content(prompt, credential, self._config)
            except Exception as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                status_code = failure_status(e)
                message = redact(str(e), credential)
                kind = classify_failure(status_code, message)

                self._metrics.record_attempt(kind.value, elapsed_ms)
                self._logger.log_attempt(
                    mode,
                    index,
                    kind.value,
                    elapsed_ms,
                    status_code=status_code,
                    error_reason=message,
                )

                if kind is FailureKind.FATAL:
                    raise FatalProviderError(
                        f"Generation failed with credential {index}: {message}",
                        status_code=status_code,
                        credential_index=index,
                    ) from e

                failures.append(
                    TransientProviderError(message, status_code=status_code, credential_index=index)
                )
                if index < len(self._pool):
                    logger.info(f"Retrying generation with credential {index + 1}")
                continue

            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            self._metrics.record_attempt("success", elapsed_ms)
            self._logger.log_attempt(mode, index, "success", elapsed_ms)
            return text

        logger.error(f"All {len(failures)} generation credentials failed")
        raise PoolExhaustedError(failures)

    def _timestamp(self) -> str:
        return self._clock().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_itinerary_generator(settings: Settings) -> ItineraryGenerator:
    """Build a generator wired to the configured provider, metrics and logging.

    Raises:
        ConfigurationError: If no generation credentials are configured
    """
    provider = OpenAICompatibleProvider(
        model=settings.generation_model,
        base_url=settings.generation_base_url or None,
    )
    return ItineraryGenerator(
        pool=settings.credential_pool(),
        provider=provider,
        model_name=settings.generation_model,
        metrics=PrometheusGenerationMetrics(),
        logger=StructuredGenerationLogger(),
    )


@lru_cache
def get_itinerary_generator() -> ItineraryGenerator:
    """Get cached generator instance built from settings."""
    return build_itinerary_generator(get_settings())
