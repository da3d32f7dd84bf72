"""Error kinds raised by the itinerary generation core.

The HTTP layer maps these to status codes; the core only classifies.
"""


class GenerationError(Exception):
    """Base class for itinerary generation failures."""

    pass


class ConfigurationError(GenerationError):
    """Service is misconfigured (e.g. no generation credentials)."""

    pass


class TripValidationError(GenerationError):
    """Trip request is missing required fields or has out-of-range values."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class ProviderError(GenerationError):
    """Remote generation call failed.

    Raised by provider implementations with the HTTP-like status of the
    failure when one is known.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class TransientProviderError(ProviderError):
    """Provider failure that another credential may not hit (quota, overload, 5xx)."""

    def __init__(self, message: str, status_code: int | None = None, credential_index: int = 0):
        self.credential_index = credential_index
        super().__init__(message, status_code)


class FatalProviderError(ProviderError):
    """Provider failure that retrying with another credential will not fix."""

    def __init__(self, message: str, status_code: int | None = None, credential_index: int = 0):
        self.credential_index = credential_index
        super().__init__(message, status_code)


class PoolExhaustedError(GenerationError):
    """Every credential in the pool failed transiently."""

    def __init__(self, attempts: list[TransientProviderError]):
        self.attempts = attempts
        super().__init__(
            f"All {len(attempts)} generation credential(s) failed. Please try again later."
        )


class MalformedOutputError(GenerationError):
    """Model output could not be parsed as a JSON object."""

    def __init__(self, message: str, raw_text: str):
        self.raw_text = raw_text
        super().__init__(message)
