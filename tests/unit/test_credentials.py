"""Tests for the credential pool and failure classification."""

import pytest
from pydantic import SecretStr

from backend.app.llm.credentials import (
    TRANSIENT_KEYWORDS,
    CredentialPool,
    FailureKind,
    classify_failure,
    failure_status,
    redact,
)
from backend.app.llm.errors import ConfigurationError, ProviderError


class TestCredentialPool:
    """Pool construction and ordering."""

    def test_preserves_configuration_order(self) -> None:
        pool = CredentialPool.from_values(["a", "b", "c"])

        assert len(pool) == 3
        assert [c.get_secret_value() for c in pool] == ["a", "b", "c"]

    def test_iteration_restarts_from_first_credential(self) -> None:
        pool = CredentialPool.from_values(["a", "b"])

        assert [c.get_secret_value() for c in pool] == ["a", "b"]
        assert [c.get_secret_value() for c in pool] == ["a", "b"]

    def test_empty_pool_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="At least one"):
            CredentialPool.from_values([])

    def test_blank_credential_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="blank"):
            CredentialPool.from_values(["a", "  "])

    def test_repr_does_not_leak_values(self) -> None:
        pool = CredentialPool.from_values(["super-secret"])
        assert "super-secret" not in repr(pool)


class TestClassifyFailure:
    """Transient vs fatal classification."""

    @pytest.mark.parametrize("status_code", [429, 500, 501, 502, 503, 504, 599])
    def test_rate_limit_and_server_errors_are_transient(self, status_code: int) -> None:
        assert classify_failure(status_code, "") is FailureKind.TRANSIENT

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 422])
    def test_client_errors_are_fatal(self, status_code: int) -> None:
        assert classify_failure(status_code, "Invalid argument") is FailureKind.FATAL

    @pytest.mark.parametrize(
        "message",
        [
            "The model is overloaded. Please try again later.",
            "Service Unavailable",
            "You exceeded your current QUOTA",
            "Request timeout while waiting for the model",
        ],
    )
    def test_transient_vocabulary_matches_without_status(self, message: str) -> None:
        assert classify_failure(None, message) is FailureKind.TRANSIENT

    def test_transient_vocabulary_overrides_fatal_status(self) -> None:
        assert classify_failure(403, "Quota exceeded for project") is FailureKind.TRANSIENT

    def test_unmatched_message_without_status_is_fatal(self) -> None:
        assert classify_failure(None, "Connection error: Name or service not known") is FailureKind.FATAL

    def test_keyword_set(self) -> None:
        assert set(TRANSIENT_KEYWORDS) == {"overloaded", "unavailable", "quota", "timeout"}


class TestFailureStatus:
    """Reading status codes off arbitrary exceptions."""

    def test_provider_error_status(self) -> None:
        assert failure_status(ProviderError("boom", status_code=503)) == 503

    def test_status_attribute(self) -> None:
        exc = RuntimeError("boom")
        exc.status = 429  # type: ignore[attr-defined]
        assert failure_status(exc) == 429

    def test_non_integer_code_is_ignored(self) -> None:
        exc = RuntimeError("boom")
        exc.code = "ECONNRESET"  # type: ignore[attr-defined]
        assert failure_status(exc) is None

    def test_plain_exception_has_no_status(self) -> None:
        assert failure_status(ValueError("nope")) is None


def test_redact_removes_credential_value() -> None:
    credential = SecretStr("AIza-secret-123")
    message = "API key AIza-secret-123 not valid"

    assert redact(message, credential) == "API key *** not valid"
    assert redact("unrelated", credential) == "unrelated"
