from commit_pilot.errors import (
    ApiKeyMissingError,
    AuthenticationFailedError,
    CommitPilotError,
    CompletionFailedError,
    ConfigurationError,
    ErrorKind,
    TokenLimitExceededError,
    classify_error,
    provider_error_message,
)


class FakeHttpError(Exception):
    """Error exposing the same capabilities as an HTTP client status error."""

    def __init__(self, message, status_code, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def test_custom_exceptions_inheritance():
    for error_cls in (
        TokenLimitExceededError,
        AuthenticationFailedError,
        CompletionFailedError,
        ApiKeyMissingError,
        ConfigurationError,
    ):
        assert issubclass(error_cls, CommitPilotError)
    assert issubclass(CommitPilotError, Exception)


def test_error_kinds():
    assert TokenLimitExceededError(10, 5).kind is ErrorKind.TOO_MUCH_TOKENS
    assert AuthenticationFailedError("denied").kind is ErrorKind.AUTH_ERROR
    assert CompletionFailedError("boom").kind is ErrorKind.UNKNOWN_ERROR
    assert ApiKeyMissingError("missing").kind is None


def test_token_limit_message_includes_counts():
    error = TokenLimitExceededError(5000, 3596)

    assert "5000" in str(error)
    assert "3596" in error.detail


def test_classify_unauthorized_by_capability():
    error = FakeHttpError(
        "Error code: 401", 401, {"error": {"message": "invalid_api_key"}}
    )

    categorized = classify_error(error)

    assert isinstance(categorized, AuthenticationFailedError)
    assert categorized.provider_message == "invalid_api_key"
    assert categorized.detail == "Error code: 401"


def test_classify_unauthorized_without_body():
    categorized = classify_error(FakeHttpError("denied", 401))

    assert isinstance(categorized, AuthenticationFailedError)
    assert categorized.provider_message is None


def test_classify_other_status_is_unknown():
    categorized = classify_error(FakeHttpError("rate limited", 429, {"message": "slow"}))

    assert isinstance(categorized, CompletionFailedError)
    assert categorized.detail == "rate limited"


def test_classify_plain_exception_is_unknown():
    categorized = classify_error(RuntimeError("boom"))

    assert isinstance(categorized, CompletionFailedError)
    assert categorized.detail == "boom"


def test_classify_empty_message_uses_type_name():
    assert classify_error(TimeoutError()).detail == "TimeoutError"


def test_classify_passes_through_categorized_errors():
    error = TokenLimitExceededError(10, 5)

    assert classify_error(error) is error


def test_provider_error_message_shapes():
    assert provider_error_message(FakeHttpError("x", 401, {"message": "a"})) == "a"
    assert (
        provider_error_message(FakeHttpError("x", 401, {"error": {"message": "b"}}))
        == "b"
    )
    assert provider_error_message(FakeHttpError("x", 401, "plain text")) is None
    assert provider_error_message(FakeHttpError("x", 401, {"error": "flat"})) is None
    assert provider_error_message(RuntimeError("no body")) is None
