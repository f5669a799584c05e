"""
Unit tests for the LLM layer.

- factory: settings.LLM_PROVIDER → 对应的 service
- GeminiService: requests.post 被 mock，验证成功 / 错误码映射 / 超时
- SDK 异常映射（anthropic / openai 共用）
"""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from quizagent.exceptions import (
    GatewayTimeoutError,
    LLMServiceError,
    ServiceUnavailableError,
)
from quizagent.llm import get_llm_service
from quizagent.llm.base import DEFAULT_TIMEOUT
from quizagent.llm.services import (
    ClaudeService,
    GeminiService,
    OpenAIService,
    _raise_for_sdk_error,
)


# -------------------------------------------------------------------
# Factory
# -------------------------------------------------------------------

class TestFactory:

    @pytest.mark.parametrize("provider, service_cls", [
        ("gemini", GeminiService),
        ("anthropic", ClaudeService),
        ("openai", OpenAIService),
    ])
    def test_known_providers(self, settings, provider, service_cls):
        settings.LLM_PROVIDER = provider
        assert isinstance(get_llm_service(), service_cls)

    def test_unknown_provider_raises(self, settings):
        settings.LLM_PROVIDER = "llama"
        with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
            get_llm_service()

    def test_timeout_from_settings(self, settings):
        settings.LLM_PROVIDER = "gemini"
        settings.QUIZ_LLM_TIMEOUT = 7.5
        assert get_llm_service().timeout == 7.5

    def test_default_timeout(self):
        assert GeminiService().timeout == DEFAULT_TIMEOUT


# -------------------------------------------------------------------
# GeminiService
# -------------------------------------------------------------------

def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = body
    response.text = str(body)
    return response


GEMINI_OK = {"candidates": [{"content": {"parts": [{"text": '{"summary_text": "ok"}'}]}}]}


class TestGeminiService:

    @pytest.fixture(autouse=True)
    def _api_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.delenv("GEMINI_MODEL", raising=False)

    @patch("quizagent.llm.services.requests.post")
    def test_success(self, mock_post):
        mock_post.return_value = _response(200, GEMINI_OK)

        result = GeminiService(timeout=10).complete("system", "user")

        assert result.content == '{"summary_text": "ok"}'
        assert result.model == "gemini-2.5-flash-lite"

        _, kwargs = mock_post.call_args
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["timeout"] == 10
        assert kwargs["json"]["systemInstruction"]["parts"][0]["text"] == "system"
        assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "user"
        assert "gemini-2.5-flash-lite:generateContent" in mock_post.call_args.args[0]

    @patch("quizagent.llm.services.requests.post")
    def test_model_override(self, mock_post, monkeypatch):
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
        mock_post.return_value = _response(200, GEMINI_OK)

        assert GeminiService().complete("s", "u").model == "gemini-2.0-flash"

    @patch("quizagent.llm.services.requests.post")
    def test_empty_candidates_returns_empty_text(self, mock_post):
        mock_post.return_value = _response(200, {"candidates": []})
        assert GeminiService().complete("s", "u").content == ""

    @patch("quizagent.llm.services.requests.post")
    def test_missing_api_key(self, mock_post, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY")

        with pytest.raises(LLMServiceError) as exc_info:
            GeminiService().complete("s", "u")

        assert exc_info.value.code == "SERVICE_INVALID_API_KEY"
        assert exc_info.value.http_status == 500
        mock_post.assert_not_called()

    @patch("quizagent.llm.services.requests.post")
    def test_quota_exceeded_is_503(self, mock_post):
        mock_post.return_value = _response(429, {
            "error": {"status": "RESOURCE_EXHAUSTED", "message": "Quota exceeded for metric"},
        })

        with pytest.raises(ServiceUnavailableError) as exc_info:
            GeminiService().complete("s", "u")

        assert exc_info.value.code == "SERVICE_QUOTA_EXCEEDED"
        assert exc_info.value.http_status == 503
        assert "high demand" in exc_info.value.message

    @patch("quizagent.llm.services.requests.post")
    def test_bad_request_is_500(self, mock_post):
        mock_post.return_value = _response(400, {"error": {"message": "Invalid JSON payload"}})

        with pytest.raises(LLMServiceError) as exc_info:
            GeminiService().complete("s", "u")

        assert not isinstance(exc_info.value, ServiceUnavailableError)
        assert exc_info.value.code == "SERVICE_INVALID_REQUEST"
        assert exc_info.value.http_status == 500

    @patch("quizagent.llm.services.requests.post")
    def test_timeout_is_504(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(GatewayTimeoutError) as exc_info:
            GeminiService().complete("s", "u")

        assert exc_info.value.http_status == 504
        assert exc_info.value.code == "SERVICE_TIMEOUT"

    @patch("quizagent.llm.services.requests.post")
    def test_connection_error_is_503(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ServiceUnavailableError) as exc_info:
            GeminiService().complete("s", "u")

        assert exc_info.value.code == "SERVICE_TEMPORARILY_UNAVAILABLE"
        assert exc_info.value.detail == {"provider_error": "refused"}


class TestGeminiClassifyError:

    @pytest.mark.parametrize("status_code, body, code", [
        (429, {"error": {"message": "You exceeded your current quota"}}, "SERVICE_QUOTA_EXCEEDED"),
        (429, {"error": {"message": "Too many requests"}}, "SERVICE_RESOURCE_EXHAUSTED"),
        (403, {}, "SERVICE_PERMISSION_DENIED"),
        (400, {"error": {"message": "API key not valid. Please pass a valid API key."}}, "SERVICE_INVALID_API_KEY"),
        (400, {"error": {"message": "bad field"}}, "SERVICE_INVALID_REQUEST"),
        (503, {"error": {"status": "UNAVAILABLE"}}, "SERVICE_TEMPORARILY_UNAVAILABLE"),
        (502, {"raw": "<html>"}, "SERVICE_TEMPORARILY_UNAVAILABLE"),
        (418, "teapot", "SERVICE_UNKNOWN_ERROR"),
    ])
    def test_classify(self, status_code, body, code):
        assert GeminiService.classify_error(status_code, body) == code

    def test_extract_text_tolerates_garbage(self):
        assert GeminiService.extract_text({}) == ""
        assert GeminiService.extract_text(None) == ""
        assert GeminiService.extract_text({"candidates": [{"content": {"parts": []}}]}) == ""


# -------------------------------------------------------------------
# SDK 异常映射
# -------------------------------------------------------------------

class _APIError(Exception):
    pass


class _APITimeoutError(_APIError):
    pass


class _RateLimitError(_APIError):
    pass


class _PermissionDeniedError(_APIError):
    pass


class _AuthenticationError(_APIError):
    pass


class _BadRequestError(_APIError):
    pass


class _InternalServerError(_APIError):
    pass


class _APIConnectionError(_APIError):
    pass


FAKE_SDK = SimpleNamespace(
    APIError=_APIError,
    APITimeoutError=_APITimeoutError,
    RateLimitError=_RateLimitError,
    PermissionDeniedError=_PermissionDeniedError,
    AuthenticationError=_AuthenticationError,
    BadRequestError=_BadRequestError,
    InternalServerError=_InternalServerError,
    APIConnectionError=_APIConnectionError,
)


class TestSDKErrorMapping:

    @pytest.mark.parametrize("exc_cls, code, http_status", [
        (_RateLimitError, "SERVICE_QUOTA_EXCEEDED", 503),
        (_PermissionDeniedError, "SERVICE_PERMISSION_DENIED", 503),
        (_InternalServerError, "SERVICE_TEMPORARILY_UNAVAILABLE", 503),
        (_APIConnectionError, "SERVICE_TEMPORARILY_UNAVAILABLE", 503),
        (_AuthenticationError, "SERVICE_INVALID_API_KEY", 500),
        (_BadRequestError, "SERVICE_INVALID_REQUEST", 500),
        (_APIError, "SERVICE_UNKNOWN_ERROR", 500),
    ])
    def test_mapping(self, exc_cls, code, http_status):
        with pytest.raises(LLMServiceError) as exc_info:
            _raise_for_sdk_error(FAKE_SDK, exc_cls("boom"))

        assert exc_info.value.code == code
        assert exc_info.value.http_status == http_status
        assert exc_info.value.detail == {"provider_error": "boom"}

    def test_timeout(self):
        with pytest.raises(GatewayTimeoutError):
            _raise_for_sdk_error(FAKE_SDK, _APITimeoutError("slow"))

    def test_missing_sdk_keys(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        for service in (ClaudeService(), OpenAIService()):
            with pytest.raises(LLMServiceError) as exc_info:
                service.complete("s", "u")
            assert exc_info.value.code == "SERVICE_INVALID_API_KEY"
