"""
具体 LLM 实现。

新增 LLM 供应商：在此文件添加一个类，然后在 factory.py 注册即可。

已注册供应商：
  gemini    — GeminiService   (gemini-2.5-flash-lite, REST)
  anthropic — ClaudeService   (claude-sonnet-4-20250514)
  openai    — OpenAIService   (gpt-4o)

所有实现都把供应商错误翻译成 exceptions.py 里的 LLMServiceError 体系，
view 层据此返回 503 / 504 / 500。
"""

import logging
import os

import requests

from ..exceptions import GatewayTimeoutError, LLMServiceError
from .base import BaseLLMService
from .types import LLMResponse

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 8192
TEMPERATURE = 0.3


def _raise_for_sdk_error(sdk, exc):
    """anthropic / openai SDK 的异常类名一致，统一映射成 SERVICE_* 错误码。"""
    if isinstance(exc, sdk.APITimeoutError):
        raise GatewayTimeoutError(message="Quiz processing timed out") from exc

    if isinstance(exc, sdk.RateLimitError):
        code = "SERVICE_QUOTA_EXCEEDED"
    elif isinstance(exc, sdk.PermissionDeniedError):
        code = "SERVICE_PERMISSION_DENIED"
    elif isinstance(exc, sdk.AuthenticationError):
        code = "SERVICE_INVALID_API_KEY"
    elif isinstance(exc, sdk.BadRequestError):
        code = "SERVICE_INVALID_REQUEST"
    elif isinstance(exc, (sdk.InternalServerError, sdk.APIConnectionError)):
        code = "SERVICE_TEMPORARILY_UNAVAILABLE"
    else:
        code = "SERVICE_UNKNOWN_ERROR"
    raise LLMServiceError.from_code(code, str(exc)) from exc


# ── GeminiService ──────────────────────────────────────────────────────────
#
# 直接调 Generative Language REST API。
# 环境变量：GEMINI_API_KEY
# 模型：gemini-2.5-flash-lite（可通过 GEMINI_MODEL 覆盖）

class GeminiService(BaseLLMService):

    DEFAULT_MODEL = "gemini-2.5-flash-lite"
    ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    @staticmethod
    def classify_error(status_code: int, body) -> str:
        """HTTP 状态码 + Gemini error body → SERVICE_* 错误码。"""
        error = body.get("error") if isinstance(body, dict) else None
        error = error if isinstance(error, dict) else {}
        status = str(error.get("status") or "")
        message = str(error.get("message") or "").lower()

        if status_code == 429 or status == "RESOURCE_EXHAUSTED":
            return "SERVICE_QUOTA_EXCEEDED" if "quota" in message else "SERVICE_RESOURCE_EXHAUSTED"
        if status_code == 403 or status == "PERMISSION_DENIED":
            return "SERVICE_PERMISSION_DENIED"
        if status_code == 400 and ("api key" in message or "api_key" in message):
            return "SERVICE_INVALID_API_KEY"
        if status_code == 400:
            return "SERVICE_INVALID_REQUEST"
        if status_code in (500, 502, 503) or status == "UNAVAILABLE":
            return "SERVICE_TEMPORARILY_UNAVAILABLE"
        return "SERVICE_UNKNOWN_ERROR"

    @staticmethod
    def extract_text(data) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            return ""

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise LLMServiceError.from_code(
                "SERVICE_INVALID_API_KEY", "GEMINI_API_KEY environment variable is not set"
            )

        model = os.getenv("GEMINI_MODEL", self.DEFAULT_MODEL)
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }

        try:
            response = requests.post(
                self.ENDPOINT.format(model=model),
                params={"key": api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise GatewayTimeoutError(message="Quiz processing timed out") from exc
        except requests.exceptions.RequestException as exc:
            raise LLMServiceError.from_code("SERVICE_TEMPORARILY_UNAVAILABLE", str(exc)) from exc

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {"raw": response.text}
            code = self.classify_error(response.status_code, body)
            logger.warning("[Gemini] API error %s (%s)", response.status_code, code)
            raise LLMServiceError.from_code(code, f"Gemini API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            data = {}

        return LLMResponse(content=self.extract_text(data), model=model)


# ── ClaudeService ──────────────────────────────────────────────────────────
#
# 使用 Anthropic SDK。
# 环境变量：ANTHROPIC_API_KEY
# 模型：claude-sonnet-4-20250514（可通过 ANTHROPIC_MODEL 覆盖）

class ClaudeService(BaseLLMService):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import anthropic

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise LLMServiceError.from_code("SERVICE_INVALID_API_KEY", "ANTHROPIC_API_KEY is not set")

        model = os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL)
        client = anthropic.Anthropic(api_key=api_key, timeout=self.timeout)

        try:
            response = client.messages.create(
                model=model,
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as exc:
            _raise_for_sdk_error(anthropic, exc)

        return LLMResponse(
            content=response.content[0].text if response.content else "",
            model=model,
        )


# ── OpenAIService ──────────────────────────────────────────────────────────
#
# 使用 OpenAI SDK。
# 环境变量：OPENAI_API_KEY
# 模型：gpt-4o（可通过 OPENAI_MODEL 覆盖）

class OpenAIService(BaseLLMService):

    DEFAULT_MODEL = "gpt-4o"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import openai

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise LLMServiceError.from_code("SERVICE_INVALID_API_KEY", "OPENAI_API_KEY is not set")

        model = os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL)
        client = openai.OpenAI(api_key=api_key, timeout=self.timeout)

        try:
            response = client.chat.completions.create(
                model=model,
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user",   "content": user_prompt},
                ],
            )
        except openai.APIError as exc:
            _raise_for_sdk_error(openai, exc)

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=model,
        )
