"""
get_llm_service()：按 settings.LLM_PROVIDER 选供应商，按 settings.QUIZ_LLM_TIMEOUT 设超时。

加一家供应商 = services.py 里写一个 BaseLLMService 子类 + 在 _providers() 里登记。
handle_quiz() 和校验代码都不需要改。
"""

from django.conf import settings

from .base import BaseLLMService

DEFAULT_PROVIDER = "gemini"


def _providers() -> dict[str, type[BaseLLMService]]:
    # services.py 会间接引入 SDK，放到调用时再 import
    from .services import ClaudeService, GeminiService, OpenAIService

    return {
        "gemini":    GeminiService,
        "anthropic": ClaudeService,
        "openai":    OpenAIService,
    }


def get_llm_service() -> BaseLLMService:
    """
    Raises:
        ValueError: LLM_PROVIDER 不在已登记的供应商里（配置错误，最终表现为 500）
    """
    name = getattr(settings, "LLM_PROVIDER", DEFAULT_PROVIDER) or DEFAULT_PROVIDER
    providers = _providers()

    try:
        service_cls = providers[name]
    except KeyError:
        raise ValueError(
            f"Unknown LLM_PROVIDER: {name!r}. Known providers: {sorted(providers)}"
        ) from None

    return service_cls(timeout=getattr(settings, "QUIZ_LLM_TIMEOUT", None))
