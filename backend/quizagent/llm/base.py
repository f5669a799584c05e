"""
所有供应商共用的接口：一个 complete()，一个超时。

供应商自己的异常不能漏出来，必须翻译成 exceptions.py 里的 LLMServiceError 体系。
"""

from abc import ABC, abstractmethod
from typing import Optional

from .types import LLMResponse

DEFAULT_TIMEOUT = 25.0


class BaseLLMService(ABC):

    def __init__(self, timeout: Optional[float] = None):
        # 秒；超时由各实现转成 GatewayTimeoutError
        self.timeout = timeout or DEFAULT_TIMEOUT

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """
        一次非流式调用。

        Raises:
            GatewayTimeoutError:     超过 self.timeout
            ServiceUnavailableError: 配额 / 限流 / 供应商暂时不可用
            LLMServiceError:         key 缺失或无效、请求被拒、其他错误
        """
