"""
LLM 层的标准结构。

LLMResponse    所有 LLMService.complete() 的返回值
SummaryResult  从 LLMResponse.content 里解析出来的摘要（可能是 fallback）
"""

from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    content: str       # 生成的文本内容
    model: str         # 实际使用的模型名


@dataclass
class SummaryResult:
    summary_text: str = ""
    structured_summary: dict = field(default_factory=dict)
