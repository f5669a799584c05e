from .factory import get_llm_service
from .types import LLMResponse, SummaryResult

__all__ = ["LLMResponse", "SummaryResult", "get_llm_service"]
