"""
Quiz 业务流程：prompt → LLM → 解析摘要 → 校验。

LLM 返回的内容不可信：可能夹带 markdown、可能根本不是 JSON。
parse_summary_response() 负责兜底，校验核心对 fallback 不做特殊处理。
"""

import json
import logging
from dataclasses import dataclass

from .intake.types import QuestionnairePayload
from .llm import SummaryResult, get_llm_service
from .prompts import SYSTEM_PROMPT, build_prompt
from .validation import ValidationStatus, extract_and_validate_data

logger = logging.getLogger(__name__)


@dataclass
class QuizResult:
    summary: SummaryResult
    validation_status: ValidationStatus
    llm_model: str = ""


def parse_summary_response(response_text):
    """
    从 LLM 文本中截取第一个 '{' 到最后一个 '}' 之间的 JSON。

    - 没有花括号           → 空 SummaryResult
    - 截出来的不是合法 JSON → fallback：原文放进 summary_text 和 raw_response
    - 字段类型不对         → 按空处理
    """
    text = response_text if isinstance(response_text, str) else ""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return SummaryResult()

    try:
        parsed = json.loads(text[start:end])
    except ValueError as exc:
        logger.warning("[Quiz] JSON parsing of LLM response failed: %s", exc)
        return SummaryResult(summary_text=text, structured_summary={"raw_response": text})

    if not isinstance(parsed, dict):
        return SummaryResult(summary_text=text, structured_summary={"raw_response": text})

    summary_text = parsed.get("summary_text")
    structured = parsed.get("structured_summary")
    return SummaryResult(
        summary_text=summary_text if isinstance(summary_text, str) else "",
        structured_summary=structured if isinstance(structured, dict) else {},
    )


def handle_quiz(payload: QuestionnairePayload) -> QuizResult:
    """
    生成摘要并交叉校验。

    LLM 调用失败时异常直接上抛（LLMServiceError 体系），由 exception_handler 转成 503/504/500。
    """
    prompt = build_prompt(payload.raw_payload)
    logger.info("[Quiz] patient_id=%s prompt built, length=%d", payload.patient_id, len(prompt))

    llm = get_llm_service()
    response = llm.complete(SYSTEM_PROMPT, prompt)
    logger.info("[LLM] model=%s returned %d characters", response.model, len(response.content))

    summary = parse_summary_response(response.content)
    validation = extract_and_validate_data(summary, payload)

    return QuizResult(summary=summary, validation_status=validation, llm_model=response.model)
