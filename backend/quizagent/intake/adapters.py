"""
问卷 Adapter 实现。

外部格式示例（JSON）:
{
  "patient_id": 137,
  "uuid": "9b1d...",                                    ← 可选，只回显
  "main_quiz": {
    "updated_at": "2024-05-01T10:00:00Z",
    "answers": [
      {"question_id": 12, "question_title": "What is your height and current weight?",
       "answer_text": "{\"height_cm\":\"171\",\"weight_kg\":\"81\"}"}      ← answer_text 内嵌 JSON
    ]
  },
  "order_quiz":    { "updated_at": "...", "answers": [ ... ] },
  "order_history": {
    "total_orders": 2,
    "orders": [
      {"order_id": 501, "product": "Mounjaro", "product_plan": "monthly",
       "dosage": "5mg", "order_created_at": "2024-04-20T09:00:00Z", "order_state": "shipped"}
    ]
  }
}

任何 section 都可能缺失或形状不对：不是 dict 的 section 当作缺失，
不是 list 的 answers / orders 当作空列表，不是 dict 的元素直接跳过。
"""

import json
from typing import Any, Optional

from ..exceptions import ValidationError
from .base import BaseIntakeAdapter
from .types import Answer, Order, OrderHistory, QuestionnairePayload, Quiz


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _build_quiz(raw: Any) -> Optional[Quiz]:
    if not isinstance(raw, dict):
        return None
    answers = [
        Answer(
            question_id=item.get("question_id"),
            question_title=_as_text(item.get("question_title")),
            answer_text=item.get("answer_text"),
        )
        for item in _as_list(raw.get("answers"))
        if isinstance(item, dict)
    ]
    return Quiz(updated_at=raw.get("updated_at"), answers=answers)


def _build_order_history(raw: Any) -> Optional[OrderHistory]:
    if not isinstance(raw, dict):
        return None
    orders = [
        Order(
            order_id=item.get("order_id"),
            product=_as_text(item.get("product")).strip(),
            product_plan=_as_text(item.get("product_plan")),
            dosage=_as_text(item.get("dosage")).strip(),
            order_created_at=item.get("order_created_at"),
            order_state=_as_text(item.get("order_state")),
        )
        for item in _as_list(raw.get("orders"))
        if isinstance(item, dict)
    ]
    try:
        total_orders = int(raw.get("total_orders"))
    except (TypeError, ValueError, OverflowError):
        total_orders = len(orders)
    return OrderHistory(total_orders=total_orders, orders=orders)


def build_payload(raw: Any) -> QuestionnairePayload:
    """
    dict → QuestionnairePayload。全函数：任何输入都返回一个 payload，从不抛异常。

    validation/checks.py 接收原始 dict 时也走这里。
    """
    raw = _as_dict(raw)
    return QuestionnairePayload(
        patient_id=raw.get("patient_id"),
        main_quiz=_build_quiz(raw.get("main_quiz")),
        order_quiz=_build_quiz(raw.get("order_quiz")),
        order_history=_build_order_history(raw.get("order_history")),
        uuid=raw.get("uuid"),
        quiz_id=raw.get("quiz_id"),
        raw_payload=raw,
    )


class QuizPayloadAdapter(BaseIntakeAdapter):
    source = "quiz"

    def parse(self) -> Any:
        if isinstance(self._raw_body, (bytes, str)):
            try:
                raw = json.loads(self._raw_body or "null")
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise ValidationError(
                    message="Request body is not valid JSON.",
                    code="INVALID_JSON",
                    detail={"error": str(exc)},
                )
        else:
            raw = self._raw_body

        if not isinstance(raw, dict):
            raise ValidationError(
                message="Request body must be a JSON object.",
                code="INVALID_JSON",
            )

        self._parsed = raw
        return raw

    def transform(self) -> QuestionnairePayload:
        return build_payload(self._parsed)
