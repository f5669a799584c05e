"""
Payload Extractor — 从问卷里抽取身高、体重观测、用药和剂量。

抽取策略是一张有序规则表（EXTRACTION_RULES）：
每条规则 = (section, question_title 触发子串, 动作)。
每个 answer 会和本 section 的全部规则逐条比对，一个 answer 可以触发多条规则
（例如 "height and current weight" 同时命中 height 和 current weight）。

整个抽取是一次 reduce：状态是不可变的 ExtractedData，每个动作返回新状态。
对任何输入都不抛异常：section 缺失、answer_text 不是 JSON、字段缺失、
数值非法，一律当作"这里什么都没抽到"，由 validation/checks.py 汇总成 issue。
"""

import json
import logging
import math
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import reduce
from typing import Any, Callable, Iterable, Optional

from django.utils.dateparse import parse_datetime

from .types import (
    Answer,
    ExtractedData,
    OrderHistory,
    QuestionnairePayload,
    Quiz,
    WeightObservation,
)

logger = logging.getLogger(__name__)

# 与 JS parseFloat 一致：只看开头的数字部分，"81 kg" → 81.0
NUMBER_PREFIX_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
BEFORE_BEGINNING_RE = re.compile(r"before beginning (\w+)", re.IGNORECASE)

MAIN_QUIZ = "main_quiz"
ORDER_QUIZ = "order_quiz"

CONTEXT_MAIN_CURRENT = "Main Quiz - Current Weight"
CONTEXT_GOAL = "Goal Weight"
CONTEXT_ORDER_CURRENT = "Order Quiz - Current Weight"


# ── 数值解析 ───────────────────────────────────────────────────────────────

def coerce_float(value: Any) -> Optional[float]:
    """
    宽松转 float。非数字、0、负数、NaN/inf 都返回 None。

    0 和"字段不存在"在结果上无法区分。
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = NUMBER_PREFIX_RE.match(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None

    if not math.isfinite(number) or number <= 0:
        return None
    return number


def load_answer_json(answer_text: Any) -> Optional[dict]:
    """answer_text → dict。已经是 dict 直接用；解析失败或不是 JSON 对象返回 None。"""
    if isinstance(answer_text, dict):
        return answer_text
    if not isinstance(answer_text, (str, bytes)):
        return None
    try:
        parsed = json.loads(answer_text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def read_measurement(answer_text: Any, key: str) -> Optional[float]:
    data = load_answer_json(answer_text)
    if data is None:
        return None
    return coerce_float(data.get(key))


def _raw_text(answer_text: Any) -> str:
    if isinstance(answer_text, str):
        return answer_text
    try:
        return json.dumps(answer_text)
    except (TypeError, ValueError):
        return str(answer_text)


# ── 状态更新（全部返回新 ExtractedData） ────────────────────────────────────

def _with_weight(state: ExtractedData, weight: Optional[float], context: str,
                 date: Optional[str] = None) -> ExtractedData:
    if weight is None:
        return state
    observation = WeightObservation(weight_kg=weight, context=context, date=date)
    return replace(state, weights=state.weights + (observation,))


def _with_medication(state: ExtractedData, name: str) -> ExtractedData:
    name = (name or "").strip()
    if not name or name in state.medications:
        return state
    return replace(state, medications=state.medications + (name,))


# ── 规则动作 ───────────────────────────────────────────────────────────────

def take_height(state: ExtractedData, answer: Answer, quiz: Quiz) -> ExtractedData:
    height = read_measurement(answer.answer_text, "height_cm")
    if height is None:
        return state
    # 覆盖，不累加：多条身高答案时最后一条生效
    return replace(state, height_cm=height)


def take_weight(context: str) -> Callable[[ExtractedData, Answer, Quiz], ExtractedData]:
    def action(state: ExtractedData, answer: Answer, quiz: Quiz) -> ExtractedData:
        return _with_weight(state, read_measurement(answer.answer_text, "weight_kg"), context)
    return action


def take_starting_weight(state: ExtractedData, answer: Answer, quiz: Quiz) -> ExtractedData:
    match = BEFORE_BEGINNING_RE.search(answer.question_title)
    if not match:
        return state
    # date 先放原始答案文本，真实日期在别的问题里
    return _with_weight(
        state,
        read_measurement(answer.answer_text, "weight_kg"),
        f"Before {match.group(1)}",
        date=_raw_text(answer.answer_text),
    )


def take_order_quiz_weight(state: ExtractedData, answer: Answer, quiz: Quiz) -> ExtractedData:
    return _with_weight(
        state,
        read_measurement(answer.answer_text, "weight_kg"),
        CONTEXT_ORDER_CURRENT,
        date=quiz.updated_at,
    )


def take_medication_mention(state: ExtractedData, answer: Answer, quiz: Quiz) -> ExtractedData:
    mention = answer.answer_text
    if isinstance(mention, list):
        return reduce(_with_medication, (m for m in mention if isinstance(m, str)), state)
    if isinstance(mention, str):
        return _with_medication(state, mention)
    return state


@dataclass(frozen=True)
class ExtractionRule:
    section: str
    trigger: str        # 小写；question_title 里出现即命中（大小写不敏感）
    action: Callable[[ExtractedData, Answer, Quiz], ExtractedData]

    def matches(self, section: str, answer: Answer) -> bool:
        return section == self.section and self.trigger in answer.question_title.lower()


EXTRACTION_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(MAIN_QUIZ, "height", take_height),
    ExtractionRule(MAIN_QUIZ, "current weight", take_weight(CONTEXT_MAIN_CURRENT)),
    ExtractionRule(MAIN_QUIZ, "goal weight", take_weight(CONTEXT_GOAL)),
    ExtractionRule(MAIN_QUIZ, "before beginning", take_starting_weight),
    ExtractionRule(MAIN_QUIZ, "medicines to support weight loss", take_medication_mention),
    ExtractionRule(ORDER_QUIZ, "current weight", take_order_quiz_weight),
)


# ── order_history ──────────────────────────────────────────────────────────

def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value.strip())
    except ValueError:
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_more_recent(candidate: Optional[str], current: Optional[str]) -> bool:
    """
    时间戳都能解析时比较时间；否则按 orders 的顺序（orders[0] 最新），
    排在前面的订单保留，与 id_check 回显的 orders[0].order_id 一致。
    """
    new_ts, old_ts = _parse_timestamp(candidate), _parse_timestamp(current)
    if new_ts is None or old_ts is None:
        return False
    return new_ts > old_ts


def reduce_order_history(state: ExtractedData, history: Optional[OrderHistory]) -> ExtractedData:
    if history is None:
        return state

    latest: dict[str, tuple[str, Optional[str]]] = {}
    for order in history.orders:
        if not order.product:
            continue
        state = _with_medication(state, order.product)
        if not order.dosage:
            continue
        current = latest.get(order.product)
        if current is None or _is_more_recent(order.order_created_at, current[1]):
            latest[order.product] = (order.dosage, order.order_created_at)

    dosages = tuple((product, dosage) for product, (dosage, _) in latest.items())
    return replace(state, dosages=state.dosages + dosages)


# ── 入口 ───────────────────────────────────────────────────────────────────

def _answer_events(payload: QuestionnairePayload) -> Iterable[tuple[ExtractionRule, Answer, Quiz]]:
    for section, quiz in ((MAIN_QUIZ, payload.main_quiz), (ORDER_QUIZ, payload.order_quiz)):
        if quiz is None:
            continue
        for answer in quiz.answers:
            for rule in EXTRACTION_RULES:
                if rule.matches(section, answer):
                    yield rule, answer, quiz


def extract_payload_data(payload: QuestionnairePayload) -> ExtractedData:
    """
    问卷 → ExtractedData。

    先处理 order_history（用药集合里订单产品排在问卷提及之前），
    再按 main_quiz、order_quiz 的顺序走规则表。
    """
    state = reduce_order_history(ExtractedData(), payload.order_history)
    state = reduce(
        lambda acc, event: event[0].action(acc, event[1], event[2]),
        _answer_events(payload),
        state,
    )
    logger.debug(
        "[Quiz] Extracted height=%s weights=%d medications=%d dosages=%d",
        state.height_cm, len(state.weights), len(state.medications), len(state.dosages),
    )
    return state
