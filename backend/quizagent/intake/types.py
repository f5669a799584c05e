"""
QuestionnairePayload dataclass — 校验核心唯一认识的标准格式。

QuizPayloadAdapter.transform() 把原始 JSON 转成这个结构；
extractor / validation 只消费这个结构，永远不碰外部原始数据。

三个 section（main_quiz / order_quiz / order_history）都可能缺失，
缺失就是 None，不是空对象，下游据此产生 "missing data" issue。
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass
class Answer:
    question_id: Optional[int] = None
    question_title: str = ""
    answer_text: Any = None     # 通常是内嵌 JSON 的字符串，也可能是已解析的 dict


@dataclass
class Quiz:
    updated_at: Optional[str] = None
    answers: list[Answer] = field(default_factory=list)


@dataclass
class Order:
    order_id: Optional[int] = None
    product: str = ""
    product_plan: str = ""
    dosage: str = ""
    order_created_at: Optional[str] = None
    order_state: str = ""


@dataclass
class OrderHistory:
    total_orders: int = 0
    orders: list[Order] = field(default_factory=list)   # 约定 orders[0] 是最新一单


@dataclass
class QuestionnairePayload:
    """
    标准问卷格式。

    patient_id   必填（string 或 int）；缺失时由 adapter.validate() 拦在 HTTP 层，
                 但校验核心本身也能处理缺失（id_check 记 issue）。
    uuid/quiz_id 可选，只做回显。
    raw_payload  保存原始 dict，用于构建 prompt，不参与校验逻辑。
    """

    patient_id: Optional[Union[str, int]] = None
    main_quiz: Optional[Quiz] = None
    order_quiz: Optional[Quiz] = None
    order_history: Optional[OrderHistory] = None
    uuid: Optional[str] = None
    quiz_id: Optional[Union[str, int]] = None
    raw_payload: Any = field(default=None, repr=False)


@dataclass(frozen=True)
class WeightObservation:
    weight_kg: float
    context: str
    date: Optional[str] = None


@dataclass(frozen=True)
class ExtractedData:
    """
    extractor 的输出，一次遍历得到，不可变。

    height_cm    只有一个值（多条身高答案时最后一条覆盖前面的）
    weights      累加，从不覆盖
    medications  按出现顺序去重：先 order_history，后问卷里提到的
    dosages      (medication, dosage) 对，每个 medication 一条（最近一单）
    """

    height_cm: Optional[float] = None
    weights: tuple[WeightObservation, ...] = ()
    medications: tuple[str, ...] = ()
    dosages: tuple[tuple[str, str], ...] = ()
