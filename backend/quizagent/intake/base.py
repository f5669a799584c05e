"""
BaseIntakeAdapter — 问卷数据源 Adapter 的抽象基类。

三步流水线：parse → transform → validate
  parse()     原始请求体（bytes / str / dict）→ dict
  transform() dict → QuestionnairePayload（全函数，不因数据形状抛异常）
  validate()  只检查 HTTP 边界的必填字段（patient_id），失败抛 ValidationError

注意分工：validate() 决定请求能不能进来（400）；
进来之后的数据缺失 / 格式问题全部交给 validation/checks.py 写进 issues。
"""

from abc import ABC, abstractmethod
from typing import Any

from ..exceptions import ValidationError
from .types import QuestionnairePayload

REQUIRED_FIELDS = ("patient_id",)


def is_missing(value: Any) -> bool:
    """None / 空字符串 / 纯空白字符串视为缺失。0 也算缺失（与上游表单行为一致）。"""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float)):
        return value == 0
    return False


class BaseIntakeAdapter(ABC):

    # 子类声明自己对应的 source 标识符
    source: str = ""

    def __init__(self, raw_body: Any):
        self._raw_body = raw_body
        self._parsed = None

    # ── 必须实现 ───────────────────────────────────────────────────────────

    @abstractmethod
    def parse(self) -> Any:
        """解析原始数据，结果赋值给 self._parsed。"""

    @abstractmethod
    def transform(self) -> QuestionnairePayload:
        """将 self._parsed 转换为 QuestionnairePayload，原始数据存入 raw_payload。"""

    # ── 提供默认实现，子类可 override ──────────────────────────────────────

    def validate(self, payload: QuestionnairePayload) -> None:
        missing = [name for name in REQUIRED_FIELDS if is_missing(getattr(payload, name))]
        if missing:
            raise ValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                code="MISSING_REQUIRED_FIELDS",
                detail={"missing": missing},
            )

    # ── 对外统一入口 ───────────────────────────────────────────────────────

    def process(self) -> QuestionnairePayload:
        """parse → transform → validate，返回校验通过的 QuestionnairePayload。"""
        self.parse()
        payload = self.transform()
        self.validate(payload)
        return payload
