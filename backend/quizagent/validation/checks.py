"""
Validation Orchestrator — 用自己算出来 / 查出来的事实交叉核对 AI 摘要。

四个检查互相独立，任何一个失败都不影响其他三个；
输入再残缺（空 payload、空 AI 结果、AI 返回的垃圾被包成 fallback）也总是返回完整的
四段 ValidationStatus，从不抛异常。
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from ..intake.adapters import build_payload
from ..intake.base import is_missing
from ..intake.extractor import extract_payload_data
from ..intake.types import ExtractedData, QuestionnairePayload
from .calculators import calculate_bmi
from .medications import VALID_MEDICATIONS, validate_dosage, validate_medication
from .types import (
    BMICheck,
    CalculatedBMI,
    DosageCheck,
    IDCheck,
    MedicineCheck,
    ValidationStatus,
)

logger = logging.getLogger(__name__)

MISSING_PATIENT_ID = "patient_id is missing"
MISSING_HEIGHT = "Missing height data for BMI calculation"
MISSING_WEIGHT = "Missing weight data for BMI calculation"
MISSING_HEIGHT_AND_WEIGHT = "Missing height and weight data for BMI calculation"
NO_MEDICATION_HISTORY = "No medication history found in payload"
NO_DOSAGE_INFORMATION = "No dosage information found in order history"

DOSAGE_MENTION_RE = re.compile(r"\d+\.?\d*\s*mg")


@dataclass(frozen=True)
class SummaryView:
    """AI 结果的只读视图：text 已转小写，structured 保证是 dict。"""

    text: str
    structured: dict

    def dig(self, *keys: str) -> Any:
        node: Any = self.structured
        for key in keys:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node


def read_summary(ai_result: Any) -> SummaryView:
    if isinstance(ai_result, Mapping):
        text = ai_result.get("summary_text")
        structured = ai_result.get("structured_summary")
    else:
        text = getattr(ai_result, "summary_text", None)
        structured = getattr(ai_result, "structured_summary", None)

    return SummaryView(
        text=text.lower() if isinstance(text, str) else "",
        structured=structured if isinstance(structured, dict) else {},
    )


# ── ID ─────────────────────────────────────────────────────────────────────

def _latest_order_id(payload: QuestionnairePayload) -> Optional[Any]:
    history = payload.order_history
    if history is None or not history.orders:
        return None
    return history.orders[0].order_id


def check_ids(payload: QuestionnairePayload, summary: SummaryView) -> IDCheck:
    check = IDCheck(
        uuid=payload.uuid or None,
        quiz_id=payload.quiz_id or None,
        order_id=_latest_order_id(payload),
    )

    if is_missing(payload.patient_id):
        check.issues.append(MISSING_PATIENT_ID)
    else:
        check.patient_id = payload.patient_id
    check.validated = not check.issues

    echoed = summary.dig("patient_info", "patient_id")
    mentioned = check.patient_id is not None and str(check.patient_id).lower() in summary.text
    check.present_in_summary = bool(echoed) or mentioned
    return check


# ── BMI ────────────────────────────────────────────────────────────────────

def check_bmi(data: ExtractedData, summary: SummaryView) -> BMICheck:
    check = BMICheck()

    if data.height_cm is not None and data.weights:
        # 身高视为常量：成人身高稳定，所有体重观测共用同一个身高
        for observation in data.weights:
            result = calculate_bmi(observation.weight_kg, data.height_cm)
            check.calculated_values.append(CalculatedBMI(
                weight_kg=observation.weight_kg,
                height_cm=data.height_cm,
                bmi=result.bmi,
                category=result.category,
                context=observation.context,
            ))
    elif data.height_cm is None and not data.weights:
        check.issues.append(MISSING_HEIGHT_AND_WEIGHT)
    elif data.height_cm is None:
        check.issues.append(MISSING_HEIGHT)
    else:
        check.issues.append(MISSING_WEIGHT)
    check.validated = not check.issues

    timeline = summary.dig("weight_progression", "timeline")
    first_bmi = None
    if isinstance(timeline, list) and timeline and isinstance(timeline[0], dict):
        first_bmi = timeline[0].get("bmi")
    check.present_in_summary = "bmi" in summary.text or bool(first_bmi)
    return check


# ── 药名 ───────────────────────────────────────────────────────────────────

def check_medicines(data: ExtractedData, summary: SummaryView) -> MedicineCheck:
    check = MedicineCheck()

    if not data.medications:
        check.issues.append(NO_MEDICATION_HISTORY)
    else:
        check.found_medications = list(data.medications)
        for name in data.medications:
            match = validate_medication(name)
            if match.is_valid:
                check.standardized_names.append(match.standardized_name)
                if match.message:
                    logger.debug("[Quiz] %s", match.message)
            else:
                check.issues.append(match.message)
    check.validated = not check.issues

    check.present_in_summary = (
        any(med.lower() in summary.text for med in VALID_MEDICATIONS)
        or "medication" in summary.text
    )
    return check


# ── 剂量 ───────────────────────────────────────────────────────────────────

def check_dosages(data: ExtractedData, summary: SummaryView) -> DosageCheck:
    check = DosageCheck()

    if not data.dosages:
        check.issues.append(NO_DOSAGE_INFORMATION)
    else:
        for medication, dosage in data.dosages:
            check.found_dosages.append(f"{medication}: {dosage}")

            # 药名不认识的问题归 medicine_check，这里只核对认识的药
            match = validate_medication(medication)
            if not match.is_valid:
                continue
            dosage_match = validate_dosage(match.standardized_name, dosage)
            if not dosage_match.is_valid:
                check.issues.append(dosage_match.message)
    check.validated = not check.issues

    check.present_in_summary = bool(DOSAGE_MENTION_RE.search(summary.text)) or bool(data.dosages)
    return check


# ── 入口 ───────────────────────────────────────────────────────────────────

def extract_and_validate_data(ai_result: Any, payload: Any) -> ValidationStatus:
    """
    AI 结果 + 问卷 → ValidationStatus。

    Args:
        ai_result: SummaryResult 或任何带 summary_text / structured_summary 的 dict，
                   字段缺失、类型不对都按空处理
        payload:   QuestionnairePayload，或原始 dict（内部转换）
    """
    if not isinstance(payload, QuestionnairePayload):
        payload = build_payload(payload)

    summary = read_summary(ai_result)
    data = extract_payload_data(payload)

    status = ValidationStatus(
        bmi_check=check_bmi(data, summary),
        dosage_check=check_dosages(data, summary),
        medicine_check=check_medicines(data, summary),
        id_check=check_ids(payload, summary),
    )

    logger.info(
        "[Quiz] Validation patient_id=%s bmi=%s dosage=%s medicine=%s id=%s",
        payload.patient_id,
        status.bmi_check.validated,
        status.dosage_check.validated,
        status.medicine_check.validated,
        status.id_check.validated,
    )
    return status
