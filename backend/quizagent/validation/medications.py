"""
参考表 + 药名 / 剂量匹配。

参考表在 import 时固定，之后只读（MappingProxyType + tuple），
多个请求并发读取不需要加锁。

药名匹配分三档，返回带标签的 MedicationMatch：
  EXACT         大小写不敏感完全匹配
  STANDARDIZED  子串匹配（任一方向），替换成标准名
  UNKNOWN       都不匹配
"""

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional

# 体重管理类药物（GLP-1 / GIP）
VALID_MEDICATIONS: tuple[str, ...] = (
    "Mounjaro",
    "Saxenda",
    "Wegovy",
    "Ozempic",
    "Victoza",
    "Trulicity",
    "Rybelsus",
)

MEDICATION_DOSAGES = MappingProxyType({
    "Mounjaro":  ("2.5mg", "5mg", "7.5mg", "10mg", "12.5mg", "15mg"),
    "Saxenda":   ("0.6mg", "1.2mg", "1.8mg", "2.4mg", "3mg"),
    "Wegovy":    ("0.25mg", "0.5mg", "1mg", "1.7mg", "2.4mg"),
    "Ozempic":   ("0.25mg", "0.5mg", "1mg", "2mg"),
    "Victoza":   ("0.6mg", "1.2mg", "1.8mg"),
    "Trulicity": ("0.75mg", "1.5mg", "3mg", "4.5mg"),
    "Rybelsus":  ("3mg", "7mg", "14mg"),
})


class MatchKind(enum.Enum):
    EXACT = "exact"
    STANDARDIZED = "standardized"
    UNKNOWN = "unknown"


class DosageVerdict(enum.Enum):
    VALID = "valid"
    INVALID_DOSAGE = "invalid_dosage"
    UNKNOWN_MEDICATION = "unknown_medication"


@dataclass(frozen=True)
class MedicationMatch:
    kind: MatchKind
    query: str
    standardized_name: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.kind is not MatchKind.UNKNOWN


@dataclass(frozen=True)
class DosageMatch:
    verdict: DosageVerdict
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.verdict is DosageVerdict.VALID


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def validate_medication(medication_name: Any) -> MedicationMatch:
    name = _text(medication_name)
    normalized = name.strip().lower()

    # 空字符串是任何药名的子串，必须先排除
    if normalized:
        for med in VALID_MEDICATIONS:
            if med.lower() == normalized:
                return MedicationMatch(MatchKind.EXACT, name, standardized_name=med)

        for med in VALID_MEDICATIONS:
            canonical = med.lower()
            if normalized in canonical or canonical in normalized:
                return MedicationMatch(
                    MatchKind.STANDARDIZED,
                    name,
                    standardized_name=med,
                    message=f'Standardized "{name}" to "{med}"',
                )

    return MedicationMatch(
        MatchKind.UNKNOWN,
        name,
        message=f"Unknown medication: {name}. Valid medications: {', '.join(VALID_MEDICATIONS)}",
    )


def validate_dosage(medication: str, dosage: Any) -> DosageMatch:
    """medication 必须是标准名（validate_medication 的输出）。"""
    valid_dosages = MEDICATION_DOSAGES.get(medication)
    if valid_dosages is None:
        return DosageMatch(
            DosageVerdict.UNKNOWN_MEDICATION,
            f"No dosage information available for: {medication}",
        )

    raw = _text(dosage)
    normalized = raw.strip().lower()
    if any(valid.lower() == normalized for valid in valid_dosages):
        return DosageMatch(DosageVerdict.VALID)

    return DosageMatch(
        DosageVerdict.INVALID_DOSAGE,
        f'Invalid dosage "{raw}" for {medication}. Valid dosages: {", ".join(valid_dosages)}',
    )
