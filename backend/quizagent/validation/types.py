"""
ValidationStatus — 四个互相独立的检查块。

每块都有 validated / present_in_summary / issues：
  validated           只有 issues 为空时才可能是 True
  present_in_summary  AI 输出里有没有提到这些事实，与 validated 无关
"""

from dataclasses import asdict, dataclass, field
from typing import Optional, Union


@dataclass
class CalculatedBMI:
    weight_kg: float
    height_cm: float
    bmi: float
    category: str
    context: Optional[str] = None


@dataclass
class BMICheck:
    validated: bool = False
    present_in_summary: bool = False
    issues: list[str] = field(default_factory=list)
    calculated_values: list[CalculatedBMI] = field(default_factory=list)


@dataclass
class DosageCheck:
    validated: bool = False
    present_in_summary: bool = False
    issues: list[str] = field(default_factory=list)
    found_dosages: list[str] = field(default_factory=list)


@dataclass
class MedicineCheck:
    validated: bool = False
    present_in_summary: bool = False
    issues: list[str] = field(default_factory=list)
    found_medications: list[str] = field(default_factory=list)
    standardized_names: list[str] = field(default_factory=list)


@dataclass
class IDCheck:
    validated: bool = False
    present_in_summary: bool = False
    issues: list[str] = field(default_factory=list)
    patient_id: Optional[Union[str, int]] = None
    uuid: Optional[str] = None
    quiz_id: Optional[Union[str, int]] = None
    order_id: Optional[Union[str, int]] = None


@dataclass
class ValidationStatus:
    bmi_check: BMICheck = field(default_factory=BMICheck)
    dosage_check: DosageCheck = field(default_factory=DosageCheck)
    medicine_check: MedicineCheck = field(default_factory=MedicineCheck)
    id_check: IDCheck = field(default_factory=IDCheck)

    def to_dict(self) -> dict:
        """JSON-able dict。id_check 里没拿到的可选回显字段直接省略。"""
        data = asdict(self)
        data["id_check"] = {
            key: value for key, value in data["id_check"].items()
            if value is not None or key == "patient_id"
        }
        return data
