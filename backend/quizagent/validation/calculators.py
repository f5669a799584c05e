"""
临床计算：BMI 及其分类。

纯函数，不做参数校验。height_cm > 0 由 extractor 保证（非正数不会被抽出来）。
"""

from dataclasses import dataclass

UNDERWEIGHT = "Underweight"
NORMAL = "Normal"
OVERWEIGHT = "Overweight"
OBESE = "Obese"

# (上限，不含) → 分类，按顺序比对
BMI_CATEGORIES = (
    (18.5, UNDERWEIGHT),
    (25.0, NORMAL),
    (30.0, OVERWEIGHT),
)


@dataclass(frozen=True)
class BMIResult:
    bmi: float
    category: str


def classify_bmi(bmi: float) -> str:
    for upper, category in BMI_CATEGORIES:
        if bmi < upper:
            return category
    return OBESE


def calculate_bmi(weight_kg: float, height_cm: float) -> BMIResult:
    """
    BMI = weight(kg) / height(m)^2，保留一位小数。

    分类用四舍五入后的值，这样展示出来的 18.5 / 25.0 / 30.0 正好落在边界的上一档。
    """
    height_m = height_cm / 100
    bmi = round(weight_kg / (height_m * height_m), 1)
    return BMIResult(bmi=bmi, category=classify_bmi(bmi))
