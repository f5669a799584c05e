from .calculators import calculate_bmi
from .checks import extract_and_validate_data
from .medications import validate_dosage, validate_medication
from .types import ValidationStatus

__all__ = [
    "ValidationStatus",
    "calculate_bmi",
    "extract_and_validate_data",
    "validate_dosage",
    "validate_medication",
]
