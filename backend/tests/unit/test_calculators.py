"""
Unit tests for BMI calculation and classification.

纯 Python 测试，不需要数据库。
"""
import pytest

from quizagent.validation.calculators import calculate_bmi, classify_bmi


class TestCalculateBMI:

    @pytest.mark.parametrize("weight, height", [
        (81, 171),
        (70, 171),
        (95, 171),
        (58.3, 162.5),
        (120, 190),
        (45, 150),
    ])
    def test_matches_formula_rounded_to_one_decimal(self, weight, height):
        height_m = height / 100
        expected = round(weight / (height_m * height_m), 1)
        assert calculate_bmi(weight, height).bmi == expected

    def test_example_patient(self):
        result = calculate_bmi(81, 171)
        assert result.bmi == 27.7
        assert result.category == "Overweight"

    def test_height_converted_from_centimetres(self):
        # 100cm → 1m，BMI 等于体重
        assert calculate_bmi(64, 100).bmi == 64.0


class TestCategoryBoundaries:

    @pytest.mark.parametrize("bmi, category", [
        (18.4, "Underweight"),
        (18.5, "Normal"),
        (24.9, "Normal"),
        (25.0, "Overweight"),
        (29.9, "Overweight"),
        (30.0, "Obese"),
        (41.2, "Obese"),
    ])
    def test_classify(self, bmi, category):
        assert classify_bmi(bmi) == category

    @pytest.mark.parametrize("weight, category", [
        (18.5, "Normal"),
        (25.0, "Overweight"),
        (30.0, "Obese"),
    ])
    def test_boundaries_through_calculate(self, weight, category):
        result = calculate_bmi(weight, 100)
        assert result.bmi == weight
        assert result.category == category

    def test_category_uses_rounded_value(self):
        # 24.96 → 25.0，展示值和分类一致
        result = calculate_bmi(24.96, 100)
        assert result.bmi == 25.0
        assert result.category == "Overweight"
