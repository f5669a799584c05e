"""
Shared fixtures for all tests.

问卷样例和 AI 摘要样例放在这里，unit/ 和 integration/ 都通过 fixture 取用。
fixture 每次返回深拷贝，测试里随便改不会互相影响。
"""
import copy
import json

import pytest
from django.test import Client


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

QUIZ_PAYLOAD = {
    "patient_id": 137,
    "uuid": "6f1c2b9e-4d7a-4c1e-9a43-0f6d5b2e8c11",
    "main_quiz": {
        "updated_at": "2024-03-01T09:00:00Z",
        "answers": [
            {
                "question_id": 1,
                "question_title": "What is your height and current weight?",
                "answer_text": '{"height_cm":"171","weight_kg":"81"}',
            },
            {
                "question_id": 2,
                "question_title": "What is your goal weight?",
                "answer_text": '{"weight_kg":"70"}',
            },
            {
                "question_id": 3,
                "question_title": "What was your weight before beginning Mounjaro?",
                "answer_text": '{"weight_kg":"95"}',
            },
            {
                "question_id": 4,
                "question_title": "Have you taken any medicines to support weight loss?",
                "answer_text": "Wegovy",
            },
            {
                "question_id": 5,
                "question_title": "What is your age range?",
                "answer_text": "35-44",
            },
        ],
    },
    "order_quiz": {
        "updated_at": "2024-05-01T10:00:00Z",
        "answers": [
            {
                "question_id": 20,
                "question_title": "What is your current weight?",
                "answer_text": '{"weight_kg":"78"}',
            },
        ],
    },
    "order_history": {
        "total_orders": 2,
        "orders": [
            {
                "order_id": 502,
                "product": "Mounjaro",
                "product_plan": "Monthly",
                "dosage": "5mg",
                "order_created_at": "2024-05-01T10:05:00Z",
                "order_state": "processing",
            },
            {
                "order_id": 501,
                "product": "Mounjaro",
                "product_plan": "Monthly",
                "dosage": "2.5mg",
                "order_created_at": "2024-03-01T09:10:00Z",
                "order_state": "completed",
            },
        ],
    },
}

AI_SUMMARY = {
    "summary_text": (
        "Patient 137 began Mounjaro at 95 kg (BMI 32.5, Obese) and is currently on "
        "Mounjaro 5mg at 78 kg (BMI 26.7, Overweight)."
    ),
    "structured_summary": {
        "patient_info": {"patient_id": 137},
        "weight_progression": {
            "timeline": [{"date": "Before Mounjaro", "weight_kg": 95, "bmi": 32.5}],
        },
    },
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def quiz_payload():
    """完整问卷：身高 171，四个体重观测，Mounjaro 两单 + 问卷里提到 Wegovy。"""
    return copy.deepcopy(QUIZ_PAYLOAD)


@pytest.fixture
def ai_summary():
    return copy.deepcopy(AI_SUMMARY)


@pytest.fixture
def empty_summary():
    return {"summary_text": "", "structured_summary": {}}


@pytest.fixture
def ai_summary_text():
    """LLM 原始输出：JSON 外面包了一层 markdown 代码块。"""
    return "```json\n" + json.dumps(AI_SUMMARY) + "\n```"
