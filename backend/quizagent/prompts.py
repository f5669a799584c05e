"""Prompt construction for the quiz summary request."""

import json

SYSTEM_PROMPT = (
    "You are an AI assistant specialized in creating comprehensive medical summaries "
    "from patient quiz data with focus on weight management journey, medication history, "
    "and health metrics progression."
)

RESPONSE_SCHEMA = """{
  "summary_text": "A comprehensive narrative summary (3-5 paragraphs) covering: patient background (ID: %(patient_id)s), complete weight journey with all measurements and dates, BMI progression analysis with specific BMI values, detailed medication history with EXACT DOSAGES, current status, and recommendations.",
  "structured_summary": {
    "patient_info": {
      "patient_id": %(patient_id_json)s,
      "age_range": "from main_quiz",
      "sex": "from main_quiz",
      "ethnicity": "from main_quiz",
      "weight_challenge_duration": "from main_quiz"
    },
    "weight_progression": {
      "timeline": [
        {"date": "date or context", "weight_kg": "value", "bmi": "calculated - MANDATORY",
         "bmi_category": "category - MANDATORY", "context": "e.g., Before Mounjaro, Current Weight"}
      ],
      "total_weight_lost_kg": "calculated",
      "total_weight_lost_percentage": "calculated"
    },
    "height_info": {"current_height_cm": "value from main_quiz - MANDATORY"},
    "goals": {
      "target_weight_kg": "from main_quiz",
      "current_weight_kg": "latest from order_quiz",
      "remaining_kg": "calculated",
      "progress_percentage": "calculated"
    },
    "medication_history": [
      {"medication": "name from order_history - MANDATORY", "dosage": "from order_history - MANDATORY",
       "start_date": "from main_quiz answers", "end_date": "from main_quiz or 'current'",
       "starting_weight_kg": "from 'before beginning' questions",
       "currently_taking": "from answers", "side_effects": "from answers"}
    ],
    "current_status": {
      "current_medication": "from latest order", "current_dosage": "from latest order",
      "feeling_score": "from order_quiz", "side_effects": "from order_quiz", "adherence": "from order_quiz"
    },
    "health_conditions": {
      "diabetes": "from main_quiz", "family_history": "from main_quiz",
      "allergies": "from main_quiz", "other_conditions": "from main_quiz"
    },
    "previous_approaches": ["from main_quiz"],
    "orders": {
      "total_orders": %(total_orders)s,
      "latest_order": {"order_id": "from order_history", "product": "from order_history",
                       "dosage": "from order_history", "plan": "from order_history",
                       "status": "from order_history", "created_at": "from order_history"}
    }
  }
}"""

INSTRUCTIONS = """CRITICAL INSTRUCTIONS - You MUST analyze and include ALL of the following in your summary:

The input data has the following structure:
- patient_id: Top level patient identifier
- main_quiz: Contains main questionnaire answers with updated_at timestamp
- order_quiz: Contains order-specific questions with updated_at timestamp
- order_history: Contains all orders with product, dosage, dates, and status

1. PATIENT DEMOGRAPHICS: age range, sex, ethnicity, how long they've been managing weight.
2. WEIGHT PROGRESSION: starting weights before each medication, current weight from main_quiz
   ("height and current weight"), latest weight from order_quiz ("current weight"),
   total weight change and percentage.
3. BMI CALCULATIONS (MANDATORY): height from main_quiz; BMI = weight(kg) / (height(m))^2 at each
   weight point; categories Underweight <18.5, Normal 18.5-24.9, Overweight 25-29.9, Obese >=30.
   MUST include BMI values in both summary_text and structured_summary.
4. GOAL TRACKING: target weight from main_quiz, remaining kg and percentage.
5. MEDICATION HISTORY: ALL products from order_history.orders and medications mentioned in
   main_quiz ("medicines to support weight loss"), each with name and EXACT dosage.
6. CURRENT STATUS: latest order (order_history.orders[0]), feeling score, side effects, adherence.
7. HEALTH CONDITIONS: diabetes status, family history, allergies, other conditions.
8. PREVIOUS APPROACHES: methods tried before medications.
9. ORDER HISTORY: total orders, all orders with dates, status, products."""


def build_prompt(raw_payload):
    """Build the user prompt for the quiz summary from the raw request payload."""
    raw_payload = raw_payload if isinstance(raw_payload, dict) else {}
    patient_id = raw_payload.get("patient_id")
    order_history = raw_payload.get("order_history")
    total_orders = order_history.get("total_orders") if isinstance(order_history, dict) else None

    schema = RESPONSE_SCHEMA % {
        "patient_id": patient_id,
        "patient_id_json": json.dumps(patient_id),
        "total_orders": json.dumps(total_orders or 0),
    }

    return (
        f"{INSTRUCTIONS}\n\n"
        f"Respond ONLY with valid JSON in this exact format:\n{schema}\n\n"
        f"Quiz data to analyze:\n{json.dumps(raw_payload, indent=2, default=str)}"
    )
