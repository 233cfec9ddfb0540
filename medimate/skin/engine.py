"""
Skincare questionnaire engine.
Implements get_inputs() and run_inference(answers) over the 13-question survey.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Union

from medimate.app_services import new_record_id, now_iso


logger = logging.getLogger(__name__)

Answer = Union[str, List[str]]

BASE_SCORE = 85
MIN_SCORE = 40

QUESTIONS: List[Dict] = [
    {"id": 1, "question": "How would you describe your skin type?", "type": "single", "category": "type",
     "options": ["Oily", "Dry", "Combination", "Normal", "Sensitive"]},
    {"id": 2, "question": "What are your main skin concerns? (Select all that apply)", "type": "multiple", "category": "concerns",
     "options": ["Acne/Breakouts", "Dark Spots", "Fine Lines/Wrinkles", "Large Pores", "Dullness",
                 "Redness/Irritation", "Uneven Texture", "Dark Circles"]},
    {"id": 3, "question": "How often do you break out?", "type": "single", "category": "concerns",
     "options": ["Never", "Rarely (once a month)", "Sometimes (2-3 times a month)", "Often (weekly)", "Very often (daily)"]},
    {"id": 4, "question": "How does your skin feel by midday?", "type": "single", "category": "type",
     "options": ["Very oily all over", "Oily in T-zone only", "Normal/comfortable", "Tight or dry", "Flaky or very dry"]},
    {"id": 5, "question": "How does your skin react to new products?", "type": "single", "category": "type",
     "options": ["No reaction", "Mild irritation sometimes", "Often gets irritated", "Very sensitive, reacts easily",
                 "Breaks out frequently"]},
    {"id": 6, "question": "What is your current skincare routine?", "type": "single", "category": "routine",
     "options": ["No routine", "Basic (cleanser only)", "Simple (cleanser + moisturizer)", "Moderate (3-4 products)",
                 "Extensive (5+ products)"]},
    {"id": 7, "question": "How much time do you spend in the sun daily?", "type": "single", "category": "lifestyle",
     "options": ["Less than 30 minutes", "30 minutes - 1 hour", "1-2 hours", "2-4 hours", "More than 4 hours"]},
    {"id": 8, "question": "Do you currently use sunscreen?", "type": "single", "category": "routine",
     "options": ["Daily", "Sometimes", "Only when going out", "Rarely", "Never"]},
    {"id": 9, "question": "How would you rate your stress levels?", "type": "scale", "category": "lifestyle",
     "options": [str(level) for level in range(1, 11)]},
    {"id": 10, "question": "How many hours of sleep do you get per night?", "type": "single", "category": "lifestyle",
     "options": ["Less than 5 hours", "5-6 hours", "6-7 hours", "7-8 hours", "More than 8 hours"]},
    {"id": 11, "question": "How often do you drink water daily?", "type": "single", "category": "lifestyle",
     "options": ["Less than 4 glasses", "4-6 glasses", "6-8 glasses", "8-10 glasses", "More than 10 glasses"]},
    {"id": 12, "question": "What is your age range?", "type": "single", "category": "type",
     "options": ["Under 18", "18-25", "26-35", "36-45", "46-55", "Over 55"]},
    {"id": 13, "question": "What is your primary skincare goal?", "type": "single", "category": "concerns",
     "options": ["Prevent aging", "Clear acne", "Even skin tone", "Hydrate skin", "Reduce sensitivity",
                 "General maintenance"]},
]

CLEANSERS = {
    "Oily": {
        "name": "Salicylic Acid Foaming Cleanser",
        "description": "Deep-cleansing foam that removes excess oil and unclogs pores",
        "usage": "Use twice daily, morning and evening",
    },
    "Dry": {
        "name": "Gentle Cream Cleanser",
        "description": "Hydrating cleanser that removes impurities without stripping natural oils",
        "usage": "Use twice daily with lukewarm water",
    },
    "Sensitive": {
        "name": "Fragrance-Free Gentle Cleanser",
        "description": "Mild, non-irritating formula perfect for sensitive skin",
        "usage": "Use once or twice daily as tolerated",
    },
    "default": {
        "name": "Balanced pH Gel Cleanser",
        "description": "Gentle yet effective cleanser suitable for all skin types",
        "usage": "Use twice daily, morning and evening",
    },
}

TONERS = {
    "Oily": {
        "name": "BHA Clarifying Toner",
        "description": "Helps control oil production and minimize pores",
        "usage": "Apply with cotton pad after cleansing, evening only initially",
    },
    "Dry": {
        "name": "Hyaluronic Acid Hydrating Toner",
        "description": "Provides deep hydration and plumps the skin",
        "usage": "Pat gently into skin after cleansing, twice daily",
    },
    "default": {
        "name": "Rose Water Balancing Toner",
        "description": "Natural toner that balances pH and provides gentle hydration",
        "usage": "Apply with cotton pad or pat into skin after cleansing",
    },
}

# Checked in this order; the first concern present picks the serum.
SERUMS = [
    ("Dark Spots", {
        "name": "Vitamin C Brightening Serum",
        "description": "Powerful antioxidant that fades dark spots and evens skin tone",
        "usage": "Apply in the morning before moisturizer, start 3x per week",
    }),
    ("Fine Lines/Wrinkles", {
        "name": "Retinol Anti-Aging Serum",
        "description": "Stimulates cell turnover and reduces signs of aging",
        "usage": "Apply at night, start 2x per week and gradually increase",
    }),
    ("Acne/Breakouts", {
        "name": "Niacinamide Pore Refining Serum",
        "description": "Reduces oil production and minimizes breakouts",
        "usage": "Apply twice daily after toner",
    }),
]
DEFAULT_SERUM = {
    "name": "Hyaluronic Acid Hydrating Serum",
    "description": "Provides intense hydration and plumps the skin",
    "usage": "Apply to damp skin before moisturizer, twice daily",
}

MOISTURIZERS = {
    "Oily": {
        "name": "Oil-Free Gel Moisturizer",
        "description": "Lightweight, non-comedogenic formula that hydrates without clogging pores",
        "usage": "Apply twice daily as the last step in your routine",
    },
    "Dry": {
        "name": "Rich Ceramide Cream",
        "description": "Deeply nourishing cream that restores the skin barrier",
        "usage": "Apply generously twice daily, especially after showering",
    },
    "default": {
        "name": "Balanced Hydrating Lotion",
        "description": "Perfect balance of hydration for normal to combination skin",
        "usage": "Apply twice daily after serum",
    },
}

SUNSCREEN = {
    "name": "Broad Spectrum SPF 30+ Sunscreen",
    "description": "Essential protection against UV damage and premature aging",
    "usage": "Apply every morning as the final step, reapply every 2 hours",
}

MORNING_ROUTINE = [
    {"step": 1, "product": "Gentle Cleanser", "instruction": "Cleanse face with lukewarm water"},
    {"step": 2, "product": "Toner", "instruction": "Apply toner to balance skin pH"},
    {"step": 3, "product": "Vitamin C Serum", "instruction": "Apply serum for antioxidant protection"},
    {"step": 4, "product": "Moisturizer", "instruction": "Hydrate and protect skin barrier"},
    {"step": 5, "product": "Sunscreen SPF 30+", "instruction": "Apply generously for UV protection"},
]

EVENING_ROUTINE = [
    {"step": 1, "product": "Cleanser", "instruction": "Remove makeup and daily impurities"},
    {"step": 2, "product": "Toner", "instruction": "Prepare skin for treatment products"},
    {"step": 3, "product": "Treatment Serum", "instruction": "Apply targeted treatment for concerns"},
    {"step": 4, "product": "Night Moisturizer", "instruction": "Nourish and repair overnight"},
]

UNIVERSAL_TIPS = [
    "Always patch test new products before full application",
    "Introduce new products one at a time to monitor reactions",
    "Be consistent with your routine for at least 4-6 weeks to see results",
]

SCHEDULE = """Week 1-2: Start with basic routine (cleanser, moisturizer, sunscreen)
Week 3-4: Introduce toner gradually
Week 5-6: Add serum 2-3 times per week
Week 7+: Full routine with all products as tolerated

Monthly: Assess skin changes and adjust products as needed
Quarterly: Consider professional skin consultation"""

SUNSCREEN_NEGLECT = {"Never", "Rarely"}


def get_inputs() -> List[Dict]:
    widget_types = {"single": "radio", "multiple": "multiselect", "scale": "select_slider"}
    return [
        {
            "type": widget_types[item["type"]],
            "name": f"q{item['id']}",
            "question_id": item["id"],
            "label": item["question"],
            "unit": "",
            "help": f"Category: {item['category']}",
            "options": list(item["options"]),
        }
        for item in QUESTIONS
    ]


def _text(answer) -> str:
    if answer is None:
        return ""
    if isinstance(answer, (list, tuple, set)):
        return " ".join(str(item) for item in answer)
    return str(answer)


def _answers_by_id(answers: Dict) -> Dict[int, Answer]:
    """Accept 1, "1" or "q1" style keys."""
    normalized: Dict[int, Answer] = {}
    for key, value in answers.items():
        text_key = str(key).lower().lstrip("q")
        if text_key.isdigit():
            normalized[int(text_key)] = value
    return normalized


def determine_skin_type(answers: Dict[int, Answer]) -> str:
    skin_type = _text(answers.get(1)) or "Normal"
    midday = _text(answers.get(4))
    if "Very oily" in midday:
        skin_type = "Oily"
    elif "Tight" in midday or "Flaky" in midday:
        skin_type = "Dry"
    elif "T-zone" in midday:
        skin_type = "Combination"
    if "Very sensitive" in _text(answers.get(5)):
        skin_type = "Sensitive"
    return skin_type


def _stress_level(answer) -> int:
    try:
        return int(str(answer).strip())
    except (TypeError, ValueError):
        return 0


def skin_score(answers: Dict[int, Answer]) -> int:
    score = BASE_SCORE
    if "Often" in _text(answers.get(3)) or "Very often" in _text(answers.get(3)):
        score -= 15
    if "More than 4 hours" in _text(answers.get(7)):
        score -= 10
    if _text(answers.get(8)) in SUNSCREEN_NEGLECT:
        score -= 20
    if _stress_level(answers.get(9)) > 7:
        score -= 10
    if "Less than 5" in _text(answers.get(10)):
        score -= 10
    if "Less than 4" in _text(answers.get(11)):
        score -= 10
    return max(score, MIN_SCORE)


def recommend_products(skin_type: str, concerns: List[str]) -> Dict[str, Dict]:
    serum = DEFAULT_SERUM
    for concern, product in SERUMS:
        if concern in concerns:
            serum = product
            break
    return {
        "cleanser": dict(CLEANSERS.get(skin_type, CLEANSERS["default"])),
        "toner": dict(TONERS.get(skin_type, TONERS["default"])),
        "serum": dict(serum),
        "moisturizer": dict(MOISTURIZERS.get(skin_type, MOISTURIZERS["default"])),
        "sunscreen": dict(SUNSCREEN),
    }


def skincare_tips(skin_type: str, concerns: List[str], answers: Dict[int, Answer]) -> List[str]:
    tips = list(UNIVERSAL_TIPS)
    if skin_type == "Oily":
        tips.append("Avoid over-cleansing as it can increase oil production")
        tips.append("Use blotting papers instead of washing face multiple times")
    if skin_type == "Dry":
        tips.append("Apply moisturizer to damp skin to lock in hydration")
        tips.append("Use a humidifier in dry environments")
    if "Acne/Breakouts" in concerns:
        tips.append("Avoid touching your face throughout the day")
        tips.append("Change pillowcases regularly to prevent bacteria buildup")
    if _text(answers.get(8)) in SUNSCREEN_NEGLECT:
        tips.append("Sunscreen is crucial - UV damage is the #1 cause of premature aging")
    return tips


def run_inference(answers: Dict) -> Dict:
    by_id = _answers_by_id(answers)

    skin_type = determine_skin_type(by_id)
    raw_concerns = by_id.get(2)
    concerns = list(raw_concerns) if isinstance(raw_concerns, (list, tuple)) else []
    score = skin_score(by_id)

    logger.debug("Skin analysis: type=%s concerns=%s score=%d", skin_type, concerns, score)

    return {
        "skin_type": skin_type,
        "primary_concerns": concerns,
        "skin_score": score,
        "recommendations": recommend_products(skin_type, concerns),
        # Same template for everyone.
        "routine": {
            "morning": [dict(step) for step in MORNING_ROUTINE],
            "evening": [dict(step) for step in EVENING_ROUTINE],
        },
        "tips": skincare_tips(skin_type, concerns, by_id),
        "schedule": SCHEDULE,
    }


def build_record(result: Dict) -> Dict:
    return {
        "id": new_record_id(),
        "date": now_iso(),
        "skinType": result["skin_type"],
        "concerns": list(result["primary_concerns"]),
        "score": result["skin_score"],
        "recommendations": result["recommendations"],
    }
