from __future__ import annotations

import random
from datetime import date
from typing import Dict, List, Optional

from medimate.app_services import new_record_id, now_iso


QUESTIONS: List[Dict] = [
    {
        "id": 1,
        "question": "How much water should an average adult drink per day?",
        "options": ["4-6 glasses", "8-10 glasses", "12-14 glasses", "2-3 glasses"],
        "correct": 1,
        "explanation": "Most adults should drink about 8-10 glasses (64-80 oz) of water daily to maintain proper hydration.",
    },
    {
        "id": 2,
        "question": "What is the recommended amount of sleep for adults?",
        "options": ["5-6 hours", "7-9 hours", "10-12 hours", "4-5 hours"],
        "correct": 1,
        "explanation": "Adults should get 7-9 hours of quality sleep per night for optimal health and cognitive function.",
    },
    {
        "id": 3,
        "question": "How often should you exercise per week for basic health?",
        "options": ["Once a week", "Daily", "At least 150 minutes", "Only weekends"],
        "correct": 2,
        "explanation": "The WHO recommends at least 150 minutes of moderate aerobic activity per week for adults.",
    },
    {
        "id": 4,
        "question": "What is the normal resting heart rate for adults?",
        "options": ["40-50 bpm", "60-100 bpm", "110-120 bpm", "30-40 bpm"],
        "correct": 1,
        "explanation": "A normal resting heart rate for adults ranges from 60 to 100 beats per minute.",
    },
    {
        "id": 5,
        "question": "Which vitamin is primarily obtained from sunlight?",
        "options": ["Vitamin A", "Vitamin C", "Vitamin D", "Vitamin B12"],
        "correct": 2,
        "explanation": "Vitamin D is synthesized in the skin when exposed to UVB radiation from sunlight.",
    },
]

WELLNESS_TIPS = [
    "Start your day with a glass of water to kickstart your metabolism and hydrate your body after hours of rest.",
    "Take a 10-minute walk after meals to improve digestion and help regulate blood sugar levels.",
    "Practice deep breathing for 5 minutes daily to reduce stress and improve mental clarity.",
    "Eat the rainbow - include colorful fruits and vegetables in your diet for diverse nutrients and antioxidants.",
    "Get 15-20 minutes of sunlight exposure daily to boost vitamin D production and improve mood.",
    "Practice the 20-20-20 rule: Every 20 minutes, look at something 20 feet away for 20 seconds to rest your eyes.",
    "Keep a gratitude journal - writing down 3 things you're grateful for can improve mental health and sleep quality.",
    "Limit screen time before bed to improve sleep quality and reduce blue light exposure.",
    "Stay socially connected - regular interaction with friends and family is crucial for mental health.",
    "Listen to music or engage in creative activities to reduce stress and boost cognitive function.",
]

BREATHING_PHASES = [
    {"phase": "inhale", "seconds": 4, "prompt": "Breathe in slowly..."},
    {"phase": "hold", "seconds": 4, "prompt": "Hold your breath..."},
    {"phase": "exhale", "seconds": 6, "prompt": "Breathe out slowly..."},
    {"phase": "rest", "seconds": 2, "prompt": "Relax..."},
]
BREATHING_CYCLES = 5


def _question(question_id: int) -> Dict:
    for item in QUESTIONS:
        if item["id"] == question_id:
            return item
    raise KeyError(f"Unknown quiz question: {question_id}")


def check_answer(question_id: int, choice: int) -> bool:
    return _question(question_id)["correct"] == choice


def _verdict(score: int, total: int) -> str:
    if score == total:
        return "Perfect! You're a health expert!"
    if score >= total * 0.8:
        return "Great job! You know your health facts!"
    if score >= total * 0.6:
        return "Good work! Keep learning about health!"
    return "Keep studying! Health knowledge is important!"


def score_quiz(answers: Dict[int, Optional[int]]) -> Dict:
    """``answers`` maps question id to chosen option index; unanswered counts as wrong."""
    total = len(QUESTIONS)
    score = sum(
        1 for item in QUESTIONS
        if answers.get(item["id"]) is not None and answers[item["id"]] == item["correct"]
    )
    return {"score": score, "total_questions": total, "message": _verdict(score, total)}


def daily_tip(day: Optional[date] = None) -> str:
    day = day or date.today()
    return WELLNESS_TIPS[day.day % len(WELLNESS_TIPS)]


def random_tip(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(WELLNESS_TIPS)


def breathing_plan(cycles: int = BREATHING_CYCLES) -> List[Dict]:
    plan = []
    for cycle in range(1, cycles + 1):
        for phase in BREATHING_PHASES:
            plan.append({"cycle": cycle, **phase})
    return plan


def build_record(score_result: Dict) -> Dict:
    return {
        "id": new_record_id(),
        "date": now_iso(),
        "score": score_result["score"],
        "totalQuestions": score_result["total_questions"],
    }
