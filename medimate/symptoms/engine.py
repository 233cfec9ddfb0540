"""
Symptom quick-check engine.
Rule-based: severity band from fixed thresholds, condition from the first
matching symptom-cluster rule. Implements get_inputs() and run_inference(user_data).
"""

from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np
import skfuzzy as fuzz

from medimate.app_services import new_record_id, now_iso


logger = logging.getLogger(__name__)

SYMPTOM_CATEGORIES: Dict[str, List[str]] = {
    "Neurological": ["Headache", "Dizziness", "Memory Issues", "Confusion", "Numbness"],
    "Respiratory": ["Cough", "Shortness of Breath", "Chest Pain", "Wheezing", "Throat Pain"],
    "Digestive": ["Nausea", "Vomiting", "Stomach Pain", "Diarrhea", "Constipation"],
    "Muscular": ["Muscle Pain", "Joint Pain", "Stiffness", "Weakness", "Cramps"],
    "General": ["Fever", "Fatigue", "Loss of Appetite", "Weight Loss", "Night Sweats"],
}

DURATIONS = ["Less than a day", "1-3 days", "3-7 days", "1-2 weeks", "More than 2 weeks"]

# Clusters used by the rules; narrower than the display categories above.
CLUSTERS: Dict[str, List[str]] = {
    "respiratory": ["Cough", "Shortness of Breath", "Chest Pain"],
    "fever": ["Fever"],
    "gastrointestinal": ["Nausea", "Vomiting", "Stomach Pain", "Diarrhea"],
    "neurological": ["Headache", "Dizziness", "Confusion"],
}

CLUSTER_TESTS: Dict[str, List[str]] = {
    "respiratory": ["Chest X-ray", "Complete Blood Count"],
    "fever": ["Blood Culture", "Inflammatory Markers"],
    "gastrointestinal": ["Stool Analysis", "Abdominal Ultrasound"],
}

BASE_RECOMMENDATIONS = [
    "Stay hydrated and get adequate rest",
    "Monitor your symptoms closely",
    "Consider over-the-counter pain relief if appropriate",
]
URGENT_RECOMMENDATION = "Seek immediate medical attention"
APPOINTMENT_RECOMMENDATION = "Schedule an appointment with your healthcare provider"

LIFESTYLE_TIPS = [
    "Maintain a balanced diet rich in vitamins",
    "Get 7-8 hours of quality sleep",
    "Practice stress management techniques",
]

DEFAULT_CONDITION = ("General Health Concern", 70)

BANDS = ["Low", "Medium", "High", "Critical"]


def get_inputs() -> List[Dict]:
    inputs: List[Dict] = [
        {
            "type": "multiselect",
            "name": f"symptoms_{category.lower()}",
            "label": f"{category} symptoms",
            "unit": "",
            "help": f"Select any {category.lower()} symptoms you are experiencing.",
            "options": list(options),
        }
        for category, options in SYMPTOM_CATEGORIES.items()
    ]
    inputs.extend(
        [
            {
                "type": "selectbox",
                "name": "duration",
                "label": "How long have you had these symptoms?",
                "unit": "",
                "help": "Approximate duration.",
                "options": list(DURATIONS),
            },
            {
                "type": "slider",
                "name": "severity",
                "label": "Severity level",
                "unit": "1-10",
                "min": 1,
                "max": 10,
                "default": 5,
                "help": "How severe do the symptoms feel overall?",
            },
            {
                "type": "slider",
                "name": "emotional_state",
                "label": "Emotional state",
                "unit": "1-10",
                "min": 1,
                "max": 10,
                "default": 5,
                "help": "How are you feeling emotionally?",
            },
        ]
    )
    return inputs


def severity_band(severity: float) -> str:
    if severity >= 8:
        return "Critical"
    if severity >= 6:
        return "High"
    if severity >= 4:
        return "Medium"
    return "Low"


def severity_profile(severity: float) -> Dict[str, float]:
    """Membership of the raw severity in each band; for display only."""
    universe = np.linspace(1.0, 10.0, 91)
    curves = {
        "Low": fuzz.trapmf(universe, [1, 1, 3, 4]),
        "Medium": fuzz.trapmf(universe, [3, 4, 5, 6]),
        "High": fuzz.trapmf(universe, [5, 6, 7, 8]),
        "Critical": fuzz.trapmf(universe, [7, 8, 10, 10]),
    }
    value = float(np.clip(severity, 1.0, 10.0))
    return {
        band: round(float(fuzz.interp_membership(universe, curve, value)), 2)
        for band, curve in curves.items()
    }


def detect_clusters(symptoms: List[str]) -> Dict[str, bool]:
    present = set(symptoms)
    return {name: bool(present.intersection(members)) for name, members in CLUSTERS.items()}


def _match_condition(clusters: Dict[str, bool], symptom_count: int, severity: float):
    """First matching rule wins. Returns (condition, confidence, forced_band, rule_text)."""
    if clusters["respiratory"] and clusters["fever"]:
        return "Possible Respiratory Infection", 85, None, "IF respiratory AND fever THEN respiratory infection"
    if clusters["gastrointestinal"] and symptom_count >= 2:
        return "Possible Gastrointestinal Issue", 80, None, "IF gastrointestinal AND 2+ symptoms THEN GI issue"
    if clusters["neurological"] and severity >= 6:
        return "Neurological Concern", 75, "High", "IF neurological AND severity >= 6 THEN neurological concern"
    if clusters["fever"] and symptom_count >= 3:
        return "Possible Viral/Bacterial Infection", 82, None, "IF fever AND 3+ symptoms THEN viral/bacterial infection"
    condition, confidence = DEFAULT_CONDITION
    return condition, confidence, None, "No specific pattern matched THEN general health concern"


def run_inference(user_data: Dict) -> Dict:
    symptoms = list(user_data.get("symptoms", []))
    severity = float(user_data.get("severity", 5))

    band = severity_band(severity)
    clusters = detect_clusters(symptoms)
    condition, confidence, forced_band, fired_rule = _match_condition(clusters, len(symptoms), severity)
    if forced_band:
        band = forced_band

    recommendations = list(BASE_RECOMMENDATIONS)
    if band == "Critical" or severity >= 8:
        recommendations.insert(0, URGENT_RECOMMENDATION)
    elif band == "High":
        recommendations.append(APPOINTMENT_RECOMMENDATION)

    suggested_tests: List[str] = []
    for cluster, tests in CLUSTER_TESTS.items():
        if clusters[cluster]:
            suggested_tests.extend(tests)

    present = set(symptoms)
    rule_trace = [
        {
            "rule": f"Symptoms include the {name} cluster",
            "strength": round(len(present.intersection(members)) / len(members), 2),
        }
        for name, members in CLUSTERS.items()
    ]
    rule_trace = [item for item in rule_trace if item["strength"] > 0]
    rule_trace.append({"rule": fired_rule, "strength": 1.0})

    logger.debug("Symptom check %s (severity=%s) -> %s / %s", symptoms, severity, condition, band)

    return {
        "condition": condition,
        "severity": band,
        "confidence": confidence,
        "description": (
            "Based on your symptoms and severity level, this appears to be a "
            f"{band.lower()} priority health concern."
        ),
        "recommendations": recommendations,
        "suggested_tests": suggested_tests,
        "lifestyle": list(LIFESTYLE_TIPS),
        "rule_trace": rule_trace,
        "severity_profile": severity_profile(severity),
    }


def build_record(user_data: Dict, result: Dict) -> Dict:
    return {
        "id": new_record_id(),
        "date": now_iso(),
        "symptoms": list(user_data.get("symptoms", [])),
        "severity": user_data.get("severity"),
        "emotionalState": user_data.get("emotional_state"),
        "duration": user_data.get("duration", ""),
        "prediction": result["condition"],
        "recommendations": list(result["recommendations"]),
    }
