"""
Medical report scanner: MOCK analyzer.

No OCR and no parsing happen here. run_inference() ignores the uploaded file
and always returns the same canned blood-panel findings; only the file name is
echoed back. Upload validation is real and runs before the mock.
"""

from __future__ import annotations

import copy
import hashlib
import logging
from typing import Dict, List

from medimate.app_services import new_record_id, now_iso


logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/jpg", "application/pdf"}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class UploadRejected(ValueError):
    """The uploaded file has an unsupported type or is too large."""


MOCK_FINDINGS: List[Dict] = [
    {
        "parameter": "Total Cholesterol",
        "value": "220",
        "unit": "mg/dL",
        "normal_range": "< 200",
        "status": "high",
        "explanation": "Your cholesterol level is above the recommended range, which may increase your risk of heart disease.",
    },
    {
        "parameter": "HDL Cholesterol",
        "value": "45",
        "unit": "mg/dL",
        "normal_range": "40-60",
        "status": "normal",
        "explanation": "Your HDL (good) cholesterol is within the normal range, which is beneficial for heart health.",
    },
    {
        "parameter": "Blood Glucose",
        "value": "110",
        "unit": "mg/dL",
        "normal_range": "70-99",
        "status": "high",
        "explanation": "Your fasting glucose level is slightly elevated, which may indicate prediabetes.",
    },
    {
        "parameter": "Hemoglobin",
        "value": "13.5",
        "unit": "g/dL",
        "normal_range": "12.0-15.5",
        "status": "normal",
        "explanation": "Your hemoglobin level is normal, indicating healthy oxygen-carrying capacity.",
    },
]

MOCK_REPORT: Dict = {
    "test_type": "Complete Blood Panel",
    "overall_assessment": (
        "Your blood test shows some areas that need attention. While most values are normal, "
        "your cholesterol and glucose levels are slightly elevated."
    ),
    "recommendations": [
        "Adopt a heart-healthy diet low in saturated fats",
        "Increase physical activity to at least 150 minutes per week",
        "Monitor your blood sugar levels regularly",
        "Schedule a follow-up appointment with your doctor in 3 months",
        "Consider consulting a nutritionist for personalized dietary advice",
    ],
    "suggested_tests": [
        "HbA1c Test (for diabetes screening)",
        "Lipid Panel (follow-up in 3 months)",
        "Thyroid Function Test",
    ],
    "severity": "mild",
    "risk_factors": [
        "Elevated cholesterol may increase cardiovascular risk",
        "Slightly high glucose may indicate insulin resistance",
    ],
}


def get_inputs() -> List[Dict]:
    return [
        {
            "type": "file",
            "name": "report",
            "label": "Upload medical report",
            "unit": "",
            "help": "JPG, PNG or PDF up to 10MB.",
            "options": ["jpg", "jpeg", "png", "pdf"],
        }
    ]


def validate_upload(file_name: str, mime_type: str, size_bytes: int) -> None:
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UploadRejected("Please upload a valid image (JPG, PNG) or PDF file.")
    if size_bytes > MAX_UPLOAD_BYTES:
        raise UploadRejected("File size should be less than 10MB.")
    logger.debug("Accepted upload %s (%s, %d bytes)", file_name, mime_type, size_bytes)


def run_inference(file_name: str) -> Dict:
    """Mock analysis: same findings for every file."""
    result = copy.deepcopy(MOCK_REPORT)
    result["file_name"] = file_name
    result["key_findings"] = copy.deepcopy(MOCK_FINDINGS)
    return result


def build_record(file_name: str, result: Dict) -> Dict:
    return {
        "id": new_record_id(),
        "date": now_iso(),
        "fileName": file_name,
        "analysis": result["overall_assessment"],
        "recommendations": list(result["recommendations"]),
    }


def upload_fingerprint(file_name: str, data: bytes) -> str:
    """Identifies one upload; same-named files with different bytes differ."""
    digest = hashlib.sha256(data)
    digest.update(file_name.encode("utf-8"))
    return digest.hexdigest()
