from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd


ACTIVITY_LABELS = {
    "symptoms": "Symptom Check",
    "reports": "Report Analysis",
    "quizzes": "Health Quiz",
    "skinAnalyses": "Skin Analysis",
}

# Skin analyses have their own panel and do not count towards progress.
PROGRESS_KINDS = ["symptoms", "reports", "quizzes"]


def _records(history: Dict[str, List[Dict]], kind: str) -> List[Dict]:
    return [item for item in history.get(kind, []) if isinstance(item, dict)]


def _to_utc(values) -> pd.Series:
    """Naive timestamps are read as UTC; unreadable ones become NaT."""
    return pd.to_datetime(pd.Series(values, dtype="object"), format="mixed", errors="coerce", utc=True)


def activity_counts(history: Dict[str, List[Dict]]) -> Dict[str, int]:
    return {kind: len(history.get(kind, [])) for kind in ACTIVITY_LABELS}


def history_frame(history: Dict[str, List[Dict]], kind: str) -> pd.DataFrame:
    records = _records(history, kind)
    if not records:
        return pd.DataFrame(columns=["id", "date"])
    df = pd.DataFrame(records)
    if "date" not in df.columns:
        df["date"] = ""
    df["_dt"] = _to_utc(df["date"].tolist())
    return df.sort_values("_dt", ascending=False, na_position="last").drop(columns="_dt").reset_index(drop=True)


def recent_activity(history: Dict[str, List[Dict]], limit: int = 5) -> pd.DataFrame:
    rows = []
    for kind in PROGRESS_KINDS:
        for record in _records(history, kind):
            rows.append({"Activity": ACTIVITY_LABELS[kind], "date": record.get("date", "")})
    if not rows:
        return pd.DataFrame(columns=["Activity", "Date"])

    df = pd.DataFrame(rows)
    df["Date"] = _to_utc(df["date"].tolist())
    df = df.dropna(subset=["Date"]).sort_values("Date", ascending=False, kind="stable")
    return df[["Activity", "Date"]].head(limit).reset_index(drop=True)


def days_since_join(user: Optional[Dict], today: Optional[datetime] = None) -> int:
    if not user:
        return 0
    joined = _to_utc([user.get("joinDate", "")]).iloc[0]
    if pd.isna(joined):
        return 0
    now = pd.Timestamp(today or datetime.now(timezone.utc))
    if now.tzinfo is None:
        now = now.tz_localize("UTC")
    elapsed = (now - joined).total_seconds()
    return max(0, math.ceil(elapsed / 86400))


def wellness_progress(history: Dict[str, List[Dict]]) -> int:
    total = sum(len(history.get(kind, [])) for kind in PROGRESS_KINDS)
    return min(total * 10, 100)


def skin_score_trend(history: Dict[str, List[Dict]]) -> pd.DataFrame:
    records = _records(history, "skinAnalyses")
    if not records:
        return pd.DataFrame(columns=["Date", "Score", "Skin Type"])
    df = pd.DataFrame(
        {
            "Date": _to_utc([item.get("date", "") for item in records]),
            "Score": pd.to_numeric(pd.Series([item.get("score") for item in records]), errors="coerce"),
            "Skin Type": [item.get("skinType", "") for item in records],
        }
    )
    return df.dropna(subset=["Date", "Score"]).sort_values("Date").reset_index(drop=True)
