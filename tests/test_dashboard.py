"""
Tests for dashboard summaries.
"""

import json
from datetime import datetime, timezone

from medimate.app_services import HISTORY_KEY, UserStore, empty_history, now_iso
from medimate.dashboard import (
    activity_counts,
    days_since_join,
    history_frame,
    recent_activity,
    skin_score_trend,
    wellness_progress,
)


def _history():
    history = empty_history()
    history["symptoms"] = [{"id": "1", "date": "2024-05-01T10:00:00.000"}]
    history["reports"] = [{"id": "2", "date": "2024-05-03T10:00:00.000"}]
    history["quizzes"] = [
        {"id": "3", "date": "2024-05-02T10:00:00.000"},
        {"id": "4", "date": "2024-05-04T10:00:00.000"},
    ]
    history["skinAnalyses"] = [
        {"id": "5", "date": "2024-05-05T10:00:00.000", "score": 70, "skinType": "Dry"},
        {"id": "6", "date": "2024-04-05T10:00:00.000", "score": 60, "skinType": "Oily"},
    ]
    return history


def test_activity_counts() -> None:
    assert activity_counts(_history()) == {"symptoms": 1, "reports": 1, "quizzes": 2, "skinAnalyses": 2}


def test_recent_activity_newest_first() -> None:
    frame = recent_activity(_history(), limit=3)
    assert list(frame["Activity"]) == ["Health Quiz", "Report Analysis", "Health Quiz"]


def test_recent_activity_empty() -> None:
    assert recent_activity(empty_history()).empty


def test_wellness_progress_ignores_skin_and_caps() -> None:
    assert wellness_progress(_history()) == 40
    history = empty_history()
    history["quizzes"] = [{"id": str(i)} for i in range(15)]
    assert wellness_progress(history) == 100


def test_days_since_join() -> None:
    user = {"joinDate": "2024-05-01T12:00:00.000"}
    assert days_since_join(user, today=datetime(2024, 5, 3, 13, 0)) == 3
    assert days_since_join(user, today=datetime(2024, 5, 1, 12, 0)) == 0
    assert days_since_join(None) == 0
    assert days_since_join({"joinDate": "not a date"}) == 0


def test_skin_score_trend_sorted_by_date() -> None:
    trend = skin_score_trend(_history())
    assert list(trend["Score"]) == [60, 70]
    assert list(trend["Skin Type"]) == ["Oily", "Dry"]


class TestMalformedHistory:
    """Odd records coming straight from storage must not break the page."""

    def test_records_without_dates(self) -> None:
        history = empty_history()
        history["symptoms"] = [{"id": "1", "prediction": "General Health Concern"}]

        frame = history_frame(history, "symptoms")

        assert list(frame["id"]) == ["1"]
        assert recent_activity(history).empty

    def test_non_object_records_are_skipped(self) -> None:
        history = empty_history()
        history["symptoms"] = [1, "x", {"id": "1", "date": "2024-05-01T10:00:00.000Z"}]
        history["skinAnalyses"] = ["bad", {"id": "2", "date": "2024-05-01T10:00:00.000Z", "score": 70}]

        assert list(recent_activity(history)["Activity"]) == ["Symptom Check"]
        assert list(history_frame(history, "symptoms")["id"]) == ["1"]
        assert list(skin_score_trend(history)["Score"]) == [70]

    def test_store_loaded_history_renders(self, storage) -> None:
        storage.set_item(
            HISTORY_KEY,
            json.dumps({"symptoms": [1, "x", {"id": "1"}], "reports": [], "quizzes": [], "skinAnalyses": []}),
        )
        store = UserStore(storage)
        store.load()

        assert recent_activity(store.history).empty
        assert list(history_frame(store.history, "symptoms")["id"]) == ["1"]


class TestTimezones:
    def test_history_frame_newest_first(self) -> None:
        history = empty_history()
        history["quizzes"] = [
            {"id": "old", "date": "2024-05-01T10:00:00.000"},
            {"id": "new", "date": "2024-05-02T10:00:00.000Z"},
            {"id": "broken", "date": "yesterday"},
        ]
        assert list(history_frame(history, "quizzes")["id"]) == ["new", "old", "broken"]

    def test_utc_join_date(self) -> None:
        """A Z-suffixed join date is measured against UTC now."""
        user = {"joinDate": "2024-05-01T23:30:00.000Z"}
        today = datetime(2024, 5, 2, 0, 30, tzinfo=timezone.utc)
        assert days_since_join(user, today=today) == 1

    def test_offset_join_date(self) -> None:
        user = {"joinDate": "2024-05-02T01:30:00.000+02:00"}
        today = datetime(2024, 5, 1, 23, 30, tzinfo=timezone.utc)
        assert days_since_join(user, today=today) == 0

    def test_join_date_from_now_iso(self) -> None:
        assert days_since_join({"joinDate": now_iso()}) in (0, 1)
