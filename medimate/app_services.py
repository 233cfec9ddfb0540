from __future__ import annotations

import copy
import json
import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from yaml.loader import SafeLoader


logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
APP_DATA_DIR = Path(os.getenv("MEDIMATE_DATA_DIR", BASE_DIR / "app_data"))
SETTINGS_PATH = APP_DATA_DIR / "settings.yaml"

USER_KEY = "mediMateUser"
ACCOUNTS_KEY = "mediMateUsers"
HISTORY_KEY = "mediMateHistory"
FEEDBACK_KEY = "mediMateFeedback"

HISTORY_KINDS = ["symptoms", "reports", "quizzes", "skinAnalyses"]

FEEDBACK_CATEGORIES = [
    "General Feedback",
    "Symptom Checker",
    "Report Scanner",
    "Fun Activities",
    "User Experience",
    "Technical Issues",
    "Feature Request",
    "Other",
]

MIN_PASSWORD_LENGTH = 6


class FeedbackError(ValueError):
    """Raised when a feedback submission is incomplete or out of range."""


# -------------------------
# Settings
# -------------------------
def _default_settings() -> Dict:
    return {
        "storage": {"directory": str(APP_DATA_DIR / "storage")},
        "demo_account": {
            "enabled": True,
            "email": "demo@medimate.com",
            "name": "Demo User",
            "password": "demo123",
        },
        "simulated_latency": {
            "symptoms": 2.0,
            "reports": 3.0,
            "skin": 2.0,
            "feedback": 2.0,
        },
    }


def _normalize_settings(settings: Dict, path: Path) -> Dict:
    defaults = _default_settings()
    changed = False

    if not isinstance(settings, dict):
        settings = {}
        changed = True

    for section, section_defaults in defaults.items():
        if not isinstance(settings.get(section), dict):
            settings[section] = dict(section_defaults)
            changed = True
            continue
        for key, value in section_defaults.items():
            current = settings[section].get(key)
            if current is None or current == "" or not isinstance(current, type(value)):
                # ints are fine where floats are expected
                if isinstance(value, float) and isinstance(current, int) and not isinstance(current, bool):
                    settings[section][key] = float(current)
                else:
                    settings[section][key] = value
                changed = True

    if changed:
        with path.open("w", encoding="utf-8") as file_obj:
            yaml.safe_dump(settings, file_obj, sort_keys=False)

    return settings


def load_settings(path: Optional[Path] = None) -> Dict:
    """Read settings.yaml, creating it with defaults on first run."""
    path = Path(path) if path is not None else SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        with path.open("w", encoding="utf-8") as file_obj:
            yaml.safe_dump(_default_settings(), file_obj, sort_keys=False)
    with path.open("r", encoding="utf-8") as file_obj:
        settings = yaml.load(file_obj, Loader=SafeLoader) or {}
    return _normalize_settings(settings, path)


# -------------------------
# Key-value storage
# -------------------------
class MemoryStorage:
    """Dict-backed storage; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """One ``<key>.json`` file per key under ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


def parse_json_value(value, fallback):
    if value is None or value == "":
        return fallback
    try:
        return json.loads(value)
    except (TypeError, json.JSONDecodeError):
        logger.warning("Ignoring malformed stored value: %.60r", value)
        return fallback


def empty_history() -> Dict[str, List[Dict]]:
    return {kind: [] for kind in HISTORY_KINDS}


def _normalize_history(history) -> Dict[str, List[Dict]]:
    if not isinstance(history, dict):
        if history is not None:
            logger.warning("Stored history is not an object; starting empty.")
        return empty_history()
    normalized = {}
    for kind in HISTORY_KINDS:
        entries = history.get(kind)
        if not isinstance(entries, list):
            normalized[kind] = []
            continue
        normalized[kind] = [item for item in entries if isinstance(item, dict)]
        if len(normalized[kind]) != len(entries):
            logger.warning("Dropped %d malformed %s records.", len(entries) - len(normalized[kind]), kind)
    return normalized


def _normalize_user(user) -> Optional[Dict]:
    if not isinstance(user, dict):
        if user is not None:
            logger.warning("Stored user is not an object; treating as signed out.")
        return None
    if not {"id", "name", "email"} <= set(user.keys()):
        logger.warning("Stored user is missing identity fields; treating as signed out.")
        return None
    return user


def new_record_id(taken=()) -> str:
    """Millisecond timestamp id, bumped until it is not in ``taken``."""
    candidate = int(time.time() * 1000)
    taken = set(taken)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def now_iso() -> str:
    """UTC timestamp in the ``2024-05-01T10:00:00.000Z`` form."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _merge_settings(settings: Optional[Dict]) -> Dict:
    merged = _default_settings()
    for section, values in (settings or {}).items():
        if isinstance(merged.get(section), dict):
            if isinstance(values, dict):
                merged[section].update(values)
        else:
            merged[section] = values
    return merged


def validate_signup(name: str, email: str, password: str, confirm: str) -> Optional[str]:
    if not name.strip():
        return "Name is required"
    if not email.strip():
        return "Email is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if password != confirm:
        return "Passwords do not match"
    return None


# -------------------------
# User store
# -------------------------
class UserStore:
    """Current user, accounts, history and feedback on top of a storage object.

    Every mutation writes the whole affected blob back to storage before
    returning. History is device-wide and survives logout.
    """

    def __init__(self, storage, settings: Optional[Dict] = None):
        self.storage = storage
        self.settings = _merge_settings(settings)
        self.user: Optional[Dict] = None
        self.history: Dict[str, List[Dict]] = empty_history()

    def load(self) -> None:
        self.user = _normalize_user(parse_json_value(self.storage.get_item(USER_KEY), None))
        self.history = _normalize_history(parse_json_value(self.storage.get_item(HISTORY_KEY), None))
        logger.info(
            "Loaded state: user=%s, history sizes=%s",
            self.user["email"] if self.user else None,
            {kind: len(entries) for kind, entries in self.history.items()},
        )

    # ---------- accounts ----------
    def accounts(self) -> List[Dict]:
        accounts = parse_json_value(self.storage.get_item(ACCOUNTS_KEY), [])
        if not isinstance(accounts, list):
            logger.warning("Stored accounts collection is not a list; ignoring it.")
            return []
        return [item for item in accounts if isinstance(item, dict)]

    def _set_current_user(self, account: Dict) -> None:
        user = {key: value for key, value in account.items() if key != "password"}
        self.user = user
        self.storage.set_item(USER_KEY, json.dumps(user))

    def login(self, email: str, password: str) -> bool:
        email = email.strip()
        for account in self.accounts():
            if account.get("email") == email and account.get("password") == password:
                self._set_current_user(account)
                logger.info("User %s signed in", email)
                return True
        logger.info("Failed sign-in attempt for %s", email)
        return False

    def signup(self, name: str, email: str, password: str) -> bool:
        email = email.strip()
        accounts = self.accounts()
        if any(account.get("email") == email for account in accounts):
            logger.info("Signup rejected, email already registered: %s", email)
            return False

        account = {
            "id": new_record_id(account.get("id") for account in accounts),
            "name": name,
            "email": email,
            "password": password,
            "joinDate": now_iso(),
        }
        accounts.append(account)
        self.storage.set_item(ACCOUNTS_KEY, json.dumps(accounts))
        logger.info("Created account %s for %s", account["id"], email)
        self._set_current_user(account)
        return True

    def logout(self) -> None:
        if self.user:
            logger.info("User %s signed out", self.user.get("email"))
        self.user = None
        self.storage.remove_item(USER_KEY)

    def ensure_demo_account(self) -> bool:
        """Create the demo account from settings if enabled and missing."""
        demo = self.settings.get("demo_account", {})
        if not demo.get("enabled"):
            return False
        accounts = self.accounts()
        if any(account.get("email") == demo["email"] for account in accounts):
            return False
        accounts.append(
            {
                "id": new_record_id(account.get("id") for account in accounts),
                "name": demo["name"],
                "email": demo["email"],
                "password": demo["password"],
                "joinDate": now_iso(),
            }
        )
        self.storage.set_item(ACCOUNTS_KEY, json.dumps(accounts))
        logger.info("Seeded demo account %s", demo["email"])
        return True

    # ---------- history ----------
    def _append(self, kind: str, record: Dict) -> None:
        updated = copy.deepcopy(self.history)
        updated[kind] = updated[kind] + [record]
        self.storage.set_item(HISTORY_KEY, json.dumps(updated))
        self.history = updated
        logger.info("Appended %s record %s", kind, record.get("id"))

    def append_symptom(self, record: Dict) -> None:
        self._append("symptoms", record)

    def append_report(self, record: Dict) -> None:
        self._append("reports", record)

    def append_quiz(self, record: Dict) -> None:
        self._append("quizzes", record)

    def append_skin_analysis(self, record: Dict) -> None:
        self._append("skinAnalyses", record)

    # ---------- feedback ----------
    def feedback(self) -> List[Dict]:
        entries = parse_json_value(self.storage.get_item(FEEDBACK_KEY), [])
        return entries if isinstance(entries, list) else []

    def submit_feedback(self, name: str, email: str, category: str, rating, message: str) -> Dict:
        if not str(name).strip() or not str(email).strip() or not str(message).strip():
            raise FeedbackError("Please fill in your name, email and message.")
        if category not in FEEDBACK_CATEGORIES:
            raise FeedbackError("Please select a feedback category.")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise FeedbackError("Please choose a rating between 1 and 5 stars.")

        entries = self.feedback()
        entry = {
            "name": name,
            "email": email,
            "category": category,
            "rating": rating,
            "message": message,
            "id": new_record_id(item.get("id") for item in entries if isinstance(item, dict)),
            "timestamp": now_iso(),
        }
        entries.append(entry)
        self.storage.set_item(FEEDBACK_KEY, json.dumps(entries))
        logger.info("Stored feedback %s (%s, %d stars)", entry["id"], category, rating)
        return entry


def build_store(settings: Optional[Dict] = None) -> UserStore:
    """File-backed store for the app session, loaded and ready."""
    settings = settings or load_settings()
    store = UserStore(FileStorage(settings["storage"]["directory"]), settings)
    store.load()
    return store
