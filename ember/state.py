"""
Ember State Store
=================
Four small files, no database:

  claude-pet-state.json        MoodState, overwritten wholesale
  ember-session-context.json   SessionContext, merged per key
  ember-feedback.jsonl         FeedbackEntry log, append-only
  ember-learning.jsonl         LearningEntry log, append-only

Files use the camelCase keys other Ember tooling writes, so a pet state
produced by the hooks side stays readable here.

Nothing in this module raises on bad disk state. Missing or corrupt records
read as uninitialized/empty, failed writes return False. Both get logged.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ember.config import (
    EMBER_HOME, PET_STATE_FILE, FEEDBACK_LOG, LEARNING_LOG,
    SESSION_CONTEXT_FILE, PET_NAME, TASK_TYPES, RECENT_ACTIONS_LIMIT,
)
from ember.log import log


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_task_type(value) -> Optional[str]:
    """None stays None. Anything outside the enumeration becomes 'unknown'."""
    if value is None:
        return None
    value = str(value).strip().lower()
    return value if value in TASK_TYPES else "unknown"


def _number(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# ── Records ─────────────────────────────────────────────────

@dataclass
class MoodState:
    name: str = PET_NAME
    hunger: float = 50
    energy: float = 75
    happiness: float = 75
    cleanliness: float = 70
    behavior_score: float = 100
    recent_violations: int = 0
    thought_history: list = field(default_factory=list)
    current_thought: str = "Ready to help!"

    @classmethod
    def from_dict(cls, data: dict) -> "MoodState":
        return cls(
            name=data.get("name") or PET_NAME,
            hunger=_number(data.get("hunger"), 50),
            energy=_number(data.get("energy"), 75),
            happiness=_number(data.get("happiness"), 75),
            cleanliness=_number(data.get("cleanliness"), 70),
            behavior_score=_number(data.get("claudeBehaviorScore"), 100),
            recent_violations=int(_number(data.get("recentViolations"), 0)),
            thought_history=list(data.get("thoughtHistory") or []),
            current_thought=data.get("currentThought") or "",
        )

    def to_dict(self) -> dict:
        # health and currentMood are written for other readers; Ember
        # itself always recomputes them (see ember.mood).
        from ember.mood import health, mood_label
        h = health(self)
        return {
            "name": self.name,
            "hunger": self.hunger,
            "energy": self.energy,
            "happiness": self.happiness,
            "cleanliness": self.cleanliness,
            "health": h,
            "currentMood": mood_label(h),
            "claudeBehaviorScore": self.behavior_score,
            "recentViolations": self.recent_violations,
            "thoughtHistory": list(self.thought_history),
            "currentThought": self.current_thought,
        }


@dataclass
class FeedbackEntry:
    action: str
    success: bool
    ember_feedback: str
    quality_score: Optional[float] = None
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackEntry":
        return cls(
            action=str(data.get("action") or ""),
            success=bool(data.get("success")),
            ember_feedback=str(data.get("emberFeedback") or ""),
            quality_score=data.get("qualityScore"),
            timestamp=int(_number(data.get("timestamp"), 0)),
        )

    def to_dict(self) -> dict:
        d = {
            "timestamp": self.timestamp,
            "action": self.action,
            "success": self.success,
            "emberFeedback": self.ember_feedback,
        }
        if self.quality_score is not None:
            d["qualityScore"] = self.quality_score
        return d


@dataclass
class LearningEntry:
    pattern: str
    user_correction: str
    score_adjustment: float
    context: str
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def from_dict(cls, data: dict) -> "LearningEntry":
        return cls(
            pattern=str(data.get("pattern") or ""),
            user_correction=str(data.get("userCorrection") or ""),
            score_adjustment=_number(data.get("scoreAdjustment"), 0.0),
            context=str(data.get("context") or ""),
            timestamp=int(_number(data.get("timestamp"), 0)),
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "pattern": self.pattern,
            "userCorrection": self.user_correction,
            "scoreAdjustment": self.score_adjustment,
            "context": self.context,
        }


@dataclass
class SessionContext:
    current_task: Optional[str] = None
    task_type: Optional[str] = None
    start_time: int = field(default_factory=now_ms)
    recent_actions: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SessionContext":
        return cls(
            current_task=data.get("currentTask"),
            task_type=normalize_task_type(data.get("taskType")),
            start_time=int(_number(data.get("startTime"), now_ms())),
            recent_actions=[str(a) for a in data.get("recentActions") or []],
        )

    def to_dict(self) -> dict:
        d = {"startTime": self.start_time, "recentActions": list(self.recent_actions)}
        if self.current_task is not None:
            d["currentTask"] = self.current_task
        if self.task_type is not None:
            d["taskType"] = self.task_type
        return d

    def record_action(self, action: str):
        self.recent_actions.append(action)
        self.recent_actions = self.recent_actions[-RECENT_ACTIONS_LIMIT:]


# ── Store ───────────────────────────────────────────────────

class StateStore:
    """File-backed store for the pet record, session record and both logs."""

    def __init__(self, home=None):
        self.home = Path(home) if home is not None else EMBER_HOME
        self.pet_state_path = self.home / PET_STATE_FILE
        self.session_path = self.home / SESSION_CONTEXT_FILE
        self.feedback_path = self.home / FEEDBACK_LOG
        self.learning_path = self.home / LEARNING_LOG

    # Raw JSON ------------------------------------------------

    def _read_json(self, path: Path) -> Optional[dict]:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Unreadable record %s: %s", path.name, e)
            return None
        if not isinstance(data, dict):
            log.warning("Record %s is not an object, ignoring", path.name)
            return None
        return data

    def _write_json(self, path: Path, data: dict) -> bool:
        try:
            self.home.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            return True
        except OSError as e:
            log.error("Failed to write %s: %s", path.name, e)
            return False

    def _append_line(self, path: Path, data: dict) -> bool:
        try:
            self.home.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(data) + "\n")
            return True
        except OSError as e:
            log.error("Failed to append to %s: %s", path.name, e)
            return False

    def _read_lines(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            log.warning("Unreadable log %s: %s", path.name, e)
            return []
        records = []
        for lineno, line in enumerate(raw.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except ValueError:
                log.warning("Skipping corrupt line %d in %s", lineno, path.name)
                continue
            if isinstance(record, dict):
                records.append(record)
        return records

    # Mood ----------------------------------------------------

    def load_mood(self) -> Optional[MoodState]:
        """The persisted pet state, or None when uninitialized."""
        data = self._read_json(self.pet_state_path)
        if data is None:
            return None
        return MoodState.from_dict(data)

    def save_mood(self, state: MoodState) -> bool:
        return self._write_json(self.pet_state_path, state.to_dict())

    # Session -------------------------------------------------

    def load_session(self) -> SessionContext:
        """The stored session. The first read starts (and saves) a fresh one."""
        data = self._read_json(self.session_path)
        if data is None:
            session = SessionContext()
            self.save_session(session)
            return session
        return SessionContext.from_dict(data)

    def save_session(self, session: SessionContext) -> bool:
        return self._write_json(self.session_path, session.to_dict())

    def update_session(self, **updates) -> SessionContext:
        """Merge updates into the stored session. Last write wins per key."""
        session = self.load_session()
        for key, value in updates.items():
            if key == "task_type":
                value = normalize_task_type(value)
            setattr(session, key, value)
        self.save_session(session)
        return session

    # Logs ----------------------------------------------------

    def append_feedback(self, entry: FeedbackEntry) -> bool:
        return self._append_line(self.feedback_path, entry.to_dict())

    def read_feedback(self, limit: int = None) -> list[FeedbackEntry]:
        records = self._read_lines(self.feedback_path)
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return [FeedbackEntry.from_dict(r) for r in records]

    def append_learning(self, entry: LearningEntry) -> bool:
        return self._append_line(self.learning_path, entry.to_dict())

    def read_learning(self) -> list[LearningEntry]:
        return [LearningEntry.from_dict(r) for r in self._read_lines(self.learning_path)]
