"""
Tests for the file-backed state store and its error boundaries.
Every test gets its own temp home; nothing touches ~/.claude.
"""

import json
import os
import tempfile

from ember.state import (
    StateStore, MoodState, FeedbackEntry, LearningEntry, SessionContext,
    normalize_task_type,
)


def _fresh():
    tmp = tempfile.mkdtemp()
    return StateStore(tmp), tmp


# ── Mood record ───────────────────────────────────────────

def test_missing_pet_state_is_uninitialized():
    store, _ = _fresh()
    assert store.load_mood() is None


def test_corrupt_pet_state_is_uninitialized():
    store, _ = _fresh()
    store.pet_state_path.write_text("{not json", encoding="utf-8")
    assert store.load_mood() is None
    store.pet_state_path.write_text("[1, 2, 3]", encoding="utf-8")
    assert store.load_mood() is None


def test_reads_hooks_written_state():
    """camelCase files from the hooks side load; stored health is ignored."""
    store, _ = _fresh()
    store.pet_state_path.write_text(json.dumps({
        "name": "Ember", "hunger": 50, "energy": 75, "happiness": 80,
        "cleanliness": 70, "health": 12, "currentMood": "exhausted",
        "claudeBehaviorScore": 90, "recentViolations": 2,
        "thoughtHistory": ["All is well"], "currentThought": "Ready to help!",
    }), encoding="utf-8")
    state = store.load_mood()
    assert state.behavior_score == 90
    assert state.recent_violations == 2
    assert state.current_thought == "Ready to help!"

    store.save_mood(state)
    saved = json.loads(store.pet_state_path.read_text(encoding="utf-8"))
    assert saved["health"] == 68.75
    assert saved["currentMood"] == "okay"
    assert saved["claudeBehaviorScore"] == 90


def test_save_mood_overwrites_wholesale():
    store, _ = _fresh()
    assert store.save_mood(MoodState(name="Cinder")) is True
    assert store.save_mood(MoodState(name="Ember", happiness=10)) is True
    state = store.load_mood()
    assert state.name == "Ember"
    assert state.happiness == 10


# ── Session record ────────────────────────────────────────

def test_session_defaults_and_persists_on_first_read():
    store, _ = _fresh()
    session = store.load_session()
    assert session.task_type is None
    assert session.recent_actions == []
    assert store.session_path.exists()
    assert store.load_session().start_time == session.start_time


def test_update_session_merges_and_normalizes():
    store, _ = _fresh()
    store.update_session(task_type="testing", current_task="Build dashboard")
    store.update_session(task_type="qa")
    session = store.load_session()
    assert session.task_type == "unknown"
    assert session.current_task == "Build dashboard"


def test_session_file_with_bad_task_type():
    store, _ = _fresh()
    store.session_path.write_text(json.dumps({"taskType": "Chaos", "startTime": 5}), encoding="utf-8")
    session = store.load_session()
    assert session.task_type == "unknown"
    assert session.start_time == 5


def test_recent_actions_bounded():
    session = SessionContext()
    for i in range(25):
        session.record_action(f"Write {i}")
    assert len(session.recent_actions) == 10
    assert session.recent_actions[-1] == "Write 24"


def test_normalize_task_type():
    assert normalize_task_type(None) is None
    assert normalize_task_type("Development") == "development"
    assert normalize_task_type("monitoring ") == "monitoring"
    assert normalize_task_type("deploying") == "unknown"


# ── Logs ──────────────────────────────────────────────────

def test_feedback_log_appends_in_order():
    store, _ = _fresh()
    store.append_feedback(FeedbackEntry(action="Write a", success=True, ember_feedback="ok"))
    store.append_feedback(FeedbackEntry(action="Write b", success=False, ember_feedback="no", quality_score=40))
    entries = store.read_feedback()
    assert [e.action for e in entries] == ["Write a", "Write b"]
    assert entries[1].quality_score == 40
    assert [e.action for e in store.read_feedback(limit=1)] == ["Write b"]
    assert store.read_feedback(limit=0) == []


def test_optional_quality_score_omitted_on_disk():
    store, _ = _fresh()
    store.append_feedback(FeedbackEntry(action="Write", success=True, ember_feedback="ok"))
    line = store.feedback_path.read_text(encoding="utf-8").strip()
    assert "qualityScore" not in json.loads(line)


def test_corrupt_log_lines_skipped():
    store, _ = _fresh()
    store.append_learning(LearningEntry(pattern="mock_data", user_correction="a",
                                        score_adjustment=-2.0, context="ctx"))
    with open(store.learning_path, "a", encoding="utf-8") as f:
        f.write("garbage\n\n")
    store.append_learning(LearningEntry(pattern="poc_code", user_correction="b",
                                        score_adjustment=0.0, context="other"))
    entries = store.read_learning()
    assert [e.pattern for e in entries] == ["mock_data", "poc_code"]


def test_missing_logs_are_empty():
    store, _ = _fresh()
    assert store.read_feedback() == []
    assert store.read_learning() == []


def test_write_failure_returns_false():
    """Home path occupied by a file: writes fail softly, reads stay empty."""
    tmp = tempfile.mkdtemp()
    blocker = os.path.join(tmp, "not-a-dir")
    with open(blocker, "w") as f:
        f.write("x")
    store = StateStore(blocker)
    assert store.save_mood(MoodState()) is False
    assert store.append_feedback(FeedbackEntry(action="a", success=True, ember_feedback="b")) is False
    assert store.append_learning(LearningEntry(pattern="p", user_correction="c",
                                               score_adjustment=0.0, context="x")) is False
    assert store.load_mood() is None
    assert store.read_learning() == []
    # Session still usable in memory
    assert store.load_session().recent_actions == []
