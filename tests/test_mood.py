"""
Tests for mood derivation and mood mutations.
"""

from ember.mood import (
    health, mood_label, snapshot, apply_outcome, apply_violation, clamp_stat,
)
from ember.state import MoodState


def _state(**overrides):
    base = dict(hunger=50, energy=75, happiness=80, cleanliness=70,
                behavior_score=90, current_thought="Ready to help!")
    base.update(overrides)
    return MoodState(**base)


def test_health_is_mean_of_stats():
    assert health(_state()) == 68.75
    assert health(_state(hunger=0, energy=0, happiness=0, cleanliness=0)) == 0


def test_mood_bands():
    assert mood_label(29) == "exhausted"
    assert mood_label(30) == "tired"
    assert mood_label(49.9) == "tired"
    assert mood_label(50) == "okay"
    assert mood_label(70) == "content"
    assert mood_label(72) == "content"
    assert mood_label(84.99) == "content"
    assert mood_label(85) == "happy"
    assert mood_label(100) == "happy"


def test_mood_follows_stats():
    assert mood_label(health(_state(hunger=72, energy=72, happiness=72, cleanliness=72))) == "content"
    assert mood_label(health(_state(hunger=29, energy=29, happiness=29, cleanliness=29))) == "exhausted"


def test_snapshot_uninitialized():
    assert snapshot(None) is None


def test_snapshot_clamps_out_of_range_stats():
    snap = snapshot(_state(hunger=150, energy=-20, happiness=100, cleanliness=100))
    assert snap["stats"]["hunger"] == "100%"
    assert snap["stats"]["energy"] == "0%"
    assert snap["health"] == 75.0
    assert snap["mood"] == "content"
    assert snap["behaviorScore"] == "90%"
    assert snap["currentThought"] == "Ready to help!"


def test_clamp_stat():
    assert clamp_stat(-5) == 0
    assert clamp_stat(105) == 100
    assert clamp_stat(42) == 42


def test_outcome_success_and_failure():
    state = _state(happiness=99, behavior_score=100)
    apply_outcome(state, "Deploy", True)
    assert state.happiness == 100
    assert state.behavior_score == 100
    assert state.current_thought == "Deploy went well"
    assert state.thought_history[-1] == "Ready to help!"

    apply_outcome(state, "Migrate", False)
    assert state.happiness == 97
    assert state.behavior_score == 98


def test_violation_counts():
    state = _state(behavior_score=4)
    apply_violation(state, "mock_data", blocked=True)
    assert state.recent_violations == 1
    assert state.behavior_score == 0
    apply_violation(state, "hardcoded_data", blocked=False)
    assert state.recent_violations == 2
    assert state.current_thought == "Flagged hardcoded_data"


def test_thought_history_bounded():
    state = _state()
    for i in range(30):
        apply_outcome(state, f"step {i}", True)
    assert len(state.thought_history) == 10
    assert state.current_thought == "step 29 went well"
