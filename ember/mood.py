"""
Ember's mood: derived numbers and the few ways outcomes move them.

Health is never trusted from disk. It is the mean of the four stats,
recomputed on every read, and the mood label is a step function of it.
"""

from typing import Optional

from ember.config import THOUGHT_HISTORY_LIMIT
from ember.state import MoodState

# (upper bound, label); first bound the health falls under wins
MOOD_BANDS = [
    (30, "exhausted"),
    (50, "tired"),
    (70, "okay"),
    (85, "content"),
]
TOP_MOOD = "happy"


def clamp_stat(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def health(state: MoodState) -> float:
    return (state.hunger + state.energy + state.happiness + state.cleanliness) / 4


def mood_label(health_value: float) -> str:
    for bound, label in MOOD_BANDS:
        if health_value < bound:
            return label
    return TOP_MOOD


def clamped(state: MoodState) -> dict:
    """The four stats clamped to 0-100, plus the health derived from them.

    Stored values are not clamped; every reader of the 0-100 scale goes through here.
    """
    stats = {
        "hunger": clamp_stat(state.hunger),
        "energy": clamp_stat(state.energy),
        "happiness": clamp_stat(state.happiness),
        "cleanliness": clamp_stat(state.cleanliness),
    }
    stats["health"] = sum(stats.values()) / 4
    return stats


def snapshot(state: Optional[MoodState]) -> Optional[dict]:
    """Public view of the state, or None when uninitialized."""
    if state is None:
        return None
    stats = clamped(state)
    h = stats.pop("health")
    return {
        "name": state.name,
        "mood": mood_label(h),
        "stats": {**{k: f"{round(v)}%" for k, v in stats.items()}, "health": f"{round(h)}%"},
        "health": round(h, 1),
        "behaviorScore": f"{round(clamp_stat(state.behavior_score))}%",
        "recentViolations": state.recent_violations,
        "currentThought": state.current_thought,
    }


def _think(state: MoodState, thought: str):
    if state.current_thought:
        state.thought_history.append(state.current_thought)
        state.thought_history = state.thought_history[-THOUGHT_HISTORY_LIMIT:]
    state.current_thought = thought


def apply_outcome(state: MoodState, action: str, success: bool) -> MoodState:
    """A reported outcome nudges happiness and behavior score."""
    if success:
        state.happiness = clamp_stat(state.happiness + 2)
        state.behavior_score = clamp_stat(state.behavior_score + 1)
        _think(state, f"{action} went well")
    else:
        state.happiness = clamp_stat(state.happiness - 3)
        state.behavior_score = clamp_stat(state.behavior_score - 2)
        _think(state, f"{action} didn't land, watching closely")
    return state


def apply_violation(state: MoodState, category: str, blocked: bool) -> MoodState:
    """A flagged check counts against the behavior score."""
    state.recent_violations += 1
    state.behavior_score = clamp_stat(state.behavior_score - (5 if blocked else 2))
    verb = "Blocked" if blocked else "Flagged"
    _think(state, f"{verb} {category}")
    return state
