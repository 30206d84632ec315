"""
Learning from corrections and outcomes.

A correction is a fixed-size nudge: 0 when Ember was right to flag,
-2.0 when it was wrong. How far off the original score was doesn't matter.
Entries only touch future checks whose action text contains the tag.
"""

from ember.log import log
from ember.state import StateStore, LearningEntry, FeedbackEntry, SessionContext

WRONG_FLAG_ADJUSTMENT = -2.0
RECENT_LEARNINGS = 5

# timeframe -> how many feedback entries to look at (None = whole session)
FEEDBACK_WINDOWS = {"last_action": 1, "session": None, "recent": 10}
DEFAULT_FEEDBACK_WINDOW = 3


def correction_adjustment(was_correct: bool) -> float:
    return 0.0 if was_correct else WRONG_FLAG_ADJUSTMENT


def record_correction(store: StateStore, category: str, correction: str,
                      was_correct: bool, context: str) -> tuple[LearningEntry, bool]:
    """Append a learning entry. Returns (entry, persisted)."""
    entry = LearningEntry(
        pattern=category,
        user_correction=correction,
        score_adjustment=correction_adjustment(was_correct),
        context=context,
    )
    saved = store.append_learning(entry)
    log.info("Learned %s correction (%+.1f) for context %r", category, entry.score_adjustment, context)
    return entry, saved


def learning_stats(entries: list[LearningEntry], session: SessionContext) -> dict:
    patterns = {}
    for entry in entries:
        agg = patterns.setdefault(entry.pattern, {"count": 0, "totalAdjustment": 0.0})
        agg["count"] += 1
        agg["totalAdjustment"] += entry.score_adjustment
    return {
        "totalLearnings": len(entries),
        "patterns": patterns,
        "sessionContext": session.to_dict(),
        "recentLearnings": [e.to_dict() for e in entries[-RECENT_LEARNINGS:]],
    }


def record_outcome(store: StateStore, action: str, success: bool, outcome: str,
                   quality_score=None) -> tuple[FeedbackEntry, bool]:
    entry = FeedbackEntry(
        action=action,
        success=success,
        ember_feedback=outcome,
        quality_score=quality_score,
    )
    return entry, store.append_feedback(entry)


def select_feedback(store: StateStore, timeframe: str, session: SessionContext) -> list[FeedbackEntry]:
    """Feedback entries for a timeframe tag. Unknown tags get the last few."""
    if timeframe in FEEDBACK_WINDOWS:
        window = FEEDBACK_WINDOWS[timeframe]
        if window is None:
            return [e for e in store.read_feedback() if e.timestamp >= session.start_time]
        return store.read_feedback(limit=window)
    return store.read_feedback(limit=DEFAULT_FEEDBACK_WINDOW)


def summarize_feedback(entries: list[FeedbackEntry]) -> dict:
    successes = sum(1 for e in entries if e.success)
    return {
        "count": len(entries),
        "successRatio": successes / max(len(entries), 1) * 100,
    }
