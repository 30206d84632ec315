"""
Ember Violation Scorer
======================
Pure computation over three inputs: the payload text, the session context,
and the learning log. No disk, no network.

    text  = action + params (as text) + context
    match = every rule in VIOLATION_PATTERNS found in text, in table order
    score = base
            - 2.0  development session, action names a util/tool/helper
            - 1.5  testing or monitoring session
            + sum of learning adjustments whose context tag is in the action
            clamped to [0, 10]

Learning tags match by plain substring, so a short tag like "test" also
hits "latest_report". That fuzziness is intended.
"""

import json
from dataclasses import dataclass, field
from typing import Optional

from ember.config import WARN_THRESHOLD, BLOCK_THRESHOLD, MIN_SCORE, MAX_SCORE
from ember.patterns import VIOLATION_PATTERNS, ViolationPattern
from ember.state import SessionContext, LearningEntry, normalize_task_type

DEVELOPMENT_DISCOUNT = 2.0
TESTING_DISCOUNT = 1.5
UTILITY_MARKERS = ("util", "tool", "helper")

CLEAN_MESSAGE = "✅ Ember: No violations detected - looks good!"


@dataclass
class ViolationDetail:
    type: str
    severity: str
    base_score: float
    context_score: float
    reason: str
    suggestion: str
    risk: str
    impact: str
    safe_alternative: Optional[str]
    should_block: bool

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "baseScore": self.base_score,
            "contextScore": self.context_score,
            "reason": self.reason,
            "suggestion": self.suggestion,
            "risk": self.risk,
            "impact": self.impact,
            "safeAlternative": self.safe_alternative,
            "shouldBlock": self.should_block,
        }


@dataclass
class ViolationCheck:
    violations: list = field(default_factory=list)
    highest_score: float = 0.0
    should_block: bool = False
    tier: str = "clean"
    message: str = CLEAN_MESSAGE
    valid: bool = True
    error: Optional[str] = None

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)

    @property
    def primary(self) -> Optional[ViolationDetail]:
        for v in self.violations:
            if v.context_score == self.highest_score:
                return v
        return None

    def to_dict(self) -> dict:
        d = {
            "valid": self.valid,
            "hasViolations": self.has_violations,
            "violations": [v.to_dict() for v in self.violations],
            "highestScore": self.highest_score,
            "shouldBlock": self.should_block,
            "tier": self.tier,
            "message": self.message,
        }
        if self.error:
            d["error"] = self.error
        return d


def serialize_params(params) -> str:
    """Parameter blob as matchable text. None is empty, strings pass through."""
    if params is None:
        return ""
    if isinstance(params, str):
        return params
    try:
        return json.dumps(params, default=str)
    except (TypeError, ValueError):
        return str(params)


def tier_for(score: float) -> str:
    if score >= BLOCK_THRESHOLD:
        return "block"
    if score >= WARN_THRESHOLD:
        return "warning"
    return "clean"


def context_score(
    base_score: float,
    action: str,
    task_type: Optional[str],
    learnings: list[LearningEntry] = (),
) -> float:
    score = base_score
    task_type = normalize_task_type(task_type)
    lowered = action.lower()

    if task_type == "development" and any(m in lowered for m in UTILITY_MARKERS):
        score -= DEVELOPMENT_DISCOUNT

    if task_type in ("testing", "monitoring"):
        score -= TESTING_DISCOUNT

    for entry in learnings:
        if entry.context and entry.context in action:
            score += entry.score_adjustment

    return max(MIN_SCORE, min(MAX_SCORE, score))


def _detail(vp: ViolationPattern, score: float) -> ViolationDetail:
    return ViolationDetail(
        type=vp.type,
        severity=vp.severity,
        base_score=vp.base_score,
        context_score=score,
        reason=vp.reason,
        suggestion=vp.suggestion,
        risk=vp.risk,
        impact=vp.impact,
        safe_alternative=vp.safe_alternative,
        should_block=score >= BLOCK_THRESHOLD,
    )


def format_message(check: ViolationCheck) -> str:
    primary = check.primary
    if primary is None or check.tier == "clean":
        return CLEAN_MESSAGE

    banner = "🚫 BLOCKED" if check.should_block else "⚠️  CAUTION"
    lines = [
        f"{banner} ({check.highest_score:.1f}/10): {primary.reason}",
        "",
        f"Issue: {primary.risk}",
        f"Impact: {primary.impact}",
        f"Suggestion: {primary.suggestion}",
    ]
    if primary.safe_alternative:
        lines.append(f"Safe alternative: {primary.safe_alternative}")
    lines.append("")
    if check.should_block:
        lines.append("This action has been blocked.")
    else:
        lines.append("Proceed with caution. This will be logged.")
    return "\n".join(lines)


def check_violations(
    action,
    params=None,
    context=None,
    session: SessionContext = None,
    learnings: list[LearningEntry] = (),
    patterns: list[ViolationPattern] = None,
) -> ViolationCheck:
    """Score a planned action against the pattern table.

    A missing action name is the one input we refuse; everything else
    degrades to empty text.
    """
    if action is None or not str(action).strip():
        return ViolationCheck(valid=False, error="action is required",
                              message="Invalid check: action is required")

    action = str(action)
    context = "" if context is None else str(context)
    task_type = session.task_type if session is not None else None
    search_text = f"{action} {serialize_params(params)} {context}"

    violations = []
    for vp in patterns if patterns is not None else VIOLATION_PATTERNS:
        if vp.matches(search_text):
            score = context_score(vp.base_score, action, task_type, learnings)
            violations.append(_detail(vp, score))

    check = ViolationCheck(violations=violations)
    if violations:
        check.highest_score = max(v.context_score for v in violations)
        check.should_block = check.highest_score >= BLOCK_THRESHOLD
        check.tier = tier_for(check.highest_score)
    check.message = format_message(check)
    return check
