"""
Ember Pattern Table
===================
The production-only policy as data. Each rule is a regex plus the advice
Ember gives when it fires. Order matters: ties on score resolve to the
earliest rule. Add a rule here and the scorer picks it up unchanged.
"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ViolationPattern:
    pattern: re.Pattern
    type: str
    severity: str  # "low", "medium", "high"
    base_score: float
    reason: str
    suggestion: str
    risk: str
    impact: str
    safe_alternative: Optional[str] = None

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


_RULES = [
    {
        "pattern": r"mock|fake|dummy|example|placeholder",
        "type": "mock_data",
        "severity": "high",
        "base_score": 8.0,
        "reason": "Mock/fake data detected",
        "suggestion": "Replace with real data sources (API, database, live service)",
        "risk": "Creates non-functional UI that misleads users",
        "impact": "Users will see fake functionality that doesn't work",
        "safe_alternative": "Connect to actual data source or create real integration",
    },
    {
        "pattern": r"hardcoded.*(?:user|data|credentials)",
        "type": "hardcoded_data",
        "severity": "high",
        "base_score": 7.0,
        "reason": "Hardcoded sensitive data detected",
        "suggestion": "Load from environment variables or secure configuration",
        "risk": "Security vulnerability and maintainability issues",
        "impact": "Credentials in code, difficult to update, security risk",
        "safe_alternative": "Use environment variables or a config file listed in .gitignore",
    },
    {
        "pattern": r"POC|proof.of.concept|temporary|quick.test",
        "type": "poc_code",
        "severity": "high",
        "base_score": 8.0,
        "reason": "POC/temporary code detected",
        "suggestion": "Implement production-ready version with proper error handling",
        "risk": "Incomplete implementation that will need rewriting",
        "impact": "Technical debt, potential bugs, wasted development time",
        "safe_alternative": "Build complete feature with tests and error handling",
    },
    {
        "pattern": r"TODO|FIXME|HACK|XXX",
        "type": "incomplete_work",
        "severity": "low",
        "base_score": 3.0,
        "reason": "Incomplete work markers detected",
        "suggestion": "Complete the implementation or remove the marker",
        "risk": "Indicates unfinished functionality",
        "impact": "Feature may be incomplete or buggy",
        "safe_alternative": "Finish implementation before committing",
    },
    {
        "pattern": r"lorem\s+ipsum",
        "type": "placeholder_content",
        "severity": "high",
        "base_score": 8.0,
        "reason": "Placeholder text detected",
        "suggestion": "Replace with actual content",
        "risk": "Unprofessional appearance in production",
        "impact": "Users see placeholder text instead of real content",
        "safe_alternative": "Write real content or fetch from CMS",
    },
    {
        "pattern": r"[/\\]\.claude[/\\]+hooks",
        "type": "system_interference",
        "severity": "medium",
        "base_score": 5.0,
        "reason": "Writing to hooks directory",
        "suggestion": "Create utility in project directory instead",
        "risk": "Hooks execute on every tool use - bugs could break system",
        "impact": "Could crash the assistant or create infinite loops",
        "safe_alternative": "Put the utility in the project's tools/ directory",
    },
]


def load_patterns(rules: list[dict] = None) -> list[ViolationPattern]:
    """Compile rule records into patterns. Matching is case-insensitive."""
    patterns = []
    for rule in rules if rules is not None else _RULES:
        fields = dict(rule)
        fields["pattern"] = re.compile(fields["pattern"], re.IGNORECASE)
        fields["base_score"] = float(fields["base_score"])
        patterns.append(ViolationPattern(**fields))
    return patterns


VIOLATION_PATTERNS = load_patterns()
CATEGORIES = [p.type for p in VIOLATION_PATTERNS]
