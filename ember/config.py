"""
Ember Configuration
Every setting in one place. Paths, provider, thresholds.
"""

import os
from pathlib import Path

# ── Identity ─────────────────────────────────────────────
SERVER_NAME = "ember-mcp-enhanced"
SERVER_VERSION = "2.5.0"
PET_NAME = "Ember"

# ── Paths ────────────────────────────────────────────────
EMBER_HOME = Path(os.environ.get("EMBER_HOME", Path.home() / ".claude" / "pets"))
PET_STATE_FILE = "claude-pet-state.json"
FEEDBACK_LOG = "ember-feedback.jsonl"
LEARNING_LOG = "ember-learning.jsonl"
SESSION_CONTEXT_FILE = "ember-session-context.json"

# ── Personality (text generation) ────────────────────────
PROVIDER = os.environ.get("EMBER_PROVIDER", "groq").lower()  # groq | anthropic | static
GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "")
GROQ_URL = os.environ.get("EMBER_GROQ_URL", "https://api.groq.com/openai/v1")
GROQ_MODEL = os.environ.get("EMBER_GROQ_MODEL", "openai/gpt-oss-120b")
ANTHROPIC_MODEL = os.environ.get("EMBER_ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
LLM_TIMEOUT = float(os.environ.get("EMBER_LLM_TIMEOUT", "30"))
LLM_TEMPERATURE = 0.8
LLM_MAX_TOKENS = 200

# ── Policy ───────────────────────────────────────────────
STRICT_MODE = os.environ.get("EMBER_STRICT_MODE", "").lower() in ("1", "true", "yes", "on")
WARN_THRESHOLD = 5.0
BLOCK_THRESHOLD = 8.0
MIN_SCORE = 0.0
MAX_SCORE = 10.0

# ── Session ──────────────────────────────────────────────
TASK_TYPES = ("development", "testing", "monitoring", "refactoring", "unknown")
RECENT_ACTIONS_LIMIT = 10
THOUGHT_HISTORY_LIMIT = 10
