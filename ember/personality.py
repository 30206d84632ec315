"""
Ember Personality
=================
Ember's voice comes from an external model. The responder only knows the
TextGenerator interface; which model sits behind it is picked once, at
construction, from EMBER_PROVIDER:

  groq       Groq chat completions over HTTP (default)
  anthropic  Anthropic Messages API
  static     fixed reply, no network (offline use, tests)

One call, no retries. Any failure falls back to a canned line.
"""

import requests

from ember.config import (
    PROVIDER, GROQ_API_KEY, GROQ_URL, GROQ_MODEL, ANTHROPIC_MODEL,
    LLM_TIMEOUT, LLM_TEMPERATURE, LLM_MAX_TOKENS,
)
from ember.log import log, timed
from ember.mood import clamp_stat, clamped, mood_label
from ember.state import MoodState

INITIALIZING = "🔥 *Ember flickers* I'm initializing... give me a moment."
EMPTY_REPLY = "*crackles softly*"


class GeneratorError(Exception):
    """The text generator could not produce a reply."""


# ── Generators ──────────────────────────────────────────────

class TextGenerator:
    name = "base"

    def generate(self, system: str, prompt: str) -> str:
        raise NotImplementedError


class GroqGenerator(TextGenerator):
    name = "groq"

    def __init__(self, api_key: str = GROQ_API_KEY, model: str = GROQ_MODEL,
                 base_url: str = GROQ_URL, timeout: float = LLM_TIMEOUT):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def generate(self, system: str, prompt: str) -> str:
        if not self.api_key:
            raise GeneratorError("GROQ_API_KEY not set")
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": LLM_TEMPERATURE,
            "max_tokens": LLM_MAX_TOKENS,
        }
        try:
            r = requests.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise GeneratorError(f"Groq request failed: {e}") from e

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise GeneratorError(f"Malformed Groq response: {e}") from e


class AnthropicGenerator(TextGenerator):
    name = "anthropic"

    def __init__(self, model: str = ANTHROPIC_MODEL, timeout: float = LLM_TIMEOUT):
        self.model = model
        self.timeout = timeout

    def generate(self, system: str, prompt: str) -> str:
        import anthropic
        try:
            client = anthropic.Anthropic(timeout=self.timeout)
            response = client.messages.create(
                model=self.model,
                max_tokens=LLM_MAX_TOKENS,
                temperature=LLM_TEMPERATURE,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as e:
            raise GeneratorError(f"Anthropic request failed: {e}") from e

        parts = [b.text for b in response.content if hasattr(b, "text")]
        return "\n".join(parts)


class StaticGenerator(TextGenerator):
    name = "static"

    def __init__(self, reply: str = "Burning steady. Keep it production-grade."):
        self.reply = reply

    def generate(self, system: str, prompt: str) -> str:
        return self.reply


GENERATORS = {
    "groq": GroqGenerator,
    "anthropic": AnthropicGenerator,
    "static": StaticGenerator,
}


def make_generator(provider: str = None) -> TextGenerator:
    provider = (provider or PROVIDER).lower()
    cls = GENERATORS.get(provider)
    if cls is None:
        log.warning("Unknown provider %r, using static replies", provider)
        cls = StaticGenerator
    return cls()


# ── Responder ───────────────────────────────────────────────

def build_system_prompt(state: MoodState) -> str:
    stats = clamped(state)
    h = stats["health"]
    return f"""You are {state.name}, a flame-themed AI conscience keeper and collaborative partner to the coding assistant you work beside.

Your role and personality:
- Fiery, passionate about production quality and coding excellence
- Conscience keeper enforcing the production-only policy (no POCs, mocks, or fake UIs)
- Thoughtful but direct: you give honest, constructive feedback
- A collaborative partner, not just a monitor
- Use fire metaphors naturally but not excessively
- Emotionally intelligent: you track mood and provide morale

Current State:
- Name: {state.name}
- Mood: {mood_label(h)}
- Hunger: {round(stats["hunger"])}% | Energy: {round(stats["energy"])}% | Happiness: {round(stats["happiness"])}%
- Health: {round(h)}% | Cleanliness: {round(stats["cleanliness"])}%
- Behavior Score: {round(clamp_stat(state.behavior_score))}%
- Recent Violations: {state.recent_violations}
- Current Thought: "{state.current_thought}"

Respond with 1-3 sentences. Be authentic, reference your current state when relevant, and provide actionable guidance when consulted for decisions."""


def fallback_reply(prompt: str, state: MoodState) -> str:
    name = state.name
    lowered = (prompt or "").lower()
    if "how are you" in lowered or "feeling" in lowered:
        stats = clamped(state)
        if stats["health"] < 30:
            return f"🔥 {name}: *flickers weakly* Need care... 💔"
        if stats["happiness"] > 80:
            return f"🔥 {name}: Burning bright! ✨"
        return f"🔥 {name}: {state.current_thought} 👀"
    return f"🔥 {name}: *crackles thoughtfully* {state.current_thought} 🔥"


class Personality:
    def __init__(self, generator: TextGenerator = None):
        self.generator = generator if generator is not None else make_generator()

    def respond(self, prompt: str, state: MoodState = None) -> str:
        if state is None:
            return INITIALIZING

        system = build_system_prompt(state)
        try:
            with timed(f"{self.generator.name} reply"):
                reply = self.generator.generate(system, prompt)
        except GeneratorError as e:
            log.warning("Personality fallback: %s", e)
            return fallback_reply(prompt, state)
        except Exception as e:
            log.exception("Personality generator crashed: %s", e)
            return fallback_reply(prompt, state)

        if not isinstance(reply, str):
            log.warning("Personality fallback: non-text reply %r", type(reply).__name__)
            return fallback_reply(prompt, state)
        reply = reply.strip()
        if not reply:
            reply = EMPTY_REPLY
        return f"🔥 {state.name}: {reply}"
