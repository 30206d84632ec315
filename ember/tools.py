"""
Ember Tool Registry
Single source of truth for all tool definitions and handlers.
The stdio server and the CLI both dispatch through call_tool().
"""

import json
from dataclasses import replace

from ember import learning, mood
from ember.config import STRICT_MODE
from ember.log import log
from ember.personality import Personality
from ember.scorer import check_violations, format_message
from ember.state import StateStore, MoodState, normalize_task_type


class Ember:
    """Everything a tool call needs: the store, the voice, the policy mode."""

    def __init__(self, store: StateStore = None, personality: Personality = None,
                 strict: bool = STRICT_MODE):
        self.store = store if store is not None else StateStore()
        self.personality = personality if personality is not None else Personality()
        self.strict = strict
        self.store.load_session()

    def say(self, prompt: str) -> str:
        return self.personality.respond(prompt, self.store.load_mood())

    def mutate_mood(self, change) -> bool:
        """Load (or create) the pet state, apply change, write it back."""
        state = self.store.load_mood() or MoodState()
        change(state)
        return self.store.save_mood(state)


TOOL_DEFS = [
    {
        "name": "ember_chat",
        "description": (
            "Have a free-form conversation with Ember. Ask for advice, discuss approaches, "
            "or just chat. Ember responds with personality and contextual awareness."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "Your message to Ember"},
            },
            "required": ["message"],
        },
    },
    {
        "name": "ember_check_violation",
        "description": (
            "Check if a planned action violates the production-only policy. "
            "Returns every matched rule with a context-aware score (0-10), inline "
            "suggestions, and a decision: under 5 passes, 5-8 warns, 8+ blocks."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "action": {"type": "string", "description": "The tool or action being performed (e.g., Write, Edit)"},
                "params": {"type": "object", "description": "Parameters of the action (e.g., file content, code)"},
                "context": {"type": "string", "description": "Current work context (what are you building?)"},
            },
            "required": ["action", "params", "context"],
        },
    },
    {
        "name": "ember_consult",
        "description": (
            "Consult Ember for advice on a decision. Ember provides perspective as conscience "
            "keeper, considering quality, production readiness, and best practices."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "question": {"type": "string", "description": "The question or decision you need guidance on"},
                "options": {"type": "array", "items": {"type": "string"}, "description": "Possible approaches or options to consider"},
                "context": {"type": "string", "description": "Additional context about the situation"},
            },
            "required": ["question"],
        },
    },
    {
        "name": "ember_get_feedback",
        "description": "Get Ember's assessment of recent work: behavioral feedback, quality trend, patterns noticed.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "timeframe": {
                    "type": "string",
                    "enum": ["last_action", "session", "recent"],
                    "description": "Timeframe for feedback",
                },
            },
            "required": ["timeframe"],
        },
    },
    {
        "name": "ember_learn_from_outcome",
        "description": (
            "Report an action outcome to Ember. Logged to the feedback history and "
            "reflected in Ember's mood."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "action": {"type": "string", "description": "What action was taken"},
                "success": {"type": "boolean", "description": "Whether the action was successful"},
                "outcome": {"type": "string", "description": "Brief description of the outcome"},
                "qualityScore": {"type": "number", "description": "Quality score 0-100 (optional)", "minimum": 0, "maximum": 100},
            },
            "required": ["action", "success", "outcome"],
        },
    },
    {
        "name": "ember_get_mood",
        "description": "Check Ember's current state, mood, and stats.",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "ember_feed_context",
        "description": (
            "Give Ember context about your current work (task, goal, taskType). "
            "taskType (development/testing/monitoring/refactoring) changes how strictly "
            "violations are scored for the rest of the session."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "context": {"type": "object", "description": "Context about current work (task, goal, progress, taskType)"},
            },
            "required": ["context"],
        },
    },
    {
        "name": "ember_learn_from_correction",
        "description": (
            "Tell Ember when you corrected or overrode its assessment. A wrong flag lowers "
            "future scores by 2.0 for actions containing the given context."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "originalViolationType": {"type": "string", "description": "The violation type that was flagged"},
                "userCorrection": {"type": "string", "description": "Why the user proceeded anyway or disagreed"},
                "wasCorrect": {"type": "boolean", "description": "Was Ember correct to flag it? (false = Ember was wrong)"},
                "context": {"type": "string", "description": "What was the actual context?"},
            },
            "required": ["originalViolationType", "userCorrection", "wasCorrect", "context"],
        },
    },
    {
        "name": "ember_get_learning_stats",
        "description": "Statistics on Ember's learning: corrections per violation type, total adjustments, session context.",
        "inputSchema": {"type": "object", "properties": {}},
    },
]

TOOL_NAMES = {t["name"] for t in TOOL_DEFS}


def _text(text: str) -> dict:
    return {"text": text}


def _json(data: dict) -> dict:
    return {"text": json.dumps(data, indent=2, ensure_ascii=False)}


def _error(text: str) -> dict:
    return {"text": text, "isError": True}


def _missing(args: dict, *keys) -> list[str]:
    return [k for k in keys if args.get(k) is None]


def call_tool(ember: Ember, name: str, args: dict) -> dict:
    """Dispatch a tool call. Returns MCP-format result dict."""
    args = args or {}

    if name == "ember_chat":
        message = args.get("message")
        if not message:
            return _error("message is required")
        return _text(ember.say(message))

    elif name == "ember_check_violation":
        return _check_violation(ember, args)

    elif name == "ember_consult":
        question = args.get("question")
        if not question:
            return _error("question is required")
        prompt = f'The assistant is consulting you: "{question}"'
        options = args.get("options")
        if options:
            listed = "\n".join(f"{i}. {o}" for i, o in enumerate(options, 1))
            prompt += f"\n\nOptions being considered:\n{listed}"
        if args.get("context"):
            prompt += f"\n\nContext: {args['context']}"
        prompt += "\n\nProvide your recommendation as conscience keeper, considering production quality and best practices."
        return _text(ember.say(prompt))

    elif name == "ember_get_feedback":
        timeframe = args.get("timeframe") or "recent"
        session = ember.store.load_session()
        entries = learning.select_feedback(ember.store, timeframe, session)
        summary = learning.summarize_feedback(entries)
        recent = json.dumps([e.to_dict() for e in entries])
        prompt = (
            f"The assistant is asking for feedback on {timeframe} work. Recent actions: {recent}. "
            "Provide assessment of quality, patterns noticed, and suggestions."
        )
        return _json({
            "feedback": ember.say(prompt),
            "recentActions": summary["count"],
            "qualityTrend": summary["successRatio"],
        })

    elif name == "ember_learn_from_outcome":
        missing = _missing(args, "action", "success", "outcome")
        if missing:
            return _error(f"Missing required field(s): {', '.join(missing)}")
        if not isinstance(args["success"], bool):
            return _error("success must be a boolean")
        action, success, outcome = str(args["action"]), args["success"], str(args["outcome"])
        quality = args.get("qualityScore")
        _, saved = learning.record_outcome(ember.store, action, success, outcome, quality)
        mood_saved = ember.mutate_mood(lambda s: mood.apply_outcome(s, action, success))
        prompt = (
            f"The assistant reports: {action} was {'successful' if success else 'unsuccessful'}. "
            f"Outcome: {outcome}."
        )
        if quality is not None:
            prompt += f" Quality score: {quality}%."
        prompt += " Acknowledge and provide brief insight if any patterns emerge."
        reply = ember.say(prompt)
        if not saved:
            reply += "\n(Outcome could not be saved; feedback history is read-only right now.)"
        if not mood_saved:
            reply += "\n(Mood could not be saved; pet state is read-only right now.)"
        return _text(reply)

    elif name == "ember_get_mood":
        snap = mood.snapshot(ember.store.load_mood())
        if snap is None:
            return _text("🔥 Ember is initializing...")
        snap["moodDescription"] = ember.say(
            "The assistant is checking in on you. How are you feeling right now? Brief status update."
        )
        return _json(snap)

    elif name == "ember_feed_context":
        context = args.get("context")
        if not isinstance(context, dict):
            return _error("context must be an object")
        updates = {}
        if context.get("taskType") is not None:
            updates["task_type"] = normalize_task_type(context["taskType"])
        task = context.get("task") or context.get("goal")
        if task:
            updates["current_task"] = str(task)
        if updates:
            ember.store.update_session(**updates)
        prompt = f"The assistant provides context update: {json.dumps(context, default=str)}. Acknowledge briefly."
        return _text(ember.say(prompt))

    elif name == "ember_learn_from_correction":
        missing = _missing(args, "originalViolationType", "userCorrection", "wasCorrect", "context")
        if missing:
            return _error(f"Missing required field(s): {', '.join(missing)}")
        category = str(args["originalViolationType"])
        correction = str(args["userCorrection"])
        was_correct = args["wasCorrect"]
        if not isinstance(was_correct, bool):
            return _error("wasCorrect must be a boolean")
        context = str(args["context"])
        entry, saved = learning.record_correction(ember.store, category, correction, was_correct, context)
        prompt = (
            f"The assistant corrected me: I flagged {category} but "
            f"{'I was right to do so' if was_correct else 'I was wrong'}. "
            f'User says: "{correction}". Context: {context}. Acknowledge and adjust my understanding.'
        )
        return _json({
            "learned": saved,
            "adjustment": entry.score_adjustment,
            "emberResponse": ember.say(prompt),
        })

    elif name == "ember_get_learning_stats":
        return _json(learning.learning_stats(ember.store.read_learning(), ember.store.load_session()))

    return _error(f"Unknown tool: {name}")


def _check_violation(ember: Ember, args: dict) -> dict:
    action = args.get("action")
    context = args.get("context") or ""
    session = ember.store.load_session()
    check = check_violations(action, args.get("params"), context,
                             session=session, learnings=ember.store.read_learning())
    if not check.valid:
        return _error(json.dumps(check.to_dict(), indent=2, ensure_ascii=False))

    if ember.strict and check.tier == "warning":
        # strict mode treats every warning as a block, message included
        check = replace(check, should_block=True, tier="block")
        check.message = format_message(check)
    result = check.to_dict()
    result["strictMode"] = ember.strict
    result["moodSaved"] = True

    session.record_action(str(action))
    ember.store.save_session(session)

    guidance = check.message
    if check.tier != "clean":
        primary = check.primary
        result["moodSaved"] = ember.mutate_mood(
            lambda s: mood.apply_violation(s, primary.type, check.should_block))
        log.info("Flagged %s: %s (%.1f/10)", action, primary.type, check.highest_score)
        prompt = (
            f"The assistant is about to {action}. I detected violations "
            f"(score: {check.highest_score:.1f}/10). "
            f"{'BLOCKED' if check.should_block else 'Warning issued'}. "
            f"Context: {context}. Provide brief encouragement or guidance."
        )
        guidance = ember.say(prompt)
    result["emberGuidance"] = guidance
    return _json(result)
