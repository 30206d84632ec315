"""
Ember CLI
=========
Command-line interface for Ember's policy checks and state.

Usage:
    ember serve                Start MCP server (default)
    ember check <action> [params] [context]
                               Score an action offline (exit 2 if blocked)
    ember mood                 Show Ember's current state
    ember stats                Learning statistics and session context
    ember init [name]          Create a fresh pet state
    ember doctor [--json]      Health check of the state directory
"""

import json
import sys


def main():
    args = sys.argv[1:]
    if not args:
        cmd_serve()
        return

    cmd = args[0].lower()
    rest = args[1:]

    commands = {
        "serve": cmd_serve,
        "check": cmd_check,
        "mood": cmd_mood,
        "stats": cmd_stats,
        "init": cmd_init,
        "doctor": cmd_doctor,
        "version": cmd_version,
        "--version": cmd_version,
        "help": cmd_help,
        "--help": cmd_help,
        "-h": cmd_help,
    }

    handler = commands.get(cmd)
    if handler:
        if "--help" in rest or "-h" in rest:
            cmd_help([])
            return
        handler(rest)
    else:
        print(f"Unknown command: {cmd}")
        cmd_help([])
        sys.exit(1)


def cmd_serve(args=None):
    """Start the MCP server (default behavior)."""
    from ember.server import run
    run()


def cmd_check(args=None):
    """Score an action against the policy without asking the model."""
    if not args:
        print("Usage: ember check <action> [params_json_or_text] [context]")
        sys.exit(1)

    from ember.scorer import check_violations
    from ember.state import StateStore

    action = args[0]
    params = args[1] if len(args) > 1 else None
    if params:
        try:
            params = json.loads(params)
        except ValueError:
            pass  # plain text is a valid blob
    context = args[2] if len(args) > 2 else ""

    store = StateStore()
    check = check_violations(action, params, context,
                             session=store.load_session(), learnings=store.read_learning())
    print(json.dumps(check.to_dict(), indent=2, ensure_ascii=False))
    if not check.valid:
        sys.exit(1)
    if check.should_block:
        sys.exit(2)


def cmd_mood(args=None):
    from ember.mood import snapshot
    from ember.state import StateStore

    snap = snapshot(StateStore().load_mood())
    if snap is None:
        print("Ember is initializing... (no pet state yet, run: ember init)")
        return
    print(json.dumps(snap, indent=2, ensure_ascii=False))


def cmd_stats(args=None):
    from ember.learning import learning_stats, summarize_feedback
    from ember.state import StateStore

    store = StateStore()
    stats = learning_stats(store.read_learning(), store.load_session())
    stats["feedback"] = summarize_feedback(store.read_feedback())
    print(json.dumps(stats, indent=2, ensure_ascii=False))


def cmd_init(args=None):
    from ember.state import StateStore, MoodState

    store = StateStore()
    if store.load_mood() is not None:
        print(f"Pet state already exists: {store.pet_state_path}")
        return
    state = MoodState(name=args[0]) if args else MoodState()
    if not store.save_mood(state):
        print(f"Could not write {store.pet_state_path}")
        sys.exit(1)
    print(f"{state.name} is lit. State: {store.pet_state_path}")


def cmd_doctor(args=None):
    from ember.doctor import run
    run(args)


def cmd_version(args=None):
    from ember.config import SERVER_VERSION
    print(f"Ember v{SERVER_VERSION}")


def cmd_help(args=None):
    print("""
Ember - production-only conscience keeper.

Server:
  ember serve                 Start MCP server (default if no command given)

Policy:
  ember check <action> [params] [context]
                              Score an action offline; exit 2 if blocked

State:
  ember mood                  Show Ember's current state
  ember stats                 Learning statistics and session context
  ember init [name]           Create a fresh pet state
  ember doctor [--json]       Health check of the state directory

  ember version               Print version
  ember help                  This message

Environment:
  EMBER_HOME          State directory (default ~/.claude/pets)
  EMBER_PROVIDER      groq | anthropic | static
  GROQ_API_KEY        Groq credentials
  EMBER_STRICT_MODE   1 to block warnings as well
""")


if __name__ == "__main__":
    main()
