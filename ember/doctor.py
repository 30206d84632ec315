"""
Ember Doctor — health check for the state directory.
Checks: home directory, pet state, session context, both logs, voice provider.
"""

import json
import os
import sys

from ember.config import PROVIDER, GROQ_API_KEY, SERVER_VERSION
from ember.state import StateStore


def _check_record(path) -> dict:
    if not path.exists():
        return {"status": "missing", "path": str(path)}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        return {"status": "corrupt", "path": str(path), "error": str(e)}
    if not isinstance(data, dict):
        return {"status": "corrupt", "path": str(path), "error": "not a JSON object"}
    return {"status": "ok", "path": str(path)}


def _check_log(path) -> dict:
    if not path.exists():
        return {"status": "empty", "path": str(path), "entries": 0}
    good = bad = 0
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    json.loads(line)
                    good += 1
                except ValueError:
                    bad += 1
    except OSError as e:
        return {"status": "error", "path": str(path), "error": str(e)}
    return {"status": "ok" if not bad else "degraded", "path": str(path),
            "entries": good, "corrupt_lines": bad}


def check_all(home=None) -> dict:
    """Run all health checks. Returns dict with status and details.

    A missing pet state is reported but isn't unhealthy: Ember runs
    uninitialized until the first outcome or `ember init`.
    """
    store = StateStore(home)
    checks = {}
    healthy = True

    if store.home.is_dir():
        writable = os.access(store.home, os.W_OK)
        checks["home"] = {"status": "ok" if writable else "read-only", "path": str(store.home)}
        if not writable:
            healthy = False
    else:
        checks["home"] = {"status": "missing", "path": str(store.home)}

    checks["pet_state"] = _check_record(store.pet_state_path)
    checks["session"] = _check_record(store.session_path)
    checks["feedback_log"] = _check_log(store.feedback_path)
    checks["learning_log"] = _check_log(store.learning_path)
    for key in ("pet_state", "session"):
        if checks[key]["status"] == "corrupt":
            healthy = False

    voice = {"status": "ok", "provider": PROVIDER}
    if PROVIDER == "groq" and not GROQ_API_KEY:
        voice = {"status": "fallback", "provider": PROVIDER, "error": "GROQ_API_KEY not set"}
    elif PROVIDER == "anthropic" and not os.environ.get("ANTHROPIC_API_KEY"):
        voice = {"status": "fallback", "provider": PROVIDER, "error": "ANTHROPIC_API_KEY not set"}
    checks["voice"] = voice

    return {"healthy": healthy, "version": SERVER_VERSION, "checks": checks}


def run(args=None):
    """CLI entry: print report, exit 1 if unhealthy."""
    as_json = bool(args and "--json" in args)
    result = check_all()

    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(f"Ember Doctor v{result['version']}")
        for name, check in result["checks"].items():
            detail = check.get("error") or check.get("path", check.get("provider", ""))
            extra = f" ({check['entries']} entries)" if "entries" in check else ""
            print(f"  {name:<13} {check['status']:<10} {detail}{extra}")
        print("Healthy." if result["healthy"] else "Problems found.")

    sys.exit(0 if result["healthy"] else 1)
