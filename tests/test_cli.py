"""
Tests for the ember CLI.
Runs the real module in a subprocess against a temp EMBER_HOME.
"""

import json
import os
import subprocess
import sys
import tempfile


def _run(*args, home=None):
    env = dict(os.environ)
    env["EMBER_HOME"] = home or tempfile.mkdtemp()
    env["EMBER_PROVIDER"] = "static"
    return subprocess.run(
        [sys.executable, "-m", "ember.cli", *args],
        capture_output=True, text=True, env=env,
    )


def test_version():
    """ember --version prints version."""
    from ember.config import SERVER_VERSION
    result = _run("--version")
    assert result.returncode == 0
    assert SERVER_VERSION in result.stdout


def test_help_lists_commands():
    result = _run("--help")
    assert result.returncode == 0
    for cmd in ("serve", "check", "mood", "stats", "init", "doctor"):
        assert cmd in result.stdout


def test_subcommand_help():
    for cmd in ["check", "mood", "stats", "init", "doctor"]:
        result = _run(cmd, "--help")
        assert result.returncode == 0, f"{cmd} --help failed: {result.stderr}"


def test_unknown_subcommand():
    result = _run("nonexistent")
    assert result.returncode != 0


def test_check_blocks_with_exit_code():
    result = _run("check", "Write", '{"content": "const mockData = [1,2,3]"}', "dashboard")
    assert result.returncode == 2
    data = json.loads(result.stdout)
    assert data["shouldBlock"] is True
    assert data["violations"][0]["type"] == "mock_data"


def test_check_clean_text_params():
    result = _run("check", "Write", "const apiData = await fetch('/api/x')")
    assert result.returncode == 0
    assert json.loads(result.stdout)["hasViolations"] is False


def test_init_then_mood():
    home = tempfile.mkdtemp()
    before = _run("mood", home=home)
    assert "initializing" in before.stdout

    assert _run("init", "Cinder", home=home).returncode == 0
    data = json.loads(_run("mood", home=home).stdout)
    assert data["name"] == "Cinder"
    assert data["mood"] == "okay"


def test_stats_on_empty_home():
    data = json.loads(_run("stats").stdout)
    assert data["totalLearnings"] == 0
    assert data["feedback"] == {"count": 0, "successRatio": 0.0}
