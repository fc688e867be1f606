"""Tests for the storybook command line."""

import json
from pathlib import Path

import pytest

from storybook import __version__
from storybook.cli.main import app
from storybook.config import StorybookSettings, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Point log handlers back at the real stderr once the runner closes its streams."""
    yield
    configure_logging(StorybookSettings())


@pytest.fixture
def manuscript(tmp_path):
    """Write a story to a temporary file and return its path."""

    def write(text, name="story.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return write


class TestVersion:
    """Test the version command."""

    def test_plain(self, runner, clean_output):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert f"Storybook v{__version__}" in clean_output(result.stdout)

    def test_json(self, runner):
        result = runner.invoke(app, ["version", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["version"] == __version__
        assert "characters" in data["analyzers"]


class TestAnalyzerCommands:
    """Test each analyzer command end to end."""

    def test_characters_json(self, runner, manuscript, kitchen_story):
        result = runner.invoke(app, ["characters", manuscript(kitchen_story), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert {c["name"] for c in data["characters"]} == {"Alice", "Bob"}
        assert "continuityErrors" in data

    def test_characters_filter(self, runner, manuscript, kitchen_story):
        result = runner.invoke(
            app, ["characters", manuscript(kitchen_story), "-C", "Bob", "--json"]
        )
        data = json.loads(result.stdout)
        assert [c["name"] for c in data["characters"]] == ["Bob"]

    def test_characters_table(self, runner, manuscript, kitchen_story, clean_output):
        result = runner.invoke(app, ["characters", manuscript(kitchen_story)])
        assert result.exit_code == 0
        output = clean_output(result.stdout)
        assert "Characters" in output
        assert "Alice" in output

    def test_events_json(self, runner, manuscript, missing_return_story):
        result = runner.invoke(
            app, ["events", manuscript(missing_return_story), "--json"]
        )
        assert result.exit_code == 0
        assert "eventChain" in json.loads(result.stdout)

    def test_emotions_with_delimiter(self, runner, manuscript, three_scene_story):
        result = runner.invoke(
            app, ["emotions", manuscript(three_scene_story), "-d", "***", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["scenes"]) == 3
        assert data["emotionalArc"]["overallTrend"] == "rising"

    def test_dialogue_focus(self, runner, manuscript, dialogue_story):
        result = runner.invoke(
            app, ["dialogue", manuscript(dialogue_story), "--focus", "alice", "--json"]
        )
        assert result.exit_code == 0
        segments = json.loads(result.stdout)["dialogueSegments"]
        assert [s["speaker"] for s in segments] == ["Alice"]

    def test_repetitions_from_stdin(self, runner, shadow_story):
        result = runner.invoke(app, ["repetitions", "--json"], input=shadow_story)
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["repeatedPhrases"][0]["term"] == "the shadow"

    def test_analyze(self, runner, manuscript, kitchen_story, clean_output):
        result = runner.invoke(app, ["analyze", manuscript(kitchen_story)])
        assert result.exit_code == 0
        output = clean_output(result.stdout)
        assert "Manuscript Summary" in output
        assert "Characters: 2" in output

    def test_analyze_json(self, runner, manuscript, kitchen_story):
        result = runner.invoke(app, ["analyze", manuscript(kitchen_story), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["summary"]["characterCount"] == 2

    def test_missing_file(self, runner, tmp_path, clean_output):
        result = runner.invoke(app, ["characters", str(tmp_path / "absent.txt")])
        assert result.exit_code == 1
        assert "File not found" in clean_output(result.stdout)

    def test_file_not_utf8(self, runner, tmp_path, clean_output):
        path = tmp_path / "latin.txt"
        path.write_bytes(b"\xff\xfe\xfa caf\xe9")
        result = runner.invoke(app, ["characters", str(path)])
        assert result.exit_code == 1
        output = " ".join(clean_output(result.stdout).split())
        assert "Validation Error" in output
        assert "UTF-8" in output

    def test_unreadable_file(self, runner, manuscript, monkeypatch, clean_output):
        path = manuscript("Alice waited.")
        read_text = Path.read_text

        def denied(self, *args, **kwargs):
            if self == Path(path):
                raise PermissionError(13, "Permission denied")
            return read_text(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_text", denied)
        result = runner.invoke(app, ["events", path])
        assert result.exit_code == 1
        assert "Permission denied" in " ".join(clean_output(result.stdout).split())


class TestSynonymsCommand:
    """Test the synonyms command."""

    def test_json(self, runner):
        result = runner.invoke(
            app, ["synonyms", "walked", "--context", "She walked home.", "--json"]
        )
        assert result.exit_code == 0
        suggestions = json.loads(result.stdout)
        assert suggestions
        assert suggestions[0]["synonyms"][0] == "walked"

    def test_unknown_term(self, runner, clean_output):
        result = runner.invoke(app, ["synonyms", "xylophone"])
        assert result.exit_code == 0
        assert "No synonyms known" in clean_output(result.stdout)


class TestSimulateCommand:
    """Test the reader simulation command."""

    def test_options_profile(self, runner, manuscript, three_scene_story):
        result = runner.invoke(
            app,
            [
                "simulate",
                manuscript(three_scene_story),
                "--age",
                "16",
                "--education",
                "secondary",
                "--speed",
                "fast",
                "--json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["reader_profile"]["age"] == 16
        assert len(data["reading_timeline"]) == 5

    def test_profile_file(self, runner, manuscript, tmp_path, kitchen_story):
        profile = tmp_path / "reader.yaml"
        profile.write_text(
            "age: 40\neducationLevel: postgraduate\nreadingSpeed: slow\n"
            "attentionSpan: long\nlanguage_proficiency: advanced\n"
        )
        result = runner.invoke(
            app,
            ["simulate", manuscript(kitchen_story), "--profile", str(profile), "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["reader_profile"]["educationLevel"] == "postgraduate"

    def test_invalid_profile(self, runner, manuscript, kitchen_story):
        result = runner.invoke(
            app, ["simulate", manuscript(kitchen_story), "--age", "3", "--json"]
        )
        assert result.exit_code == 1
        error = json.loads(result.stdout)
        assert error["success"] is False
        assert error["error_type"] == "ValidationError"

    def test_profile_must_be_mapping(self, runner, manuscript, tmp_path, kitchen_story):
        profile = tmp_path / "reader.yaml"
        profile.write_text("- just\n- a list\n")
        result = runner.invoke(
            app, ["simulate", manuscript(kitchen_story), "-p", str(profile), "--json"]
        )
        assert result.exit_code == 1
        assert "must be a mapping" in json.loads(result.stdout)["error"]

    def test_plain_output(self, runner, manuscript, kitchen_story, clean_output):
        result = runner.invoke(app, ["simulate", manuscript(kitchen_story)])
        assert result.exit_code == 0
        assert "Reading Simulation" in clean_output(result.stdout)


class TestGlobalOptions:
    """Test options handled by the main callback."""

    def test_config_file(self, runner, manuscript, tmp_path, shadow_story):
        config = tmp_path / "storybook.yaml"
        config.write_text("repetition_window: 5\n")
        result = runner.invoke(
            app,
            ["--config", str(config), "repetitions", manuscript(shadow_story), "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["statistics"]["totalRepetitions"] == 0

    def test_missing_config(self, runner, tmp_path, clean_output):
        result = runner.invoke(
            app, ["--config", str(tmp_path / "absent.yaml"), "version"]
        )
        assert result.exit_code == 1
        assert "Failed to load configuration" in clean_output(result.stdout)

    def test_verbose(self, runner, monkeypatch):
        monkeypatch.setenv("STORYBOOK_LOG_LEVEL", "WARNING")
        result = runner.invoke(app, ["--verbose", "version"])
        assert result.exit_code == 0

    def test_help_lists_commands(self, runner, clean_output):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        output = clean_output(result.stdout)
        for command in ("analyze", "characters", "simulate", "synonyms", "mcp"):
            assert command in output


class TestMcpCommand:
    """Test the MCP server command without starting a transport."""

    def test_keyboard_interrupt_exits_cleanly(self, runner, monkeypatch):
        def interrupted():
            raise KeyboardInterrupt

        monkeypatch.setattr("storybook.mcp.server.main", interrupted)
        result = runner.invoke(app, ["mcp"])
        assert result.exit_code == 0

    def test_failure_exits_with_error(self, runner, monkeypatch):
        def broken():
            raise RuntimeError("transport closed")

        monkeypatch.setattr("storybook.mcp.server.main", broken)
        result = runner.invoke(app, ["mcp"])
        assert result.exit_code == 1
