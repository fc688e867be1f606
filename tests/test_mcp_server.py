"""Tests for the MCP server and its tools."""

import pytest
from mcp.server import FastMCP

from storybook import __version__
from storybook.config import StorybookSettings, set_settings
from storybook.mcp.server import create_server
from storybook.mcp.tools import register_analysis_tools, register_thinking_tools
from storybook.mcp.utils import format_error, format_success
from storybook.thinking import ThinkingSession


class ToolRecorder:
    """Stand-in server that keeps registered tool functions by name."""

    def __init__(self):
        self.tools = {}

    def tool(self, name=None, **_):
        def decorator(func):
            self.tools[name or func.__name__] = func
            return func

        return decorator


@pytest.fixture
def analysis_tools():
    recorder = ToolRecorder()
    register_analysis_tools(recorder)
    return recorder.tools


@pytest.fixture
def thinking_tool():
    recorder = ToolRecorder()
    session = ThinkingSession()
    register_thinking_tools(recorder, session)
    return recorder.tools["analyze-sequentially"], session


class TestServer:
    """Test server construction."""

    def test_create_server(self):
        assert isinstance(create_server(), FastMCP)

    async def test_registers_tools(self):
        tools = {tool.name for tool in await create_server().list_tools()}
        assert tools == {
            "analyze-characters",
            "analyze-events",
            "analyze-emotions",
            "analyze-dialogue",
            "analyze-manuscript",
            "analyze-repetitions",
            "suggest-alternatives",
            "simulate-reader",
            "health-check",
            "analyze-sequentially",
        }


class TestAnalysisTools:
    """Test the analyzer tools."""

    async def test_characters(self, analysis_tools, kitchen_story):
        result = await analysis_tools["analyze-characters"](kitchen_story)
        assert {c["name"] for c in result["characters"]} == {"Alice", "Bob"}

    async def test_emotions(self, analysis_tools, three_scene_story):
        result = await analysis_tools["analyze-emotions"](three_scene_story)
        assert len(result["scenes"]) == 3

    async def test_emotions_use_configured_delimiter(self, analysis_tools):
        set_settings(StorybookSettings(scene_delimiter="#"))
        text = "A happy morning.\n\n#\n\nA sad night."
        result = await analysis_tools["analyze-emotions"](text)
        assert len(result["scenes"]) == 2
        explicit = await analysis_tools["analyze-emotions"](text, scene_delimiter="***")
        assert len(explicit["scenes"]) == 1

    async def test_manuscript_uses_configured_delimiter(self, analysis_tools):
        set_settings(StorybookSettings(scene_delimiter="#"))
        text = "Alice smiled.\n\n#\n\nBob frowned."
        result = await analysis_tools["analyze-manuscript"](text)
        assert len(result["emotions"]["scenes"]) == 2

    async def test_dialogue(self, analysis_tools, dialogue_story):
        result = await analysis_tools["analyze-dialogue"](dialogue_story)
        assert result["statistics"]["totalSegments"] == 3

    async def test_events(self, analysis_tools, missing_return_story):
        result = await analysis_tools["analyze-events"](missing_return_story)
        assert "eventChain" in result

    async def test_manuscript(self, analysis_tools, kitchen_story):
        result = await analysis_tools["analyze-manuscript"](kitchen_story)
        assert result["summary"]["characterCount"] == 2

    async def test_repetitions(self, analysis_tools, shadow_story):
        result = await analysis_tools["analyze-repetitions"](shadow_story)
        assert result["statistics"]["totalRepetitions"] == 2

    async def test_suggest_alternatives(self, analysis_tools):
        text = "She walked to the gate. She walked to the well. She walked to the house."
        result = await analysis_tools["suggest-alternatives"](text)
        assert result["success"] is True
        assert result["terms"] == 1
        assert result["data"]["walked"][0]["synonyms"][0] == "walked"

    async def test_simulate_reader(self, analysis_tools, kitchen_story, reader_profile):
        result = await analysis_tools["simulate-reader"](kitchen_story, reader_profile)
        assert len(result["reading_timeline"]) == 2

    async def test_simulate_reader_rejects_bad_profile(
        self, analysis_tools, kitchen_story, reader_profile
    ):
        reader_profile["age"] = 3
        result = await analysis_tools["simulate-reader"](kitchen_story, reader_profile)
        assert result == {
            "success": False,
            "error": "Invalid reader demographics",
            "error_type": "ValidationError",
        }

    async def test_failure_is_reported(self, analysis_tools, monkeypatch):
        def explode(text, main_characters=None):
            raise RuntimeError("boom")

        monkeypatch.setattr("storybook.mcp.tools.analysis.analyze_characters", explode)
        result = await analysis_tools["analyze-characters"]("Alice ran.")
        assert result == {"success": False, "error": "boom", "error_type": "RuntimeError"}

    async def test_health_check(self, analysis_tools):
        result = await analysis_tools["health-check"]()
        assert result["status"] == "ok"
        assert result["version"] == __version__
        assert "reader" in result["analyzers"]


class TestThinkingTool:
    """Test the sequential analysis tool."""

    async def test_records_thought(self, thinking_tool):
        tool, session = thinking_tool
        result = await tool("Who wants the knife?", 1, 3, True)
        assert result["success"] is True
        assert result["data"]["thoughtNumber"] == 1
        assert result["currentBranch"] == "main"
        assert len(session.history()) == 1

    async def test_revision(self, thinking_tool):
        tool, session = thinking_tool
        await tool("Setup", 1, 3, True)
        await tool("Conflict", 2, 3, True)
        result = await tool(
            "Conflict, reconsidered", 3, 3, False, is_revision=True, revises_thought=2
        )
        assert result["currentBranch"] == "revision-1"
        assert result["branches"] == ["main", "revision-1"]

    async def test_out_of_order(self, thinking_tool):
        tool, _ = thinking_tool
        await tool("Setup", 2, 3, True)
        result = await tool("Earlier", 1, 3, True)
        assert result["success"] is False
        assert result["error_type"] == "ThoughtSequenceError"


class TestUtils:
    """Test response helpers."""

    def test_format_success(self):
        assert format_success([1], count=1) == {"success": True, "data": [1], "count": 1}

    def test_format_error(self):
        assert format_error(ValueError("bad")) == {
            "success": False,
            "error": "bad",
            "error_type": "ValueError",
        }
