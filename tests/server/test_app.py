from __future__ import annotations

import asyncio
import logging
import types
from dataclasses import replace

import pytest
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from fixtures import make_wire_question
from quizaurus import config as config_mod
from quizaurus.server import app as app_mod


@pytest.fixture
def cfg() -> config_mod.QuizaurusConfig:
    return config_mod.load_config(env={})


def _tools(server: FastMCP):
    return {tool.name: tool for tool in asyncio.run(server.list_tools())}


def test_build_server_applies_settings(cfg):
    server = app_mod.build_server(cfg)

    assert server.name == "quizaurus-server"
    assert server.settings.port == 8000
    assert server.settings.streamable_http_path == "/mcp"
    assert server.settings.json_response is True
    assert server.settings.stateless_http is True
    assert server._mcp_server.version == "1.0.0"


def test_each_build_is_independent(cfg):
    first = app_mod.build_server(cfg)
    second = app_mod.build_server(cfg)

    assert first is not second
    assert set(_tools(first)) == set(_tools(second))


def test_tools_are_registered_with_metadata(cfg):
    tools = _tools(app_mod.build_server(cfg))

    render = tools["render-quiz"]
    assert render.title == "Render Quiz"
    assert render.meta == {
        "openai/outputTemplate": "ui://widget/interactive-quiz.html"
    }
    properties = render.inputSchema["properties"]
    assert set(properties) == {"topic", "difficulty", "questions"}
    assert properties["difficulty"]["default"] == "medium"
    assert properties["difficulty"]["enum"] == ["easy", "medium", "hard"]
    assert set(render.inputSchema["required"]) == {"topic", "questions"}

    score = tools["score-quiz-results"]
    assert score.title == "Prepare quiz results"
    assert set(score.inputSchema["properties"]) == {
        "correctAnswersCount",
        "totalQuestionsCount",
    }


def test_configured_default_difficulty_and_widget_uri(cfg):
    cfg = replace(
        cfg,
        quiz=replace(cfg.quiz, default_difficulty="hard"),
        widget=replace(cfg.widget, uri="ui://widget/custom.html"),
    )
    render = _tools(app_mod.build_server(cfg))["render-quiz"]

    assert render.inputSchema["properties"]["difficulty"]["default"] == "hard"
    assert render.meta["openai/outputTemplate"] == "ui://widget/custom.html"


def test_call_render_quiz(cfg):
    server = app_mod.build_server(cfg)

    result = asyncio.run(
        server.call_tool(
            "render-quiz",
            {
                "topic": "Rivers",
                "questions": [make_wire_question(), {"question": "bad"}],
            },
        )
    )

    assert result.structuredContent["difficulty"] == "medium"
    assert len(result.structuredContent["questions"]) == 1
    assert result.meta == {"openai/locale": "en"}


def test_render_quiz_drops_non_object_entries(cfg):
    server = app_mod.build_server(cfg)

    result = asyncio.run(
        server.call_tool(
            "render-quiz",
            {
                "topic": "Rivers",
                "questions": [make_wire_question(), "oops", None, 7],
            },
        )
    )

    assert len(result.structuredContent["questions"]) == 1
    assert result.isError is False


def test_render_quiz_description_follows_option_policy(cfg):
    strict = _tools(app_mod.build_server(cfg))["render-quiz"]
    relaxed_cfg = replace(
        cfg, quiz=replace(cfg.quiz, min_options=2, max_options=None)
    )
    relaxed = _tools(app_mod.build_server(relaxed_cfg))["render-quiz"]

    assert "exactly 4 answer options" in strict.description
    assert "at least 2 answer options" in relaxed.description
    assert "exactly" not in relaxed.description


def test_version_not_advertised_without_lowlevel_server(caplog):
    server = types.SimpleNamespace()

    with caplog.at_level(logging.WARNING, logger="quizaurus"):
        app_mod._advertise_version(server, "9.9.9")

    assert "Cannot advertise server version 9.9.9" in caplog.text


def test_call_score_quiz_results(cfg):
    server = app_mod.build_server(cfg)

    result = asyncio.run(
        server.call_tool(
            "score-quiz-results",
            {"correctAnswersCount": 9, "totalQuestionsCount": 10},
        )
    )

    assert result.structuredContent == {
        "encouragement": "Excellent!",
        "successRate": 0.9,
    }


def test_score_with_zero_total_is_tool_error(cfg):
    server = app_mod.build_server(cfg)

    with pytest.raises(ToolError, match="Cannot score"):
        asyncio.run(
            server.call_tool(
                "score-quiz-results",
                {"correctAnswersCount": 0, "totalQuestionsCount": 0},
            )
        )


def test_widget_resource(cfg):
    server = app_mod.build_server(cfg)

    resources = asyncio.run(server.list_resources())
    contents = list(
        asyncio.run(server.read_resource("ui://widget/interactive-quiz.html"))
    )

    assert [str(r.uri) for r in resources] == [
        "ui://widget/interactive-quiz.html"
    ]
    assert resources[0].name == "interactive-quiz"
    assert resources[0].mimeType == "text/html+skybridge"
    assert contents[0].mime_type == "text/html+skybridge"
    assert '<div id="quizaurus-root">' in contents[0].content


def test_widget_assets_read_per_request(tmp_path, cfg):
    script = tmp_path / "QuizaurusApp.js"
    script.write_text("v1();", encoding="utf-8")
    (tmp_path / "QuizaurusApp.css").write_text("", encoding="utf-8")
    cfg = replace(cfg, widget=replace(cfg.widget, assets_dir=tmp_path))
    server = app_mod.build_server(cfg)

    uri = cfg.widget.uri
    first = list(asyncio.run(server.read_resource(uri)))[0].content
    script.write_text("v2();", encoding="utf-8")
    second = list(asyncio.run(server.read_resource(uri)))[0].content

    assert "v1();" in first
    assert "v2();" in second


@pytest.mark.parametrize("transport", ["stdio", "sse", "streamable-http"])
def test_run_server_uses_configured_transport(monkeypatch, cfg, transport):
    calls = []
    monkeypatch.setattr(
        FastMCP, "run", lambda self, transport: calls.append(transport)
    )
    cfg = replace(cfg, server=replace(cfg.server, transport=transport))

    app_mod.run_server(cfg)

    assert calls == [transport]
