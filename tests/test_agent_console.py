from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

import main
from agent.replies import AgentReply, collect_reply, extract_csv_paths

SAVED = "/home/u/rice-stock-data/stock-data-2025-07-10T14-03-22.csv"


def text_event(text):
    part = SimpleNamespace(text=text, function_call=None, function_response=None)
    return SimpleNamespace(content=SimpleNamespace(parts=[part]))


def call_event(name):
    part = SimpleNamespace(text=None, function_call=SimpleNamespace(name=name), function_response=None)
    return SimpleNamespace(content=SimpleNamespace(parts=[part]))


def response_event(result):
    response = SimpleNamespace(name="query_data", response={"result": result})
    part = SimpleNamespace(text=None, function_call=None, function_response=response)
    return SimpleNamespace(content=SimpleNamespace(parts=[part]))


async def stream(*events):
    for event in events:
        yield event


# -----------------------------------------------------------------------------
# Reply collection
# -----------------------------------------------------------------------------
def test_extract_csv_paths_in_order_without_duplicates():
    text = f"💾 **Full dataset saved to:** `{SAVED}`\nAgain: `{SAVED}` and `/tmp/b.csv`, not `notes.txt`"
    assert extract_csv_paths(text) == [SAVED, "/tmp/b.csv"]
    assert extract_csv_paths("") == []


@pytest.mark.asyncio
async def test_collect_reply_keeps_last_text_tools_and_saved_files():
    seen = []
    events = stream(
        SimpleNamespace(content=None),
        call_event("query_data"),
        response_event(f"**Large Dataset Retrieved** (250 total rows)\n\n💾 **Full dataset saved to:** `{SAVED}`"),
        text_event("Let me look."),
        text_event("There are 250 technology stocks; the full list is saved."),
    )

    reply = await collect_reply(events, on_tool_call=seen.append)

    assert reply.text == "There are 250 technology stocks; the full list is saved."
    assert reply.tool_calls == ["query_data"]
    assert seen == ["query_data"]
    assert reply.csv_paths == [SAVED]


@pytest.mark.asyncio
async def test_collect_reply_without_events():
    reply = await collect_reply(stream())
    assert reply == AgentReply()


# -----------------------------------------------------------------------------
# Command line
# -----------------------------------------------------------------------------
def test_one_shot_prompt_prints_answer_and_saved_file(monkeypatch):
    asked = []

    async def fake_answer_once(settings, prompt):
        asked.append(prompt)
        return AgentReply(text="Done.", tool_calls=["query_data"], csv_paths=[SAVED])

    monkeypatch.setattr(main, "answer_once", fake_answer_once)

    result = CliRunner().invoke(main.app, ["--prompt", "all tech stocks"])

    assert result.exit_code == 0
    assert asked == ["all tech stocks"]
    assert "Done." in result.output
    assert f"💾 Saved dataset: {SAVED}" in result.output


def test_one_shot_prompt_without_answer_exits_nonzero(monkeypatch):
    async def fake_answer_once(settings, prompt):
        return AgentReply()

    monkeypatch.setattr(main, "answer_once", fake_answer_once)

    result = CliRunner().invoke(main.app, ["-p", "anything"])

    assert result.exit_code == 1
    assert "No response generated" in result.output


def test_blank_prompt_is_rejected_before_starting_agent(monkeypatch):
    async def fail_answer_once(settings, prompt):
        raise AssertionError("agent should not start")

    monkeypatch.setattr(main, "answer_once", fail_answer_once)

    result = CliRunner().invoke(main.app, ["--prompt", "   "])

    assert result.exit_code == 2
