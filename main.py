# =============================================================================
# main.py  —  Console front end for the Rice stock data analyst agent
# =============================================================================
#
# HOW TO RUN:
#   rice-stock-data-agent                          # interactive session
#   rice-stock-data-agent -p "Top 5 tech stocks"   # one question, then exit
#
# WHAT HAPPENS:
#   1. Loads .env (USER_ACCESS_TOKEN, KOYEB_APP_URL, OPENROUTER_API_KEY, ...)
#   2. Creates the ADK agent (agent/data_agent.py), which starts the
#      query_data MCP server as a subprocess
#   3. Sends each question through the runner and prints the final answer,
#      followed by any CSV files the portal results were saved to
#
# One session is kept for the whole run, so follow-up questions ("now only
# the ones paying dividends") see the earlier answers.
# =============================================================================

import asyncio
from typing import Optional

import typer
from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm and the MCP subprocess both
# read their keys from the environment.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.data_agent import create_agent
from agent.replies import AgentReply, collect_reply
from core.config import PortalSettings

APP_NAME = "rice_stock_data"
USER_ID = "console_user"
EXIT_WORDS = ("quit", "exit", "q")

app = typer.Typer(
    name="rice-stock-data-agent",
    help="Ask questions about the Rice Business stock market data portal.",
    add_completion=False,
)


class ConsoleSession:
    """One ADK runner plus the session it keeps answering in."""

    def __init__(self, runner: Runner, session_id: str):
        self.runner = runner
        self.session_id = session_id

    @classmethod
    async def start(cls, settings: PortalSettings) -> "ConsoleSession":
        session_service = InMemorySessionService()
        runner = Runner(agent=create_agent(settings), app_name=APP_NAME, session_service=session_service)
        session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)
        return cls(runner, session.id)

    async def ask(self, question: str, show_tools: bool = True) -> AgentReply:
        message = types.Content(role="user", parts=[types.Part(text=question)])
        events = self.runner.run_async(user_id=USER_ID, session_id=self.session_id, new_message=message)
        on_tool_call = (lambda name: typer.echo(f"  🔧 Calling tool: {name}")) if show_tools else None
        return await collect_reply(events, on_tool_call=on_tool_call)


def print_reply(reply: AgentReply) -> None:
    if reply.text:
        typer.echo(f"\n🤖 Agent:\n\n{reply.text}")
    else:
        typer.echo("\n⚠️  No response generated. The agent may have encountered an error.")
    for path in reply.csv_paths:
        typer.echo(f"\n💾 Saved dataset: {path}")


async def answer_once(settings: PortalSettings, prompt: str) -> AgentReply:
    console = await ConsoleSession.start(settings)
    return await console.ask(prompt, show_tools=False)


async def interactive(settings: PortalSettings) -> None:
    typer.echo("=" * 70)
    typer.echo("  RICE STOCK DATA ANALYST")
    typer.echo(f"  Portal: {settings.base_url}  |  Agent model: {settings.agent_model}")
    typer.echo("=" * 70)

    console = await ConsoleSession.start(settings)
    typer.echo("💬 Ask about stocks, sectors, or financial ratios. ('quit' to exit)")

    while True:
        try:
            question = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if question.lower() in EXIT_WORDS:
            break
        if question:
            print_reply(await console.ask(question))

    typer.echo("\n👋 Goodbye!")


@app.command()
def run(
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Answer one question and exit"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="LiteLLM model for the agent (overrides AGENT_MODEL)"),
):
    """Start the agent console, or answer a single question with --prompt."""
    settings = PortalSettings.from_env()
    if model:
        settings.agent_model = model

    if prompt is None:
        asyncio.run(interactive(settings))
        return

    if not prompt.strip():
        typer.echo("Error: --prompt must not be empty.", err=True)
        raise typer.Exit(code=2)

    reply = asyncio.run(answer_once(settings, prompt))
    print_reply(reply)
    if not reply.text:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
