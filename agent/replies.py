# =============================================================================
# agent/replies.py  —  Collapse an ADK event stream into one reply
# =============================================================================
#
# The runner yields many events per question: model text, function calls,
# and the query_data tool's responses.  The console only needs three things
# from them:
#
#   text       → the last text the model produced
#   tool_calls → names of the tools it called, in order
#   csv_paths  → every saved result file mentioned by the tool or the model,
#                so the user can open large datasets directly
# =============================================================================

import re
from dataclasses import dataclass, field
from typing import AsyncIterable, Callable, List, Optional

# Matches the backtick-wrapped path the renderer prints for saved results
_CSV_PATH = re.compile(r"`([^`\n]+?\.csv)`")


def extract_csv_paths(text: str) -> List[str]:
    """Every distinct `...csv` path in `text`, in first-seen order."""
    paths = []
    for match in _CSV_PATH.finditer(text or ""):
        if match.group(1) not in paths:
            paths.append(match.group(1))
    return paths


@dataclass
class AgentReply:
    text: str = ""
    tool_calls: List[str] = field(default_factory=list)
    csv_paths: List[str] = field(default_factory=list)

    def add_paths(self, text: str) -> None:
        for path in extract_csv_paths(text):
            if path not in self.csv_paths:
                self.csv_paths.append(path)


async def collect_reply(events: AsyncIterable, on_tool_call: Optional[Callable[[str], None]] = None) -> AgentReply:
    """Drain `events` and return the reply they add up to.

    `on_tool_call` is invoked with each tool name as soon as the call is seen,
    which lets the console show progress while the query is still running.
    """
    reply = AgentReply()
    async for event in events:
        content = getattr(event, "content", None)
        if not content or not content.parts:
            continue
        for part in content.parts:
            if getattr(part, "text", None):
                reply.text = part.text
                reply.add_paths(part.text)

            call = getattr(part, "function_call", None)
            if call:
                reply.tool_calls.append(call.name)
                if on_tool_call:
                    on_tool_call(call.name)

            response = getattr(part, "function_response", None)
            if response:
                reply.add_paths(str(response.response))
    return reply
