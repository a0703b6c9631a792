# =============================================================================
# agent/loom_agent.py  —  Google ADK agent for the Loom tool server
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the console assistant: a Google ADK Agent whose only tools are the
#   loom_* tools served by tools/mcp_server.py.
#
# HOW IT CONNECTS:
#   ADK launches the tool server as a subprocess and talks MCP over stdio.
#   A stdio server has a single tenant, so the local LOOM_ACCESS_TOKEN (and
#   optional LOOM_BASE_URL) is forwarded in the subprocess environment.  A
#   multi-tenant deployment runs the server over HTTP instead and every
#   caller sends X-Loom-Access-Token.
#
#   ┌───────────────┐  stdio / MCP  ┌────────────────────┐  HTTPS  ┌──────────┐
#   │ ADK Agent     │──────────────▶│ tools/mcp_server   │────────▶│ Loom API │
#   │ (LiteLlm)     │◀──────────────│ loom_* tools       │◀────────│          │
#   └───────────────┘               └────────────────────┘         └──────────┘
#
# MODEL:
#   Any LiteLlm model string works.  LOOM_AGENT_MODEL overrides the default
#   "openrouter/openai/gpt-4o"; LiteLlm reads the provider key (e.g.
#   OPENROUTER_API_KEY) from the environment.
# =============================================================================

import os
from typing import Mapping, Optional

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_video_assistant_prompt

DEFAULT_MODEL = "openrouter/openai/gpt-4o"

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def build_server_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Environment for the tool-server subprocess.

    The subprocess does not inherit our environment by default, so PATH and
    friends are copied along with the Loom settings.
    """
    if environ is None:
        environ = os.environ
    env = dict(environ)
    env["LOOM_MCP_TRANSPORT"] = "stdio"
    return env


def create_agent(model: Optional[str] = None) -> Agent:
    """Create the Loom library assistant.

    Args:
        model: LiteLlm model string.  Falls back to LOOM_AGENT_MODEL, then
            DEFAULT_MODEL.

    Returns:
        A configured Google ADK Agent instance.
    """
    loom_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=PROJECT_ROOT,
            env=build_server_env(),
        ),
    )

    return Agent(
        name="loom_library_assistant",
        model=LiteLlm(model=model or os.environ.get("LOOM_AGENT_MODEL", DEFAULT_MODEL)),
        instruction=get_video_assistant_prompt(),
        tools=[loom_tools],
    )


# -----------------------------------------------------------------------------
# Console output helpers (used by main.py)
# -----------------------------------------------------------------------------
def describe_tool_call(name: str, args: Optional[Mapping] = None, limit: int = 80) -> str:
    """One console line for a tool call, e.g. ``get_transcript(video_id='abc')``.

    The ``loom_`` prefix is dropped and long argument lists are cut at
    ``limit`` characters.
    """
    short_name = name[len("loom_"):] if name.startswith("loom_") else name
    rendered = ", ".join(f"{key}={value!r}" for key, value in (args or {}).items())
    if len(rendered) > limit:
        rendered = rendered[: limit - 3] + "..."
    return f"{short_name}({rendered})"


def missing_token_warning(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Startup hint when the stdio tool server would have no Loom token."""
    if environ is None:
        environ = os.environ
    if environ.get("LOOM_ACCESS_TOKEN", "").strip():
        return None
    return (
        "LOOM_ACCESS_TOKEN is not set: every Loom tool will fail with an "
        "authentication error until it is added to .env"
    )
