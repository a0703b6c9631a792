# =============================================================================
# main.py  —  Entry Point for the Loom library assistant
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/loom_agent.py)
#   2. ADK starts tools/mcp_server.py as a stdio subprocess
#   3. Each line you type is sent to the agent
#   4. Each loom_* call is echoed with its arguments, then the final answer
#   5. A missing LOOM_ACCESS_TOKEN is flagged at startup
#
# REQUIRED ENVIRONMENT (.env is loaded automatically):
#   LOOM_ACCESS_TOKEN    your Loom OAuth access token
#   OPENROUTER_API_KEY   or the key for whichever LOOM_AGENT_MODEL you use
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm and the tool-server
# subprocess both read their settings from the environment.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.loom_agent import create_agent, describe_tool_call, missing_token_warning

APP_NAME = "loom_assistant"
USER_ID = "local_user"


async def run_agent():
    """Run the Loom library assistant interactively."""
    print("=" * 70)
    print("  LOOM LIBRARY ASSISTANT")
    print("  Powered by Google ADK + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    warning = missing_token_warning()
    if warning:
        print(f"⚠️  {warning}\n")
    print("💬 Ask about your Loom videos, folders and spaces.")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""
        tool_calls = 0
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        # credentials never travel as tool arguments
                        call = part.function_call
                        tool_calls += 1
                        print(f"  🎬 {describe_tool_call(call.name, call.args)}")

        if tool_calls:
            print(f"\n  ({tool_calls} Loom call{'s' if tool_calls != 1 else ''})")
        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
