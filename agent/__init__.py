# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK console assistant.
#
# ARCHITECTURAL ROLE:
#   The agent is a CLIENT of the Loom tool server.  It decides which loom_*
#   tool to call and explains the results to the user.  It has no Loom
#   logic of its own:
#     - HTTP and field mapping live in core/
#     - Tool definitions and envelopes live in tools/
#     - This package only holds the prompt and the agent wiring
# =============================================================================
