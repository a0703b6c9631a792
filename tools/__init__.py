# =============================================================================
# tools/__init__.py
# =============================================================================
# This package exposes the Loom API as FastMCP tools.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP clients and core/.
#     - handlers.py:   one method per tool; calls one LoomClient operation and
#                      builds the success / "Error: ..." envelope
#     - mcp_server.py: registers the handlers as FastMCP tools, declares the
#                      argument schemas, and resolves per-request credentials
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT talk HTTP to Loom themselves (that's core/loom_client.py)
#   - They do NOT retry, cache, or chain API calls
#   - They do NOT keep a client between calls (credentials differ per tenant)
# =============================================================================
