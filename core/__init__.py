# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the Loom API adapter: data models, credential parsing,
# the HTTP client, error taxonomy, configuration and output serialization.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK, FastMCP, or any orchestration
#   framework.  The only third-party import is httpx for the network call.
#   Everything here can be tested with a fake transport and no server running.
# =============================================================================
