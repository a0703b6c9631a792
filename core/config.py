# =============================================================================
# core/config.py  —  Server limits, read once at start-up
# =============================================================================
#
# The limits below are the only process-wide settings.  They are loaded into
# a frozen ServerConfig and handed to tools.mcp_server.create_server(); no
# other module reads the environment for them.
#
#   LOOM_CHARACTER_LIMIT     max characters in one tool response (50000)
#   LOOM_DEFAULT_PAGE_SIZE   per_page sent when a list tool gets none (20)
#   LOOM_MAX_PAGE_SIZE       largest per_page a list tool accepts (100)
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_CHARACTER_LIMIT = 50000
DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class ServerConfig:
    character_limit: int = DEFAULT_CHARACTER_LIMIT
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    """Parse an integer setting, falling back to the default on bad input."""
    raw = environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def load_config(environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Build the ServerConfig from environment variables (or a given mapping)."""
    if environ is None:
        environ = os.environ

    return ServerConfig(
        character_limit=_env_int(environ, "LOOM_CHARACTER_LIMIT", DEFAULT_CHARACTER_LIMIT),
        default_page_size=_env_int(environ, "LOOM_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        max_page_size=_env_int(environ, "LOOM_MAX_PAGE_SIZE", DEFAULT_MAX_PAGE_SIZE),
    )
