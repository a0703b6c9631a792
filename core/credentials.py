# =============================================================================
# core/credentials.py  —  Tenant credential parsing
# =============================================================================
#
# MULTI-TENANT:
#   One server deployment serves many Loom accounts.  Each request says who it
#   is with two headers:
#
#     X-Loom-Access-Token   OAuth access token (required)
#     X-Loom-Base-URL       optional override of the API base URL
#
#   These functions only parse.  Reading the live HTTP request is the tools
#   layer's job (it knows about FastMCP, core/ does not).
#
# STDIO:
#   A stdio server has no request headers and exactly one tenant: the local
#   user.  credentials_from_env() covers that case.
# =============================================================================

import os
from typing import Mapping, Optional

from core.errors import AuthenticationError
from core.models import TenantCredentials

ACCESS_TOKEN_HEADER = "X-Loom-Access-Token"
BASE_URL_HEADER = "X-Loom-Base-URL"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or None
    return None


def parse_tenant_credentials(headers: Mapping[str, str]) -> TenantCredentials:
    """Read the tenant's token and base URL override from request headers.

    Header names are matched case-insensitively.  Empty values count as absent.
    """
    return TenantCredentials(
        access_token=_header(headers, ACCESS_TOKEN_HEADER),
        base_url=_header(headers, BASE_URL_HEADER),
    )


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> TenantCredentials:
    """Credentials for the single local tenant of a stdio server."""
    if environ is None:
        environ = os.environ
    return TenantCredentials(
        access_token=environ.get("LOOM_ACCESS_TOKEN") or None,
        base_url=environ.get("LOOM_BASE_URL") or None,
    )


def validate_credentials(credentials: TenantCredentials) -> None:
    """Raise AuthenticationError if no access token was supplied."""
    if not credentials.access_token:
        raise AuthenticationError(
            f"No credentials provided. Include {ACCESS_TOKEN_HEADER} header."
        )
