"""App-only token acquisition for Microsoft Graph."""

import logging

import msal

from ..config import GraphConfig

logger = logging.getLogger(__name__)

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]


class AuthError(Exception):
    """Raised when an access token cannot be obtained."""


def build_msal_client(config: GraphConfig) -> msal.ConfidentialClientApplication:
    authority = f"https://login.microsoftonline.com/{config.tenant_id}"
    return msal.ConfidentialClientApplication(
        client_id=config.client_id,
        client_credential=config.client_secret,
        authority=authority,
    )


def acquire_token(config: GraphConfig) -> str:
    """Acquire a client-credentials access token for Graph.

    Raises:
        AuthError: If settings are missing or the token request is rejected.
    """
    missing = config.missing()
    if missing:
        raise AuthError(f"Missing Graph credentials: {', '.join(missing)}")

    try:
        app = build_msal_client(config)
    except ValueError as e:
        # msal validates the authority eagerly
        raise AuthError(f"Invalid Graph authority for tenant {config.tenant_id!r}: {e}") from e

    result = app.acquire_token_for_client(scopes=GRAPH_SCOPES)
    if "access_token" not in result:
        error = result.get("error", "unknown_error")
        description = result.get("error_description", "")
        raise AuthError(f"Token request failed: {error} {description}".strip())

    logger.debug("Acquired Graph token (expires in %ss)", result.get("expires_in"))
    return str(result["access_token"])
