"""
Username/password token exchange for MS Graph.

Tokens are not cached: every run authenticates once and discards the
credential as soon as the token is issued.
"""

import logging

from azure.core.credentials import AccessToken
from azure.core.exceptions import AzureError
from azure.identity import UsernamePasswordCredential

from core.config import GRAPH_SCOPES
from core.exceptions import AuthError, ConfigurationError

logger = logging.getLogger(__name__)


def authenticate(
    client_id: str,
    tenant_id: str,
    username: str,
    password: str,
    scopes: list[str] | None = None,
) -> AccessToken:
    """
    Exchange user credentials for a bearer token bound to `scopes`.

    Uses the resource-owner-password flow of a public client application,
    so no browser interaction is needed.

    Raises:
        ConfigurationError: if any identity field is empty
        AuthError: if the exchange fails for any reason
    """
    missing = [
        name
        for name, value in (
            ("client id", client_id),
            ("tenant id", tenant_id),
            ("username", username),
            ("password", password),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing Graph credentials: {', '.join(missing)}")

    scopes = scopes or GRAPH_SCOPES
    logger.info("Requesting Graph token")

    try:
        with UsernamePasswordCredential(
            client_id=client_id,
            username=username,
            password=password,
            tenant_id=tenant_id,
        ) as credential:
            return credential.get_token(*scopes)
    except (AzureError, ValueError) as e:
        raise AuthError(f"Token request failed: {e}") from e
