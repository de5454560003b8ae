"""
MS Graph client setup around a pre-acquired bearer token.
"""

from typing import Any

import httpx
from kiota_abstractions.authentication import AuthenticationProvider
from kiota_abstractions.request_information import RequestInformation
from msgraph import GraphRequestAdapter, GraphServiceClient
from msgraph_core import GraphClientFactory

from core.config import GRAPH_API_URL
from core.exceptions import AuthError

AUTHORIZATION_HEADER = "Authorization"


class BearerTokenAuthenticationProvider(AuthenticationProvider):
    """Adds the same bearer token to every Graph SDK request."""

    def __init__(self, access_token: str):
        self._access_token = access_token

    async def authenticate_request(
        self,
        request: RequestInformation,
        additional_authentication_context: dict[str, Any] | None = None,
    ) -> None:
        if request.headers.contains(AUTHORIZATION_HEADER):
            request.headers.remove(AUTHORIZATION_HEADER)
        request.headers.add(AUTHORIZATION_HEADER, f"Bearer {self._access_token}")


class BearerAuth(httpx.Auth):
    """httpx auth flow for plain HTTP calls to Graph."""

    def __init__(self, access_token: str):
        self._access_token = access_token

    def auth_flow(self, request: httpx.Request):
        request.headers[AUTHORIZATION_HEADER] = f"Bearer {self._access_token}"
        yield request


def create_graph_client(access_token: str, http_client: httpx.AsyncClient) -> GraphServiceClient:
    """
    Build a Graph client that authenticates with `access_token`.

    The caller owns `http_client` (timeout, lifetime); the Graph default
    middleware (retry, redirect, headers) is installed on top of it.
    """
    auth_provider = BearerTokenAuthenticationProvider(access_token)
    client = GraphClientFactory.create_with_default_middleware(client=http_client)
    adapter = GraphRequestAdapter(auth_provider, client)
    return GraphServiceClient(request_adapter=adapter)


async def get_signed_in_user(
    access_token: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[str | None, str | None]:
    """
    Look up the authenticated principal (login check).

    Returns:
        Tuple of (display_name, user_principal_name)

    Raises:
        AuthError: if Graph does not accept the token
    """
    async with httpx.AsyncClient(
        auth=BearerAuth(access_token), timeout=timeout, transport=transport
    ) as client:
        try:
            response = await client.get(
                f"{GRAPH_API_URL}/me",
                params={"$select": "displayName,userPrincipalName"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"Login check failed with HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise AuthError(f"Login check failed: {e}") from e

    me = response.json()
    return me.get("displayName"), me.get("userPrincipalName")
