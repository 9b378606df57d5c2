"""Client for the Spotify Accounts token endpoint.

Every call authenticates with the proxy's own client credentials
(HTTP Basic) and sends a form-encoded body. Responses are handed back
as-is; callers decide what a non-2xx status means for them.
"""

import logging
from typing import Optional

import httpx

from oauth_proxy.errors import UpstreamFailure

logger = logging.getLogger(__name__)

SPOTIFY_AUTH_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


class TokenClient:
    """Wraps the three grant types the proxy forwards to Spotify."""

    def __init__(
        self,
        basic_credential: str,
        token_url: str = SPOTIFY_TOKEN_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_url = token_url
        self._headers = {
            "Authorization": f"Basic {basic_credential}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _post(self, data: dict) -> httpx.Response:
        grant_type = data["grant_type"]
        try:
            response = await self._client.post(self.token_url, data=data, headers=self._headers)
        except httpx.HTTPError as e:
            logger.warning(f"[TOKEN] {grant_type} request to Spotify failed: {e!r}")
            raise UpstreamFailure("Failed request to Spotify Accounts") from e

        if response.is_error:
            logger.warning(f"[TOKEN] {grant_type} rejected by Spotify: HTTP {response.status_code}")
        else:
            logger.info(f"[TOKEN] {grant_type} exchange succeeded")
        return response

    async def exchange_code(self, code: str, redirect_uri: str) -> httpx.Response:
        return await self._post({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        })

    async def refresh(self, refresh_token: str) -> httpx.Response:
        return await self._post({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })

    async def client_credentials(self) -> httpx.Response:
        return await self._post({"grant_type": "client_credentials"})

    async def close(self) -> None:
        await self._client.aclose()
