"""Spotify OAuth proxy endpoints.

This module contains the proxy routes:
- Authorization flow (/login, /spotifyOauthCallback)
- Token pass-through (/refresh, /clientCredentials)

Client applications identify themselves with the proxy's own Spotify
client_id; the client secret never leaves this process.
"""

import logging
import secrets

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse, Response

from oauth_proxy.errors import (
    BadRequest,
    ServerInconsistency,
    StateStoreError,
    Unauthorized,
    UpstreamFailure,
)
from oauth_proxy.redirects import (
    redirect_allowed,
    resolve_callback_url,
    to_query_string,
    with_fragment,
)
from oauth_proxy.scopes import validate_scopes
from oauth_proxy.stores import STATE_TTL_SECONDS
from oauth_proxy.token_client import SPOTIFY_AUTH_URL

logger = logging.getLogger(__name__)

# Router for proxy endpoints
router = APIRouter(tags=["oauth"])

# These will be set by init_proxy_routes()
_config = None
_state_store = None
_token_client = None


def init_proxy_routes(config, state_store, token_client):
    """Initialize proxy routes with config, state store and token client.

    Must be called before including the router in the app.
    """
    global _config, _state_store, _token_client
    _config = config
    _state_store = state_store
    _token_client = token_client


def _require_known_client(client_id: str) -> None:
    if not client_id or client_id != _config.client_id:
        logger.info("[AUTH] Request rejected: unknown client_id")
        raise Unauthorized("Invalid Client ID")


def _callback_url(request: Request) -> str:
    return resolve_callback_url(request, trust_forwarded=_config.trust_forwarded_headers)


def _passthrough(response) -> Response:
    """Relay Spotify's token response body and status unchanged."""
    return Response(
        content=response.content,
        status_code=response.status_code,
        media_type=response.headers.get("content-type", "application/json"),
    )


# ============== Authorization Flow ==============

@router.get("/login")
async def login(
    request: Request,
    client_id: str = "",
    redirect_uri: str = "",
    scope: str = "",
):
    """Start the Authorization Code flow - redirects to Spotify."""
    _require_known_client(client_id)
    validate_scopes(scope)

    if not redirect_uri:
        raise BadRequest("Invalid Redirect URI")
    if not redirect_allowed(redirect_uri, _config.allowed_redirect_origins):
        logger.info("[LOGIN] Redirect URI rejected: origin not in allow-list")
        raise BadRequest("Invalid Redirect URI")

    callback_url = _callback_url(request)
    state = secrets.token_urlsafe(32)

    try:
        await _state_store.put(state, redirect_uri, STATE_TTL_SECONDS)
    except StateStoreError as e:
        logger.error(f"[STATE] Could not store pending authorization: {e}")
        raise ServerInconsistency("State store unavailable") from e

    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": callback_url,
        "state": state,
    }
    if scope:
        params["scope"] = scope

    logger.info(f"[LOGIN] Redirecting to Spotify, callback: {callback_url}")
    return RedirectResponse(url=f"{SPOTIFY_AUTH_URL}?{to_query_string(params)}", status_code=302)


@router.get("/spotifyOauthCallback")
async def spotify_oauth_callback(
    request: Request,
    state: str = "",
    code: str = "",
):
    """Handle Spotify's redirect and hand the result to the calling app."""
    if not state:
        # /login always attaches a state, so this is our bug, not the caller's
        logger.error("[CALLBACK] Callback reached without state")
        raise ServerInconsistency("Server Error 500")

    try:
        app_redirect_uri = await _state_store.get(state)
    except StateStoreError as e:
        logger.warning(f"[CALLBACK] State lookup failed: {e}")
        app_redirect_uri = None

    if not app_redirect_uri:
        logger.info("[CALLBACK] Unknown or expired state")
        raise BadRequest("Invalid State")

    if not code:
        # No code - user probably denied. Pass the query on to the app.
        logger.info("[CALLBACK] No authorization code, forwarding provider parameters")
        return RedirectResponse(
            url=with_fragment(app_redirect_uri, request.query_params.multi_items()),
            status_code=302,
        )

    response = await _token_client.exchange_code(code, _callback_url(request))
    if response.is_error:
        raise UpstreamFailure("Failed request to Spotify Accounts")

    try:
        token_data = response.json()
    except ValueError as e:
        raise UpstreamFailure("Failed request to Spotify Accounts") from e
    if not isinstance(token_data, dict):
        raise UpstreamFailure("Failed request to Spotify Accounts")

    logger.info("[CALLBACK] Tokens issued, redirecting to application")
    return RedirectResponse(url=with_fragment(app_redirect_uri, token_data), status_code=302)


# ============== Token Pass-through ==============

@router.get("/refresh")
async def refresh(client_id: str = "", refresh_token: str = ""):
    """Exchange a refresh token for a fresh access token."""
    _require_known_client(client_id)
    if not refresh_token:
        raise BadRequest("Invalid Refresh Token")

    try:
        response = await _token_client.refresh(refresh_token)
    except UpstreamFailure as e:
        raise BadRequest(e.message) from e
    return _passthrough(response)


@router.get("/clientCredentials")
async def client_credentials(client_id: str = ""):
    """Fetch an app-only access token (Client Credentials grant)."""
    _require_known_client(client_id)

    try:
        response = await _token_client.client_credentials()
    except UpstreamFailure as e:
        raise UpstreamFailure(e.message, status_code=502) from e
    return _passthrough(response)
