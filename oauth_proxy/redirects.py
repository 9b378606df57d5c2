"""Redirect URL helpers.

The callback URL sent to Spotify at /login must be byte-identical to the
one sent again during the code exchange, so both go through
resolve_callback_url().
"""

from typing import Iterable, Mapping, Union
from urllib.parse import quote, urlsplit

from fastapi import Request

CALLBACK_PATH = "/spotifyOauthCallback"

# Characters left alone by JavaScript's encodeURI / encodeURIComponent.
_URI_SAFE = ";,/?:@&=+$!*'()#"
_COMPONENT_SAFE = "!*'()"


def encode_uri(url: str) -> str:
    """Percent-encode a complete URL, keeping its structure intact."""
    return quote(url, safe=_URI_SAFE)


def encode_component(value) -> str:
    """Percent-encode a single query component (spaces become %20)."""
    if value is None:
        text = "null"
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe=_COMPONENT_SAFE)


def to_query_string(params: Union[Mapping, Iterable[tuple]]) -> str:
    """Serialize key/value pairs as ``k=v&k2=v2``, preserving order."""
    items = params.items() if isinstance(params, Mapping) else params
    return "&".join(f"{encode_component(key)}={encode_component(value)}" for key, value in items)


def with_fragment(uri: str, params: Union[Mapping, Iterable[tuple]]) -> str:
    """Attach *params* to *uri* after ``#`` so they stay in the browser."""
    return f"{uri}#{to_query_string(params)}"


def _first_header_value(value: str) -> str:
    return value.split(",")[0].strip()


def resolve_callback_url(request: Request, trust_forwarded: bool = True) -> str:
    """Build this proxy's own callback URL as Spotify should see it.

    x-forwarded-proto / x-forwarded-host from the reverse proxy take
    precedence over the connection's scheme and Host header.
    """
    protocol = request.url.scheme
    host = request.headers.get("host") or request.url.netloc

    if trust_forwarded:
        forwarded_proto = request.headers.get("x-forwarded-proto")
        forwarded_host = request.headers.get("x-forwarded-host")
        if forwarded_proto:
            protocol = _first_header_value(forwarded_proto)
        if forwarded_host:
            host = _first_header_value(forwarded_host)

    return encode_uri(f"{protocol}://{host}{CALLBACK_PATH}")


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` for *url* (empty if not absolute)."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def redirect_allowed(url: str, allowed_origins: list[str]) -> bool:
    """An empty allow-list accepts any redirect URI."""
    if not allowed_origins:
        return True
    return origin_of(url) in {origin.lower() for origin in allowed_origins}
