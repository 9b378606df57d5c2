"""Spotify scopes this proxy is willing to request."""

from typing import Optional

from oauth_proxy.errors import BadRequest

VALID_SCOPES = [
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-public",
    "playlist-modify-private",
    "user-library-read",
    "user-library-modify",
    "user-read-private",
    "user-read-birthdate",
    "user-read-email",
    "user-follow-read",
    "user-follow-modify",
    "user-top-read",
    "user-read-playback-state",
    "user-read-recently-played",
    "user-read-currently-playing",
    "user-modify-playback-state",
]


def scopes_are_valid(scope: Optional[str]) -> bool:
    """True when no scope was requested or every comma-separated entry is known.

    Matching is exact: no trimming, no case folding.
    """
    if not scope:
        return True
    return all(requested in VALID_SCOPES for requested in scope.split(","))


def validate_scopes(scope: Optional[str]) -> None:
    if not scopes_are_valid(scope):
        raise BadRequest("Invalid Scopes")
