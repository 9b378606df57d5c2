"""Errors raised by the proxy routes.

Each error carries the HTTP status it should be answered with. The
application-level handler in main.py renders them as

    {"statusCode": 400, "error": "Bad Request", "message": "Invalid Scopes"}
"""

from http import HTTPStatus


class ProxyError(Exception):
    """Base error surfaced directly to the HTTP caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "error": HTTPStatus(self.status_code).phrase,
            "message": self.message,
        }


class Unauthorized(ProxyError):
    """The calling application presented a client_id we don't know."""

    status_code = 401


class BadRequest(ProxyError):
    status_code = 400


class UpstreamFailure(ProxyError):
    """A call to Spotify Accounts failed (network error or non-2xx)."""

    status_code = 500


class ServerInconsistency(ProxyError):
    """The proxy reached a state its own wiring should have prevented."""

    status_code = 500


class StateStoreError(Exception):
    """The state store backend could not be reached or answered badly."""
