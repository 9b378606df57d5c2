"""Config management for spotify-oauth-proxy.

All settings come from the process environment. A local .env file is
loaded first (if present) so development setups don't need exports.
"""
import base64
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_FILE = Path(".env")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_STATE_KEY_PREFIX = "oauth-proxy:state:"
DEFAULT_TOKEN_REQUEST_TIMEOUT = 10.0


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip().rstrip("/") for item in value.split(",") if item.strip()]


class Config:
    """Configuration container.

    Built once at startup. The Basic credential for the provider's token
    endpoint is computed here so request handlers never rebuild it.
    """

    def __init__(self, data: dict = None):
        self.data = dict(data or {})
        pair = f"{self.client_id}:{self.client_secret}"
        self._basic_credential = base64.b64encode(pair.encode("utf-8")).decode("ascii")

    @property
    def client_id(self) -> str:
        return self.data.get("client_id") or ""

    @property
    def client_secret(self) -> str:
        return self.data.get("client_secret") or ""

    @property
    def basic_credential(self) -> str:
        """base64("client_id:client_secret"), used as HTTP Basic auth."""
        return self._basic_credential

    @property
    def host(self) -> str:
        return self.data.get("host") or DEFAULT_HOST

    @property
    def port(self) -> int:
        return int(self.data.get("port") or DEFAULT_PORT)

    @property
    def redis_url(self) -> Optional[str]:
        return self.data.get("redis_url") or None

    @property
    def state_key_prefix(self) -> str:
        return self.data.get("state_key_prefix") or DEFAULT_STATE_KEY_PREFIX

    @property
    def token_request_timeout(self) -> float:
        return float(self.data.get("token_request_timeout") or DEFAULT_TOKEN_REQUEST_TIMEOUT)

    @property
    def trust_forwarded_headers(self) -> bool:
        return self.data.get("trust_forwarded_headers", True)

    @property
    def allowed_redirect_origins(self) -> list[str]:
        return self.data.get("allowed_redirect_origins") or []

    @property
    def log_level(self) -> str:
        return (self.data.get("log_level") or "INFO").upper()

    @property
    def log_format(self) -> str:
        return (self.data.get("log_format") or "plain").lower()

    def is_valid(self) -> bool:
        """Check if the provider credential pair is configured."""
        return bool(self.client_id and self.client_secret)


def load_config() -> Config:
    """Load config from the environment (and .env, if present)."""
    if ENV_FILE.exists():
        load_dotenv(ENV_FILE)

    return Config({
        "client_id": os.getenv("CLIENT_ID", ""),
        "client_secret": os.getenv("CLIENT_SECRET", ""),
        "host": os.getenv("HOST", DEFAULT_HOST),
        "port": os.getenv("PORT", str(DEFAULT_PORT)),
        "redis_url": os.getenv("REDIS_URL", ""),
        "state_key_prefix": os.getenv("STATE_KEY_PREFIX", DEFAULT_STATE_KEY_PREFIX),
        "token_request_timeout": os.getenv("TOKEN_REQUEST_TIMEOUT", str(DEFAULT_TOKEN_REQUEST_TIMEOUT)),
        "trust_forwarded_headers": _as_bool(os.getenv("TRUST_FORWARDED_HEADERS"), True),
        "allowed_redirect_origins": _as_list(os.getenv("ALLOWED_REDIRECT_ORIGINS")),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_format": os.getenv("LOG_FORMAT", "plain"),
    })
