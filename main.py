"""Spotify OAuth Proxy.

Holds the one Spotify client id/secret pair and lets registered client
applications run the Authorization Code flow through it:
- /login redirects the user to Spotify with a fresh state token
- /spotifyOauthCallback exchanges the code and redirects back to the app
- /refresh and /clientCredentials forward token requests to Spotify

Pending authorizations live in Redis when REDIS_URL is set, otherwise
in process memory.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Config, load_config
from logging_config import setup_logging
from oauth_proxy.endpoints import router as proxy_router, init_proxy_routes
from oauth_proxy.errors import ProxyError
from oauth_proxy.stores import StateStore, build_state_store
from oauth_proxy.token_client import TokenClient

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(
    config: Config,
    state_store: StateStore = None,
    token_client: TokenClient = None,
) -> FastAPI:
    """Assemble the FastAPI app around a config, state store and token client."""
    if state_store is None:
        state_store = build_state_store(config)
    if token_client is None:
        token_client = TokenClient(config.basic_credential, timeout=config.token_request_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await token_client.close()
        await state_store.close()

    app = FastAPI(
        title="Spotify OAuth Proxy",
        description="Authorization Code proxy sharing one Spotify client credential",
        version=VERSION,
        lifespan=lifespan,
    )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    # Basic request tracing; query strings carry codes and tokens, so paths only
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"[REQUEST] {request.method} {request.url.path} -> {response.status_code}")
        return response

    init_proxy_routes(config, state_store, token_client)
    app.include_router(proxy_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "spotify-oauth-proxy",
            "version": VERSION,
            "credentials_configured": config.is_valid(),
        }

    return app


config = load_config()
setup_logging(level=config.log_level, log_format=config.log_format)

if not config.is_valid():
    logger.warning("[STARTUP] CLIENT_ID / CLIENT_SECRET not set - every client will be rejected")

app = create_app(config)


# ============== Main Entry Point ==============

if __name__ == "__main__":
    import uvicorn
    logger.info(f"[STARTUP] Server running at: http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port)
