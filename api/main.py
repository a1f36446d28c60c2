"""Blackjack table API: one live game per signed session."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from api.routes import game
from blackjack.errors import BlackjackError
from config import config

logging.basicConfig(level=config.logging.level, format=config.logging.format)
logger = logging.getLogger(__name__)

HEALTH_LIMIT = f"{config.rate_limit.requests_per_minute}/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[HEALTH_LIMIT],
)


def _too_many_requests(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit by %s on %s", get_remote_address(request), request.url.path)
    return JSONResponse(status_code=429, content={"detail": f"Rate limit exceeded: {exc.detail}"})


def _blackjack_error_handler(request: Request, exc: BlackjackError) -> JSONResponse:
    """Report a rejected game action; the game state is unchanged."""
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


app = FastAPI(
    title="Blackjack",
    description="Single-player casino blackjack against an automated dealer",
    version="0.1.0",
    debug=config.debug,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _too_many_requests)
app.add_exception_handler(BlackjackError, _blackjack_error_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)
app.include_router(game.router, prefix="/api/game", tags=["game"])


@app.get("/api/health")
@limiter.limit(HEALTH_LIMIT)
async def health_check(request: Request) -> dict[str, str]:
    return {"status": "healthy"}
