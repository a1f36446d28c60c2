"""Blackjack service settings, read from the environment when first loaded."""

import os
import secrets
from dataclasses import dataclass, field

from blackjack.rules import TableRules


def _env_int(name: str, default: int):
    return field(default_factory=lambda: int(os.getenv(name, str(default))))


def _env_flag(name: str, default: bool):
    """Only the word "true", in any case, turns a flag on."""
    fallback = "true" if default else "false"
    return field(default_factory=lambda: os.getenv(name, fallback).lower() == "true")


def _parse_cors_origins() -> list[str]:
    """Comma-separated CORS_ORIGINS; blank entries are skipped."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class CORSConfig:
    """Browser origins allowed to call the table API."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-client request budget for the health check."""

    enabled: bool = _env_flag("RATE_LIMIT_ENABLED", True)
    requests_per_minute: int = _env_int("RATE_LIMIT_RPM", 60)


@dataclass(frozen=True)
class SecurityConfig:
    # Without SECRET_KEY, tokens die with the process, as do the games they name.
    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
    )


@dataclass(frozen=True)
class LoggingConfig:
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class GameConfig:
    """Table used for POST /api/game/new when the request leaves a field out."""

    decks: int = _env_int("BLACKJACK_DECKS", 1)
    chips: int = _env_int("BLACKJACK_CHIPS", 500)
    min_bet: int = _env_int("BLACKJACK_MIN_BET", 5)
    max_bet: int = _env_int("BLACKJACK_MAX_BET", 100)

    def to_rules(self) -> TableRules:
        """Build validated table rules from this configuration."""
        return TableRules(
            decks=self.decks,
            chips=self.chips,
            min_bet=self.min_bet,
            max_bet=self.max_bet,
        )


@dataclass(frozen=True)
class AppConfig:
    """Everything the API process reads at startup."""

    debug: bool = _env_flag("DEBUG", False)
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = _env_int("PORT", 5000)
    # Idle seconds before a table and its token expire
    session_ttl: int = _env_int("SESSION_TTL", 3600)

    game: GameConfig = field(default_factory=GameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


config = AppConfig()
