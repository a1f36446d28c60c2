"""Signed sessions and the in-process store of live games."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from uuid import uuid4

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from blackjack.game import BlackjackGame
from config import config

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class GameStore(ABC):
    """
    Where live games are kept between requests.

    Games hold state machines and a partly dealt shoe, so stores keep the
    objects themselves rather than a serialized copy.
    """

    @abstractmethod
    async def get(self, session_id: str) -> BlackjackGame | None:
        ...

    @abstractmethod
    async def set(self, session_id: str, game: BlackjackGame, ttl: int | None = None) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def exists(self, session_id: str) -> bool:
        return await self.get(session_id) is not None

    async def cleanup_expired(self) -> int:
        """Drop abandoned games. Stores whose backend expires keys itself need not."""
        return 0


class InMemoryGameStore(GameStore):
    """Process-local game store with per-session expiry."""

    def __init__(self) -> None:
        self._games: dict[str, tuple[BlackjackGame, datetime]] = {}

    async def get(self, session_id: str) -> BlackjackGame | None:
        if session_id not in self._games:
            return None

        game, expiry = self._games[session_id]
        if expiry < datetime.now():
            await self.delete(session_id)
            return None
        return game

    async def set(self, session_id: str, game: BlackjackGame, ttl: int | None = None) -> None:
        """Store a game and restart its expiry clock."""
        ttl = ttl or config.session_ttl
        self._games[session_id] = (game, datetime.now() + timedelta(seconds=ttl))

    async def delete(self, session_id: str) -> None:
        self._games.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        """Remove expired games."""
        now = datetime.now()
        expired = [sid for sid, (_, expiry) in self._games.items() if expiry < now]
        for sid in expired:
            del self._games[sid]
        if expired:
            logger.info("Dropped %d expired game session(s)", len(expired))
        return len(expired)


_game_store: GameStore | None = None


def get_game_store() -> GameStore:
    """Get or create the game store."""
    global _game_store
    if _game_store is None:
        _game_store = InMemoryGameStore()
    return _game_store


async def create_session(game: BlackjackGame) -> str:
    """
    Store a game under a fresh session, sweeping out expired games first.

    Returns:
        A signed session token for the X-Session-ID header
    """
    store = get_game_store()
    await store.cleanup_expired()
    session_id = str(uuid4())
    await store.set(session_id, game)
    logger.info("Created game session %s", session_id)
    return get_session_signer().sign(session_id)


def extract_session_id(token: str) -> str | None:
    """
    Extract the raw session ID from a signed token.

    Returns:
        The raw session ID if valid, None otherwise
    """
    return get_session_signer().unsign(token)


async def load_game(token: str) -> BlackjackGame | None:
    """Find the live game for a signed session token, refreshing its expiry."""
    session_id = extract_session_id(token)
    if session_id is None:
        return None
    store = get_game_store()
    game = await store.get(session_id)
    if game is not None:
        await store.set(session_id, game)
    return game


async def delete_session(token: str) -> None:
    session_id = extract_session_id(token)
    if session_id is not None:
        await get_game_store().delete(session_id)
