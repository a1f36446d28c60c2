"""Tests for session signing and the game store."""

import time
from unittest.mock import patch

import pytest
import pytest_asyncio

import api.session as session_module
from api.session import (
    InMemoryGameStore,
    SessionSigner,
    create_session,
    delete_session,
    extract_session_id,
    get_game_store,
    get_session_signer,
    load_game,
)
from blackjack.game import BlackjackGame


class TestSessionSigner:
    """Tests for SessionSigner class."""

    def test_sign_creates_token(self):
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("table-123")

        assert token
        assert token != "table-123"

    def test_unsign_returns_original_id(self):
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("table-456")

        assert signer.unsign(token, max_age=3600) == "table-456"

    def test_unsign_invalid_token_returns_none(self):
        signer = SessionSigner(secret_key="test-secret")

        assert signer.unsign("invalid-token-data", max_age=3600) is None

    def test_unsign_wrong_secret_returns_none(self):
        token = SessionSigner(secret_key="secret-one").sign("table")

        assert SessionSigner(secret_key="secret-two").unsign(token, max_age=3600) is None

    def test_unsign_expired_token_returns_none(self):
        """Test that a token signed two hours ago fails a one hour max age."""
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("table")

        original_time = time.time
        with patch("time.time", lambda: original_time() + 7200):
            result = signer.unsign(token, max_age=3600)

        assert result is None

    def test_get_session_signer_returns_singleton(self):
        session_module._session_signer = None

        assert get_session_signer() is get_session_signer()


class TestInMemoryGameStore:
    """Tests for InMemoryGameStore class."""

    @pytest_asyncio.fixture
    async def store(self):
        return InMemoryGameStore()

    @pytest.mark.asyncio
    async def test_set_and_get_keeps_the_live_game(self, store):
        game = BlackjackGame()
        await store.set("table", game, ttl=3600)

        assert await store.get("table") is game

    @pytest.mark.asyncio
    async def test_get_nonexistent_returns_none(self, store):
        assert await store.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.set("table", BlackjackGame(), ttl=3600)
        await store.delete("table")

        assert await store.exists("table") is False
        # Deleting twice is harmless
        await store.delete("table")

    @pytest.mark.asyncio
    async def test_expiration(self, store):
        await store.set("table", BlackjackGame(), ttl=1)
        assert await store.exists("table") is True

        time.sleep(1.5)

        assert await store.get("table") is None

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, store):
        await store.set("table-1", BlackjackGame(), ttl=1)
        await store.set("table-2", BlackjackGame(), ttl=1)
        await store.set("table-3", BlackjackGame(), ttl=3600)

        time.sleep(1.5)

        assert await store.cleanup_expired() == 2
        assert await store.exists("table-1") is False
        assert await store.exists("table-3") is True


class TestModuleFunctions:
    """Tests for module-level session functions."""

    @pytest.fixture(autouse=True)
    def fresh_store(self):
        session_module._game_store = None
        yield
        session_module._game_store = None

    @pytest.mark.asyncio
    async def test_create_and_load(self):
        game = BlackjackGame()
        token = await create_session(game)

        assert len(token) > 36  # Signed token is longer than a UUID
        assert await load_game(token) is game

    @pytest.mark.asyncio
    async def test_new_session_sweeps_abandoned_games(self):
        store = get_game_store()
        for i in range(50):
            await store.set(f"abandoned-{i}", BlackjackGame(), ttl=-1)
        await store.set("live", BlackjackGame(), ttl=3600)

        token = await create_session(BlackjackGame())

        assert set(store._games) == {"live", extract_session_id(token)}

    @pytest.mark.asyncio
    async def test_load_with_bad_token(self):
        assert await load_game("not-a-token") is None

    @pytest.mark.asyncio
    async def test_delete_session(self):
        token = await create_session(BlackjackGame())
        await delete_session(token)

        assert await load_game(token) is None
        assert await get_game_store().exists(extract_session_id(token)) is False

    def test_extract_session_id(self):
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("table-123")

        with patch("api.session.get_session_signer", return_value=signer):
            assert extract_session_id(token) == "table-123"

    def test_extract_session_id_invalid_returns_none(self):
        assert extract_session_id("invalid-token") is None
