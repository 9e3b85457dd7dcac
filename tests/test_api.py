import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from shared.errors import EmbeddingServiceError, GenerationServiceError, StoreUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.models.conversation import ConversationRole
from server.api_server import app


@pytest.fixture
def state(env):
    """Inject services into app.state without running the lifespan."""
    logger = ColorLogger(logging.getLogger("rag_bridge.tests.api"))
    app.state.logging = logger
    app.state.helper_config = HelperConfig(logger=logger)
    app.state.upload_service = MagicMock()
    app.state.upload_service.do_upload = AsyncMock(return_value="doc-123")
    app.state.chat_service = MagicMock()
    app.state.chat_service.do_chat = AsyncMock(return_value="RAG answer")
    app.state.chat_service.do_generate = AsyncMock(return_value="Tool answer")
    app.state.store = MagicMock()
    app.state.store.get_engine_name.return_value = "memory"
    app.state.store.do_count = AsyncMock(return_value=7)
    return app.state


@pytest.fixture
def client(state) -> TestClient:
    return TestClient(app)


class TestUploadEndpoint:
    """Tests for POST /api/upload."""

    def test_upload_returns_document_id(self, client, state) -> None:
        """Returns 201 with the generated document id."""
        response = client.post("/api/upload", files={"file": ("notes.txt", b"hello world", "text/plain")})
        assert response.status_code == 201
        assert response.json() == {"message": "File processed and stored successfully.", "documentId": "doc-123"}
        state.upload_service.do_upload.assert_awaited_once_with(b"hello world", "notes.txt")

    def test_missing_file(self, client, state) -> None:
        """Returns 400 without a file."""
        response = client.post("/api/upload")
        assert response.status_code == 400
        state.upload_service.do_upload.assert_not_awaited()

    def test_processing_failure_is_generic(self, client, state) -> None:
        """Returns 500 without internal detail."""
        state.upload_service.do_upload.side_effect = EmbeddingServiceError("quota exceeded", details={"status": 429})
        response = client.post("/api/upload", files={"file": ("notes.txt", b"hi", "text/plain")})
        assert response.status_code == 500
        assert "quota" not in response.text


class TestChatEndpoints:
    """Tests for POST /api/chat and POST /api/generate."""

    def test_chat(self, client, state) -> None:
        """Answers through the RAG profile."""
        response = client.post("/api/chat", json={"query": "What?", "history": []})
        assert response.status_code == 200
        assert response.json() == {"message": "Response generated successfully.", "response": "RAG answer"}
        state.chat_service.do_chat.assert_awaited_once()

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"history": []}])
    def test_missing_query(self, client, state, body) -> None:
        """Returns 400 for a missing or blank query."""
        response = client.post("/api/chat", json=body)
        assert response.status_code == 400
        state.chat_service.do_chat.assert_not_awaited()

    def test_generate_passes_history(self, client, state) -> None:
        """Converts history items into conversation turns."""
        history = [
            {"role": "user", "parts": [{"text": "Hi"}]},
            {"role": "model", "parts": [{"text": "Hello"}, {"text": "!"}]},
        ]
        response = client.post("/api/generate", json={"query": "Weather in Rome?", "history": history})
        assert response.status_code == 200
        assert response.json()["response"] == "Tool answer"
        query, turns = state.chat_service.do_generate.await_args.args
        assert query == "Weather in Rome?"
        assert [turn.role for turn in turns] == [ConversationRole.USER, ConversationRole.MODEL]
        assert turns[1].text == "Hello!"

    def test_generate_drops_empty_history_messages(self, client, state) -> None:
        """Leaves out history messages that carry no text."""
        history = [
            {"role": "user", "parts": [{"text": "q"}]},
            {"role": "model", "parts": []},
            {"role": "model", "parts": [{}]},
        ]
        response = client.post("/api/generate", json={"query": "hi", "history": history})
        assert response.status_code == 200
        _, turns = state.chat_service.do_generate.await_args.args
        assert [turn.text for turn in turns] == ["q"]

    def test_invalid_history_role(self, client, state) -> None:
        """Rejects history roles other than user and model."""
        response = client.post("/api/generate", json={"query": "q", "history": [{"role": "system", "parts": []}]})
        assert response.status_code == 422

    def test_generation_failure(self, client, state) -> None:
        """Maps a generation error to 500."""
        state.chat_service.do_generate.side_effect = GenerationServiceError("upstream 503")
        response = client.post("/api/generate", json={"query": "q"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate a response."

    def test_unexpected_failure(self, client, state) -> None:
        """Maps any other exception to 500."""
        state.chat_service.do_chat.side_effect = RuntimeError("bug")
        response = client.post("/api/chat", json={"query": "q"})
        assert response.status_code == 500

    def test_timeout(self, env, client, state) -> None:
        """Returns 504 when the request exceeds APP_REQUEST_TIMEOUT."""
        env.setenv("APP_REQUEST_TIMEOUT", "0.05")

        async def slow(query, history):
            await asyncio.sleep(1)
            return "late"

        state.chat_service.do_chat = slow
        response = client.post("/api/chat", json={"query": "q"})
        assert response.status_code == 504


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_ok(self, client) -> None:
        """Reports the store engine and entry count."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "vectorStore": "memory", "entries": 7}

    def test_degraded(self, client, state) -> None:
        """Reports a degraded store."""
        state.store.do_count.side_effect = StoreUnavailable("down")
        response = client.get("/health")
        assert response.json()["status"] == "degraded"
        assert response.json()["entries"] is None
