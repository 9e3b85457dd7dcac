import json

import httpx
import pytest

from shared.clients.rag.RAGClientInterface import UPSERT_BATCH_SIZE
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.rag.pinecone.RAGClientPinecone import RAGClientPinecone
from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.errors import DimensionMismatch, InvalidConfiguration, StoreUnavailable
from shared.models.document import VectorStoreEntry

from tests.helpers import RecordingTransport


def _entries(count: int) -> list[VectorStoreEntry]:
    return [
        VectorStoreEntry(
            id=f"id-{i}",
            embedding=[float(i), 1.0, 0.0, 0.0],
            text=f"chunk {i}",
            document_id="doc-1",
            source_name="report.pdf",
            sequence_index=i,
        )
        for i in range(count)
    ]


@pytest.fixture
def pinecone_env(env):
    env.setenv("RAG_ENGINE", "pinecone")
    env.setenv("RAG_PINECONE_INDEX_HOST", "my-index.svc.pinecone.io")
    env.setenv("RAG_PINECONE_API_KEY", "pc-key")
    env.delenv("RAG_PINECONE_NAMESPACE", raising=False)
    return env


async def _booted_pinecone(helper_config, handler) -> tuple[RAGClientPinecone, RecordingTransport]:
    transport = RecordingTransport(handler)
    client = RAGClientPinecone(helper_config=helper_config)
    await client.boot(transport=transport)
    return client, transport


class TestPineconeUpsert:
    """Tests for batched upserts against Pinecone."""

    async def test_batches_of_one_hundred(self, pinecone_env, helper_config) -> None:
        """Sends 250 entries as three sequential batches."""
        client, transport = await _booted_pinecone(helper_config, lambda request: httpx.Response(200, json={"upsertedCount": 1}))
        await client.do_upsert(_entries(250))
        sizes = [len(body["vectors"]) for body in transport.json_bodies()]
        assert sizes == [UPSERT_BATCH_SIZE, UPSERT_BATCH_SIZE, 50]
        first = transport.requests[0]
        assert str(first.url) == "https://my-index.svc.pinecone.io/vectors/upsert"
        assert first.headers["Api-Key"] == "pc-key"
        vector = transport.json_bodies()[0]["vectors"][0]
        assert vector["metadata"] == {"text": "chunk 0", "document_id": "doc-1", "source_name": "report.pdf", "sequence_index": 0}
        await client.close()

    async def test_failed_batch_reports_range(self, pinecone_env, helper_config) -> None:
        """Stops at the failing batch and reports its range and the committed count."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(503, text="unavailable") if calls["n"] == 2 else httpx.Response(200, json={})

        client, transport = await _booted_pinecone(helper_config, handler)
        with pytest.raises(StoreUnavailable) as exc_info:
            await client.do_upsert(_entries(250))
        assert exc_info.value.details["failed_range"] == [100, 200]
        assert exc_info.value.details["committed"] == 100
        assert len(transport.requests) == 2
        await client.close()

    async def test_transport_error_reports_range(self, pinecone_env, helper_config) -> None:
        """Wraps a connection failure with the failing range."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client, _ = await _booted_pinecone(helper_config, handler)
        with pytest.raises(StoreUnavailable) as exc_info:
            await client.do_upsert(_entries(3))
        assert exc_info.value.details["failed_range"] == [0, 3]
        assert exc_info.value.details["committed"] == 0
        await client.close()

    async def test_dimension_rejection(self, pinecone_env, helper_config) -> None:
        """Maps a 400 about the vector dimension to DimensionMismatch."""
        client, _ = await _booted_pinecone(
            helper_config,
            lambda request: httpx.Response(400, json={"message": "Vector dimension 4 does not match the dimension of the index 768"}),
        )
        with pytest.raises(DimensionMismatch) as exc_info:
            await client.do_upsert(_entries(1))
        assert exc_info.value.actual == 4
        assert exc_info.value.expected is None
        await client.close()


class TestPineconeQuery:
    """Tests for Pinecone queries and counts."""

    async def test_query_sorted_and_truncated(self, pinecone_env, helper_config) -> None:
        """Orders matches by score and keeps at most k."""
        body = {"matches": [
            {"id": "a", "score": 0.2, "metadata": {"text": "low", "source_name": "x.txt"}},
            {"id": "b", "score": 0.9, "metadata": {"text": "high", "source_name": "x.txt"}},
            {"id": "c", "score": 0.5, "metadata": {"text": "mid"}},
        ]}
        client, transport = await _booted_pinecone(helper_config, lambda request: httpx.Response(200, json=body))
        matches = await client.do_query([0.1, 0.2, 0.3, 0.4], 2)
        assert [m.text for m in matches] == ["high", "mid"]
        sent = json.loads(transport.requests[0].content)
        assert sent["topK"] == 2
        assert sent["includeMetadata"] is True
        await client.close()

    async def test_count(self, pinecone_env, helper_config) -> None:
        """Reads totalVectorCount from the index stats."""
        client, _ = await _booted_pinecone(helper_config, lambda request: httpx.Response(200, json={"totalVectorCount": 42}))
        assert await client.do_count() == 42
        await client.close()

    async def test_unreachable(self, pinecone_env, helper_config) -> None:
        """Raises StoreUnavailable on a server error."""
        client, _ = await _booted_pinecone(helper_config, lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(StoreUnavailable):
            await client.do_query([0.1, 0.2, 0.3, 0.4], 3)
        await client.close()


class TestQdrantPrepare:
    """Tests for Qdrant collection setup."""

    @pytest.fixture
    def qdrant_env(self, env):
        env.setenv("RAG_QDRANT_BASE_URL", "http://qdrant:6333")
        env.delenv("RAG_QDRANT_API_KEY", raising=False)
        env.delenv("RAG_QDRANT_COLLECTION", raising=False)
        return env

    async def test_creates_missing_collection(self, qdrant_env, helper_config) -> None:
        """Creates the collection sized to EMBED_DIMENSIONS."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/exists"):
                return httpx.Response(200, json={"result": {"exists": False}})
            return httpx.Response(200, json={"result": True})

        transport = RecordingTransport(handler)
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot(transport=transport)
        await client.do_prepare()
        create = transport.requests[-1]
        assert create.method == "PUT"
        assert create.url.path == "/collections/rag_documents"
        assert json.loads(create.content) == {"vectors": {"size": 4, "distance": "Cosine"}}
        await client.close()

    async def test_existing_collection_untouched(self, qdrant_env, helper_config) -> None:
        """Does not recreate an existing collection."""
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"result": {"exists": True}}))
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot(transport=transport)
        await client.do_prepare()
        assert len(transport.requests) == 1
        await client.close()


class TestRAGClientManager:
    """Tests for engine selection."""

    def test_defaults_to_memory(self, helper_config) -> None:
        """Uses the in-process store by default."""
        assert RAGClientManager(helper_config=helper_config).get_client().get_engine_name() == "memory"

    def test_selects_pinecone(self, pinecone_env, helper_config) -> None:
        """Instantiates the configured remote engine."""
        assert isinstance(RAGClientManager(helper_config=helper_config).get_client(), RAGClientPinecone)

    def test_unknown_engine(self, env, helper_config) -> None:
        """Rejects an unsupported engine."""
        env.setenv("RAG_ENGINE", "faiss")
        with pytest.raises(InvalidConfiguration):
            RAGClientManager(helper_config=helper_config)
