import asyncio

import pytest

from shared.clients.rag.memory.RAGClientMemory import RAGClientMemory
from shared.errors import DimensionMismatch
from shared.models.document import VectorStoreEntry


def _entry(entry_id: str, embedding: list[float], text: str | None = None) -> VectorStoreEntry:
    return VectorStoreEntry(
        id=entry_id,
        embedding=embedding,
        text=text or f"text of {entry_id}",
        document_id="doc-1",
        source_name="notes.txt",
    )


@pytest.fixture
def store(helper_config) -> RAGClientMemory:
    return RAGClientMemory(helper_config=helper_config)


class TestMemoryStoreQuery:
    """Tests for querying the in-process store."""

    async def test_empty_store_returns_nothing(self, store) -> None:
        """An empty store yields no matches."""
        assert await store.do_query([1.0, 0.0], 5) == []

    async def test_returns_at_most_k_stored_entries(self, store) -> None:
        """Returns no more than k matches, all from stored ids."""
        await store.do_upsert([_entry(f"e{i}", [float(i), 1.0]) for i in range(6)])
        matches = await store.do_query([1.0, 1.0], 3)
        assert len(matches) == 3
        assert {m.id for m in matches} <= {f"e{i}" for i in range(6)}
        assert [m.score for m in matches] == sorted((m.score for m in matches), reverse=True)

    async def test_self_retrieval_ranks_first(self, store) -> None:
        """Querying with a stored vector returns that entry first."""
        await store.do_upsert([
            _entry("a", [1.0, 0.0, 0.0]),
            _entry("b", [0.0, 1.0, 0.0]),
            _entry("c", [0.2, 0.1, 0.9]),
        ])
        matches = await store.do_query([0.2, 0.1, 0.9], 2)
        assert matches[0].id == "c"
        assert matches[0].score == pytest.approx(1.0)
        assert matches[0].text == "text of c"
        assert matches[0].source_name == "notes.txt"

    async def test_without_metadata(self, store) -> None:
        """Omits text and document fields when metadata is not requested."""
        await store.do_upsert([_entry("a", [1.0, 0.0])])
        [match] = await store.do_query([1.0, 0.0], 1, include_metadata=False)
        assert match.id == "a"
        assert match.text == ""
        assert match.document_id is None

    async def test_query_dimension_mismatch(self, store) -> None:
        """Rejects a query vector of the wrong length."""
        await store.do_upsert([_entry("a", [1.0, 0.0])])
        with pytest.raises(DimensionMismatch) as exc_info:
            await store.do_query([1.0, 0.0, 0.0], 1)
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3


class TestMemoryStoreUpsert:
    """Tests for storing entries."""

    async def test_first_entry_fixes_dimensions(self, store) -> None:
        """The first stored vector sets the dimensionality."""
        assert store.get_dimensions() is None
        await store.do_upsert([_entry("a", [1.0, 2.0, 3.0])])
        assert store.get_dimensions() == 3

    async def test_mismatched_batch_rejected_whole(self, store) -> None:
        """A batch with one bad vector stores nothing."""
        await store.do_upsert([_entry("a", [1.0, 2.0])])
        with pytest.raises(DimensionMismatch):
            await store.do_upsert([_entry("b", [1.0, 2.0]), _entry("c", [1.0, 2.0, 3.0])])
        assert await store.do_count() == 1

    async def test_duplicate_id_is_appended(self, store) -> None:
        """Re-upserting an id adds a second entry."""
        await store.do_upsert([_entry("a", [1.0, 0.0])])
        await store.do_upsert([_entry("a", [1.0, 0.0])])
        assert await store.do_count() == 2

    async def test_concurrent_upserts_all_stored(self, store) -> None:
        """Parallel upserts lose no entries."""
        await asyncio.gather(*[store.do_upsert([_entry(f"e{i}", [1.0, float(i)])]) for i in range(20)])
        assert await store.do_count() == 20
