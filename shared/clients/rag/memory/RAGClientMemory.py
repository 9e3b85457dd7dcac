"""In-process vector store.

Holds every entry in an ordered list and scores all of them on each query
(linear scan). Entirely volatile: nothing survives a process restart.

Re-upserting an id that is already stored appends a second entry with the
same id; entries are never replaced or deleted.
"""

import threading

from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.clients.rag.memory.similarity import top_k
from shared.errors import DimensionMismatch
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import RetrievalMatch, VectorStoreEntry


class RAGClientMemory(VectorStoreInterface):
    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._entries: list[VectorStoreEntry] = []
        self._dimensions: int | None = None
        # guards append; queries read a snapshot taken under the lock
        self._lock = threading.Lock()

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        return "memory"

    def get_dimensions(self) -> int | None:
        """Dimensionality fixed by the first stored entry, None while empty."""
        return self._dimensions

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self, transport=None) -> None:
        return None

    async def close(self) -> None:
        return None

    async def do_healthcheck(self) -> None:
        return None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_upsert(self, entries: list[VectorStoreEntry]) -> None:
        """Append entries to the store.

        The whole call is rejected before anything is appended if one entry's
        dimensionality disagrees with the store.

        Raises:
            DimensionMismatch: If an entry's vector length differs from the stored dimensionality.
        """
        if not entries:
            return
        with self._lock:
            expected = self._dimensions if self._dimensions is not None else len(entries[0].embedding)
            for entry in entries:
                if len(entry.embedding) != expected:
                    raise DimensionMismatch(expected=expected, actual=len(entry.embedding), details={"entry_id": entry.id})
            self._entries.extend(entries)
            self._dimensions = expected
            total = len(self._entries)
        self.logging.info("Stored %d entries in memory store (total: %d).", len(entries), total)

    async def do_query(self, vector: list[float], k: int, include_metadata: bool = True) -> list[RetrievalMatch]:
        """Rank every stored entry by cosine similarity and return the top k.

        Operates on the entries present when the call starts.

        Raises:
            DimensionMismatch: If the query vector's length differs from the stored dimensionality.
        """
        with self._lock:
            snapshot = list(self._entries)
            dimensions = self._dimensions

        if not snapshot or k <= 0:
            self.logging.debug("Memory store query on %d entries with k=%d returns nothing.", len(snapshot), k)
            return []
        if len(vector) != dimensions:
            raise DimensionMismatch(expected=dimensions, actual=len(vector))

        ranked = top_k(vector, [entry.embedding for entry in snapshot], k)
        matches: list[RetrievalMatch] = []
        for index, score in ranked:
            entry = snapshot[index]
            if include_metadata:
                matches.append(RetrievalMatch(
                    id=entry.id,
                    text=entry.text,
                    score=score,
                    document_id=entry.document_id,
                    source_name=entry.source_name,
                ))
            else:
                matches.append(RetrievalMatch(id=entry.id, text="", score=score))
        self.logging.debug("Memory store query scored %d entries, returning %d.", len(snapshot), len(matches))
        return matches

    async def do_count(self) -> int:
        with self._lock:
            return len(self._entries)
