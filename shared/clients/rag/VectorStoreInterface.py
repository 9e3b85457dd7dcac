from abc import ABC, abstractmethod

from shared.models.document import RetrievalMatch, VectorStoreEntry


class VectorStoreInterface(ABC):
    """Capability interface shared by every vector store backend.

    Services only talk to this interface; the concrete backend (in-process or
    a remote managed index) is chosen by configuration in RAGClientManager.
    """

    ##########################################
    ################ GETTER ##################
    ##########################################

    @abstractmethod
    def get_engine_name(self) -> str:
        """
        Returns the name of the store backend in lowercase. E.g. "memory"
        """
        pass

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    @abstractmethod
    async def boot(self, transport=None) -> None:
        """Acquire the resources the store needs before serving requests."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release all resources."""
        pass

    @abstractmethod
    async def do_healthcheck(self):
        """Check the backend is reachable.

        Raises:
            StoreUnavailable: If the backend cannot be reached.
        """
        pass

    async def do_prepare(self) -> None:
        """Create whatever the backend needs before the first upsert (e.g. a collection)."""
        return None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_upsert(self, entries: list[VectorStoreEntry]) -> None:
        """Store entries.

        Whether re-upserting an existing id replaces or duplicates it is
        backend-specific and documented on each implementation.

        Raises:
            StoreUnavailable: If the backend cannot be reached.
            DimensionMismatch: If an entry's vector disagrees with the stored dimensionality.
        """
        pass

    @abstractmethod
    async def do_query(self, vector: list[float], k: int, include_metadata: bool = True) -> list[RetrievalMatch]:
        """Return at most k matches ordered by descending relevance.

        Raises:
            StoreUnavailable: If the backend cannot be reached.
            DimensionMismatch: If the vector disagrees with the stored dimensionality.
        """
        pass

    @abstractmethod
    async def do_count(self) -> int:
        """Return the number of stored entries."""
        pass
