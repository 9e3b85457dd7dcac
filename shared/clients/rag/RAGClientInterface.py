from abc import abstractmethod

import httpx

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.errors import DimensionMismatch, RagBridgeError, StoreUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import RetrievalMatch, VectorStoreEntry

UPSERT_BATCH_SIZE = 100  # max entries per upsert request


class RAGClientInterface(ClientInterface, VectorStoreInterface):
    """Base class for remote managed vector indexes reached over HTTP."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    def _get_error_class(self) -> type[RagBridgeError]:
        return StoreUnavailable

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_upsert(self) -> str:
        """
        Returns the endpoint path for upsert requests (e.g. "/vectors/upsert").
        """
        pass

    @abstractmethod
    def _get_upsert_method(self) -> str:
        """
        Returns the HTTP method used for upsert requests (e.g. "POST").
        """
        pass

    @abstractmethod
    def _get_endpoint_query(self) -> str:
        """
        Returns the endpoint path for similarity queries (e.g. "/query").
        """
        pass

    @abstractmethod
    def _get_endpoint_count(self) -> str:
        """
        Returns the endpoint path for counting stored vectors.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_upsert_payload(self, entries: list[VectorStoreEntry]) -> dict:
        """
        Builds the backend-specific body for upserting one batch of entries.

        Args:
            entries (list[VectorStoreEntry]): At most UPSERT_BATCH_SIZE entries.

        Returns:
            dict: The payload for the upsert request.
        """
        pass

    @abstractmethod
    def get_query_payload(self, vector: list[float], k: int, include_metadata: bool) -> dict:
        """
        Builds the backend-specific body for a similarity query.

        Returns:
            dict: The payload for the query request.
        """
        pass

    @abstractmethod
    def get_count_payload(self) -> dict:
        """
        Builds the backend-specific body for a count request.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_matches(self, raw_response: dict) -> list[RetrievalMatch]:
        """
        Extracts the ranked matches from a raw query response.

        Args:
            raw_response (dict): The raw JSON response from the query endpoint.

        Returns:
            list[RetrievalMatch]: Matches in the order the backend ranked them.
        """
        pass

    @abstractmethod
    def extract_count(self, raw_response: dict) -> int:
        """
        Extracts the number of stored vectors from a raw count response.
        """
        pass

    def _raise_for_store_error(self, response: httpx.Response, vector_size: int, details: dict | None = None) -> None:
        """Translate a non-2xx backend response into DimensionMismatch or StoreUnavailable.

        Args:
            response (httpx.Response): The failed response.
            vector_size (int): Dimensionality of the vector(s) sent.
            details (dict | None): Extra context for the raised error.
        """
        details = {**(details or {}), "status": response.status_code, "backend": self.get_engine_name()}
        body = response.text[:500]
        self.logging.error(
            "%s request failed with status %d: %s", self.get_engine_name(), response.status_code, body
        )
        if response.status_code == 400 and "dimension" in body.lower():
            raise DimensionMismatch(expected=None, actual=vector_size, details={**details, "backend_message": body})
        raise StoreUnavailable(
            f"Vector store '{self.get_engine_name()}' answered with status {response.status_code}",
            details=details,
        )

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_upsert(self, entries: list[VectorStoreEntry]) -> None:
        """Upsert entries in sequential batches of UPSERT_BATCH_SIZE.

        Batches that succeeded before a failure stay committed; the failing
        batch's entry range is reported and the remaining batches are not sent.

        Args:
            entries (list[VectorStoreEntry]): The entries to store.

        Raises:
            StoreUnavailable: If a batch cannot be delivered. details carry
                "failed_range" ([start, end)) and "committed".
            DimensionMismatch: If the backend rejects a batch for its dimensionality.
        """
        for batch_start in range(0, len(entries), UPSERT_BATCH_SIZE):
            batch = entries[batch_start: batch_start + UPSERT_BATCH_SIZE]
            batch_end = batch_start + len(batch)
            range_details = {"failed_range": [batch_start, batch_end], "committed": batch_start, "total": len(entries)}
            try:
                response = await self.do_request(
                    method=self._get_upsert_method(),
                    json=self.get_upsert_payload(batch),
                    endpoint=self._get_endpoint_upsert(),
                )
            except StoreUnavailable as e:
                raise StoreUnavailable(
                    f"Upsert of entries [{batch_start}, {batch_end}) to '{self.get_engine_name()}' failed: {e.message}",
                    details={**e.details, **range_details},
                ) from e
            if response.status_code >= 300:
                self._raise_for_store_error(response, vector_size=len(batch[0].embedding), details=range_details)
            self.logging.debug(
                "Upserted entries [%d, %d) of %d to %s.", batch_start, batch_end, len(entries), self.get_engine_name()
            )
        self.logging.info("Upserted %d entries to %s.", len(entries), self.get_engine_name())

    async def do_query(self, vector: list[float], k: int, include_metadata: bool = True) -> list[RetrievalMatch]:
        """Query the remote index for the k nearest vectors.

        Raises:
            StoreUnavailable: If the backend cannot be reached or fails.
            DimensionMismatch: If the backend rejects the vector's dimensionality.
        """
        if k <= 0:
            return []
        response = await self.do_request(
            method="POST",
            json=self.get_query_payload(vector, k, include_metadata),
            endpoint=self._get_endpoint_query(),
        )
        if response.status_code >= 300:
            self._raise_for_store_error(response, vector_size=len(vector))
        matches = self.extract_matches(response.json())
        return sorted(matches, key=lambda match: match.score, reverse=True)[:k]

    async def do_count(self) -> int:
        response = await self.do_request(
            method="POST",
            json=self.get_count_payload(),
            endpoint=self._get_endpoint_count(),
            raise_on_error=True,
        )
        return self.extract_count(response.json())
