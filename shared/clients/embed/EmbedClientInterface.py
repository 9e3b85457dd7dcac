from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors import EmbeddingServiceError, InvalidConfiguration, RagBridgeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import EmbeddingIntent


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model())
        self.embed_dimensions = helper_config.get_positive_int_val(f"{self.get_client_type().upper()}_DIMENSIONS", default=None)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "embed"

    def _get_error_class(self) -> type[RagBridgeError]:
        return EmbeddingServiceError

    @abstractmethod
    def _get_default_model(self) -> str:
        """
        Returns the model identifier used when EMBED_MODEL is not set.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/v1beta/models/gemini-embedding-001:embedContent")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str, intent: EmbeddingIntent, dimensions: int) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            text (str): The text to embed.
            intent (EmbeddingIntent): Retrieval task hint, passed to the backend unchanged.
            dimensions (int): Requested output dimensionality.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the embedding vector from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[float]: The embedding vector.

        Raises:
            EmbeddingServiceError: If the response does not contain vector data.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str, intent: EmbeddingIntent, dimensions: int | None = None) -> list[float]:
        """Embed a single text with the given retrieval intent.

        One outbound request per call; no caching and no retry.

        Args:
            text (str): The text to embed.
            intent (EmbeddingIntent): DOCUMENT for indexing, QUERY for searching.
            dimensions (int | None): Output dimensionality, defaults to EMBED_DIMENSIONS.

        Returns:
            list[float]: The embedding vector.

        Raises:
            InvalidConfiguration: If the dimensionality is not a positive integer.
            EmbeddingServiceError: On transport failure, non-2xx status, malformed response
                or a vector of the wrong length.
        """
        dimensions = dimensions if dimensions is not None else self.embed_dimensions
        if not dimensions or dimensions <= 0:
            raise InvalidConfiguration(f"Embedding dimensionality must be a positive integer, got {dimensions!r}.")

        body = self.get_embed_payload(text, intent, dimensions)
        response = await self.do_request(method="POST", endpoint=self.get_endpoint_embedding(), json=body)
        if response.status_code != 200:
            self.logging.error(
                "Embedding request failed: status %d, body: %s",
                response.status_code,
                response.text[:200],
            )
            raise EmbeddingServiceError(
                "Embedding request failed with status %d." % response.status_code,
                details={"status": response.status_code, "intent": intent.value},
            )
        try:
            response_data = response.json()
        except ValueError as e:
            raise EmbeddingServiceError("Embedding response is not valid JSON.") from e

        vector = self.extract_embedding_from_response(response_data)
        if len(vector) != dimensions:
            self.logging.error(
                "Embedding model '%s' returned %d dimensions, expected %d.",
                self.embed_model, len(vector), dimensions,
            )
            raise EmbeddingServiceError(
                "Embedding response has %d dimensions, expected %d." % (len(vector), dimensions),
                details={"expected": dimensions, "actual": len(vector), "intent": intent.value},
            )
        return vector
