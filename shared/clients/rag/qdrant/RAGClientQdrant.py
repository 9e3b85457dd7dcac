from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.document import RetrievalMatch, VectorStoreEntry


class RAGClientQdrant(RAGClientInterface):
    """Qdrant REST client.

    Points are upserted by id: re-upserting an existing id replaces the point.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="rag_documents", val_type="string")
        self._distance = self.get_config_val("DISTANCE", default="Cosine", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default="rag_documents"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_upsert(self) -> str:
        return f"/collections/{self._collection_name}/points"

    def _get_upsert_method(self) -> str:
        return "PUT"

    def _get_endpoint_query(self) -> str:
        return f"/collections/{self._collection_name}/points/search"

    def _get_endpoint_count(self) -> str:
        return f"/collections/{self._collection_name}/points/count"

    def _get_endpoint_check_collection_existence(self) -> str:
        return f"/collections/{self._collection_name}/exists"

    def _get_endpoint_create_collection(self) -> str:
        return f"/collections/{self._collection_name}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, entries: list[VectorStoreEntry]) -> dict:
        return {
            "points": [
                {"id": entry.id, "vector": entry.embedding, "payload": entry.get_metadata()}
                for entry in entries
            ]
        }

    def get_query_payload(self, vector: list[float], k: int, include_metadata: bool) -> dict:
        return {"vector": vector, "limit": k, "with_payload": include_metadata}

    def get_count_payload(self) -> dict:
        return {"exact": True}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[RetrievalMatch]:
        matches: list[RetrievalMatch] = []
        for point in raw_response.get("result", []):
            payload = point.get("payload") or {}
            matches.append(RetrievalMatch(
                id=str(point.get("id")),
                text=payload.get("text", ""),
                score=point.get("score", 0.0),
                document_id=payload.get("document_id"),
                source_name=payload.get("source_name"),
            ))
        return matches

    def extract_count(self, raw_response: dict) -> int:
        return raw_response.get("result", {}).get("count", 0)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_existence_check(self) -> bool:
        """Check if the collection exists in Qdrant.

        Returns:
            bool: True if the collection exists, False otherwise.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_check_collection_existence(), raise_on_error=True)
        return bool(resp.json().get("result", {}).get("exists"))

    async def do_create_collection(self, vector_size: int) -> None:
        """Create the collection with the given vector size and the configured distance."""
        await self.do_request(
            method="PUT",
            json={"vectors": {"size": vector_size, "distance": self._distance}},
            endpoint=self._get_endpoint_create_collection(),
            raise_on_error=True,
        )

    async def do_prepare(self) -> None:
        """Create the collection sized to EMBED_DIMENSIONS if it does not exist yet."""
        if await self.do_existence_check():
            self.logging.info("Qdrant collection %r already exists.", self._collection_name)
            return
        vector_size = self._helper_config.get_positive_int_val("EMBED_DIMENSIONS")
        await self.do_create_collection(vector_size)
        self.logging.info("Created Qdrant collection %r with vector size %d.", self._collection_name, vector_size)
