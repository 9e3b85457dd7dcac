from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.document import RetrievalMatch, VectorStoreEntry


class RAGClientPinecone(RAGClientInterface):
    """Pinecone data-plane client.

    Re-upserting an existing id replaces the stored vector and metadata.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._index_host = self.get_config_val("INDEX_HOST", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._namespace = self.get_config_val("NAMESPACE", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Pinecone"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="INDEX_HOST", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="NAMESPACE", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Api-Key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        host = self._index_host
        return host if host.startswith("http") else f"https://{host}"

    def _get_endpoint_healthcheck(self) -> str:
        return "/describe_index_stats"

    def _get_endpoint_upsert(self) -> str:
        return "/vectors/upsert"

    def _get_upsert_method(self) -> str:
        return "POST"

    def _get_endpoint_query(self) -> str:
        return "/query"

    def _get_endpoint_count(self) -> str:
        return "/describe_index_stats"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, entries: list[VectorStoreEntry]) -> dict:
        payload = {
            "vectors": [
                {"id": entry.id, "values": entry.embedding, "metadata": entry.get_metadata()}
                for entry in entries
            ]
        }
        if self._namespace:
            payload["namespace"] = self._namespace
        return payload

    def get_query_payload(self, vector: list[float], k: int, include_metadata: bool) -> dict:
        payload = {
            "vector": vector,
            "topK": k,
            "includeMetadata": include_metadata,
            "includeValues": False,
        }
        if self._namespace:
            payload["namespace"] = self._namespace
        return payload

    def get_count_payload(self) -> dict:
        return {}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[RetrievalMatch]:
        matches: list[RetrievalMatch] = []
        for match in raw_response.get("matches", []):
            metadata = match.get("metadata") or {}
            matches.append(RetrievalMatch(
                id=match.get("id"),
                text=metadata.get("text", ""),
                score=match.get("score", 0.0),
                document_id=metadata.get("document_id"),
                source_name=metadata.get("source_name"),
            ))
        return matches

    def extract_count(self, raw_response: dict) -> int:
        if self._namespace:
            return raw_response.get("namespaces", {}).get(self._namespace, {}).get("vectorCount", 0)
        return raw_response.get("totalVectorCount", 0)
