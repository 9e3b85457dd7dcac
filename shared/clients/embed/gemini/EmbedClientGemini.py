from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.errors import EmbeddingServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.document import EmbeddingIntent


class EmbedClientGemini(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    def _get_default_model(self) -> str:
        return "gemini-embedding-001"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/v1beta/models/{self.embed_model}"

    def get_endpoint_embedding(self) -> str:
        return f"/v1beta/models/{self.embed_model}:embedContent"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str, intent: EmbeddingIntent, dimensions: int) -> dict:
        """Build the Gemini embedContent request body.

        Returns:
            dict: {"model": "models/...", "content": {"parts": [{"text": ...}]},
                   "taskType": "RETRIEVAL_...", "outputDimensionality": N}
        """
        return {
            "model": f"models/{self.embed_model}",
            "content": {"parts": [{"text": text}]},
            "taskType": intent.value,
            "outputDimensionality": dimensions,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the vector from a Gemini embedContent response.

        Accepts both {"embedding": {"values": [...]}} and the batched
        {"embeddings": [{"values": [...]}]} shape.
        """
        embedding = response_data.get("embedding")
        if embedding is None:
            embeddings = response_data.get("embeddings") or []
            embedding = embeddings[0] if embeddings else None
        values = (embedding or {}).get("values")
        if not values:
            raise EmbeddingServiceError(
                "Gemini response does not contain embedding values. "
                "Response keys: %s" % list(response_data.keys())
            )
        return [float(v) for v in values]
