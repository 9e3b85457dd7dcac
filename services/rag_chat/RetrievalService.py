"""Query-time retrieval: embed the question and fetch the closest stored chunks."""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.conversation import ToolDeclaration
from shared.models.document import EmbeddingIntent, RetrievalMatch

from services.rag_chat.PromptAssembler import CONTEXT_SEPARATOR

RETRIEVAL_TOP_K = 5
SEARCH_TOOL_NAME = "search_documents"


class RetrievalService:
    """Embeds queries with the QUERY intent and ranks stored chunks against them."""

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        store: VectorStoreInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._embed = embed_client
        self._store = store
        self._top_k = helper_config.get_positive_int_val("APP_RETRIEVAL_TOP_K", default=RETRIEVAL_TOP_K)

    async def do_retrieve(self, query: str, k: int | None = None) -> list[RetrievalMatch]:
        """Return the most relevant stored chunks for a query.

        Args:
            query (str): The user's question.
            k (int | None): Number of matches, defaults to APP_RETRIEVAL_TOP_K.

        Returns:
            list[RetrievalMatch]: At most k matches, best first.
        """
        vector = await self._embed.do_embed(query, EmbeddingIntent.QUERY)
        matches = await self._store.do_query(vector, k if k is not None else self._top_k, include_metadata=True)
        self.logging.info("Found %d relevant document chunks for query %r.", len(matches), query[:80])
        return matches

    def get_search_tool_declaration(self) -> ToolDeclaration:
        return ToolDeclaration(
            name=SEARCH_TOOL_NAME,
            description="Searches the uploaded documents for passages relevant to the user's question.",
            parameters={
                "type": "OBJECT",
                "properties": {
                    "query": {
                        "type": "STRING",
                        "description": "What to look for in the uploaded documents.",
                    },
                },
                "required": ["query"],
            },
        )

    async def do_search_tool(self, args: dict) -> dict:
        """Tool handler: retrieve context for the query the model asks about."""
        query = args.get("query")
        if not query:
            raise ValueError("Missing required argument 'query'.")
        matches = await self.do_retrieve(query)
        return {
            "context": CONTEXT_SEPARATOR.join(match.text for match in matches),
            "sources": sorted({match.source_name for match in matches if match.source_name}),
        }
