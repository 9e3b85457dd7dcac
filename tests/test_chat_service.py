import httpx
import pytest

from shared.clients.embed.gemini.EmbedClientGemini import EmbedClientGemini
from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini
from shared.clients.rag.memory.RAGClientMemory import RAGClientMemory
from shared.models.conversation import ConversationTurn
from shared.models.document import VectorStoreEntry
from services.rag_chat.ChatService import ChatService
from services.rag_chat.RetrievalService import SEARCH_TOOL_NAME, RetrievalService

from tests.helpers import RecordingTransport, embedding_response, function_call_response, text_response

QUERY_VECTOR = [1.0, 0.0, 0.0, 0.0]


class ChatHarness:
    def __init__(self, helper_config, llm_responses):
        queue = list(llm_responses)
        self.embed_transport = RecordingTransport(lambda request: embedding_response(QUERY_VECTOR))
        self.llm_transport = RecordingTransport(lambda request: queue.pop(0))
        self.embed = EmbedClientGemini(helper_config=helper_config)
        self.llm = LLMClientGemini(helper_config=helper_config)
        self.store = RAGClientMemory(helper_config=helper_config)
        self.retrieval = RetrievalService(helper_config=helper_config, embed_client=self.embed, store=self.store)
        self.service = ChatService(helper_config=helper_config, llm_client=self.llm, retrieval_service=self.retrieval)

    async def boot(self) -> "ChatHarness":
        await self.embed.boot(transport=self.embed_transport)
        await self.llm.boot(transport=self.llm_transport)
        return self

    async def add(self, entry_id: str, text: str, embedding: list[float]) -> None:
        await self.store.do_upsert([VectorStoreEntry(
            id=entry_id, embedding=embedding, text=text, document_id="doc", source_name="facts.txt",
        )])


class TestRagChat:
    """Tests for the RAG prompt profile."""

    async def test_empty_store_still_calls_generation(self, helper_config) -> None:
        """Sends a prompt with an empty context section."""
        harness = await ChatHarness(helper_config, [text_response("I don't have enough information.")]).boot()
        answer = await harness.service.do_chat("What is the capital?", [])
        assert answer == "I don't have enough information."
        [body] = harness.llm_transport.json_bodies()
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "CONTEXT:\n\n\nQUESTION:\nWhat is the capital?" in prompt

    async def test_context_ordered_by_relevance(self, helper_config) -> None:
        """Puts the most similar chunk first and embeds with the query intent."""
        harness = await ChatHarness(helper_config, [text_response("Paris.")]).boot()
        await harness.add("far", "Bananas are yellow.", [0.0, 1.0, 0.0, 0.0])
        await harness.add("near", "Paris is the capital of France.", [0.9, 0.1, 0.0, 0.0])
        await harness.service.do_chat("capital of France?")
        prompt = harness.llm_transport.json_bodies()[0]["contents"][0]["parts"][0]["text"]
        assert prompt.index("Paris is the capital") < prompt.index("Bananas")
        assert harness.embed_transport.json_bodies()[0]["taskType"] == "RETRIEVAL_QUERY"

    async def test_history_not_sent(self, helper_config) -> None:
        """Sends a single user turn regardless of history and no tools."""
        harness = await ChatHarness(helper_config, [text_response("ok")]).boot()
        history = [ConversationTurn.user("earlier"), ConversationTurn.model("reply")]
        await harness.service.do_chat("now?", history)
        body = harness.llm_transport.json_bodies()[0]
        assert len(body["contents"]) == 1
        assert "tools" not in body

    async def test_top_k_respected(self, env, helper_config) -> None:
        """Retrieves at most APP_RETRIEVAL_TOP_K chunks."""
        env.setenv("APP_RETRIEVAL_TOP_K", "2")
        harness = await ChatHarness(helper_config, [text_response("ok")]).boot()
        for i in range(5):
            await harness.add(f"e{i}", f"chunk-{i}", [1.0, float(i), 0.0, 0.0])
        matches = await harness.retrieval.do_retrieve("q")
        assert len(matches) == 2

    async def test_explicit_zero_k(self, helper_config) -> None:
        """Returns no matches for k=0 instead of falling back to the default."""
        harness = await ChatHarness(helper_config, []).boot()
        await harness.add("e0", "chunk", [1.0, 0.0, 0.0, 0.0])
        assert await harness.retrieval.do_retrieve("q", k=0) == []


class TestConversationalGenerate:
    """Tests for the conversational profile with tools."""

    async def test_history_system_instruction_and_tools(self, env, helper_config) -> None:
        """Sends history, the system instruction, the search tool and the tool model."""
        env.setenv("APP_SYSTEM_INSTRUCTION", "You are terse.")
        env.setenv("LLM_TOOL_MODEL", "tuned-chat")
        harness = await ChatHarness(helper_config, [text_response("Hi again.")]).boot()
        history = [ConversationTurn.user("Hello"), ConversationTurn.model("Hi!")]
        answer = await harness.service.do_generate("How are you?", history)
        assert answer == "Hi again."
        request = harness.llm_transport.requests[0]
        assert request.url.path == "/v1beta/models/tuned-chat:generateContent"
        body = harness.llm_transport.json_bodies()[0]
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
        assert body["systemInstruction"]["parts"][0]["text"] == "You are terse."
        names = [d["name"] for d in body["tools"][0]["functionDeclarations"]]
        assert names == [SEARCH_TOOL_NAME]

    async def test_search_tool_round_trip(self, helper_config) -> None:
        """Runs document search as a tool and answers from its result."""
        harness = await ChatHarness(helper_config, [
            function_call_response((SEARCH_TOOL_NAME, {"query": "vacation policy"})),
            text_response("You get 30 days."),
        ]).boot()
        await harness.add("p", "Employees get 30 vacation days.", [1.0, 0.0, 0.0, 0.0])
        answer = await harness.service.do_generate("How many vacation days?")
        assert answer == "You get 30 days."
        followup = harness.llm_transport.json_bodies()[1]["contents"]
        response = followup[-1]["parts"][0]["functionResponse"]["response"]
        assert "Employees get 30 vacation days." in response["context"]
        assert response["sources"] == ["facts.txt"]

    async def test_search_tool_requires_query(self, helper_config) -> None:
        """Rejects a search call without a query."""
        harness = ChatHarness(helper_config, [])
        with pytest.raises(ValueError):
            await harness.retrieval.do_search_tool({})
