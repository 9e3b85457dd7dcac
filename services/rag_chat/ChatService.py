"""Chat service: the two answer profiles served over HTTP.

- do_chat: RAG prompt. Retrieve context, assemble one prompt, single generation call.
- do_generate: conversational. History, system instruction and function-calling tools.
"""

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.tools.ToolClientInterface import ToolClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.conversation import ConversationTurn
from shared.models.generation import GenerationOptions

from services.rag_chat.PromptAssembler import assemble_prompt
from services.rag_chat.RetrievalService import SEARCH_TOOL_NAME, RetrievalService
from services.rag_chat.ToolDispatcher import ToolDispatcher, ToolHandler

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant. Use the available tools when they help to answer "
    "the user's question, and search the uploaded documents when the question refers to them."
)


class ChatService:
    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        retrieval_service: RetrievalService,
        tool_clients: list[ToolClientInterface] | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._llm = llm_client
        self._retrieval = retrieval_service
        self._tool_clients = tool_clients or []
        self._system_instruction = helper_config.get_string_val("APP_SYSTEM_INSTRUCTION", default=SYSTEM_INSTRUCTION)

    ##########################################
    ############### PROFILES #################
    ##########################################

    async def do_chat(self, query: str, history: list[ConversationTurn] | None = None) -> str:
        """Answer a question from the uploaded documents only.

        The history is accepted for interface symmetry but not sent; the RAG
        profile answers every question from a single assembled prompt. An
        empty store still produces a generation call with an empty context.

        Args:
            query (str): The user's question.
            history (list[ConversationTurn] | None): Ignored.

        Returns:
            str: The model's answer.
        """
        if history:
            self.logging.debug("RAG chat ignores %d history turn(s).", len(history))
        matches = await self._retrieval.do_retrieve(query)
        prompt = assemble_prompt([match.text for match in matches], query)
        options = GenerationOptions(
            safety=self._llm.get_safety_config(),
            generation_config=self._llm.get_generation_config(),
            model=self._llm.chat_model,
        )
        return await self._llm.do_generate_text(prompt, options)

    async def do_generate(self, query: str, history: list[ConversationTurn] | None = None) -> str:
        """Answer a message in an ongoing conversation, calling tools if the model asks.

        Args:
            query (str): The new user message.
            history (list[ConversationTurn] | None): Prior user/model turns, oldest first.

        Returns:
            str: The model's final answer.
        """
        conversation = [*(history or []), ConversationTurn.user(query)]
        handlers = self.get_tool_handlers()
        options = GenerationOptions(
            safety=self._llm.get_safety_config(),
            generation_config=self._llm.get_generation_config(),
            system_instruction=self._system_instruction or None,
            tools=self.get_tool_declarations(),
            model=self._llm.tool_model,
        )
        dispatcher = ToolDispatcher(self._helper_config, self._llm, handlers)
        answer = await dispatcher.do_run(conversation, options)
        self.logging.debug("Conversational answer finished in state %s.", dispatcher.state.value)
        return answer

    ##########################################
    ################# TOOLS ##################
    ##########################################

    def get_tool_declarations(self):
        return [
            self._retrieval.get_search_tool_declaration(),
            *[client.get_declaration() for client in self._tool_clients],
        ]

    def get_tool_handlers(self) -> dict[str, ToolHandler]:
        handlers: dict[str, ToolHandler] = {SEARCH_TOOL_NAME: self._retrieval.do_search_tool}
        for client in self._tool_clients:
            handlers[client.get_tool_name()] = client.do_execute
        return handlers
