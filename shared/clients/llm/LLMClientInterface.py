from abc import abstractmethod

from pydantic import TypeAdapter

from shared.clients.ClientInterface import ClientInterface
from shared.errors import EmptyResponse, GenerationServiceError, RagBridgeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.conversation import ConversationTurn, FinalAnswer, GenerationResult, ToolCallsRequested
from shared.models.generation import GenerationConfig, GenerationOptions, HarmBlockThreshold, SafetyConfig

_GENERATION_RESULT = TypeAdapter(GenerationResult)


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default=self._get_default_model())
        # conversational + tools profile, e.g. a fine-tuned variant
        self.tool_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_TOOL_MODEL", default=self.chat_model)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    def _get_error_class(self) -> type[RagBridgeError]:
        return GenerationServiceError

    @abstractmethod
    def _get_default_model(self) -> str:
        """Returns the model identifier used when LLM_CHAT_MODEL is not set."""
        pass

    ################ CONFIG ##################
    def get_safety_config(self) -> SafetyConfig:
        """Build the safety settings from LLM_SAFETY_THRESHOLD (default BLOCK_MEDIUM_AND_ABOVE).

        Raises:
            ValueError: If the configured threshold is not a known value.
        """
        raw = self._helper_config.get_string_val("LLM_SAFETY_THRESHOLD", default=HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE.value)
        return SafetyConfig.uniform(HarmBlockThreshold(raw.upper()))

    def get_generation_config(self) -> GenerationConfig:
        """Build the sampling parameters from LLM_TEMPERATURE, LLM_TOP_K, LLM_TOP_P and LLM_MAX_OUTPUT_TOKENS."""
        defaults = GenerationConfig()
        return GenerationConfig(
            temperature=self._helper_config.get_number_val("LLM_TEMPERATURE", default=defaults.temperature),
            top_k=int(self._helper_config.get_number_val("LLM_TOP_K", default=defaults.top_k)),
            top_p=self._helper_config.get_number_val("LLM_TOP_P", default=defaults.top_p),
            max_output_tokens=int(self._helper_config.get_number_val("LLM_MAX_OUTPUT_TOKENS", default=defaults.max_output_tokens)),
        )

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_generate(self, model: str) -> str:
        """Returns the endpoint path for generation requests with the given model."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_generate_payload(self, conversation: list[ConversationTurn], options: GenerationOptions) -> dict:
        """Build the backend-specific request body for a generation request.

        Safety settings in options must be written to the payload unmodified.

        Args:
            conversation (list[ConversationTurn]): History plus the new turn(s).
            options (GenerationOptions): Safety, sampling, system instruction and tools.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_generation_result(self, response_data: dict) -> dict:
        """Translate a raw generation response into a GenerationResult-shaped dict.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            dict: {"kind": "final_answer", "text": ...} or
                  {"kind": "tool_calls", "calls": [...], "model_turn": {...}}.

        Raises:
            EmptyResponse: If the response carries neither text nor function calls.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_generate(self, conversation: list[ConversationTurn], options: GenerationOptions) -> FinalAnswer | ToolCallsRequested:
        """Send a generation request and return a tagged result.

        Args:
            conversation (list[ConversationTurn]): History plus the new turn(s); must not be empty.
            options (GenerationOptions): Per-call options.

        Returns:
            FinalAnswer | ToolCallsRequested: ToolCallsRequested only when tools were
                declared and the model elected to call them.

        Raises:
            GenerationServiceError: On transport or auth failure or a non-2xx status.
            EmptyResponse: If neither text nor tool calls are present.
        """
        if not conversation:
            raise ValueError("Cannot generate from an empty conversation.")
        model = options.model or self.chat_model
        body = self.get_generate_payload(conversation, options)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_generate(model),
            json=body,
            raise_on_error=True,
        )
        try:
            response_data = response.json()
        except ValueError as e:
            raise GenerationServiceError("Generation response is not valid JSON.") from e

        result = _GENERATION_RESULT.validate_python(self.extract_generation_result(response_data))
        if isinstance(result, ToolCallsRequested) and not options.tools:
            raise EmptyResponse("Model requested tool calls although no tools were declared.")
        self.logging.debug("Generation with model '%s' returned %s.", model, result.kind)
        return result

    async def do_generate_text(self, prompt: str, options: GenerationOptions) -> str:
        """Single-prompt convenience wrapper (RAG-prompt profile: no tools, no history).

        Returns:
            str: The answer text.
        """
        result = await self.do_generate([ConversationTurn.user(prompt)], options.model_copy(update={"tools": []}))
        return result.text
