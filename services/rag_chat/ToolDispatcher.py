"""Single-round function-call dispatch.

    AWAITING_MODEL --FinalAnswer--> DONE
    AWAITING_MODEL --ToolCallsRequested--> EXECUTING_TOOLS --> AWAITING_FOLLOWUP --> DONE

Every requested invocation gets exactly one result. A failing tool never
aborts the others: its error is returned to the model as an error-shaped
payload. Exactly one follow-up generation call is made per round.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors import EmptyResponse, RagBridgeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.conversation import (
    ConversationTurn,
    FinalAnswer,
    ToolCallsRequested,
    ToolInvocationRequest,
    ToolInvocationResult,
)
from shared.models.generation import GenerationOptions

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class DispatchState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    AWAITING_FOLLOWUP = "awaiting_followup"
    DONE = "done"


class ToolDispatcher:
    """Runs one generate → execute tools → generate round for a single request."""

    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        handlers: dict[str, ToolHandler],
    ) -> None:
        self.logging = helper_config.get_logger()
        self._llm = llm_client
        self._handlers = handlers
        self.state = DispatchState.AWAITING_MODEL
        self.results: list[ToolInvocationResult] = []

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_run(self, conversation: list[ConversationTurn], options: GenerationOptions) -> str:
        """Generate an answer, executing one round of tool calls if the model asks for them.

        Args:
            conversation (list[ConversationTurn]): History plus the new user turn.
            options (GenerationOptions): Generation options including the tool declarations.

        Returns:
            str: The final answer text.

        Raises:
            GenerationServiceError: If a generation call fails.
            EmptyResponse: If a generation call returns nothing, or the follow-up
                call requests further tools.
        """
        self.state = DispatchState.AWAITING_MODEL
        result = await self._llm.do_generate(conversation, options)
        if isinstance(result, FinalAnswer):
            self.state = DispatchState.DONE
            return result.text

        self.state = DispatchState.EXECUTING_TOOLS
        self.logging.info("Model requested %d tool call(s): %s", len(result.calls), [c.name for c in result.calls])
        self.results = await self._execute_all(result.calls)

        followup = [
            *conversation,
            result.model_turn,
            *[ConversationTurn.tool(tool_result) for tool_result in self.results],
        ]

        self.state = DispatchState.AWAITING_FOLLOWUP
        final = await self._llm.do_generate(followup, options)
        self.state = DispatchState.DONE

        if isinstance(final, ToolCallsRequested):
            self.logging.error(
                "Follow-up generation requested further tool calls %s; only one tool round is executed.",
                [c.name for c in final.calls],
            )
            raise EmptyResponse(
                "Follow-up generation requested further tool calls instead of answering.",
                details={"tools": [c.name for c in final.calls]},
            )
        return final.text

    ##########################################
    ############ TOOL EXECUTION ##############
    ##########################################

    async def _execute_all(self, calls: list[ToolInvocationRequest]) -> list[ToolInvocationResult]:
        return list(await asyncio.gather(*[self._execute_one(call) for call in calls]))

    async def _execute_one(self, call: ToolInvocationRequest) -> ToolInvocationResult:
        handler = self._handlers.get(call.name)
        if handler is None:
            self.logging.error("Model requested unknown tool %r; known tools: %s", call.name, sorted(self._handlers))
            return self._error_result(call.name, f"Unknown tool '{call.name}'.")

        try:
            response = await handler(call.args)
        except RagBridgeError as e:
            self.logging.error("Tool %r failed: %s", call.name, e)
            return self._error_result(call.name, e.message, e.details)
        except Exception as e:
            self.logging.exception("Tool %r raised an unexpected error.", call.name)
            return self._error_result(call.name, f"{type(e).__name__}: {e}")

        if not isinstance(response, dict):
            response = {"result": response}
        self.logging.debug("Tool %r succeeded.", call.name)
        return ToolInvocationResult(name=call.name, response=response)

    def _error_result(self, name: str, message: str, details: dict | None = None) -> ToolInvocationResult:
        payload: dict[str, Any] = {"error": message, "tool": name}
        if details:
            payload["details"] = {key: str(value) for key, value in details.items()}
        return ToolInvocationResult(name=name, response=payload, is_error=True)
