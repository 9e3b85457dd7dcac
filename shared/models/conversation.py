"""Pydantic models for conversations, tool calls and generation results.

These are the provider-neutral shapes exchanged between services and the
generation client. Each LLM engine translates them to and from its own wire
format.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class ConversationRole(str, Enum):
    USER = "user"
    MODEL = "model"
    TOOL = "tool"


class ToolDeclaration(BaseModel):
    """A function the model may call, described with a JSON-schema-like parameter object."""

    name: str
    description: str
    parameters: dict[str, Any] | None = None


class ToolInvocationRequest(BaseModel):
    """A named operation with arguments requested by the model."""

    name: str
    args: dict[str, Any] = {}


class ToolInvocationResult(BaseModel):
    """The structured outcome of executing one ToolInvocationRequest.

    Attributes:
        name:     Name of the tool that was invoked.
        response: JSON payload handed back to the model. For failures this is
                  an error-shaped payload ({"error": ..., "tool": ...}).
        is_error: True when the invocation failed.
    """

    name: str
    response: dict[str, Any]
    is_error: bool = False


class ConversationTurn(BaseModel):
    """One role-tagged message in a dialogue.

    A user turn carries text. A model turn carries text and/or the tool calls
    it requested. A tool turn carries exactly one tool result.
    """

    role: ConversationRole
    text: str | None = None
    tool_calls: list[ToolInvocationRequest] = []
    tool_result: ToolInvocationResult | None = None

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(role=ConversationRole.USER, text=text)

    @classmethod
    def model(cls, text: str | None = None, tool_calls: list[ToolInvocationRequest] | None = None) -> "ConversationTurn":
        return cls(role=ConversationRole.MODEL, text=text, tool_calls=tool_calls or [])

    @classmethod
    def tool(cls, result: ToolInvocationResult) -> "ConversationTurn":
        return cls(role=ConversationRole.TOOL, tool_result=result)


class FinalAnswer(BaseModel):
    """The model answered with text."""

    kind: Literal["final_answer"] = "final_answer"
    text: str


class ToolCallsRequested(BaseModel):
    """The model asked for one or more tool invocations.

    Attributes:
        calls:      The requested invocations, in the order the model emitted them.
        model_turn: The model's own turn, to be appended to the conversation
                    before the tool results.
    """

    kind: Literal["tool_calls"] = "tool_calls"
    calls: list[ToolInvocationRequest]
    model_turn: ConversationTurn


GenerationResult = Annotated[Union[FinalAnswer, ToolCallsRequested], Field(discriminator="kind")]
