from typing import Literal

from pydantic import BaseModel

from shared.models.conversation import ConversationTurn


class HistoryPart(BaseModel):
    text: str = ""


class HistoryMessage(BaseModel):
    role: Literal["user", "model"]
    parts: list[HistoryPart] = []

    def to_turn(self) -> ConversationTurn:
        text = "".join(part.text for part in self.parts)
        return ConversationTurn.user(text) if self.role == "user" else ConversationTurn.model(text)


class ChatRequest(BaseModel):
    query: str | None = None
    history: list[HistoryMessage] = []

    def get_history_turns(self) -> list[ConversationTurn]:
        """Convert the history to conversation turns, dropping messages without text."""
        turns = [message.to_turn() for message in self.history]
        return [turn for turn in turns if turn.text]
