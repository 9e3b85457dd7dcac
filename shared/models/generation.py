"""Pydantic models for generation options: sampling config and safety settings."""

from enum import Enum

from pydantic import BaseModel

from shared.models.conversation import ToolDeclaration


class HarmCategory(str, Enum):
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


class HarmBlockThreshold(str, Enum):
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"


class SafetySetting(BaseModel):
    category: HarmCategory
    threshold: HarmBlockThreshold


class SafetyConfig(BaseModel):
    """Content-risk categories, each mapped to a block threshold.

    This is a compliance control: clients pass it to the model unmodified on
    every call.
    """

    settings: list[SafetySetting]

    @classmethod
    def uniform(cls, threshold: HarmBlockThreshold = HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE) -> "SafetyConfig":
        """Build a config that applies the same threshold to every category."""
        return cls(settings=[SafetySetting(category=category, threshold=threshold) for category in HarmCategory])


class GenerationConfig(BaseModel):
    temperature: float = 0.9
    top_k: int = 1
    top_p: float = 1.0
    max_output_tokens: int = 2048


class GenerationOptions(BaseModel):
    """Per-call options for the generation client.

    Attributes:
        safety:             Safety settings, passed through unchanged.
        generation_config:  Sampling parameters.
        system_instruction: Optional system prompt (conversational profile).
        tools:              Function declarations the model may call.
        model:              Model identifier override; None uses the client's chat model.
    """

    safety: SafetyConfig
    generation_config: GenerationConfig = GenerationConfig()
    system_instruction: str | None = None
    tools: list[ToolDeclaration] = []
    model: str | None = None
