from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors import EmptyResponse
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.conversation import ConversationRole, ConversationTurn
from shared.models.generation import GenerationOptions


class LLMClientGemini(LLMClientInterface):
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
        return "gemini-2.5-flash"

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
        return f"/v1beta/models/{self.chat_model}"

    def _get_endpoint_generate(self, model: str) -> str:
        return f"/v1beta/models/{model}:generateContent"

    ################ PAYLOAD BUILDER ##################
    def get_generate_payload(self, conversation: list[ConversationTurn], options: GenerationOptions) -> dict:
        """Build the Gemini generateContent request body.

        Consecutive tool turns are merged into a single "user" content carrying
        one functionResponse part per tool result. Turns with neither text nor
        tool calls are left out.
        """
        payload = {
            "contents": self._build_contents(conversation),
            "generationConfig": {
                "temperature": options.generation_config.temperature,
                "topK": options.generation_config.top_k,
                "topP": options.generation_config.top_p,
                "maxOutputTokens": options.generation_config.max_output_tokens,
            },
            "safetySettings": [
                {"category": setting.category.value, "threshold": setting.threshold.value}
                for setting in options.safety.settings
            ],
        }
        if options.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": options.system_instruction}]}
        if options.tools:
            payload["tools"] = [{
                "functionDeclarations": [tool.model_dump(exclude_none=True) for tool in options.tools]
            }]
        return payload

    def _build_contents(self, conversation: list[ConversationTurn]) -> list[dict]:
        contents: list[dict] = []
        for turn in conversation:
            if turn.role == ConversationRole.TOOL:
                part = {
                    "functionResponse": {
                        "name": turn.tool_result.name,
                        "response": turn.tool_result.response,
                    }
                }
                if contents and contents[-1].get("_tool"):
                    contents[-1]["parts"].append(part)
                else:
                    contents.append({"role": "user", "parts": [part], "_tool": True})
                continue

            parts: list[dict] = []
            if turn.text:
                parts.append({"text": turn.text})
            for call in turn.tool_calls:
                parts.append({"functionCall": {"name": call.name, "args": call.args}})
            if not parts:
                # Gemini rejects contents without parts
                self.logging.debug("Skipping empty %s turn.", turn.role.value)
                continue
            contents.append({"role": turn.role.value, "parts": parts})

        for content in contents:
            content.pop("_tool", None)
        return contents

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_generation_result(self, response_data: dict) -> dict:
        """Translate a Gemini generateContent response.

        Text parts of the first candidate are concatenated; functionCall parts
        become tool call requests.
        """
        candidates = response_data.get("candidates") or []
        parts = ((candidates[0].get("content") or {}).get("parts") or []) if candidates else []

        texts: list[str] = []
        calls: list[dict] = []
        for part in parts:
            if part.get("functionCall"):
                call = part["functionCall"]
                calls.append({"name": call.get("name", ""), "args": call.get("args") or {}})
            elif part.get("text"):
                texts.append(part["text"])

        text = "".join(texts)
        if calls:
            return {
                "kind": "tool_calls",
                "calls": calls,
                "model_turn": {"role": "model", "text": text or None, "tool_calls": calls},
            }
        if text:
            return {"kind": "final_answer", "text": text}

        block_reason = (response_data.get("promptFeedback") or {}).get("blockReason")
        finish_reason = candidates[0].get("finishReason") if candidates else None
        raise EmptyResponse(
            "Gemini response contains neither text nor function calls.",
            details={"block_reason": block_reason, "finish_reason": finish_reason},
        )
