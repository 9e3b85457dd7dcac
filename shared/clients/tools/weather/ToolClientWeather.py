from typing import Any

from shared.clients.tools.ToolClientInterface import ToolClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.conversation import ToolDeclaration


class ToolClientWeather(ToolClientInterface):
    """Current-weather lookup against a WeatherAPI-compatible endpoint."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.weatherapi.com/v1", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Weather"

    def get_declaration(self) -> ToolDeclaration:
        return ToolDeclaration(
            name="get_current_temperature",
            description="Gets the current temperature for a given location.",
            parameters={
                "type": "OBJECT",
                "properties": {
                    "location": {
                        "type": "STRING",
                        "description": "The city name, e.g. San Francisco",
                    },
                },
                "required": ["location"],
            },
        )

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.weatherapi.com/v1"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # key travels as query parameter
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def _get_endpoint_current(self) -> str:
        return "/current.json"

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_execute(self, args: dict[str, Any]) -> dict[str, Any]:
        location = self._require_arg(args, "location")
        self.logging.info("Fetching current weather for %r.", location)
        response = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_current(),
            params={"key": self._api_key, "q": location},
            raise_on_error=True,
        )
        payload = response.json()
        return payload if isinstance(payload, dict) else {"result": payload}
