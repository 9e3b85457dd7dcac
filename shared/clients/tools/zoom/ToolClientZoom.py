import base64
from typing import Any

from pydantic import BaseModel

from shared.clients.tools.ToolClientInterface import ToolClientInterface
from shared.errors import RagBridgeError, ToolExecutionError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.conversation import ToolDeclaration


class ZoomToken(BaseModel):
    """Outcome of the OAuth account-credentials exchange. Exactly one of access_token / error is set."""

    access_token: str | None = None
    expires_in: int | None = None
    error: str | None = None


class ToolClientZoom(ToolClientInterface):
    """Meeting creation through the Zoom REST API (server-to-server OAuth)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.zoom.us/v2", val_type="string")
        self._oauth_url = self.get_config_val("OAUTH_URL", default="https://zoom.us/oauth/token", val_type="string")
        self._account_id = self.get_config_val("ACCOUNT_ID", default=None, val_type="string")
        self._client_id = self.get_config_val("CLIENT_ID", default=None, val_type="string")
        self._client_secret = self.get_config_val("CLIENT_SECRET", default=None, val_type="string")
        self._timezone = self.get_config_val("TIMEZONE", default="Asia/Singapore", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Zoom"

    def get_declaration(self) -> ToolDeclaration:
        return ToolDeclaration(
            name="create_zoom_meeting",
            description="Create a zoom meeting.",
            parameters={
                "type": "OBJECT",
                "properties": {
                    "topic": {
                        "type": "STRING",
                        "description": "The topic of the meeting.",
                    },
                    "start_time": {
                        "type": "STRING",
                        "description": (
                            "The meeting's start time. The start_time must be in the datetime "
                            "format of YYYY-MM-DDTHH:mm:ssZ. The timezone (Z) is +08:00."
                        ),
                    },
                    "meeting_invitees": {
                        "type": "ARRAY",
                        "description": "List of meeting invitees' email.",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "email": {
                                    "type": "STRING",
                                    "description": "The invitee's email.",
                                },
                            },
                        },
                    },
                },
                "required": ["topic", "start_time", "meeting_invitees"],
            },
        )

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="ACCOUNT_ID", val_type="string", default=None),
            EnvConfig(env_key="CLIENT_ID", val_type="string", default=None),
            EnvConfig(env_key="CLIENT_SECRET", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # bearer token is fetched per call, see do_fetch_token
        return {}

    def _get_basic_auth_header(self) -> dict:
        credentials = base64.b64encode(f"{self._client_id}:{self._client_secret}".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {credentials}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def _get_endpoint_meetings(self) -> str:
        return "/users/me/meetings"

    ################ PAYLOAD BUILDER ##################
    def get_meeting_payload(self, topic: str, start_time: str, invitees: list) -> dict:
        emails = [
            {"email": invitee["email"] if isinstance(invitee, dict) else str(invitee)}
            for invitee in invitees
        ]
        return {
            "topic": topic,
            "type": 2,  # scheduled meeting
            "start_time": start_time,
            "timezone": self._timezone,
            "settings": {"meeting_invitees": emails},
        }

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_token(self) -> ZoomToken:
        """Exchange the account credentials for an access token.

        Never raises: failures are returned in ZoomToken.error.

        Returns:
            ZoomToken: access_token and expires_in, or error.
        """
        try:
            response = await self.do_request(
                method="POST",
                base_url=self._oauth_url,
                params={"grant_type": "account_credentials", "account_id": self._account_id},
                additional_headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    **self._get_basic_auth_header(),
                },
                raise_on_error=True,
            )
            data = response.json()
        except (RagBridgeError, ValueError) as e:
            self.logging.error("Zoom token exchange failed: %s", e)
            return ZoomToken(error=str(e))

        if not isinstance(data, dict):
            self.logging.error("Zoom token response is not a JSON object: %r", data)
            return ZoomToken(error="Token response is not a JSON object.")
        access_token = data.get("access_token")
        if not access_token:
            return ZoomToken(error=data.get("reason") or data.get("error") or "Token response contained no access_token.")
        return ZoomToken(access_token=access_token, expires_in=data.get("expires_in"))

    async def do_execute(self, args: dict[str, Any]) -> dict[str, Any]:
        topic = self._require_arg(args, "topic")
        start_time = self._require_arg(args, "start_time")
        invitees = args.get("meeting_invitees") or []

        token = await self.do_fetch_token()
        if token.error:
            raise ToolExecutionError(
                "Could not obtain a Zoom access token.",
                details={"reason": token.error},
                tool_name=self.get_tool_name(),
            )

        self.logging.info("Creating Zoom meeting %r at %s with %d invitee(s).", topic, start_time, len(invitees))
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_meetings(),
            json=self.get_meeting_payload(topic, start_time, invitees),
            additional_headers={"Authorization": f"Bearer {token.access_token}"},
            raise_on_error=True,
        )
        return response.json()
