from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.errors import RagBridgeError, ToolExecutionError
from shared.helper.HelperConfig import HelperConfig
from shared.models.conversation import ToolDeclaration


class ToolClientInterface(ClientInterface):
    """Base class for external services the model can call as tools.

    Each implementation owns one tool: its declaration (what the model sees)
    and its execution (what happens when the model calls it). Results are
    opaque JSON passed back to the model unchanged.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "tool"

    def _get_error_class(self) -> type[RagBridgeError]:
        return ToolExecutionError

    def get_tool_name(self) -> str:
        """
        Returns the function name the model uses to call this tool.
        """
        return self.get_declaration().name

    @abstractmethod
    def get_declaration(self) -> ToolDeclaration:
        """
        Returns the function declaration advertised to the model.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_execute(self, args: dict[str, Any]) -> dict[str, Any]:
        """Execute the tool with the arguments the model supplied.

        Args:
            args (dict[str, Any]): Arguments from the model's function call.

        Returns:
            dict[str, Any]: JSON payload handed back to the model.

        Raises:
            ToolExecutionError: If the call cannot be completed.
        """
        pass

    def _require_arg(self, args: dict[str, Any], name: str) -> Any:
        """Return a required argument or raise ToolExecutionError."""
        value = args.get(name)
        if value in (None, "", []):
            raise ToolExecutionError(f"Missing required argument '{name}'.", tool_name=self.get_tool_name())
        return value
