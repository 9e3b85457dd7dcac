from shared.helper.HelperConfig import HelperConfig
from shared.clients.tools.ToolClientInterface import ToolClientInterface
from shared.errors import InvalidConfiguration


class ToolClientManager:
    """
    Manager class to instantiate the external tool clients enabled in configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.clients = self._initialize_clients()

    def _get_engines_from_env(self) -> list[str]:
        """
        Reads the enabled tool engines from TOOL_ENGINES (e.g. "[weather,zoom]").

        Returns:
            list[str]: Capitalised engine names. Empty if no tools are enabled.
        """
        engines = self.helper_config.get_list_val("TOOL_ENGINES", default=[])
        return [engine.strip().lower().capitalize() for engine in engines]

    def _initialize_clients(self) -> list[ToolClientInterface]:
        """
        Initializes one client per enabled tool engine.

        Returns:
            list[ToolClientInterface]: The instantiated tool clients.

        Raises:
            InvalidConfiguration: If an engine is unsupported or two tools share a name.
        """
        clients: list[ToolClientInterface] = []
        for engine in self._get_engines_from_env():
            class_name = f"ToolClient{engine}"
            try:
                module = __import__(
                    f"shared.clients.tools.{engine.lower()}.{class_name}",
                    fromlist=[class_name],
                )
                client_class = getattr(module, class_name)
            except (ImportError, AttributeError) as e:
                raise InvalidConfiguration(f"Unsupported tool engine specified: '{engine}'. Error: {e}")
            clients.append(client_class(helper_config=self.helper_config))
            self.logging.debug("Instantiated tool client for engine: %s", engine)

        names = [client.get_tool_name() for client in clients]
        if len(names) != len(set(names)):
            raise InvalidConfiguration(f"Duplicate tool names configured: {names}")
        return clients

    def get_clients(self) -> list[ToolClientInterface]:
        """
        Returns the instantiated tool clients.
        """
        return self.clients
