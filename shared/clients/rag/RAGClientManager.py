from shared.helper.HelperConfig import HelperConfig
from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.errors import InvalidConfiguration


class RAGClientManager:
    """
    Manager class to instantiate the vector store backend selected by configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the vector store engine from ENV configuration.

        Returns:
            str: Capitalised engine name (e.g. "Memory", "Pinecone", "Qdrant").
        """
        engine = self.helper_config.get_string_val("RAG_ENGINE", default="memory")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> VectorStoreInterface:
        """
        Initializes the vector store for the configured engine.

        Returns:
            VectorStoreInterface: The instantiated store.

        Raises:
            InvalidConfiguration: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"RAGClient{engine}"
        try:
            module = __import__(
                f"shared.clients.rag.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise InvalidConfiguration(f"Unsupported RAG engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated RAG client for engine: %s", engine)
        return client

    def get_client(self) -> VectorStoreInterface:
        """
        Returns the instantiated vector store.

        Returns:
            VectorStoreInterface: The store instance.
        """
        return self.client
