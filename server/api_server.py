"""FastAPI application entry point for the RAG bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.tools.ToolClientManager import ToolClientManager
from services.rag_chat.ChatService import ChatService
from services.rag_chat.RetrievalService import RetrievalService
from services.rag_chat.UploadService import UploadService
from server.routers.ChatRouter import router as chat_router
from server.routers.HealthRouter import router as health_router
from server.routers.UploadRouter import router as upload_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.helper_config).get_client()
    store = RAGClientManager(helper_config=app.state.helper_config).get_client()
    tool_clients = ToolClientManager(helper_config=app.state.helper_config).get_clients()
    clients = [embed_client, llm_client, store, *tool_clients]

    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    logging.info("All clients booted successfully.")

    await check_connections(embed_client, llm_client, store)
    await store.do_prepare()

    app.state.embed_client = embed_client
    app.state.llm_client = llm_client
    app.state.store = store
    app.state.tool_clients = tool_clients

    retrieval_service = RetrievalService(
        helper_config=app.state.helper_config,
        embed_client=embed_client,
        store=store,
    )
    app.state.upload_service = UploadService(
        helper_config=app.state.helper_config,
        embed_client=embed_client,
        store=store,
    )
    app.state.chat_service = ChatService(
        helper_config=app.state.helper_config,
        llm_client=llm_client,
        retrieval_service=retrieval_service,
        tool_clients=tool_clients,
    )
    logging.info("RAG bridge ready (store=%s, tools=%s).", store.get_engine_name(), [t.get_tool_name() for t in tool_clients])

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in clients:
        await client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="rag_bridge",
    description=(
        "Document chat backend. Uploaded files are chunked, embedded and stored in a vector store; "
        "POST /api/chat answers from retrieved context, POST /api/generate runs a conversation "
        "in which the model may call tools."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router)
app.include_router(chat_router)
app.include_router(health_router)


async def check_connections(
    embed_client: EmbedClientInterface,
    llm_client: LLMClientInterface,
    store: VectorStoreInterface,
) -> None:
    """Check connectivity to the store, embedding and generation backends on startup.

    Tools are not probed: their APIs need per-call credentials, and a failing
    tool only produces an error result for the model.

    Raises:
        RagBridgeError: If a backend is not reachable.
    """
    await store.do_healthcheck()
    await embed_client.do_healthcheck()
    await llm_client.do_healthcheck()


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting rag_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
