from fastapi import APIRouter, Request

from shared.errors import RagBridgeError
from server.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> HealthResponse:
    """Report whether the vector store answers and how many entries it holds."""
    store = request.app.state.store
    try:
        entries = await store.do_count()
    except RagBridgeError as e:
        request.app.state.logging.warning("Health check: vector store '%s' unavailable: %s", store.get_engine_name(), e)
        return HealthResponse(status="degraded", vector_store=store.get_engine_name())
    return HealthResponse(status="ok", vector_store=store.get_engine_name(), entries=entries)
