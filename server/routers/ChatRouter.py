from fastapi import APIRouter, HTTPException, Request

from server.core.request_guard import run_guarded
from server.models.requests import ChatRequest
from server.models.responses import ChatResponse

router = APIRouter(prefix="/api", tags=["chat"])


def _require_query(body: ChatRequest) -> str:
    if not body.query or not body.query.strip():
        raise HTTPException(status_code=400, detail="Query is required.")
    return body.query


@router.post("/chat")
async def chat(request: Request, body: ChatRequest) -> ChatResponse:
    """Answer a question from the uploaded documents (RAG prompt, no tools).

    Args:
        request (Request): FastAPI request (provides app.state.chat_service).
        body (ChatRequest): JSON body with query and history.

    Returns:
        ChatResponse: The model's answer.
    """
    query = _require_query(body)
    chat_service = request.app.state.chat_service
    answer = await run_guarded(
        request,
        chat_service.do_chat(query, body.get_history_turns()),
        failure_message="Failed to generate a response.",
    )
    return ChatResponse(message="Response generated successfully.", response=answer)


@router.post("/generate")
async def generate(request: Request, body: ChatRequest) -> ChatResponse:
    """Continue a conversation; the model may call tools, including document search.

    Args:
        request (Request): FastAPI request (provides app.state.chat_service).
        body (ChatRequest): JSON body with query and history.

    Returns:
        ChatResponse: The model's final answer.
    """
    query = _require_query(body)
    chat_service = request.app.state.chat_service
    answer = await run_guarded(
        request,
        chat_service.do_generate(query, body.get_history_turns()),
        failure_message="Failed to generate a response.",
    )
    return ChatResponse(message="Response generated successfully.", response=answer)
