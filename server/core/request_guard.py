"""Request-level timeout and error mapping shared by the API routers."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import HTTPException, Request

from shared.errors import RagBridgeError

T = TypeVar("T")

REQUEST_TIMEOUT = 120  # seconds


async def run_guarded(request: Request, awaitable: Awaitable[T], failure_message: str) -> T:
    """Await a service call under APP_REQUEST_TIMEOUT and map failures to HTTP errors.

    Internal error detail is logged only; the client receives a generic message.

    Args:
        request (Request): FastAPI request (provides app.state).
        awaitable (Awaitable[T]): The service coroutine.
        failure_message (str): Message returned to the client on failure.

    Returns:
        T: The service result.

    Raises:
        HTTPException: 504 on timeout, 500 on any other failure.
    """
    logging = request.app.state.logging
    timeout = request.app.state.helper_config.get_number_val("APP_REQUEST_TIMEOUT", default=REQUEST_TIMEOUT)
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logging.error("%s %s timed out after %ss.", request.method, request.url.path, timeout)
        raise HTTPException(status_code=504, detail="The request took too long to complete.")
    except RagBridgeError as e:
        logging.error("%s %s failed: %s", request.method, request.url.path, e)
        raise HTTPException(status_code=500, detail=failure_message)
    except Exception:
        logging.exception("Unexpected error in %s %s.", request.method, request.url.path)
        raise HTTPException(status_code=500, detail=failure_message)
