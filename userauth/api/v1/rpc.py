"""
HTTP binding for the RPC gateway.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from userauth.api.deps import Gateway

router = APIRouter()


@router.get("/rpc")
async def list_patterns(gateway: Gateway) -> dict[str, list[str]]:
    """List the message patterns the gateway accepts."""
    return {"patterns": gateway.patterns}


@router.post("/rpc/{pattern}")
async def call(
    pattern: str,
    gateway: Gateway,
    payload: Optional[dict[str, Any]] = Body(default=None),
):
    """
    Dispatch one operation.

    The response status mirrors the reply: 2xx with the result body, or the
    error's status with ``{status_code, message}``.
    """
    reply = await gateway.dispatch(pattern, payload)
    return JSONResponse(status_code=reply.status_code, content=reply.body)
