"""
FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from userauth.api.gateway import RpcGateway


def get_gateway(request: Request) -> RpcGateway:
    """The gateway wired onto app state during startup."""
    return request.app.state.gateway


Gateway = Annotated[RpcGateway, Depends(get_gateway)]
