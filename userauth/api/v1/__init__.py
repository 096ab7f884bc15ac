"""
API v1 routes.
"""

from fastapi import APIRouter

from userauth.api.v1 import rpc

router = APIRouter()

router.include_router(rpc.router, tags=["RPC"])
