"""
Coffee Catalog Backend: Root & Miscellaneous Routes
=====================================================

    GET /              "Hello World!" (API key)
    GET /misc/custom   hand-built plain-text response
    GET /misc/teapot   418, echoes the JSON body back
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from catalog.dependencies import require_api_key

router = APIRouter(tags=["Misc"])


@router.get(
    "/",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_api_key)],
    summary="Greeting",
)
async def hello() -> str:
    return "Hello World!"


@router.get("/misc/custom", response_class=PlainTextResponse, summary="Custom response")
async def custom_response() -> PlainTextResponse:
    return PlainTextResponse("This returned all coffee", status_code=200)


@router.get("/misc/teapot", status_code=418, summary="I'm a teapot")
async def teapot(body: Optional[Dict[str, Any]] = Body(default=None)) -> JSONResponse:
    return JSONResponse(status_code=418, content=body)
