"""
Coffee Catalog Backend: Chain Route Handlers
==============================================

GET /chains/{chain_id}: name of a supported chain.
Invalid or unsupported ids answer 400 through the ValidationError handler.
"""

from fastapi import APIRouter

from catalog.schemas.common import ChainResponse, ErrorResponse
from catalog.services.chain_service import chain_service

router = APIRouter(prefix="/chains", tags=["Chains"])


@router.get(
    "/{chain_id}",
    response_model=ChainResponse,
    responses={400: {"description": "Invalid or unsupported chain id", "model": ErrorResponse}},
    summary="Look up a chain by id",
)
async def get_chain_info(chain_id: str) -> ChainResponse:
    parsed = chain_service.parse_chain_id(chain_id)
    return ChainResponse(name=chain_service.get_chain_name(parsed), chain_id=int(parsed))
