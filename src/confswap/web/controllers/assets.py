"""Asset and chain context endpoints."""

from fastapi import APIRouter, Depends

from confswap.api.dependencies import get_session
from confswap.assets import PRICE_TABLE, get_contract_address
from confswap.session import SwapSession
from confswap.web.contracts.assets import AssetInfo, AssetListResponse, ContextResponse

router = APIRouter(tags=["assets"])


@router.get("/assets", response_model=AssetListResponse)
async def list_assets(session: SwapSession = Depends(get_session)) -> AssetListResponse:
    """Get the price table with configured contract addresses."""
    assets = [
        AssetInfo(
            id=asset.value,
            symbol=info.symbol,
            name=info.name,
            decimals=info.decimals,
            price=info.price,
            contract_address=get_contract_address(asset, session.settings),
        )
        for asset, info in PRICE_TABLE.items()
    ]
    return AssetListResponse(assets=assets, total=len(assets))


@router.get("/context", response_model=ContextResponse)
async def get_context(session: SwapSession = Depends(get_session)) -> ContextResponse:
    """Get the session account and re-read the connected network."""
    await session.start()
    return ContextResponse(**session.context.to_dict())
