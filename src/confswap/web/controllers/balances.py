"""Encrypted balance endpoints.

Reading a balance only fetches its ciphertext handle. The plaintext is
revealed by an explicit decrypt request.
"""

from fastapi import APIRouter, Depends, HTTPException

from confswap.api.dependencies import get_session
from confswap.assets import AssetId, get_asset_info
from confswap.balance.decryptor import BalanceView
from confswap.errors import DecryptError
from confswap.session import SwapSession
from confswap.web.contracts.balances import BalanceResponse

router = APIRouter(prefix="/balances", tags=["balances"])


def _parse_asset(asset: str) -> AssetId:
    try:
        return AssetId.parse(asset)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _response(view: BalanceView) -> BalanceResponse:
    return BalanceResponse(symbol=get_asset_info(view.asset).symbol, **view.to_dict())


def _http_error(error: DecryptError) -> HTTPException:
    return HTTPException(status_code=502, detail=error.to_info().to_dict())


@router.get("/{asset}", response_model=BalanceResponse)
async def get_balance(asset: str, session: SwapSession = Depends(get_session)) -> BalanceResponse:
    """Get the balance view, refreshing its encrypted handle."""
    asset_id = _parse_asset(asset)
    try:
        view = await session.decryptor.refresh(asset_id)
    except DecryptError as e:
        raise _http_error(e)
    return _response(view)


@router.post("/{asset}/decrypt", response_model=BalanceResponse)
async def decrypt_balance(asset: str, session: SwapSession = Depends(get_session)) -> BalanceResponse:
    """Reveal the current balance of an asset."""
    asset_id = _parse_asset(asset)
    try:
        view = await session.decryptor.decrypt(asset_id)
    except DecryptError as e:
        raise _http_error(e)
    return _response(view)
