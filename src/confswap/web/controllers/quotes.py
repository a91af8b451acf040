"""Quote API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from confswap.api.dependencies import get_session
from confswap.session import SwapSession
from confswap.web.contracts.quotes import QuoteRequest, QuoteResponse

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteResponse)
async def get_quote(
    request: QuoteRequest,
    session: SwapSession = Depends(get_session),
) -> QuoteResponse:
    """Get the counter-amount for a swap.

    Pure computation against the reference price table. An empty or
    unparsable amount is not an error: the response has available=false.
    """
    try:
        result = session.orchestrator.quote(request.amount, request.from_asset, request.to_asset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result is None:
        return QuoteResponse(
            success=True,
            available=False,
            from_asset=request.from_asset.upper(),
            to_asset=request.to_asset.upper(),
        )

    return QuoteResponse(
        success=True,
        available=True,
        from_asset=result.from_asset.value,
        to_asset=result.to_asset.value,
        amount=result.amount,
        rate=result.rate,
        output_amount=result.output_amount,
    )
