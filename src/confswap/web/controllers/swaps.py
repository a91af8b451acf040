"""Swap API endpoints.

Submitting returns immediately with the execution in ENCRYPTING; the UI
polls /swaps/current for progress. Failures after validation are reported
as state, not as HTTP errors.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from confswap.api.dependencies import get_session
from confswap.errors import ValidationError
from confswap.session import SwapSession
from confswap.swap.models import SwapIntent
from confswap.web.contracts.swaps import SwapRequest, SwapStateResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/swaps", tags=["swaps"])


def _state(session: SwapSession) -> SwapStateResponse:
    orchestrator = session.orchestrator
    execution = orchestrator.current
    return SwapStateResponse(
        phase=orchestrator.phase.value,
        is_encrypting=orchestrator.is_encrypting,
        execution=execution.to_dict() if execution else None,
        explorer_url=session.explorer_url(execution.tx_hash if execution else None),
    )


@router.post("", response_model=SwapStateResponse, status_code=202)
async def submit_swap(
    request: SwapRequest,
    session: SwapSession = Depends(get_session),
) -> SwapStateResponse:
    """Start a swap, superseding any swap still in flight."""
    try:
        intent = SwapIntent.create(request.from_asset, request.to_asset, request.amount)
        session.orchestrator.submit(intent)
    except ValidationError as e:
        logger.info(f"Rejected swap request: {e}")
        raise HTTPException(status_code=400, detail=e.to_info().to_dict())

    return _state(session)


@router.get("/current", response_model=SwapStateResponse)
async def get_current_swap(session: SwapSession = Depends(get_session)) -> SwapStateResponse:
    """Get the live swap state."""
    return _state(session)


@router.post("/reset", response_model=SwapStateResponse)
async def reset_swap(session: SwapSession = Depends(get_session)) -> SwapStateResponse:
    """Clear the live swap. A broadcast transaction is not recalled."""
    session.orchestrator.reset()
    return _state(session)
