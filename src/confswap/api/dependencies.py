"""FastAPI dependencies."""

from fastapi import Request

from confswap.session import SwapSession


def get_session(request: Request) -> SwapSession:
    """Session attached to the application by create_app."""
    return request.app.state.session
