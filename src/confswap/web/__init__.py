"""Web boundary layer.

Pydantic contracts and FastAPI controllers the UI talks to. Controllers
only translate between HTTP and the session components; all swap logic
lives in confswap.swap.
"""

__all__ = [
    "contracts",
    "controllers",
]
