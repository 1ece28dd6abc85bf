from fastapi import FastAPI
from dishka.integrations.fastapi import setup_dishka

from core.container import container
from core.exception_handler import register_exception_handlers
from token_events.router import router as token_events_router

VERSION = "0.4.2"

app = FastAPI(
    title="Token Events Service",
    version=VERSION,
    description="Balances, prepared calls and recent events of the Sepolia test tokens",
)

setup_dishka(container, app)
register_exception_handlers(app)

app.include_router(token_events_router)


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns
    -------
    dict
        Application information
    """
    return {
        "name": "Token Events Service",
        "version": VERSION,
        "endpoints": {
            "events": "/api/events",
            "balances": "/api/tokens/balances",
            "allowance": "/api/tokens/allowance",
            "transactions": "/api/tokens/transactions",
            "network": "/api/network",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health():
    """
    Health check endpoint.

    Returns
    -------
    dict
        Health status
    """
    return {"status": "healthy", "version": VERSION}
