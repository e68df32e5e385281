"""
Finance Tracker FastAPI application.

This is the entry point for the application.
Logging is configured and all routers are registered here.
"""

import logging

from fastapi import FastAPI

from finance_tracker.config import LOG_FORMAT, get_settings
from finance_tracker.api.health import router as health_router
from finance_tracker.api.accounts import router as accounts_router
from finance_tracker.api.categories import router as categories_router
from finance_tracker.api.transactions import router as transactions_router
from finance_tracker.api.imports import router as imports_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL,
    format=LOG_FORMAT,
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance ledger with CSV import reconciliation",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(categories_router)
app.include_router(transactions_router)
app.include_router(imports_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "finance_tracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
