"""
Bookkeeping Core: FastAPI application.

This is the entry point for the application.
Logging is configured and all routers are registered here.
"""

import logging

from fastapi import FastAPI

from bookkeeping.config import get_settings
from bookkeeping.api.health import router as health_router
from bookkeeping.api.organizations import router as organizations_router
from bookkeeping.api.rules import router as rules_router
from bookkeeping.api.periods import router as periods_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Bank statement classification, double-entry journal "
        "generation and trial balance reporting"
    ),
    debug=settings.DEBUG,
)

# Register routers
app.include_router(health_router)
app.include_router(organizations_router)
app.include_router(rules_router)
app.include_router(periods_router)
