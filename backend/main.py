"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import plaid
from config import settings
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Ledger Sync",
    description="Plaid transaction sync and webhook processing",
    version="0.1.0",
    debug=settings.DEBUG,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plaid.router)

logger.info("Plaid environment: %s", settings.PLAID_ENVIRONMENT)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
