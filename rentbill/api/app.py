"""Rentbill FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rentbill.api import bills, renters
from rentbill.api.errors import error_response, from_store_error
from rentbill.services import init_models
from rentbill.services.errors import BillStoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    await init_models()
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Rentbill API",
    description="Monthly rent bills with metered utilities, expenses and payments",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(bills.router)
app.include_router(renters.router)


@app.exception_handler(BillStoreError)
async def store_error_handler(request: Request, exc: BillStoreError) -> JSONResponse:
    error = from_store_error(exc)
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=error.http_status, content=error_response(error))


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
