# Storefront/src/storefront/main.py
# @ai-rules:
# 1. [Route order]: /health and /not-found must be registered before /{slug}, otherwise the slug route captures them.
# 2. [Dependency]: get_storefront_client yields a request-scoped client. Tests override it via app.dependency_overrides.
# 3. [Errors]: StorefrontError is handled here only. Loader code raises; it never converts errors to responses.
"""
Storefront - FastAPI application entry point.

Serves storefront page records for the presentation layer:
1. Resolves live/test mode from the request host
2. Fetches business + products from the upstream payments API
3. Redirects to /not-found when the business slug does not exist
"""

import os
import logging
from typing import AsyncIterator

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from .errors import ConfigError, StorefrontError
from .models import PageNotFound, StorefrontPage
from .page_loader import load_page_title, load_storefront_page
from .storefront_client import StorefrontClient

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configuration from environment
SERVICE_NAME = os.getenv("SERVICE_NAME", "storefront")
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")
STOREFRONT_API_TIMEOUT = float(os.getenv("STOREFRONT_API_TIMEOUT", "10.0"))
NOT_FOUND_PATH = "/not-found"


async def get_storefront_client() -> AsyncIterator[StorefrontClient]:
    """Request-scoped upstream client; nothing is shared between requests."""
    async with StorefrontClient(timeout=STOREFRONT_API_TIMEOUT) as client:
        yield client


# Create FastAPI app
app = FastAPI(
    title="Storefront",
    description="Business storefront pages backed by the Dodo payments API",
    version=SERVICE_VERSION
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Turn data-layer failures into a generic render failure."""
    logger.error(f"Storefront render failed for {request.url.path} ({exc.kind}): {exc.message}")
    status_code = 500 if isinstance(exc, ConfigError) else 502
    return JSONResponse(
        status_code=status_code,
        content={"error": "Storefront could not be rendered", "kind": exc.kind},
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "storefront_online", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@app.get(NOT_FOUND_PATH)
async def not_found():
    """Redirect target for unknown storefront slugs."""
    return JSONResponse(status_code=404, content={"detail": "Storefront not found"})


@app.get("/{slug}/metadata")
async def get_metadata(slug: str, request: Request, client: StorefrontClient = Depends(get_storefront_client)):
    """Page metadata (title) for a storefront."""
    title = await load_page_title(slug, request.headers, client)
    return {"title": title}


@app.get("/{slug}", response_model=StorefrontPage)
async def get_storefront(slug: str, request: Request, client: StorefrontClient = Depends(get_storefront_client)):
    """Storefront page record, or a redirect when the business does not exist."""
    page = await load_storefront_page(slug, request.headers, client)
    if isinstance(page, PageNotFound):
        return RedirectResponse(url=NOT_FOUND_PATH, status_code=307)
    return page
