# Storefront/src/storefront/storefront_client.py
# @ai-rules:
# 1. [Pattern]: One StorefrontClient per request. Use `async with StorefrontClient() as client` unless an AsyncClient is injected.
# 2. [Constraint]: Base URLs are read from env at call time, not import time -- tests patch os.environ per case.
# 3. [Gotcha]: Query order is recurring then page_size. Upstream logs and tests key on the exact string.
"""
Upstream storefront API client.

Reads business and product data from the Dodo payments API:
- GET {base}/storefront/{slug}
- GET {base}/storefront/{slug}/products?recurring=...&page_size=...

Every non-2xx response becomes an UpstreamHttpError. Connection failures,
timeouts and unparseable bodies become TransportError. Redirects are
followed; nothing is retried.
"""

import os
import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from .errors import ConfigError, TransportError, UpstreamHttpError
from .models import Business, Mode, OneTimeProduct, P, ProductsPage, RecurringProduct

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 100

API_URL_ENV = {
    Mode.LIVE: "DODO_LIVE_API_URL",
    Mode.TEST: "DODO_TEST_API_URL",
}

# Freshness over performance: every call must reach the live upstream
_REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}


def get_base_url(mode: Mode) -> str:
    """Resolve the API base URL for a mode, without a trailing slash."""
    try:
        mode = Mode(mode)
    except ValueError as e:
        raise ConfigError(f"Unknown storefront mode: {mode!r}") from e

    base = os.getenv(API_URL_ENV[mode])
    if not base:
        raise ConfigError(
            f"Missing API base URL for mode={mode.value}. Set DODO_LIVE_API_URL and DODO_TEST_API_URL."
        )
    return base.rstrip("/")


# Same escaping as encodeURIComponent: !'()* stay literal
_URI_COMPONENT_SAFE = "!'()*"


def _slug_path(base: str, slug: str) -> str:
    return f"{base}/storefront/{quote(slug, safe=_URI_COMPONENT_SAFE)}"


class StorefrontClient:
    """Async client for the upstream storefront endpoints."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT):
        """
        Args:
            http_client: Pre-built AsyncClient (e.g. with a mock transport). Not closed by this client.
            timeout: Per-request timeout in seconds.
        """
        self.timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None

    async def __aenter__(self) -> "StorefrontClient":
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _fetch_json(self, url: str) -> Any:
        if self._http is None:
            raise RuntimeError("StorefrontClient used outside of 'async with' and without an http_client")

        logger.debug(f"Upstream GET {url}")
        try:
            response = await self._http.get(
                url, headers=_REQUEST_HEADERS, timeout=self.timeout, follow_redirects=True
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Upstream timeout after {self.timeout}s: {url}")
            raise TransportError(f"Upstream request timed out: {url}") from e
        except httpx.RequestError as e:
            logger.warning(f"Upstream transport failure for {url}: {e}")
            raise TransportError(f"Upstream request failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.warning(f"Upstream returned {response.status_code} for {url}")
            raise UpstreamHttpError(response.status_code, body, url=url)

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Upstream returned invalid JSON for {url}") from e

    @staticmethod
    def _parse(model, data: Any, url: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"Unexpected upstream payload for {url}: {e.error_count()} invalid field(s)") from e

    async def get_business(self, mode: Mode, slug: str) -> Business:
        url = _slug_path(get_base_url(mode), slug)
        data = await self._fetch_json(url)
        return self._parse(Business, data, url)

    async def get_products(
        self,
        mode: Mode,
        slug: str,
        variant: type[P],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> ProductsPage[P]:
        """
        List one product variant for a business.

        The variant class decides both the `recurring` query flag and the
        schema the items are validated against.
        """
        base = get_base_url(mode)
        params = urlencode({"recurring": str(variant.recurring).lower(), "page_size": page_size})
        url = f"{_slug_path(base, slug)}/products?{params}"
        data = await self._fetch_json(url)
        return self._parse(ProductsPage[variant], data, url)

    async def get_one_time_products(
        self, mode: Mode, slug: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> ProductsPage[OneTimeProduct]:
        return await self.get_products(mode, slug, OneTimeProduct, page_size=page_size)

    async def get_recurring_products(
        self, mode: Mode, slug: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> ProductsPage[RecurringProduct]:
        return await self.get_products(mode, slug, RecurringProduct, page_size=page_size)
