"""Mode resolution from request host headers, and the checkout URL per mode."""

import os
from typing import Iterable, Mapping, Optional

from .errors import ConfigError
from .models import Mode

DEFAULT_TEST_HOSTS = "localhost,127.0.0.1"

DEFAULT_CHECKOUT_URLS = {
    Mode.LIVE: "https://checkout.dodopayments.com",
    Mode.TEST: "https://test.checkout.dodopayments.com",
}

CHECKOUT_URL_ENV = {
    Mode.LIVE: "DODO_LIVE_CHECKOUT_URL",
    Mode.TEST: "DODO_TEST_CHECKOUT_URL",
}


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works for dicts and Starlette Headers."""
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def request_host(headers: Mapping[str, str]) -> str:
    """
    Extract the public host for a request.

    Prefers x-forwarded-host (first hop when comma-separated) over host.
    The result is lowercased with any port removed.
    """
    raw = _get_header(headers, "x-forwarded-host") or _get_header(headers, "host") or ""
    host = raw.split(",")[0].strip().lower()
    if host.startswith("["):
        # IPv6 literal, e.g. "[::1]:3000"
        return host.split("]")[0] + "]"
    return host.split(":")[0]


def configured_test_hosts() -> frozenset[str]:
    raw = os.getenv("STOREFRONT_TEST_HOSTS", DEFAULT_TEST_HOSTS)
    return frozenset(h.strip().lower() for h in raw.split(",") if h.strip())


def resolve_mode(headers: Mapping[str, str], test_hosts: Optional[Iterable[str]] = None) -> Mode:
    """
    Derive the operating mode from the request host.

    A host is in test mode when it is listed in test_hosts (defaults to
    STOREFRONT_TEST_HOSTS) or when its first label is "test", e.g.
    test.store.example.com. Everything else is live.
    """
    host = request_host(headers)
    hosts = configured_test_hosts() if test_hosts is None else frozenset(h.lower() for h in test_hosts)

    if host in hosts or host.split(".")[0] == "test":
        return Mode.TEST
    return Mode.LIVE


def get_checkout_base_url(mode: Mode) -> str:
    """Look up the checkout base URL for a mode. No fallback between modes."""
    try:
        mode = Mode(mode)
    except ValueError as e:
        raise ConfigError(f"Unknown storefront mode: {mode!r}") from e

    url = os.getenv(CHECKOUT_URL_ENV[mode], DEFAULT_CHECKOUT_URLS[mode])
    if not url:
        raise ConfigError(f"Missing checkout base URL for mode={mode.value}. Set {CHECKOUT_URL_ENV[mode]}.")
    return url.rstrip("/")
