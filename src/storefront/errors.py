"""
Storefront error family.

Callers branch on the concrete class (or on the `kind` tag) rather than on
message text:
- UpstreamHttpError: the upstream API answered with a non-2xx status
- ConfigError: a required URL for the requested mode is not configured
- TransportError: connection failure, timeout, or an unparseable body
"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for every failure raised by the storefront data layer."""
    kind: str = "storefront"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamHttpError(StorefrontError):
    kind = "upstream_http"

    def __init__(self, status_code: int, response_body: Optional[str] = None, url: Optional[str] = None):
        super().__init__(f"Upstream request failed {status_code}: {response_body or ''}")
        self.status_code = status_code
        self.response_body = response_body
        self.url = url

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ConfigError(StorefrontError):
    kind = "config"


class TransportError(StorefrontError):
    kind = "transport"


def is_upstream_http_error(err: object) -> bool:
    """True only for errors carrying an upstream HTTP status code."""
    return (
        isinstance(err, StorefrontError)
        and err.kind == UpstreamHttpError.kind
        and isinstance(getattr(err, "status_code", None), int)
    )
