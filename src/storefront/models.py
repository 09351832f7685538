# Storefront/src/storefront/models.py
# @ai-rules:
# 1. [Pattern]: Upstream schemas (Business, *Product) mirror the API JSON verbatim. ProductCard is the display projection.
# 2. [Constraint]: All models are frozen -- records are read-only projections of upstream JSON.
# 3. [Gotcha]: ProductCard.image is None when absent, ProductCard.description is "" when absent. Keep the asymmetry.
"""Pydantic schemas for upstream storefront data and display records."""

from enum import Enum
from typing import ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    LIVE = "live"
    TEST = "test"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Business(_Record):
    """Business profile as returned by GET /storefront/{slug}."""
    business_id: str
    name: str
    logo: str
    banner: str


class OneTimePriceDetail(_Record):
    pay_what_you_want: Optional[bool] = None


class RecurringPriceDetail(_Record):
    payment_frequency_count: Optional[int] = None
    payment_frequency_interval: Optional[str] = None
    trial_period_days: Optional[int] = None


class _UpstreamProduct(_Record):
    """Fields shared by both product variants."""
    # Value sent as the `recurring` query flag when listing this variant
    recurring: ClassVar[bool]

    product_id: str
    name: str
    image: Optional[str] = None
    price: int  # minor currency units
    currency: str
    description: Optional[str] = None


class OneTimeProduct(_UpstreamProduct):
    recurring: ClassVar[bool] = False

    price_detail: Optional[OneTimePriceDetail] = None


class RecurringProduct(_UpstreamProduct):
    recurring: ClassVar[bool] = True

    price_detail: Optional[RecurringPriceDetail] = None


P = TypeVar("P", bound=_UpstreamProduct)


class ProductsPage(_Record, Generic[P]):
    """Envelope returned by GET /storefront/{slug}/products."""
    items: list[P]


class ProductCard(_Record):
    """Display record for a single product or subscription card."""
    product_id: str
    name: str
    image: Optional[str] = None
    price: int
    currency: str
    description: str = ""
    pay_what_you_want: Optional[bool] = None
    payment_frequency_count: Optional[int] = None
    payment_frequency_interval: Optional[str] = None
    trial_period_days: Optional[int] = None


class StorefrontPage(_Record):
    """Everything the presentation layer needs to render a storefront."""
    business: Business
    products: list[ProductCard] = Field(default_factory=list)
    subscriptions: list[ProductCard] = Field(default_factory=list)
    mode: Mode
    checkout_base_url: str


class PageNotFound(_Record):
    """Loader result when the business slug does not resolve upstream."""
    slug: str
