"""Compose mode resolution and upstream fetches into a storefront page record."""

import asyncio
import logging
from typing import Mapping, Union

from .errors import StorefrontError, UpstreamHttpError
from .mode import get_checkout_base_url, resolve_mode
from .models import OneTimeProduct, PageNotFound, ProductCard, RecurringProduct, StorefrontPage
from .storefront_client import DEFAULT_PAGE_SIZE, StorefrontClient

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Dodo Payments"


def to_product_card(product: OneTimeProduct) -> ProductCard:
    detail = product.price_detail
    return ProductCard(
        product_id=product.product_id,
        name=product.name,
        image=product.image or None,
        price=product.price,
        pay_what_you_want=detail.pay_what_you_want if detail else None,
        description=product.description or "",
        currency=product.currency,
    )


def to_subscription_card(subscription: RecurringProduct) -> ProductCard:
    detail = subscription.price_detail
    return ProductCard(
        product_id=subscription.product_id,
        name=subscription.name,
        image=subscription.image or None,
        price=subscription.price,
        description=subscription.description or "",
        currency=subscription.currency,
        payment_frequency_count=detail.payment_frequency_count if detail else None,
        payment_frequency_interval=detail.payment_frequency_interval if detail else None,
        trial_period_days=detail.trial_period_days if detail else None,
    )


async def load_storefront_page(
    slug: str,
    headers: Mapping[str, str],
    client: StorefrontClient,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Union[StorefrontPage, PageNotFound]:
    """
    Load everything needed to render the storefront for `slug`.

    The business and both product lists are fetched concurrently and all three
    must finish. A 404 on the business lookup yields PageNotFound whatever the
    product fetches did. Any other failure is raised; there is no partial page.
    A 404 on a product list is not treated as "not found".
    """
    mode = resolve_mode(headers)
    checkout_base_url = get_checkout_base_url(mode)

    business, products, subscriptions = await asyncio.gather(
        client.get_business(mode, slug),
        client.get_one_time_products(mode, slug, page_size=page_size),
        client.get_recurring_products(mode, slug, page_size=page_size),
        return_exceptions=True,
    )

    if isinstance(business, UpstreamHttpError) and business.is_not_found:
        logger.info(f"Storefront not found: slug={slug} mode={mode.value}")
        return PageNotFound(slug=slug)

    for result in (business, products, subscriptions):
        if isinstance(result, BaseException):
            raise result

    return StorefrontPage(
        business=business,
        products=[to_product_card(p) for p in products.items],
        subscriptions=[to_subscription_card(s) for s in subscriptions.items],
        mode=mode,
        checkout_base_url=checkout_base_url,
    )


async def load_page_title(slug: str, headers: Mapping[str, str], client: StorefrontClient) -> str:
    """Business name for the page title, or the default title when it cannot be loaded."""
    try:
        mode = resolve_mode(headers)
        business = await client.get_business(mode, slug)
    except StorefrontError as e:
        logger.warning(f"Title lookup failed for slug={slug}: {e.message}")
        return DEFAULT_TITLE
    return business.name if business.name is not None else DEFAULT_TITLE
