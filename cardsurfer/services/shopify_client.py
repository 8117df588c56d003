"""
Shopify Admin API (GraphQL) client.

Fetches the full product catalog with cursor pagination. Every request is
authenticated through the token cache.

Note: The delay between pages is fixed, not driven by Shopify's
throttle status in the response extensions.
"""

import asyncio
import json
import logging
from typing import Any

import httpx

from cardsurfer.config import PRODUCTS_PAGE_SIZE, VARIANTS_PER_PRODUCT
from cardsurfer.models.failure import UpstreamError
from cardsurfer.models.inventory import RawProduct
from cardsurfer.services.shopify_auth import ShopifyTokenCache

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2026-01"

# Fixed pause between pages to stay under the Admin API rate limit
DEFAULT_PAGE_DELAY = 0.5

PRODUCTS_QUERY = f"""
query GetProducts($cursor: String) {{
  products(first: {PRODUCTS_PAGE_SIZE}, after: $cursor) {{
    pageInfo {{
      hasNextPage
      endCursor
    }}
    edges {{
      node {{
        id
        title
        handle
        featuredImage {{
          url
        }}
        variants(first: {VARIANTS_PER_PRODUCT}) {{
          edges {{
            node {{
              id
              title
              price
              inventoryQuantity
              sku
              selectedOptions {{
                name
                value
              }}
            }}
          }}
        }}
      }}
    }}
  }}
}}
"""


class ShopifyClient:
    """Authenticated GraphQL access to one Shopify store."""

    def __init__(
        self,
        token_cache: ShopifyTokenCache,
        *,
        api_version: str = DEFAULT_API_VERSION,
        page_delay: float = DEFAULT_PAGE_DELAY,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token_cache = token_cache
        self.api_version = api_version
        self.page_delay = page_delay
        self._http_client = http_client

    @property
    def store_domain(self) -> str:
        return self.token_cache.store_domain

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Execute a GraphQL query and return the decoded response body.

        Raises:
            UpstreamError: On transport failure, non-2xx status, or GraphQL errors
        """
        token = await self.token_cache.get_access_token()
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": token,
        }
        payload = {"query": query, "variables": variables or {}}

        try:
            if self._http_client:
                response = await self._http_client.post(
                    self.graphql_url, json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    response = await client.post(self.graphql_url, json=payload, headers=headers)
        except httpx.RequestError as e:
            raise UpstreamError(f"Shopify GraphQL request failed: {e}") from e

        if not response.is_success:
            logger.error("GraphQL request failed: %d - %s", response.status_code, response.text)
            if response.status_code == 401:
                # Revoked or rotated token; the next call re-authenticates
                self.token_cache.invalidate()
            raise UpstreamError(
                f"Shopify GraphQL error: {response.status_code} - {response.text}",
                status=response.status_code,
                body=response.text,
            )

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            logger.error("GraphQL response was not JSON: %s", response.text)
            raise UpstreamError(
                "Shopify returned a malformed GraphQL response",
                status=response.status_code,
                body=response.text,
            ) from e
        if data.get("errors"):
            errors = json.dumps(data["errors"])
            logger.error("GraphQL errors: %s", errors)
            raise UpstreamError(f"Shopify GraphQL errors: {errors}", body=errors)

        return data

    async def fetch_all_products(self) -> list[RawProduct]:
        """
        Fetch every product (with its variants) from the store.

        Pages are requested until Shopify reports no next page. Any failing
        page aborts the whole fetch; partial results are never returned.
        """
        products: list[RawProduct] = []
        cursor: str | None = None
        page = 0

        logger.info("Fetching all products from %s", self.store_domain)

        while True:
            page += 1
            data = await self.graphql(PRODUCTS_QUERY, {"cursor": cursor})

            try:
                connection = data["data"]["products"]
                edges = connection["edges"]
                page_info = connection["pageInfo"]
            except (KeyError, TypeError) as e:
                raise UpstreamError(f"Malformed products response on page {page}") from e

            products.extend(edge["node"] for edge in edges)
            logger.info(
                "Page %d: received %d products (total so far: %d)",
                page,
                len(edges),
                len(products),
            )

            if not page_info.get("hasNextPage"):
                break

            cursor = page_info.get("endCursor")
            await asyncio.sleep(self.page_delay)

        logger.info("Fetched %d products in %d pages", len(products), page)
        return products
