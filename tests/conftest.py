"""Shared fixtures: an in-memory Shopify store behind httpx.MockTransport."""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from shoptagger.infrastructure.config import ShopifyConfig
from shoptagger.infrastructure.shopify_client import ShopifyCatalogClient

SHOP_DOMAIN = "test-shop.myshopify.com"
ACCESS_TOKEN = "shpat_test_token"


class SleepRecorder:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeShop:
    """Minimal Shopify Admin GraphQL backend.

    Products live in insertion order. Cursors are the stringified index of
    the next product. Responses queued in ``scripted`` are returned (or
    raised) before the normal handlers run.
    """

    def __init__(self) -> None:
        self.products: dict[str, dict[str, Any]] = {}
        self.collections: list[dict[str, str]] = []
        self.requests: list[httpx.Request] = []
        self.payloads: list[dict[str, Any]] = []
        self.scripted: list[httpx.Response | Exception] = []
        self.rejected_creates: set[int] = set()
        self.available = 1000.0
        self.restore_rate = 50.0
        self._next_id = 1
        self._create_calls = 0

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------

    def add_product(
        self,
        title: str,
        tags: list[str] | None = None,
        product_type: str = "",
        vendor: str = "",
        collections: list[str] | None = None,
    ) -> str:
        product_id = f"gid://shopify/Product/{self._next_id}"
        self._next_id += 1
        self.products[product_id] = {
            "id": product_id,
            "title": title,
            "tags": list(tags or []),
            "productType": product_type,
            "vendor": vendor,
            "collections": list(collections or []),
        }
        return product_id

    def add_products(self, count: int, **kwargs: Any) -> list[str]:
        return [self.add_product(f"Product {n}", **kwargs) for n in range(1, count + 1)]

    def operations(self, name: str) -> list[dict[str, Any]]:
        """Variables of every request for the named operation."""
        return [p["variables"] for p in self.payloads if f" {name}(" in p["query"]]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content)
        self.payloads.append(payload)

        if self.scripted:
            item = self.scripted.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        query = payload["query"]
        variables = payload.get("variables") or {}
        if " SearchProducts(" in query:
            data = self._search(variables)
        elif " Collections(" in query:
            data = {
                "collections": {
                    "edges": [{"node": c} for c in self.collections[: variables["first"]]]
                }
            }
        elif " ProductTags(" in query:
            data = self._product_tags(variables)
        elif " UpdateProductTags(" in query:
            data = self._update_tags(variables)
        elif " CreateProduct(" in query:
            data = self._create(variables)
        elif " DeleteProduct(" in query:
            data = self._delete(variables)
        else:
            return httpx.Response(400, json={"errors": "Unknown operation"})
        return self.ok(data)

    def ok(self, data: Any, errors: list[dict[str, Any]] | None = None) -> httpx.Response:
        body: dict[str, Any] = {
            "data": data,
            "extensions": {
                "cost": {
                    "throttleStatus": {
                        "maximumAvailable": 1000.0,
                        "currentlyAvailable": self.available,
                        "restoreRate": self.restore_rate,
                    }
                }
            },
        }
        if errors:
            body["errors"] = errors
        return httpx.Response(200, json=body)

    def _matches(self, product: dict[str, Any], query: str) -> bool:
        if query == "*":
            return True
        for clause in query.split(" AND "):
            field, _, value = clause.partition(":")
            value = value.strip("'")
            if field == "title":
                if value.strip("*").lower() not in product["title"].lower():
                    return False
            elif field == "product_type":
                if product["productType"] != value:
                    return False
            elif field == "vendor":
                if product["vendor"] != value:
                    return False
            elif field == "collection_id":
                if value not in product["collections"]:
                    return False
        return True

    def _search(self, variables: dict[str, Any]) -> dict[str, Any]:
        matches = [p for p in self.products.values() if self._matches(p, variables["query"])]
        start = int(variables.get("after") or 0)
        page = matches[start : start + variables["first"]]
        end = start + len(page)
        return {
            "products": {
                "edges": [
                    {
                        "node": {"id": p["id"], "title": p["title"], "tags": list(p["tags"])},
                        "cursor": str(start + i + 1),
                    }
                    for i, p in enumerate(page)
                ],
                "pageInfo": {
                    "hasNextPage": end < len(matches),
                    "endCursor": str(end) if page else None,
                },
            }
        }

    def _product_tags(self, variables: dict[str, Any]) -> dict[str, Any]:
        product = self.products.get(variables["id"])
        if product is None:
            return {"product": None}
        return {"product": {"id": product["id"], "tags": list(product["tags"])}}

    def _update_tags(self, variables: dict[str, Any]) -> dict[str, Any]:
        product_input = variables["input"]
        product = self.products.get(product_input["id"])
        if product is None:
            return {
                "productUpdate": {
                    "product": None,
                    "userErrors": [{"field": ["id"], "message": "Product does not exist"}],
                }
            }
        product["tags"] = list(product_input["tags"])
        return {
            "productUpdate": {
                "product": {"id": product["id"], "tags": product["tags"]},
                "userErrors": [],
            }
        }

    def _create(self, variables: dict[str, Any]) -> dict[str, Any]:
        self._create_calls += 1
        if self._create_calls in self.rejected_creates:
            return {
                "productCreate": {
                    "product": None,
                    "userErrors": [{"field": ["title"], "message": "Title is invalid"}],
                }
            }
        product_input = variables["input"]
        product_id = self.add_product(
            product_input["title"],
            tags=product_input.get("tags"),
            product_type=product_input.get("productType", ""),
            vendor=product_input.get("vendor", ""),
        )
        return {
            "productCreate": {
                "product": {"id": product_id, "title": product_input["title"]},
                "userErrors": [],
            }
        }

    def _delete(self, variables: dict[str, Any]) -> dict[str, Any]:
        product_id = variables["input"]["id"]
        if self.products.pop(product_id, None) is None:
            return {
                "productDelete": {
                    "deletedProductId": None,
                    "userErrors": [{"field": ["id"], "message": "Product does not exist"}],
                }
            }
        return {"productDelete": {"deletedProductId": product_id, "userErrors": []}}


@pytest.fixture
def shop() -> FakeShop:
    """Create an empty fake store."""
    return FakeShop()


@pytest.fixture
def sleep() -> SleepRecorder:
    """Create a sleep recorder."""
    return SleepRecorder()


@pytest.fixture
def shopify_config() -> ShopifyConfig:
    """Create store connection settings for the fake store."""
    return ShopifyConfig(shop_domain=SHOP_DOMAIN, access_token=ACCESS_TOKEN)


@pytest_asyncio.fixture
async def catalog_client(
    shop: FakeShop,
    sleep: SleepRecorder,
    shopify_config: ShopifyConfig,
) -> AsyncIterator[ShopifyCatalogClient]:
    """Create a catalog client wired to the fake store."""
    client = ShopifyCatalogClient(
        shopify_config,
        transport=httpx.MockTransport(shop.handler),
        sleep=sleep,
    )
    yield client
    await client.close()
