"""
Shared fixtures.

The store is an in-memory SQLite database per test; Shopify is served by
httpx.MockTransport from canned collections.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from shopmirror.config import Settings
from shopmirror.connectors.shopify import ShopifyClient
from shopmirror.main import create_app
from shopmirror.models.base import Database
from shopmirror.services.store_gateway import StoreGateway

STORE = "test-store.myshopify.com"
TOKEN = "shpat_test_token"


class FakeShopify:
    """Canned Admin API responses, keyed by resource file name (e.g. "orders.json")."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def serve(self, resource: str, collection_key: str, records: list):
        self.routes[f"{resource}.json"] = lambda: httpx.Response(200, json={collection_key: records})

    def fail(self, resource: str, status_code: int, text: str = "error"):
        self.routes[f"{resource}.json"] = lambda: httpx.Response(status_code, text=text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = request.url.path.rsplit("/", 1)[-1]
        route = self.routes.get(name)
        if route is None:
            return httpx.Response(404, json={"errors": "Not Found"})
        return route()

    def client(self, **kwargs) -> ShopifyClient:
        return ShopifyClient(STORE, TOKEN, transport=httpx.MockTransport(self.handler), **kwargs)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        shopify_store=STORE,
        shopify_access_token=TOKEN,
    )


@pytest.fixture
def database():
    db = Database("sqlite://").open()
    yield db
    db.close()


@pytest.fixture
def gateway(database):
    return StoreGateway(database)


@pytest.fixture
def shopify():
    return FakeShopify()


@pytest.fixture
def api(settings, database, shopify):
    app = create_app(settings, database=database, shopify_client=shopify.client())
    with TestClient(app) as client:
        yield client
