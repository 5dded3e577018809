"""
Shopify Connector

Reads collections from the Shopify Admin REST API.
Only the first page of each collection is fetched; there is no retry.
"""
import httpx
from typing import Any, Dict, List, Optional

from shopmirror.errors import ShopifyAPIError
from shopmirror.schemas.shopify import ENTITY_SPECS, EntityType
from shopmirror.utils.logger import log


class ShopifyClient:
    """
    Client for the Shopify Admin API

    Owns one httpx.AsyncClient for the life of the process.
    """

    def __init__(
        self,
        store_url: str,
        access_token: str,
        api_version: str = "2023-01",
        timeout: float = 30.0,
        inventory_location_ids: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Shopify client

        Args:
            store_url: Shopify store domain (e.g., "your-store.myshopify.com")
            access_token: Shopify Admin API access token
            api_version: API version to use
            timeout: Request timeout in seconds
            inventory_location_ids: Comma-separated location ids for inventory_levels.json
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.store_url = store_url.replace('https://', '').replace('http://', '').rstrip('/')
        self.access_token = access_token
        self.api_version = api_version
        self.base_url = f"https://{self.store_url}/admin/api/{api_version}"
        self.inventory_location_ids = inventory_location_ids

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(),
            timeout=timeout,
            transport=transport
        )

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ShopifyClient":
        return cls(
            store_url=settings.shopify_store,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout,
            inventory_location_ids=settings.shopify_inventory_location_ids,
            transport=transport
        )

    async def fetch(self, entity: EntityType) -> List[Dict[str, Any]]:
        """
        Fetch one page of an entity collection

        Args:
            entity: Which collection to read

        Returns:
            Raw records found under the collection key

        Raises:
            ShopifyAPIError: transport failure, non-2xx status, or unexpected body
        """
        spec = ENTITY_SPECS[entity]
        path = f"/{spec.resource}.json"
        params = {"fields": ",".join(spec.fields)}
        if entity == EntityType.INVENTORY and self.inventory_location_ids:
            params["location_ids"] = self.inventory_location_ids

        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise ShopifyAPIError(f"Request to {path} failed: {str(e) or type(e).__name__}") from e

        if not response.is_success:
            raise ShopifyAPIError(
                f"Request to {path} failed with status code {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ShopifyAPIError(
                f"Response from {path} is not valid JSON",
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get(spec.collection_key), list):
            raise ShopifyAPIError(
                f"Response from {path} has no '{spec.collection_key}' list",
                status_code=response.status_code
            )

        records = data[spec.collection_key]
        log.debug(f"Fetched {len(records)} {spec.collection_key} from Shopify")
        return records

    async def aclose(self):
        await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for Shopify API requests"""
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json"
        }
