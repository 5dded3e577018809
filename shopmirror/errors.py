"""
Error types raised across Shopmirror.

Endpoints do not differentiate between them: anything raised below the
route layer is reported as a 500 with the error message.
"""
from typing import Any, Optional


class ShopMirrorError(Exception):
    """Base class for all Shopmirror errors"""


class ConfigurationError(ShopMirrorError):
    """A required setting is missing or invalid"""


class StoreConnectionError(ShopMirrorError):
    """The local store could not be reached at startup"""


class ShopifyAPIError(ShopMirrorError):
    """A request to the Shopify Admin API failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NormalizationError(ShopMirrorError):
    """An upstream payload does not have the expected shape"""

    def __init__(self, entity: str, message: str):
        super().__init__(f"Invalid {entity} payload: {message}")
        self.entity = entity


class DuplicateRecordError(ShopMirrorError):
    """A plain insert hit a key that is already stored"""

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} {key} already exists")
        self.entity = entity
        self.key = key
