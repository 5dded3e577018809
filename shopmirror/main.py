"""
Shopmirror
Main FastAPI application
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
import sys

from shopmirror import __version__
from shopmirror.api import health, sync, webhooks
from shopmirror.config import Settings, load_settings
from shopmirror.connectors.shopify import ShopifyClient
from shopmirror.errors import ConfigurationError
from shopmirror.models.base import Database
from shopmirror.services.store_gateway import StoreGateway
from shopmirror.services.sync_service import SyncService
from shopmirror.utils.logger import log, setup_logger


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    shopify_client: Optional[ShopifyClient] = None
) -> FastAPI:
    """
    Build the application

    The store and the Shopify client are opened when the app starts and
    closed when it stops. Either can be passed in (tests do).
    """
    settings = settings or load_settings()
    setup_logger(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        log.info(f"Starting {settings.app_name} v{__version__}")
        log.info(f"Environment: {settings.environment}")

        db = database or Database(
            settings.database_url,
            connect_timeout=settings.db_connect_timeout,
            socket_timeout=settings.db_socket_timeout
        )
        try:
            db.open()
        except Exception as e:
            log.error(f"Store connection error: {str(e)}")
            raise

        client = shopify_client or ShopifyClient.from_settings(settings)

        app.state.database = db
        app.state.shopify_client = client
        app.state.sync_service = SyncService(client, StoreGateway(db))

        yield

        # Shutdown
        await client.aclose()
        db.close()
        log.info("Shutting down application")

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="""
        Local mirror of a Shopify store

        - GET /fetch-{orders,customers,products,inventory}: pull from the Admin API
        - POST /webhook/...: receive Shopify webhook pushes
        """,
        lifespan=lifespan
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(sync.router)
    app.include_router(webhooks.router)

    return app


def main():
    """Run the API server"""
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as e:
        log.error(str(e))
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port
    )


if __name__ == "__main__":
    main()
