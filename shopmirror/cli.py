#!/usr/bin/env python3
"""
Pull Shopify data into the local store from the command line.

Same path as the GET /fetch-* endpoints, without running the server.

Usage:
    shopmirror-sync [orders|customers|products|inventory|all]
"""
import argparse
import asyncio
import sys
from typing import List

from shopmirror.config import load_settings
from shopmirror.connectors.shopify import ShopifyClient
from shopmirror.errors import ConfigurationError, StoreConnectionError
from shopmirror.models.base import Database
from shopmirror.schemas.shopify import EntityType
from shopmirror.services.store_gateway import StoreGateway
from shopmirror.services.sync_service import SyncService
from shopmirror.utils.logger import log, setup_logger


async def run(service: SyncService, entities: List[EntityType]) -> int:
    """Pull each entity in turn; returns the number that failed."""
    failed = 0
    for entity in entities:
        try:
            result = await service.pull(entity)
        except Exception as e:
            log.error(f"Error fetching {entity.value}: {str(e)}")
            failed += 1
            continue
        log.info(
            f"{entity.value}: {result.inserted}/{result.fetched} stored, "
            f"{len(result.rejected)} rejected"
        )
    return failed


async def _main(settings, entities: List[EntityType]) -> int:
    database = Database(
        settings.database_url,
        connect_timeout=settings.db_connect_timeout,
        socket_timeout=settings.db_socket_timeout
    ).open()
    client = ShopifyClient.from_settings(settings)
    try:
        return await run(SyncService(client, StoreGateway(database)), entities)
    finally:
        await client.aclose()
        database.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Pull Shopify data into the local store")
    parser.add_argument(
        "entity",
        nargs="?",
        default="all",
        choices=[e.value for e in EntityType] + ["all"],
        help="Which collection to pull (default: all)"
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        log.error(str(e))
        sys.exit(1)
    setup_logger(settings)

    entities = list(EntityType) if args.entity == "all" else [EntityType(args.entity)]

    try:
        failed = asyncio.run(_main(settings, entities))
    except StoreConnectionError as e:
        log.error(str(e))
        sys.exit(1)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
