"""
Configuration, startup failures and the sync CLI.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from shopmirror import cli, main as server
from shopmirror.config import Settings, get_settings, load_settings
from shopmirror.errors import ConfigurationError, StoreConnectionError
from shopmirror.main import create_app
from shopmirror.models.base import Database
from shopmirror.schemas.shopify import EntityType
from shopmirror.services.normalizer import normalize_order
from shopmirror.services.store_gateway import StoreGateway
from shopmirror.services.sync_service import SyncService
from shopmirror.utils.logger import log, setup_logger

ENV_NAMES = ["DATABASE_URL", "MONGO_URI", "SHOPIFY_STORE", "SHOPIFY_ACCESS_TOKEN"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No store settings in the environment and no .env in the working directory."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_mongo_uri_accepted_as_database_url(clean_env):
    clean_env.setenv("MONGO_URI", "sqlite://")
    clean_env.setenv("SHOPIFY_STORE", "test-store.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "token")

    settings = Settings()

    assert settings.database_url == "sqlite://"
    assert settings.shopify_api_version == "2023-01"
    assert settings.port == 5000


def test_database_url_preferred_over_mongo_uri(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite:///mirror.db")
    clean_env.setenv("MONGO_URI", "mongodb://localhost/shop")
    clean_env.setenv("SHOPIFY_STORE", "test-store.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "token")

    assert Settings().database_url == "sqlite:///mirror.db"


def test_missing_settings_raise_configuration_error(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite://")

    with pytest.raises(ConfigurationError) as exc:
        load_settings()

    assert "SHOPIFY_STORE" in str(exc.value)
    assert "SHOPIFY_ACCESS_TOKEN" in str(exc.value)
    assert "DATABASE_URL" not in str(exc.value)


def test_server_exits_when_misconfigured(clean_env):
    with pytest.raises(SystemExit) as exc:
        server.main()
    assert exc.value.code == 1


def test_cli_exits_when_misconfigured(clean_env):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1


def test_cli_rejects_unknown_entity(clean_env):
    with pytest.raises(SystemExit) as exc:
        cli.main(["refunds"])
    assert exc.value.code == 2


# ---------------------------------------------------------------------------
# Store startup
# ---------------------------------------------------------------------------

def test_unreachable_store_raises(tmp_path):
    database = Database(f"sqlite:///{tmp_path}/missing/dir/store.db")

    with pytest.raises(StoreConnectionError):
        database.open()

    assert database.engine is None


def test_session_before_open_raises():
    with pytest.raises(StoreConnectionError):
        Database("sqlite://").session()


def test_app_does_not_start_without_store(settings, shopify, tmp_path):
    app = create_app(
        settings,
        database=Database(f"sqlite:///{tmp_path}/missing/dir/store.db"),
        shopify_client=shopify.client()
    )

    with pytest.raises(StoreConnectionError):
        with TestClient(app):
            pass


def test_file_store_persists_across_reopen(tmp_path):
    url = f"sqlite:///{tmp_path}/store.db"

    first = Database(url).open()
    StoreGateway(first).insert_one(EntityType.ORDERS, normalize_order({"id": 1, "name": "#1001"}))
    first.close()

    second = Database(url).open()
    try:
        assert StoreGateway(second).get(EntityType.ORDERS, 1).order_number == "#1001"
    finally:
        second.close()


# ---------------------------------------------------------------------------
# CLI pulls and logging
# ---------------------------------------------------------------------------

def test_cli_run_counts_failed_entities(shopify, gateway):
    shopify.serve("orders", "orders", [{"id": 1}])
    shopify.fail("products", 500, text="Internal Server Error")

    async def go():
        client = shopify.client()
        try:
            return await cli.run(SyncService(client, gateway), [EntityType.ORDERS, EntityType.PRODUCTS])
        finally:
            await client.aclose()

    failed = asyncio.run(go())

    assert failed == 1
    assert gateway.count(EntityType.ORDERS) == 1
    assert gateway.count(EntityType.PRODUCTS) == 0


def test_log_dir_adds_file_sinks(settings, tmp_path):
    file_settings = settings.model_copy(update={
        "log_dir": str(tmp_path),
        "app_name": "Shop Mirror",
        "log_retention": "7 days",
        "error_log_retention": "14 days",
    })

    setup_logger(file_settings)
    try:
        log.info("file sink check")
        log.error("error sink check")
    finally:
        setup_logger(settings)

    info_files = [p for p in tmp_path.glob("shop_mirror_*.log") if "_errors_" not in p.name]
    error_files = list(tmp_path.glob("shop_mirror_errors_*.log"))
    assert len(info_files) == 1
    assert len(error_files) == 1
    assert "file sink check" in info_files[0].read_text()
    assert "error sink check" in error_files[0].read_text()
    assert "file sink check" not in error_files[0].read_text()


def test_retention_settings_read_from_env(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite://")
    clean_env.setenv("SHOPIFY_STORE", "test-store.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "token")
    clean_env.setenv("LOG_RETENTION", "10 days")

    settings = Settings()

    assert settings.log_retention == "10 days"
    assert settings.error_log_retention == "90 days"
