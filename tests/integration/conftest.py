"""
Pytest configuration and shared fixtures for integration tests.

These run against a dev-mode Vault on localhost:8200 (``vault server -dev
-dev-root-token-id=dev-root-token``) and are skipped when it is not reachable.
"""
import uuid
from typing import Generator

import hvac
import pytest
import requests

from monitoring_exporter.config.settings import Settings, VaultSettings

VAULT_URL = "http://localhost:8200"
VAULT_TOKEN = "dev-root-token"


def check_vault_available() -> bool:
    """Check if an unsealed Vault is available."""
    try:
        response = requests.get(f"{VAULT_URL}/v1/sys/health", timeout=5)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


@pytest.fixture(scope="session", autouse=True)
def requires_vault() -> None:
    """Skip every integration test when Vault is not running."""
    if not check_vault_available():
        pytest.skip("Vault not available on localhost:8200")


@pytest.fixture(scope="module")
def vault_client() -> hvac.Client:
    """Authenticated client for seeding test secrets."""
    return hvac.Client(url=VAULT_URL, token=VAULT_TOKEN)


@pytest.fixture
def vault_path_prefix(vault_client: hvac.Client) -> Generator[str, None, None]:
    """Unique secret prefix per test, removed afterwards."""
    prefix = f"monitoring-test/{uuid.uuid4().hex}"
    yield prefix
    secrets = vault_client.secrets.kv.v2
    try:
        listed = secrets.list_secrets(path=prefix, mount_point="secret")
    except hvac.exceptions.InvalidPath:
        return
    for key in listed["data"]["keys"]:
        secrets.delete_metadata_and_all_versions(path=f"{prefix}/{key}", mount_point="secret")


@pytest.fixture
def vault_settings(vault_path_prefix: str) -> Settings:
    return Settings(
        environment="test",
        vault=VaultSettings(
            url=VAULT_URL,
            token=VAULT_TOKEN,
            path_prefix=vault_path_prefix,
            max_retry_seconds=1,
        ),
    )
