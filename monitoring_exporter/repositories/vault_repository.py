from typing import Dict, Optional, Tuple
from datetime import datetime, timedelta
import hvac
from hvac.exceptions import VaultError, InvalidPath
import structlog

from monitoring_exporter.repositories.base import AbstractSecretStore, SecretStoreError
from monitoring_exporter.config.settings import Settings
from monitoring_exporter.monitoring.metrics import secret_store_errors_total
from monitoring_exporter.utils.retry import with_retry_on_exception

logger = structlog.get_logger(__name__)


class VaultSecretStore(AbstractSecretStore):
    """
    Secret store reading per-tag scrape tokens from HashiCorp Vault.

    Each tag has its own KV v2 secret at ``<path_prefix>/<tag>``; the token is
    the value of the configured field inside it. Tokens are cached for a
    short TTL so a busy scrape endpoint does not hit Vault on every request.
    Unknown tags are cached too, so they cost no more than known ones.
    """

    backend = "vault"

    def __init__(self, settings: Settings, client: Optional[hvac.Client] = None):
        """
        Initialize Vault secret store.

        Args:
            settings: Application settings containing Vault configuration
            client: Pre-built hvac client; one is created on connect() otherwise
        """
        self.settings = settings
        self.client: Optional[hvac.Client] = client
        self._token_cache: Dict[str, Optional[str]] = {}
        self._cache_expiry: Dict[str, datetime] = {}
        self._logger = logger.bind(component="vault_secret_store")

    def connect(self) -> None:
        """
        Establish connection to Vault server.

        Raises:
            SecretStoreError: If unable to connect to Vault or authenticate
        """
        try:
            self._logger.info(
                "connecting_to_vault",
                url=self.settings.vault.url,
            )

            if self.client is None:
                self.client = hvac.Client(
                    url=self.settings.vault.url,
                    token=self.settings.vault.token,
                )

            if not self.client.is_authenticated():
                raise VaultError("Vault authentication failed")

            self._logger.info("vault_connection_established")

        except Exception as e:
            secret_store_errors_total.labels(backend=self.backend).inc()
            self._logger.error("vault_connection_failed", error=str(e))
            raise SecretStoreError(f"Failed to connect to Vault: {e}") from e

    def health_check(self) -> bool:
        """
        Check if Vault connection is healthy.

        Returns:
            True if Vault is unsealed, initialized and the client authenticated
        """
        if not self.client:
            self._logger.warning("health_check_failed", reason="no_client")
            return False

        try:
            health_status = self.client.sys.read_health_status(method="GET")
            is_authenticated = self.client.is_authenticated()

            is_healthy = (
                not health_status.get("sealed", True)
                and health_status.get("initialized", False)
                and is_authenticated
            )

            if not is_healthy:
                self._logger.warning(
                    "vault_unhealthy",
                    sealed=health_status.get("sealed"),
                    initialized=health_status.get("initialized"),
                    authenticated=is_authenticated,
                )

            return is_healthy

        except Exception as e:
            self._logger.error("health_check_failed", error=str(e))
            return False

    def close(self) -> None:
        """Drop cached tokens."""
        self._token_cache.clear()
        self._cache_expiry.clear()
        self._logger.info("vault_connection_closed")

    def secret_path(self, tag: str) -> str:
        return f"{self.settings.vault.path_prefix.strip('/')}/{tag}"

    def get_token(self, tag: str) -> Optional[str]:
        """
        Return the scrape token for ``tag``.

        Returns:
            The token, or None if the tag has no secret or no token field

        Raises:
            SecretStoreError: If Vault cannot be read
        """
        hit, cached_token = self._get_from_cache(tag)
        if hit:
            self._logger.debug("token_from_cache", tag=tag, found=cached_token is not None)
            return cached_token

        if self.client is None:
            self.connect()

        path = self.secret_path(tag)
        read_secret = with_retry_on_exception(
            (VaultError, OSError),
            max_delay_seconds=self.settings.vault.max_retry_seconds,
        )(self._read_secret)

        try:
            secret = read_secret(path)
        except Exception as e:
            secret_store_errors_total.labels(backend=self.backend).inc()
            self._logger.error("vault_read_failed", path=path, error=str(e))
            raise SecretStoreError(f"Failed to read from Vault: {e}") from e

        if secret is None:
            self._logger.info("tag_secret_not_found", tag=tag, path=path)
            self._put_in_cache(tag, None)
            return None

        value = secret.get(self.settings.vault.token_field)
        if not value:
            self._logger.warning(
                "tag_secret_missing_field",
                tag=tag,
                path=path,
                field=self.settings.vault.token_field,
            )
            self._put_in_cache(tag, None)
            return None

        self._put_in_cache(tag, str(value))
        return str(value)

    def _read_secret(self, path: str) -> Optional[Dict[str, str]]:
        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=path,
                mount_point=self.settings.vault.mount_point,
                raise_on_deleted_version=True,
            )
        except InvalidPath:
            return None

        if not response or "data" not in response:
            return None

        return response["data"]["data"]

    def _get_from_cache(self, tag: str) -> Tuple[bool, Optional[str]]:
        """
        Get token from cache if not expired.

        Args:
            tag: Scrape tag

        Returns:
            (hit, token); token is None on a cached miss for an unknown tag
        """
        if tag in self._token_cache:
            expiry = self._cache_expiry.get(tag)
            if expiry and datetime.utcnow() < expiry:
                return True, self._token_cache[tag]
            else:
                del self._token_cache[tag]
                del self._cache_expiry[tag]

        return False, None

    def _put_in_cache(self, tag: str, token: Optional[str]) -> None:
        ttl_seconds = self.settings.vault.cache_ttl_seconds
        if ttl_seconds <= 0:
            return

        # Evict oldest entries first
        while tag not in self._token_cache and len(self._token_cache) >= self.settings.vault.cache_max_entries:
            oldest = next(iter(self._token_cache))
            del self._token_cache[oldest]
            del self._cache_expiry[oldest]

        self._token_cache[tag] = token
        self._cache_expiry[tag] = datetime.utcnow() + timedelta(seconds=ttl_seconds)

        self._logger.debug(
            "token_cached",
            tag=tag,
            expiry=self._cache_expiry[tag].isoformat(),
        )
