"""
Scoped access gate for scrape requests.

A request names a tag (the authorization scope) and presents a token. The
token must equal the secret configured for that tag. Unknown tags, missing
tokens, wrong tokens and secret store failures are all rejected the same
way so callers cannot tell which tags exist.
"""
import hashlib
import hmac
from typing import Any, Optional

from monitoring_exporter.config.logging_config import get_logger
from monitoring_exporter.models.access_scope import AccessScope
from monitoring_exporter.repositories.base import AbstractSecretStore, SecretStoreError


class UnauthorizedError(Exception):
    """Raised when a (tag, token) pair does not grant access"""
    pass


# Compared against when a tag has no secret, so the comparison path is unchanged
_UNKNOWN_TAG_DIGEST = hashlib.sha256(b"\x00unknown-tag\x00").digest()


def token_digest(token: str) -> bytes:
    """Fixed-length representation of a token used for comparison"""
    return hashlib.sha256(token.encode("utf-8")).digest()


def tokens_match(presented: str, expected: Optional[str]) -> bool:
    """
    Compare two tokens in constant time.

    Both sides are reduced to SHA-256 digests first, so the time taken depends
    on neither the length nor the content of the expected secret.
    """
    expected_digest = token_digest(expected) if expected is not None else _UNKNOWN_TAG_DIGEST
    matched = hmac.compare_digest(token_digest(presented), expected_digest)
    return matched and expected is not None


class AccessGate:
    """Validates scrape credentials against a secret store"""

    def __init__(self, secret_store: AbstractSecretStore, logger: Any = None) -> None:
        self.secret_store = secret_store
        self._logger = logger if logger is not None else get_logger(__name__).bind(component="access_gate")

    def authorize(self, tag: str, token: Optional[str]) -> AccessScope:
        """
        Validate ``token`` for ``tag``.

        Args:
            tag: Authorization scope from the request path
            token: Presented token, None if the request carried none

        Returns:
            The validated access scope

        Raises:
            UnauthorizedError: If access is denied for any reason
        """
        if not token:
            self._logger.info("scrape_denied", tag=tag, reason="missing_credentials")
            raise UnauthorizedError("Missing token")

        try:
            expected = self.secret_store.get_token(tag)
        except SecretStoreError as e:
            # Fail closed
            self._logger.error("scrape_denied", tag=tag, reason="secret_store_error", error=str(e))
            raise UnauthorizedError("Secret store unavailable") from e

        if not tokens_match(token, expected):
            reason = "unknown_tag" if expected is None else "credentials_mismatch"
            self._logger.info("scrape_denied", tag=tag, reason=reason)
            raise UnauthorizedError("Invalid token")

        return AccessScope(tag=tag, token=token)
