from typing import Dict, Optional

import structlog

from monitoring_exporter.repositories.base import AbstractSecretStore

logger = structlog.get_logger(__name__)


class StaticSecretStore(AbstractSecretStore):
    """Secret store backed by a fixed tag -> token mapping, usually from settings."""

    backend = "static"

    def __init__(self, tag_tokens: Dict[str, str]):
        self._tag_tokens = dict(tag_tokens)
        self._logger = logger.bind(component="static_secret_store")

    def connect(self) -> None:
        self._logger.info("static_secret_store_loaded", tags=sorted(self._tag_tokens))

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        pass

    def get_token(self, tag: str) -> Optional[str]:
        # Empty strings count as unset so a blank setting never opens a tag
        return self._tag_tokens.get(tag) or None
