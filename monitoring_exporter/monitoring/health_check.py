"""
Health check service for the exporter's collaborators.
"""
import time
from enum import Enum
from typing import Dict, Any, Optional, Sequence

from monitoring_exporter.config.logging_config import get_logger
from monitoring_exporter.metrics.collector import Producer
from monitoring_exporter.repositories.base import AbstractSecretStore

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status"""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


class HealthCheckService:
    """Service for checking health of all components"""

    def __init__(
        self,
        secret_store: Optional[AbstractSecretStore] = None,
        producers: Sequence[Producer] = (),
    ) -> None:
        """
        Initialize health check service.

        Args:
            secret_store: Secret store consulted by the access gate
            producers: Producers served on scrapes
        """
        self.secret_store = secret_store
        self.producers = producers

    def check_secret_store(self) -> Dict[str, Any]:
        """Check that scrape tokens can be looked up"""
        if not self.secret_store:
            return {
                "service": "secret_store",
                "status": HealthStatus.UNHEALTHY,
                "details": {"connected": False, "message": "Secret store not initialized"}
            }

        start_time = time.time()
        try:
            is_healthy = self.secret_store.health_check()
            latency_ms = (time.time() - start_time) * 1000

            return {
                "service": "secret_store",
                "status": HealthStatus.HEALTHY if is_healthy else HealthStatus.UNHEALTHY,
                "details": {
                    "backend": self.secret_store.backend,
                    "connected": is_healthy,
                    "latency_ms": round(latency_ms, 2),
                }
            }
        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000
            logger.error("secret_store_health_check_failed", error=str(e), exc_info=True)
            return {
                "service": "secret_store",
                "status": HealthStatus.UNHEALTHY,
                "details": {
                    "backend": self.secret_store.backend,
                    "connected": False,
                    "latency_ms": round(latency_ms, 2),
                    "error": str(e)
                }
            }

    def check_producers(self) -> Dict[str, Any]:
        """An exporter without producers serves empty scrapes"""
        count = len(self.producers)
        return {
            "service": "producers",
            "status": HealthStatus.HEALTHY if count else HealthStatus.DEGRADED,
            "details": {"registered": count}
        }

    def check_all(self) -> Dict[str, Any]:
        """Check health of all components"""
        components = {
            "secret_store": self.check_secret_store(),
            "producers": self.check_producers(),
        }

        # Determine overall status
        statuses = [comp["status"] for comp in components.values()]
        if all(status == HealthStatus.HEALTHY for status in statuses):
            overall_status = HealthStatus.HEALTHY
        elif any(status == HealthStatus.UNHEALTHY for status in statuses):
            overall_status = HealthStatus.UNHEALTHY
        else:
            overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status,
            "components": components
        }
