"""
Liveness and readiness reporting
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from docchat.core.config import settings
from docchat.services.completion import API_KEY_FIELDS, BASE_URL_FIELDS

logger = logging.getLogger(__name__)

SERVICE_NAME = "docchat-api"
SERVICE_VERSION = "1.0.0"


def _database_location(url: str) -> str:
    # Never echo credentials embedded in the URL
    return url.rsplit("@", 1)[-1] if "@" in url else "local"


class HealthService:
    """Builds the payloads served by /healthz and /readyz"""

    def liveness_check(self) -> Dict[str, Any]:
        return self._envelope("healthy")

    def readiness_check(self, db: Session) -> Dict[str, Any]:
        """
        The service is ready when the database answers. LLM providers are only
        described from configuration since calling them would cost tokens.
        """
        database = self._check_database(db)
        payload = self._envelope("ready" if database["status"] == "healthy" else "not_ready")
        payload["components"] = {"database": database, "llm": self._describe_llm()}
        return payload

    def _check_database(self, db: Session) -> Dict[str, Any]:
        try:
            db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Readiness probe could not reach the database: {str(e)}")
            return {"status": "unhealthy", "error": str(e)}
        return {"status": "healthy", "url": _database_location(settings.database_url)}

    def _describe_llm(self) -> Dict[str, Any]:
        providers = {
            provider: "configured" if getattr(settings, field) else "not_configured"
            for provider, field in API_KEY_FIELDS.items()
        }
        providers.update({provider: getattr(settings, field) for provider, field in BASE_URL_FIELDS.items()})
        return {
            "default_provider": settings.default_llm_provider,
            "default_model": settings.default_llm_model,
            "providers": providers,
        }

    def _envelope(self, status: str) -> Dict[str, Any]:
        return {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        }
