from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter


class HealthRouter:
    """Liveness and provider configuration status."""
    def __init__(self, config):
        self.router = APIRouter(prefix="/api", tags=["health"])
        self.config = config
        self.router.add_api_route("/health", self.get_health, methods=["GET"])

    async def get_health(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "providers": {
                "coingecko": {"api_key": bool(self.config.COINGECKO_API_KEY)},
                "newsdata": {"api_key": bool(self.config.NEWSDATA_API_KEY)},
            },
        }
