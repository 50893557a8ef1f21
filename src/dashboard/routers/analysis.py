"""Router for the full market analysis."""
from typing import Any, Dict

from fastapi import APIRouter

from src.utils.serialize import serialize_for_json


class AnalysisRouter:
    """Runs the analysis pipeline on demand and serves the last committed result."""
    def __init__(self, logger, analysis_engine):
        self.router = APIRouter(prefix="/api/analysis", tags=["analysis"])
        self.logger = logger
        self.analysis_engine = analysis_engine

        self.router.add_api_route("/{coin_id}", self.get_analysis, methods=["GET"])
        self.router.add_api_route("/{coin_id}/latest", self.get_latest_analysis, methods=["GET"])

    async def get_analysis(self, coin_id: str) -> Dict[str, Any]:
        """Run a full analysis for ``coin_id``."""
        await self.analysis_engine.get_full_analysis(coin_id)
        # Concurrent requests for one coin all answer with the newest committed result
        result = self.analysis_engine.get_latest(coin_id)
        return serialize_for_json(result.to_dict())

    async def get_latest_analysis(self, coin_id: str) -> Dict[str, Any]:
        """Get the last committed analysis without fetching anything."""
        result = self.analysis_engine.get_latest(coin_id)
        if result is None:
            return {"symbol": coin_id, "error": "No analysis available yet."}
        return serialize_for_json(result.to_dict())
