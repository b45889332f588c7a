"""Admin dashboard statistics service."""

from datetime import datetime, timezone

from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.stats.aggregator import build_admin_stats
from sceneit_engine.stats.schemas import AdminStats
from sceneit_engine.storage.base import StorageBackend


class StatsService:
    """Recomputes the dashboard payload on every call; nothing is cached."""

    def __init__(self, settings: SceneItSettings, storage: StorageBackend):
        self.settings = settings
        self.storage = storage

    async def get_admin_stats(self, now: datetime | None = None) -> AdminStats:
        now = now or datetime.now(timezone.utc)
        materials = await self.storage.aggregate_all(
            now, recent_limit=self.settings.recent_limit,
        )
        return build_admin_stats(materials)
