"""Rubric and stage lookups behind injected TTL caches."""

from functools import lru_cache
from typing import Any

from readiness_engine.core.cache import TTLCache
from readiness_engine.core.config import get_settings
from readiness_engine.core.dimensions import MAX_LEVEL, MIN_LEVEL
from readiness_engine.core.logging import get_logger
from readiness_engine.db.reference_data import list_rubric_rows, list_stages

logger = get_logger(__name__)

FALLBACK_STAGES: list[dict[str, Any]] = [
    {
        "id": "pre_seed",
        "name": "Pre-Seed",
        "description": "Initial funding stage to cover early startup costs",
        "purpose": "To cover initial costs like market research, business plan development, and early product prototypes.",
        "sources": "Often comes from the founder's own funds, friends, family, or angel investors.",
        "display_order": 1,
    },
    {
        "id": "seed",
        "name": "Seed",
        "description": "Early-stage funding for product development and market validation",
        "purpose": "To fund initial product development, conduct market research, and test business models.",
        "sources": "Primarily angel investors, incubators, or accelerators.",
        "display_order": 2,
    },
    {
        "id": "series_a",
        "name": "Series A",
        "description": "First institutional round to scale the business",
        "purpose": "To refine the business model and achieve significant market traction and revenue potential.",
        "sources": "Typically the first institutional round of venture capital after seed and angel investors.",
        "display_order": 3,
    },
]

LevelMap = dict[int, str]


class RubricService:
    """Level descriptions per dimension, cached for the cache's TTL."""

    def __init__(self, cache: TTLCache[dict[str, LevelMap]]):
        self.cache = cache

    def _load(self) -> dict[str, LevelMap]:
        rows = list_rubric_rows()
        if not rows:
            raise ValueError("No rubric data found")

        rubric: dict[str, LevelMap] = {}
        for row in rows:
            descriptions = row.get("level_descriptions") or {}
            rubric[row["dimension"]] = {
                level: descriptions.get(str(level), "") for level in range(MIN_LEVEL, MAX_LEVEL + 1)
            }
        return rubric

    def get_rubric(self) -> dict[str, LevelMap]:
        return self.cache.get_or_load(self._load)

    def get_level_description(self, dimension: str, level: int) -> str | None:
        return self.get_rubric().get(dimension, {}).get(level)

    def invalidate(self) -> None:
        self.cache.invalidate()


class StageService:
    """Funding stages, falling back to built-in stages when the table is unusable."""

    def __init__(self, cache: TTLCache[list[dict[str, Any]]]):
        self.cache = cache

    def _load(self) -> list[dict[str, Any]]:
        stages = list_stages()
        if not stages:
            raise ValueError("No stages found in database")
        return stages

    def get_stages(self) -> list[dict[str, Any]]:
        try:
            return self.cache.get_or_load(self._load)
        except Exception as e:
            # Fallback is returned but never cached, so the next call retries
            logger.warning(f"Using fallback stages: {e}")
            return list(FALLBACK_STAGES)

    def get_stage(self, stage_id: str) -> dict[str, Any] | None:
        return next((s for s in self.get_stages() if s.get("id") == stage_id), None)

    def invalidate(self) -> None:
        self.cache.invalidate()


@lru_cache(maxsize=1)
def get_rubric_service() -> RubricService:
    settings = get_settings()
    return RubricService(TTLCache(settings.RUBRIC_CACHE_TTL_SECONDS))


@lru_cache(maxsize=1)
def get_stage_service() -> StageService:
    settings = get_settings()
    return StageService(TTLCache(settings.STAGE_CACHE_TTL_SECONDS))
