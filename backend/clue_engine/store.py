"""Redis persistence for a game's token positions."""

import logging
from typing import Optional

from .board import Position
from .models import OccupancyRecord
from .occupancy import Occupancy, OccupancyTracker

logger = logging.getLogger(__name__)

EXPIRY = 24 * 60 * 60  # 24 hours in seconds


class OccupancyStore:
    def __init__(self, game_id: str, redis_client):
        self.game_id = game_id
        self.redis = redis_client
        self._positions_key = f"game:{game_id}:positions"

    # ------------------------------------------------------------------
    # Internal Redis helpers
    # ------------------------------------------------------------------

    async def _save_record(self, record: OccupancyRecord):
        await self.redis.set(self._positions_key, record.model_dump_json(), ex=EXPIRY)

    async def _load_record(self) -> OccupancyRecord:
        raw = await self.redis.get(self._positions_key)
        if raw is None:
            return OccupancyRecord()
        return OccupancyRecord.model_validate_json(raw)

    async def _load_tracker(self) -> OccupancyTracker:
        record = await self._load_record()
        return OccupancyTracker(record.positions)

    async def _save_tracker(self, tracker: OccupancyTracker):
        await self._save_record(OccupancyRecord(positions=dict(tracker.snapshot())))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(self) -> Occupancy:
        tracker = await self._load_tracker()
        return tracker.snapshot()

    async def place(self, player_id: str, position: Optional[Position]) -> Occupancy:
        """Move a token, rejecting an open cell already held by someone else."""
        tracker = await self._load_tracker()
        tracker.place(player_id, position)
        await self._save_tracker(tracker)
        logger.info("Game %s: %s placed at %s", self.game_id, player_id, position)
        return tracker.snapshot()

    async def remove(self, player_id: str) -> Occupancy:
        tracker = await self._load_tracker()
        tracker.remove(player_id)
        await self._save_tracker(tracker)
        logger.info("Game %s: %s removed from the board", self.game_id, player_id)
        return tracker.snapshot()
