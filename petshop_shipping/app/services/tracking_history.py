"""
Recent tracking lookups, most recent first, kept in the session store.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.core.session import SessionStore

logger = logging.getLogger("petshop_shipping.tracking_history")


class TrackingHistory:

    def __init__(self, store: SessionStore, limit: Optional[int] = None, key: Optional[str] = None):
        self.store = store
        self.limit = limit or settings.tracking_history_limit
        self.key = key or settings.tracking_history_key

    async def entries(self) -> List[Dict[str, str]]:
        raw = await self.store.get(self.key)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable tracking history")
            return []
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict) and "id" in entry]

    async def record(self, tracking_id: str, id_type: str, now: Optional[datetime] = None) -> List[Dict[str, str]]:
        """Move (or add) ``tracking_id`` to the front and trim to the limit."""
        checked_at = (now or datetime.now(timezone.utc)).isoformat()
        history = [entry for entry in await self.entries() if entry["id"] != tracking_id]
        history.insert(0, {"id": tracking_id, "type": id_type, "lastChecked": checked_at})
        history = history[:self.limit]
        await self.store.set(self.key, json.dumps(history))
        return history

    async def clear(self) -> None:
        await self.store.clear(self.key)
