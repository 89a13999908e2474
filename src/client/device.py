"""Device-scoped persistent state.

Anonymous visitors are identified by a random device id generated once and
kept locally. The same file keeps the sets of entities the device has
liked, so a like survives a restart before the server confirms it.
"""

from collections.abc import Iterator, MutableSet
from pathlib import Path
from typing import Any
from uuid import uuid4

import orjson
import structlog


logger = structlog.get_logger(__name__)

DEVICE_ID_KEY = "comment_device_id"
LIKED_POSTS_KEY = "liked_blog_posts"
LIKED_COMMENTS_KEY = "liked_comments"


class LikedSet(MutableSet[str]):
    """Set of liked entity ids written through to a DeviceStore."""

    def __init__(self, store: "DeviceStore", key: str):
        self._store = store
        self._key = key

    def _items(self) -> list[str]:
        return self._store.data.setdefault(self._key, [])

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items()))

    def __len__(self) -> int:
        return len(self._items())

    def add(self, entity_id: str) -> None:
        items = self._items()
        if entity_id not in items:
            items.append(entity_id)
            self._store.save()

    def discard(self, entity_id: str) -> None:
        items = self._items()
        if entity_id in items:
            items.remove(entity_id)
            self._store.save()


class DeviceStore:
    """JSON file holding the device id and liked-entity sets."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = orjson.loads(self.path.read_bytes())
        except orjson.JSONDecodeError as e:
            logger.warning("device_store_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def save(self) -> None:
        """Write the state atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_bytes(orjson.dumps(self.data, option=orjson.OPT_INDENT_2))
        tmp.replace(self.path)

    @property
    def device_id(self) -> str:
        """Device id, generated and persisted on first access."""
        device_id = self.data.get(DEVICE_ID_KEY)
        if not device_id:
            device_id = str(uuid4())
            self.data[DEVICE_ID_KEY] = device_id
            self.save()
            logger.info("device_id_generated", device_id=device_id)
        return device_id

    def liked(self, key: str) -> LikedSet:
        """Persistent liked set stored under ``key``."""
        return LikedSet(self, key)
