"""
Cache store for raw generator output.

One JSON file per entity type (skills.json, roles.json, industries.json)
holding the un-identified payloads as last written. A run interrupted
after generating skills can be resumed without calling the provider for
skills again.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from career_graph.config import CacheConfig

logger = logging.getLogger(__name__)


class CacheStore:
    """Durable per-entity-type staging area."""

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()

    def path(self, category_key: str) -> Path:
        return self.config.cache_file(category_key)

    def read(self, category_key: str) -> List[Dict[str, Any]]:
        """Return the last written list, or [] if absent or unreadable."""
        path = self.path(category_key)
        if not path.exists():
            return []
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read cache from {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring cache {path}: expected a JSON array")
            return []
        return data

    def write(self, category_key: str, entities: List[Dict[str, Any]]) -> None:
        """Persist the accumulated list for an entity type.

        Written to a temp file and renamed so a crash mid-write never
        leaves a truncated cache behind.
        """
        path = self.path(category_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{category_key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(entities, f, indent=2)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.info(f"Cached {len(entities)} {category_key} in {path}")

    def clear(self, category_key: str) -> None:
        """Remove the cache file so the next run regenerates it."""
        path = self.path(category_key)
        if path.exists():
            path.unlink()
            logger.info(f"Cleared cache {path}")

    def cached_categories(self, category_key: str) -> List[str]:
        """Categories that already have at least one cached entity."""
        seen = []
        for item in self.read(category_key):
            category = item.get("category")
            if category and category not in seen:
                seen.append(category)
        return seen
