"""Local favorites store.

Favorites live in a single JSON file (``favorites.json`` in the data
directory) holding a list of :class:`~anidex.models.FavoriteRecord` objects.
The whole file is rewritten on each change with
:func:`~anidex.config.atomic_write`.

A store that cannot be read when it is opened is a hard failure
(:class:`~anidex.exceptions.FavoritesStoreError`). Once open, write failures
are logged and the in-memory view stays authoritative for the session.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from anidex.config import atomic_write, get_data_dir
from anidex.exceptions import FavoritesStoreError
from anidex.models import FavoriteRecord

logger = logging.getLogger(__name__)

FAVORITES_FILENAME = "favorites.json"

_records_adapter = TypeAdapter(list[FavoriteRecord])


def default_favorites_path() -> Path:
    return get_data_dir() / FAVORITES_FILENAME


class FavoritesStore:
    """Favorites keyed by ``malId``.

    Args:
        path: JSON file backing the store. Defaults to
            :func:`default_favorites_path`.

    Raises:
        FavoritesStoreError: If an existing file is unreadable or invalid.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or default_favorites_path()
        self._records: dict[int, FavoriteRecord] = {}
        self._load()

    def add_favorite(self, record: FavoriteRecord) -> None:
        """Insert or replace the record with the same ``malId``."""
        self._records[record.malId] = record
        self._save()

    def remove_favorite(self, mal_id: int) -> bool:
        """Remove *mal_id*. Returns False if it was not a favorite."""
        if self._records.pop(mal_id, None) is None:
            return False
        self._save()
        return True

    def is_favorite(self, mal_id: int) -> bool:
        return mal_id in self._records

    def clear_all_favorites(self) -> None:
        self._records.clear()
        self._save()

    def list_favorites(self) -> list[FavoriteRecord]:
        """Return all favorites, most recently added first."""
        return sorted(self._records.values(), key=lambda r: r.addedDate, reverse=True)

    def __len__(self) -> int:
        return len(self._records)

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw = self.path.read_text(encoding="utf-8")
            records = _records_adapter.validate_json(raw)
        except (OSError, ValidationError) as exc:
            raise FavoritesStoreError(
                f"Could not open favorites store at {self.path}: {exc}"
            ) from exc
        self._records = {record.malId: record for record in records}

    def _save(self) -> None:
        data = [record.model_dump(mode="json") for record in self._records.values()]
        try:
            atomic_write(self.path, json.dumps(data, indent=2) + "\n")
        except OSError as exc:
            logger.warning("Could not save favorites to %s: %s", self.path, exc)
