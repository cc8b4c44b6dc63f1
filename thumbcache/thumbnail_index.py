"""
ThumbnailIndex - Durable record of the thumbnails that have already been built.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import IndexPersistError, IndexUnavailable
from .thumb import Dimensions, ThumbnailIdentity, ThumbnailRecord


class ThumbnailIndex:
    """
    Mapping of source route -> dimension key -> ThumbnailRecord.

    Entries are only ever added. Every read and write takes the index lock,
    so several workers may share one index.
    """

    def __init__(self, thumbnails: Optional[Dict[str, Dict[str, ThumbnailRecord]]] = None):
        self._thumbnails: Dict[str, Dict[str, ThumbnailRecord]] = {}
        self._lock = threading.RLock()

        for route, thumbs in (thumbnails or {}).items():
            self._thumbnails[route] = dict(thumbs)

    def contains(self, identity: ThumbnailIdentity) -> bool:
        """True if a thumbnail for this route and dimensions is indexed."""
        with self._lock:
            thumbs = self._thumbnails.get(identity.route)
            if thumbs is None:
                return False
            return identity.key in thumbs

    def insert(self, record: ThumbnailRecord) -> None:
        """Add or overwrite the record at its route and dimension key."""
        with self._lock:
            self._thumbnails.setdefault(record.route, {})[record.key] = record

    def get(self, route: str, dimensions: Dimensions) -> Optional[ThumbnailRecord]:
        """Look up the record for a route at the given dimensions."""
        with self._lock:
            return self._thumbnails.get(route, {}).get(dimensions.key)

    def records_for(self, route: str) -> List[ThumbnailRecord]:
        """All records for a route, ordered by dimensions."""
        with self._lock:
            thumbs = list(self._thumbnails.get(route, {}).values())
        return sorted(thumbs, key=lambda r: r.dimensions)

    def routes(self) -> List[str]:
        with self._lock:
            return sorted(self._thumbnails)

    def records(self) -> Iterator[ThumbnailRecord]:
        """Yield every record, ordered by route and dimensions."""
        for route in self.routes():
            yield from self.records_for(route)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(thumbs) for thumbs in self._thumbnails.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ThumbnailIndex):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        with self._lock:
            return {
                'thumbnails': {
                    route: {key: record.to_dict() for key, record in thumbs.items()}
                    for route, thumbs in self._thumbnails.items()
                },
            }

    @classmethod
    def from_dict(cls, data: dict) -> 'ThumbnailIndex':
        """
        Create from dictionary.

        Unknown keys at any level are ignored. The inner key is recomputed
        from each record's dimensions.
        """
        index = cls()
        for route, thumbs in data.get('thumbnails', {}).items():
            for record_data in thumbs.values():
                record = ThumbnailRecord.from_dict(record_data)
                if record.route != route:
                    raise ValueError(f"Record route {record.route!r} filed under {route!r}")
                index.insert(record)
        return index

    def save(self, filepath: str) -> None:
        """
        Save the index to a JSON file.

        The data is written to a temporary file next to the target and moved
        into place, so an interrupted save never corrupts an existing index.

        Raises:
            IndexPersistError: If the file cannot be written
        """
        path = Path(filepath)
        data = self.to_dict()

        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding='utf-8',
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix='.tmp',
                delete=False
            ) as f:
                tmp_name = f.name
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise IndexPersistError(f"Unable to save thumbnail index to {filepath}: {e}") from e

    @classmethod
    def load(cls, filepath: str) -> 'ThumbnailIndex':
        """
        Load an index from a JSON file.

        Raises:
            IndexUnavailable: If the file is missing, unreadable or corrupt
        """
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, ValueError, RecursionError) as e:
            raise IndexUnavailable(f"Unable to read thumbnail index {filepath}: {e}") from e

        try:
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return cls.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise IndexUnavailable(f"Malformed thumbnail index {filepath}: {e}") from e

    @classmethod
    def load_or_create(
        cls,
        filepath: str,
        logger: Optional[logging.Logger] = None
    ) -> 'ThumbnailIndex':
        """Load an index, falling back to an empty one if it is unavailable."""
        logger = logger or logging.getLogger(__name__)
        try:
            index = cls.load(filepath)
        except IndexUnavailable as e:
            logger.debug(f"No thumbnail index loaded ({e}). Creating a new one.")
            return cls()

        logger.debug(f"Loaded thumbnail index {filepath} ({len(index)} thumbnails)")
        return index
