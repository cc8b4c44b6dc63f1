"""
Repository - Items and files the thumbnail service builds thumbnails for.

Defines the contract the conversion worker consumes and a repository backed
by a local directory tree.
"""

import hashlib
import logging
import os
import threading
from mimetypes import guess_type
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, TypeVar

from .errors import MediaTypeDetectionFailed
from .notification import ReindexSignal
from .route import combine_routes, normalize_route

T = TypeVar('T')


def file_id_for_route(route: str) -> str:
    """Stable identifier for a file, derived from its full route."""
    return hashlib.sha1(route.encode('utf-8', errors='surrogateescape')).hexdigest()


class RepositoryFile:
    """
    A file belonging to a repository item.

    Attributes:
        id: Stable identifier, used to name thumbnails
        parent: Route of the owning item
        route: Route of the file relative to its item
    """

    def __init__(self, file_id: str, parent: str, route: str):
        self.id = file_id
        self.parent = parent
        self.route = route

    def mime_type(self) -> str:
        """
        Classify the file's content.

        Raises:
            MediaTypeDetectionFailed: If the media type cannot be determined
        """
        raise NotImplementedError

    def data(self, consumer: Callable[[BinaryIO], T]) -> T:
        """
        Give scoped access to the file content.

        The consumer receives a seekable binary stream that is only valid
        for the duration of the call. Its return value is passed through.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.parent!r}, {self.route!r})"

    def __str__(self) -> str:
        return f"{self.parent}/{self.route}" if self.parent else self.route


class RepositoryItem:
    """
    An item of a repository, holding zero or more files.

    Attributes:
        route: Route of the item
    """

    def __init__(self, route: str, files: Optional[List[RepositoryFile]] = None):
        self.route = route
        self._files = list(files or [])

    def files(self) -> List[RepositoryFile]:
        return list(self._files)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.route!r}, {len(self._files)} files)"


class Repository:
    """
    Base class for repositories.

    Subclasses implement _load_items(); reindex() refreshes the listing and
    then notifies every subscribed ReindexSignal.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._items: List[RepositoryItem] = []
        self._subscribers: List[ReindexSignal] = []
        self._lock = threading.Lock()

    def items(self) -> List[RepositoryItem]:
        with self._lock:
            return list(self._items)

    def after_reindex(self, signal: ReindexSignal) -> None:
        """Subscribe a signal that is notified each time reindexing finishes."""
        with self._lock:
            self._subscribers.append(signal)

    def reindex(self) -> None:
        """Rebuild the item listing and notify subscribers."""
        items = self._load_items()
        with self._lock:
            self._items = items
            subscribers = list(self._subscribers)

        self.logger.debug(f"Reindexed repository: {len(items)} items")
        for signal in subscribers:
            signal.notify()

    def _load_items(self) -> List[RepositoryItem]:
        raise NotImplementedError


class LocalFile(RepositoryFile):
    """A file on the local filesystem."""

    def __init__(self, path: Path, parent: str, route: str):
        super().__init__(file_id_for_route(combine_routes(parent, route)), parent, route)
        self.path = path

    def mime_type(self) -> str:
        mime_type, _ = guess_type(self.path.name)
        if not mime_type:
            raise MediaTypeDetectionFailed(f"Unable to detect mime type for {self.path}")
        return mime_type

    def data(self, consumer: Callable[[BinaryIO], T]) -> T:
        with open(self.path, 'rb') as f:
            return consumer(f)


class LocalRepository(Repository):
    """
    Repository backed by a local directory tree.

    Every directory that directly contains regular files is an item; its
    route is the directory path relative to the root. Hidden files and
    directories are ignored, as are the excluded directories.
    """

    def __init__(
        self,
        root: str,
        logger: Optional[logging.Logger] = None,
        exclude: Optional[List[str]] = None
    ):
        """
        Initialize local repository and build the first listing.

        Args:
            root: Root directory of the repository
            logger: Optional logger instance
            exclude: Directories left out of the listing, with everything below them
        """
        super().__init__(logger)
        self.root = Path(root)
        self.exclude = {Path(path).resolve() for path in exclude or []}
        if not self.root.is_dir():
            raise ValueError(f"Repository root does not exist: {root}")

        with self._lock:
            self._items = self._load_items()

    def _load_items(self) -> List[RepositoryItem]:
        items = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith('.') and (Path(dirpath) / d).resolve() not in self.exclude
            )

            directory = Path(dirpath)
            item_route = normalize_route(directory.relative_to(self.root).as_posix())

            files = [
                LocalFile(directory / name, item_route, name)
                for name in sorted(filenames)
                if not name.startswith('.') and (directory / name).is_file()
            ]
            if files:
                items.append(RepositoryItem(item_route, files))

        return items
