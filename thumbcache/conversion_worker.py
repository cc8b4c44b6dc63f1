"""
ConversionWorker - Builds missing thumbnails for every file of a repository.
"""

import logging
import os
import threading
from typing import Iterator, Optional, Sequence

from .config import DEFAULT_DIMENSIONS
from .errors import InvalidRoute, OutputOpenFailed, ResizeFailed
from .image_conversion import ImageConverter
from .pass_stats import PassStats
from .repository import Repository, RepositoryFile
from .thumb import Dimensions, ThumbnailIdentity, ThumbnailRecord, thumbnail_filename
from .thumbnail_index import ThumbnailIndex


class ConversionWorker:
    """
    Walks a repository and builds each missing thumbnail exactly once.

    A thumbnail that fails to build is not retried within the pass. Since it
    never reaches the index, the next pass tries it again.
    """

    def __init__(
        self,
        index: ThumbnailIndex,
        converter: ImageConverter,
        thumbnail_folder: str,
        dimensions: Sequence[Dimensions] = DEFAULT_DIMENSIONS,
        delay: float = 5.0,
        stop_event: Optional[threading.Event] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize worker.

        Args:
            index: Index of already built thumbnails, updated in place
            converter: Image converter used to resize files
            thumbnail_folder: Folder the thumbnails are written to
            dimensions: Target dimensions built for every eligible file
            delay: Seconds to wait after each file
            stop_event: Event that ends a pass before the next file when set
            logger: Optional logger instance
        """
        self.index = index
        self.converter = converter
        self.thumbnail_folder = thumbnail_folder
        self.dimensions = tuple(dimensions)
        self.delay = delay
        self.stop_event = stop_event or threading.Event()
        self.logger = logger or logging.getLogger(__name__)
        self.stats = PassStats()

    def stop(self) -> None:
        """Request the worker to stop after the current file."""
        self.stop_event.set()

    def thumbnail_path(self, record: ThumbnailRecord) -> str:
        return os.path.join(self.thumbnail_folder, record.filename)

    def run_one_pass(self, repository: Repository) -> PassStats:
        """
        Ensure every eligible file has a thumbnail at every dimension.

        Args:
            repository: Repository to walk

        Returns:
            PassStats with results
        """
        self.stats = PassStats()
        self.logger.info(f"Starting thumbnail pass ({len(self.dimensions)} dimensions)")

        for file in self._iter_files(repository):
            if self.stop_event.is_set():
                self.logger.info("Stop requested, halting thumbnail pass")
                self.stats.stopped = True
                break

            self.stats.files_seen += 1
            try:
                self._process_file(file)
            except Exception as e:
                self.logger.exception(f"Unexpected error processing file {file}")
                self.stats.errors += 1
                self.stats.error_details.append(f"{file}: {e}")

            # throttle, regardless of whether any work was done
            if self.delay > 0:
                self.stop_event.wait(self.delay)

        self.stats.finish()
        self.logger.info(f"Thumbnail pass complete: {self.stats.summary()}")
        return self.stats

    def _iter_files(self, repository: Repository) -> Iterator[RepositoryFile]:
        for item in repository.items():
            yield from item.files()

    def _process_file(self, file: RepositoryFile) -> None:
        """Build all configured thumbnails for one file."""
        try:
            mime_type = file.mime_type()
        except Exception as e:
            self.logger.warning(f"Unable to detect mime type for file {file}. Error: {e}")
            self.stats.skipped += 1
            return

        if not self.converter.mime_type_is_supported(mime_type):
            self.logger.debug(f"The mime-type {mime_type!r} of {file} is currently not supported.")
            self.stats.skipped += 1
            return

        for dimensions in self.dimensions:
            try:
                record = self.create_thumbnail(file, dimensions, mime_type)
            except InvalidRoute as e:
                self.logger.warning(f"Unable to combine routes {file.parent!r} and {file.route!r}: {e}")
                self.stats.skipped += 1
                return
            except (OutputOpenFailed, ResizeFailed) as e:
                self._record_error(str(e))
                continue
            except Exception as e:
                self._record_error(f"Unable to create thumbnail for file {file} ({dimensions.key}): {e}")
                continue

            if record is None:
                self.stats.cached += 1
                continue

            self.stats.built += 1
            self.stats.bytes_generated += self._file_size(self.thumbnail_path(record))

    def _record_error(self, message: str) -> None:
        self.logger.warning(message)
        self.stats.errors += 1
        self.stats.error_details.append(message)

    def _file_size(self, path: str) -> int:
        try:
            return os.path.getsize(path)
        except OSError as e:
            self.logger.warning(f"Unable to stat thumbnail {path!r}: {e}")
            return 0

    def create_thumbnail(
        self,
        file: RepositoryFile,
        dimensions: Dimensions,
        mime_type: str
    ) -> Optional[ThumbnailRecord]:
        """
        Build and index one thumbnail unless it is already indexed.

        Returns:
            The new record, or None if the thumbnail was already indexed

        Raises:
            InvalidRoute: If the file route cannot be combined with its parent
            OutputOpenFailed: If the target file cannot be opened
            ResizeFailed: If reading or resizing the file fails
        """
        identity = ThumbnailIdentity.from_file_route(
            file.parent, file.route, dimensions.max_width, dimensions.max_height
        )

        if self.index.contains(identity):
            self.logger.debug(f"Thumb {identity} already available in the index")
            return None

        extension = self.converter.get_file_extension_from_mime_type(mime_type)
        filename = thumbnail_filename(file.id, dimensions, extension)
        file_path = os.path.join(self.thumbnail_folder, filename)

        try:
            target = open(file_path, 'wb')
        except OSError as e:
            raise OutputOpenFailed(f"Unable to open thumbnail file {file_path!r}: {e}") from e

        try:
            with target:
                file.data(lambda content: self.converter.resize(
                    content, mime_type, dimensions.max_width, dimensions.max_height, target
                ))
        except Exception as e:
            self._remove_partial(file_path)
            raise ResizeFailed(f"Unable to create thumbnail for file {file} ({identity.key}): {e}") from e

        record = ThumbnailRecord.for_identity(identity, filename)
        self.index.insert(record)
        self.logger.debug(f"Adding thumb {record} to index")
        return record

    def _remove_partial(self, file_path: str) -> None:
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Unable to remove partial thumbnail {file_path!r}: {e}")
