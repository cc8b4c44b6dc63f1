"""
ConversionService - Runs the conversion worker in the background.

The service builds thumbnails once at startup and again every time the
repository reports it has been reindexed. It registers two shutdown hooks:
one stops the loop, the other saves the index.
"""

import logging
import os
import threading
from typing import Optional

from .config import ThumbnailConfig
from .conversion_worker import ConversionWorker
from .errors import OutputDirectoryUnavailable
from .image_conversion import ImageConverter
from .notification import ReindexSignal
from .pass_stats import PassStats
from .repository import Repository
from .shutdown import ShutdownCoordinator
from .thumbnail_index import ThumbnailIndex


class ConversionService:
    """
    Background thumbnail conversion for a repository.
    """

    def __init__(
        self,
        config: ThumbnailConfig,
        repository: Repository,
        converter: Optional[ImageConverter] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize service: create the thumbnail folder, load the index and
        register the shutdown hooks. Call start() to begin converting.

        Args:
            config: Service configuration
            repository: Repository to build thumbnails for
            converter: Optional image converter (default: ImageConverter)
            shutdown: Optional shutdown coordinator to register hooks with
            logger: Optional logger instance

        Raises:
            OutputDirectoryUnavailable: If the thumbnail folder cannot be created
        """
        self.config = config
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)
        self.converter = converter or ImageConverter(quality=config.jpeg_quality, logger=self.logger)
        self.shutdown = shutdown or ShutdownCoordinator(logger=self.logger)

        self.index_path = config.index_path
        self.thumbnail_folder = config.thumbnail_folder

        self.logger.debug(f"Creating a thumbnail folder at {self.thumbnail_folder!r}.")
        try:
            os.makedirs(self.thumbnail_folder, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryUnavailable(
                f"Could not create the thumbnail folder {self.thumbnail_folder!r}: {e}"
            ) from e

        self.index = ThumbnailIndex.load_or_create(self.index_path, self.logger)

        self._stop_event = threading.Event()
        self._signal = ReindexSignal()
        self._thread: Optional[threading.Thread] = None
        self.passes_completed = 0
        self.subscribed = False
        self.last_stats: Optional[PassStats] = None

        self.worker = ConversionWorker(
            index=self.index,
            converter=self.converter,
            thumbnail_folder=self.thumbnail_folder,
            dimensions=config.dimensions,
            delay=config.delay,
            stop_event=self._stop_event,
            logger=self.logger,
        )

        self.shutdown.register(self.stop, name='stop-conversion')
        self.shutdown.register(self.save_index, name='save-thumbnail-index')

    @classmethod
    def create(
        cls,
        config: ThumbnailConfig,
        repository: Repository,
        converter: Optional[ImageConverter] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
        logger: Optional[logging.Logger] = None
    ) -> Optional['ConversionService']:
        """Create and start a service, or return None if it cannot be set up."""
        logger = logger or logging.getLogger(__name__)
        try:
            service = cls(config, repository, converter, shutdown, logger)
        except OutputDirectoryUnavailable as e:
            logger.warning(str(e))
            return None

        service.start()
        return service

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        """Start the background conversion thread."""
        if self._thread is not None:
            raise RuntimeError("Conversion service already started")

        self._thread = threading.Thread(
            target=self._run,
            name='thumbnail-conversion',
            daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop scheduling passes; a running pass ends after its current file."""
        self.logger.info("Stopping the conversion process")
        self._stop_event.set()
        self._signal.notify()

    def save_index(self) -> None:
        """
        Persist the index.

        Raises:
            IndexPersistError: If the index cannot be written
        """
        self.logger.info(f"Saving the thumbnail index ({len(self.index)} thumbnails)")
        self.index.save(self.index_path)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the background thread; True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        self._run_pass()

        self.repository.after_reindex(self._signal)
        self.subscribed = True

        while not self._stop_event.is_set():
            if not self._signal.wait(timeout=self.config.poll_interval):
                continue
            if self._stop_event.is_set():
                break

            self.logger.debug("Refreshing thumbnails")
            self._run_pass()

        self.logger.debug("Conversion loop finished")

    def _run_pass(self) -> None:
        try:
            self.last_stats = self.worker.run_one_pass(self.repository)
        except Exception:
            self.logger.exception("Thumbnail pass failed")
            return
        self.passes_completed += 1
