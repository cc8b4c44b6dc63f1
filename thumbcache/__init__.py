"""
Thumbnail cache builder for content repositories.

Builds resized copies of every image in a repository at a fixed set of
dimensions, once per file and dimension, and remembers what it has built in
a persistent index so restarts do not redo any work.

Supports both local directory trees and S3 buckets as repositories.
"""

__version__ = "1.0.0"

from .errors import (
    ThumbcacheError,
    InvalidRoute,
    UnsupportedMediaType,
    MediaTypeDetectionFailed,
    OutputOpenFailed,
    ResizeFailed,
    IndexUnavailable,
    IndexPersistError,
    OutputDirectoryUnavailable,
)
from .route import combine_routes
from .thumb import Dimensions, ThumbnailIdentity, ThumbnailRecord, thumbnail_filename
from .thumbnail_index import ThumbnailIndex
from .image_conversion import ImageConverter
from .notification import ReindexSignal
from .repository import Repository, RepositoryItem, RepositoryFile, LocalRepository
from .s3_repository import S3Config, S3Repository
from .config import ThumbnailConfig, DEFAULT_DIMENSIONS
from .pass_stats import PassStats
from .conversion_worker import ConversionWorker
from .shutdown import ShutdownCoordinator
from .conversion_service import ConversionService
from .reporter import Reporter

__all__ = [
    "ThumbcacheError",
    "InvalidRoute",
    "UnsupportedMediaType",
    "MediaTypeDetectionFailed",
    "OutputOpenFailed",
    "ResizeFailed",
    "IndexUnavailable",
    "IndexPersistError",
    "OutputDirectoryUnavailable",
    "combine_routes",
    "Dimensions",
    "ThumbnailIdentity",
    "ThumbnailRecord",
    "thumbnail_filename",
    "ThumbnailIndex",
    "ImageConverter",
    "ReindexSignal",
    "Repository",
    "RepositoryItem",
    "RepositoryFile",
    "LocalRepository",
    "S3Config",
    "S3Repository",
    "ThumbnailConfig",
    "DEFAULT_DIMENSIONS",
    "PassStats",
    "ConversionWorker",
    "ShutdownCoordinator",
    "ConversionService",
    "Reporter",
]
