"""
ThumbnailConfig - Settings for the thumbnail conversion service.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .thumb import Dimensions

DEFAULT_DIMENSIONS: Tuple[Dimensions, ...] = (
    Dimensions(200, 0),
    Dimensions(400, 0),
    Dimensions(800, 0),
)

INDEX_FILENAME = 'thumbnail.index'
THUMBNAIL_FOLDER = 'thumbnails'


def parse_dimensions(value: str) -> Tuple[Dimensions, ...]:
    """Parse a comma separated list such as '200x0,400x0'."""
    return tuple(Dimensions.parse(part) for part in value.split(',') if part.strip())


@dataclass
class ThumbnailConfig:
    """
    Configuration of the thumbnail conversion service.

    Attributes:
        metadata_root: Folder holding the index file and the thumbnail folder
        dimensions: Target dimensions built for every eligible file
        delay: Seconds to wait after each file of a pass
        poll_interval: Seconds between checks of the stop flag while idle
        jpeg_quality: JPEG quality of generated thumbnails
    """
    metadata_root: Optional[str] = None
    dimensions: Tuple[Dimensions, ...] = field(default=DEFAULT_DIMENSIONS)
    delay: float = 5.0
    poll_interval: float = 1.0
    jpeg_quality: int = 85

    @property
    def index_path(self) -> str:
        return os.path.join(self.metadata_root or '', INDEX_FILENAME)

    @property
    def thumbnail_folder(self) -> str:
        return os.path.join(self.metadata_root or '', THUMBNAIL_FOLDER)

    @classmethod
    def from_env(cls) -> 'ThumbnailConfig':
        """
        Read configuration from THUMBCACHE_* environment variables.

        Raises:
            ValueError: If a variable holds an unparseable value
        """
        config = cls(metadata_root=os.getenv('THUMBCACHE_METADATA_ROOT'))

        if os.getenv('THUMBCACHE_DIMENSIONS'):
            config.dimensions = parse_dimensions(os.environ['THUMBCACHE_DIMENSIONS'])
        if os.getenv('THUMBCACHE_DELAY'):
            config.delay = float(os.environ['THUMBCACHE_DELAY'])
        if os.getenv('THUMBCACHE_POLL_INTERVAL'):
            config.poll_interval = float(os.environ['THUMBCACHE_POLL_INTERVAL'])
        if os.getenv('THUMBCACHE_JPEG_QUALITY'):
            config.jpeg_quality = int(os.environ['THUMBCACHE_JPEG_QUALITY'])

        return config

    def validate(self) -> List[str]:
        """Return a list of configuration errors, empty if valid."""
        errors = []
        if not self.metadata_root:
            errors.append("Metadata root is not set (THUMBCACHE_METADATA_ROOT)")
        if not self.dimensions:
            errors.append("At least one thumbnail dimension is required")
        if len(set(self.dimensions)) != len(self.dimensions):
            errors.append("Thumbnail dimensions must be unique")
        if self.delay < 0:
            errors.append(f"Delay must not be negative, got {self.delay}")
        if self.poll_interval <= 0:
            errors.append(f"Poll interval must be positive, got {self.poll_interval}")
        if not 1 <= self.jpeg_quality <= 95:
            errors.append(f"JPEG quality must be between 1 and 95, got {self.jpeg_quality}")
        return errors
