"""
Exceptions raised by the thumbnail conversion service.
"""


class ThumbcacheError(Exception):
    """Base class for all thumbcache errors."""
    pass


class InvalidRoute(ThumbcacheError):
    """Raised when a parent and file route cannot be combined."""
    pass


class UnsupportedMediaType(ThumbcacheError):
    """Raised when a media type is not eligible for thumbnails."""
    pass


class MediaTypeDetectionFailed(ThumbcacheError):
    """Raised when the media type of a file cannot be determined."""
    pass


class OutputOpenFailed(ThumbcacheError):
    """Raised when a thumbnail target file cannot be opened for writing."""
    pass


class ResizeFailed(ThumbcacheError):
    """Raised when decoding, resizing or encoding an image fails."""
    pass


class IndexUnavailable(ThumbcacheError):
    """Raised when the thumbnail index file is missing or corrupt."""
    pass


class IndexPersistError(ThumbcacheError):
    """Raised when the thumbnail index cannot be written to disk."""
    pass


class OutputDirectoryUnavailable(ThumbcacheError):
    """Raised when the thumbnail folder cannot be created."""
    pass
