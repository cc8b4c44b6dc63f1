"""
ImageConverter - Decodes, resizes and encodes images with Pillow.
"""

import logging
from typing import BinaryIO, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import ResizeFailed, UnsupportedMediaType


class ImageConverter:
    """
    Resizes images into thumbnails using Pillow.

    The output keeps the format of the input. Images are never enlarged.
    """

    # mime type -> (Pillow format, file extension)
    FORMATS: Dict[str, Tuple[str, str]] = {
        'image/jpeg': ('JPEG', 'jpg'),
        'image/png': ('PNG', 'png'),
        'image/gif': ('GIF', 'gif'),
    }

    def __init__(
        self,
        quality: int = 85,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize image converter.

        Args:
            quality: JPEG quality for output (default: 85)
            logger: Optional logger instance
        """
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _normalize(mime_type: Optional[str]) -> str:
        if not mime_type:
            return ''
        return mime_type.split(';', 1)[0].strip().lower()

    def mime_type_is_supported(self, mime_type: Optional[str]) -> bool:
        """Check whether thumbnails can be built for a mime type."""
        return self._normalize(mime_type) in self.FORMATS

    def get_file_extension_from_mime_type(self, mime_type: str) -> str:
        """
        Get the thumbnail file extension (without dot) for a mime type.

        Raises:
            UnsupportedMediaType: If the mime type is not supported
        """
        try:
            return self.FORMATS[self._normalize(mime_type)][1]
        except KeyError:
            raise UnsupportedMediaType(f"The mime-type {mime_type!r} is not supported")

    def resize(
        self,
        source: BinaryIO,
        mime_type: str,
        max_width: int,
        max_height: int,
        target: BinaryIO
    ) -> None:
        """
        Resize an image into a target stream.

        Args:
            source: Seekable binary stream with the original image
            mime_type: Media type of the original image
            max_width: Maximum width, 0 for unconstrained
            max_height: Maximum height, 0 for unconstrained
            target: Writable binary stream for the thumbnail

        Raises:
            UnsupportedMediaType: If the mime type is not supported
            ResizeFailed: If the image cannot be decoded, resized or encoded
        """
        normalized = self._normalize(mime_type)
        if normalized not in self.FORMATS:
            raise UnsupportedMediaType(f"The mime-type {mime_type!r} is not supported")
        output_format, _ = self.FORMATS[normalized]

        try:
            with Image.open(source) as img:
                img.load()
                bounds = self._get_bounds(img.size, max_width, max_height)
                thumb = img.copy()

            if output_format == 'JPEG':
                thumb = self._convert_color_mode(thumb)

            if bounds != thumb.size:
                thumb.thumbnail(bounds, Image.Resampling.LANCZOS)

            if output_format == 'JPEG':
                thumb.save(target, format='JPEG', quality=self.quality, optimize=True)
            elif output_format == 'PNG':
                thumb.save(target, format='PNG', optimize=True)
            else:
                thumb.save(target, format=output_format)

        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            self.logger.debug(f"Error resizing {mime_type} image: {e}")
            raise ResizeFailed(f"Unable to resize {mime_type} image: {e}") from e

    @staticmethod
    def _get_bounds(size: Tuple[int, int], max_width: int, max_height: int) -> Tuple[int, int]:
        """Resolve the box passed to Image.thumbnail; 0 leaves an axis unconstrained."""
        width, height = size
        return (
            min(width, max_width) if max_width > 0 else width,
            min(height, max_height) if max_height > 0 else height,
        )

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten transparency onto white and drop modes JPEG cannot encode."""
        if img.mode in ('RGB', 'L', 'CMYK'):
            return img

        has_alpha = img.mode in ('RGBA', 'LA', 'PA') or 'transparency' in img.info
        if not has_alpha:
            return img.convert('RGB')

        rgba = img.convert('RGBA')
        flattened = Image.new('RGB', rgba.size, 'white')
        flattened.paste(rgba, mask=rgba.getchannel('A'))
        return flattened
