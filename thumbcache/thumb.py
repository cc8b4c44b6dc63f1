"""
Thumb - Identity and record types for a single thumbnail.
"""

from dataclasses import dataclass

from .route import combine_routes


@dataclass(frozen=True, order=True)
class Dimensions:
    """
    Target bounds of a thumbnail.

    Attributes:
        max_width: Maximum width in pixels, 0 for unconstrained
        max_height: Maximum height in pixels, 0 for unconstrained
    """
    max_width: int
    max_height: int

    def __post_init__(self):
        for name in ('max_width', 'max_height'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")

    @property
    def key(self) -> str:
        """Canonical string form used as the inner index key (e.g. '200x0')."""
        return f"{self.max_width}x{self.max_height}"

    def __str__(self) -> str:
        return self.key

    @classmethod
    def parse(cls, value: str) -> 'Dimensions':
        """Parse a '<width>x<height>' string."""
        try:
            width, height = value.strip().lower().split('x')
            return cls(int(width), int(height))
        except (AttributeError, ValueError) as e:
            raise ValueError(f"Invalid dimensions {value!r}, expected WIDTHxHEIGHT") from e


def thumbnail_filename(file_id: str, dimensions: Dimensions, extension: str) -> str:
    """Build the artifact name '<fileId>-<maxWidth>-<maxHeight>.<ext>'."""
    return f"{file_id}-{dimensions.max_width}-{dimensions.max_height}.{extension}"


@dataclass(frozen=True)
class ThumbnailIdentity:
    """
    Logical identity of a thumbnail: the source route and target dimensions.

    Attributes:
        route: Fully-qualified route of the source file
        dimensions: Target bounds
    """
    route: str
    dimensions: Dimensions

    @classmethod
    def from_file_route(
        cls,
        parent: str,
        route: str,
        max_width: int,
        max_height: int
    ) -> 'ThumbnailIdentity':
        """
        Create an identity from a file's parent route and own route.

        Raises:
            InvalidRoute: If the routes cannot be combined
        """
        return cls(combine_routes(parent, route), Dimensions(max_width, max_height))

    @property
    def key(self) -> str:
        return self.dimensions.key

    def __str__(self) -> str:
        return f"{self.route} ({self.dimensions.key})"


@dataclass(frozen=True)
class ThumbnailRecord:
    """
    A thumbnail that has been built and written to the thumbnail folder.

    Attributes:
        route: Fully-qualified route of the source file
        dimensions: Target bounds
        filename: Generated file name inside the thumbnail folder
    """
    route: str
    dimensions: Dimensions
    filename: str

    @classmethod
    def for_identity(cls, identity: ThumbnailIdentity, filename: str) -> 'ThumbnailRecord':
        return cls(identity.route, identity.dimensions, filename)

    @property
    def identity(self) -> ThumbnailIdentity:
        return ThumbnailIdentity(self.route, self.dimensions)

    @property
    def key(self) -> str:
        return self.dimensions.key

    def __str__(self) -> str:
        return f"{self.route} ({self.dimensions.key}) -> {self.filename}"

    def to_dict(self) -> dict:
        return {
            'route': self.route,
            'filename': self.filename,
            'max_width': self.dimensions.max_width,
            'max_height': self.dimensions.max_height,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ThumbnailRecord':
        """Create from dictionary, ignoring unknown fields."""
        return cls(
            route=data['route'],
            dimensions=Dimensions(data['max_width'], data['max_height']),
            filename=data['filename'],
        )
