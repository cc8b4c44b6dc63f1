"""
Pytest fixtures for thumbcache tests.
"""

import io
import logging

import pytest

from thumbcache.image_conversion import ImageConverter
from thumbcache.repository import Repository, RepositoryFile, RepositoryItem, file_id_for_route
from thumbcache.route import combine_routes


class FakeFile(RepositoryFile):
    """In-memory repository file."""

    def __init__(self, parent, route, content=b'', mime_type='image/jpeg', mime_error=None, file_id=None):
        super().__init__(file_id or file_id_for_route(combine_routes(parent, route)), parent, route)
        self.content = content
        self._mime_type = mime_type
        self.mime_error = mime_error
        self.reads = 0

    def mime_type(self):
        if self.mime_error is not None:
            raise self.mime_error
        return self._mime_type

    def data(self, consumer):
        self.reads += 1
        with io.BytesIO(self.content) as f:
            return consumer(f)


class FakeRepository(Repository):
    """Repository whose items are set by the test."""

    def __init__(self, items=None):
        super().__init__()
        self.next_items = list(items or [])
        self._items = list(self.next_items)

    def _load_items(self):
        return list(self.next_items)


class CountingConverter(ImageConverter):
    """ImageConverter that records resize calls and can be told to fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = []
        self.failures = set()

    def resize(self, source, mime_type, max_width, max_height, target):
        self.calls.append((mime_type, max_width, max_height))
        if (max_width, max_height) in self.failures:
            raise OSError(f"simulated failure at {max_width}x{max_height}")
        return super().resize(source, mime_type, max_width, max_height, target)


def _image_bytes(size, fmt, mode='RGB', color='red'):
    from PIL import Image

    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_image_bytes():
    """Fixture providing a 1600x800 JPEG image."""
    return _image_bytes((1600, 800), 'JPEG')


@pytest.fixture
def small_image_bytes():
    """Fixture providing a 100x100 JPEG image."""
    return _image_bytes((100, 100), 'JPEG')


@pytest.fixture
def sample_png_bytes():
    """Fixture providing a 1000x1000 PNG image with transparency."""
    return _image_bytes((1000, 1000), 'PNG', mode='RGBA', color=(255, 0, 0, 128))


@pytest.fixture
def sample_gif_bytes():
    """Fixture providing a 500x250 GIF image."""
    return _image_bytes((500, 250), 'GIF', mode='P', color=3)


@pytest.fixture
def fake_file():
    """Fixture providing the FakeFile class."""
    return FakeFile


@pytest.fixture
def fake_repository():
    """Fixture providing the FakeRepository class."""
    return FakeRepository


@pytest.fixture
def counting_converter():
    """Fixture providing a CountingConverter."""
    return CountingConverter()


@pytest.fixture
def scenario_repository(sample_image_bytes):
    """One item with one JPEG file and one text file."""
    item = RepositoryItem('docs/article', [
        FakeFile('docs/article', 'files/photo.jpg', sample_image_bytes, 'image/jpeg', file_id='abc123'),
        FakeFile('docs/article', 'files/notes.txt', b'just text', 'text/plain', file_id='def456'),
    ])
    return FakeRepository([item])


@pytest.fixture
def thumbnail_folder(tmp_path):
    """Fixture providing an existing, empty thumbnail folder."""
    folder = tmp_path / 'thumbnails'
    folder.mkdir()
    return folder


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')
