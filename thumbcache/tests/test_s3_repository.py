"""Tests for S3Config and S3Repository."""

from unittest.mock import MagicMock, patch

import pytest

from thumbcache.errors import MediaTypeDetectionFailed
from thumbcache.repository import file_id_for_route
from thumbcache.s3_repository import S3Config, S3Repository


class TestS3Config:
    """Tests for S3Config."""

    def test_from_env(self, monkeypatch):
        """Test reading configuration from the environment."""
        monkeypatch.setenv('S3_ENDPOINT', 'https://minio.example.com:9000')
        monkeypatch.setenv('S3_BUCKET', 'content')
        monkeypatch.setenv('S3_PREFIX', 'repo')
        monkeypatch.setenv('S3_ACCESS_KEY', 'key')
        monkeypatch.setenv('S3_SECRET_KEY', 'secret')
        monkeypatch.setenv('S3_VERIFY_SSL', 'false')

        config = S3Config.from_env()

        assert config.endpoint == 'https://minio.example.com:9000'
        assert config.bucket == 'content'
        assert config.prefix == 'repo'
        assert config.verify_ssl is False
        assert config.validate() == []

    def test_validate_missing(self, monkeypatch):
        """Test missing settings are reported."""
        for name in ('S3_ENDPOINT', 'S3_BUCKET', 'S3_ACCESS_KEY', 'S3_SECRET_KEY'):
            monkeypatch.delenv(name, raising=False)

        errors = S3Config.from_env().validate()

        assert len(errors) == 4


class TestS3Repository:
    """Tests for S3Repository."""

    @pytest.fixture
    def config(self):
        """Fixture providing S3 config."""
        return S3Config(
            endpoint='https://test-endpoint.example.com:9000',
            bucket='test-bucket',
            prefix='repo',
            access_key='test-access-key',
            secret_key='test-secret-key',
            region='us-east-1',
        )

    @pytest.fixture
    def repository_with_mock(self, config):
        """Fixture providing S3Repository with mocked boto3."""
        mock_boto = MagicMock()
        with patch('thumbcache.s3_repository.boto3.client', return_value=mock_boto):
            repository = S3Repository(config)
            repository._test_mock = mock_boto
            yield repository

    def _paginate(self, repository, pages_by_call):
        paginator = MagicMock()
        paginator.paginate.side_effect = pages_by_call
        repository._test_mock.get_paginator.return_value = paginator
        return paginator

    def test_no_items_before_reindex(self, repository_with_mock):
        """Test the listing is empty until the first reindex."""
        assert repository_with_mock.items() == []

    def test_list_item_routes(self, repository_with_mock):
        """Test item routes come from common prefixes."""
        self._paginate(repository_with_mock, [[
            {'CommonPrefixes': [{'Prefix': 'repo/article/'}, {'Prefix': 'repo/gallery/'}]},
        ]])

        assert repository_with_mock.list_item_routes() == ['article', 'gallery']

    def test_reindex_builds_items(self, repository_with_mock):
        """Test reindex lists items and their files."""
        paginator = self._paginate(repository_with_mock, [
            [{'CommonPrefixes': [{'Prefix': 'repo/article/'}]}],
            [{'Contents': [
                {'Key': 'repo/article/files/photo.jpg'},
                {'Key': 'repo/article/files/'},
                {'Key': 'repo/article/index.md'},
            ]}],
        ])

        repository_with_mock.reindex()
        items = repository_with_mock.items()

        assert [item.route for item in items] == ['article']
        files = items[0].files()
        assert [f.route for f in files] == ['files/photo.jpg', 'index.md']
        assert files[0].parent == 'article'
        assert files[0].id == file_id_for_route('article/files/photo.jpg')
        assert files[0].mime_type() == 'image/jpeg'
        paginator.paginate.assert_any_call(Bucket='test-bucket', Prefix='repo/article/')

    def test_file_data(self, repository_with_mock):
        """Test file content is downloaded into a seekable stream."""
        self._paginate(repository_with_mock, [
            [{'CommonPrefixes': [{'Prefix': 'repo/article/'}]}],
            [{'Contents': [{'Key': 'repo/article/photo.jpg'}]}],
        ])
        body = MagicMock()
        body.read.return_value = b'image bytes'
        repository_with_mock._test_mock.get_object.return_value = {'Body': body}

        repository_with_mock.reindex()
        photo = repository_with_mock.items()[0].files()[0]

        def consumer(stream):
            stream.seek(6)
            return stream.read()

        assert photo.data(consumer) == b'bytes'
        repository_with_mock._test_mock.get_object.assert_called_once_with(
            Bucket='test-bucket', Key='repo/article/photo.jpg'
        )

    def test_unknown_mime_type(self, repository_with_mock):
        """Test objects without a known extension fail classification."""
        self._paginate(repository_with_mock, [
            [{'CommonPrefixes': [{'Prefix': 'repo/article/'}]}],
            [{'Contents': [{'Key': 'repo/article/LICENSE'}]}],
        ])

        repository_with_mock.reindex()

        with pytest.raises(MediaTypeDetectionFailed):
            repository_with_mock.items()[0].files()[0].mime_type()
