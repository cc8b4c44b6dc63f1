"""
S3Repository - Repository backed by an S3/MinIO bucket.
"""

import io
import logging
import os
from dataclasses import dataclass
from mimetypes import guess_type
from typing import BinaryIO, Callable, Generator, List, Optional, TypeVar

import boto3
from botocore.config import Config

from .errors import MediaTypeDetectionFailed
from .repository import Repository, RepositoryFile, RepositoryItem, file_id_for_route
from .route import combine_routes, normalize_route

T = TypeVar('T')


@dataclass
class S3Config:
    """
    Connection settings for an S3-compatible store.

    Attributes:
        endpoint: Endpoint URL (e.g. 'https://minio.example.com:9000')
        bucket: Bucket holding the repository
        prefix: Key prefix of the repository inside the bucket
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
    """
    endpoint: Optional[str] = None
    bucket: Optional[str] = None
    prefix: str = ''
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Read configuration from S3_* environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT'),
            bucket=os.getenv('S3_BUCKET'),
            prefix=os.getenv('S3_PREFIX', ''),
            access_key=os.getenv('S3_ACCESS_KEY'),
            secret_key=os.getenv('S3_SECRET_KEY'),
            region=os.getenv('S3_REGION'),
            verify_ssl=os.getenv('S3_VERIFY_SSL', 'true').lower() not in ('0', 'false', 'no'),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors, empty if valid."""
        errors = []
        if not self.endpoint:
            errors.append("S3 endpoint is not set (S3_ENDPOINT)")
        if not self.bucket:
            errors.append("S3 bucket is not set (S3_BUCKET)")
        if not self.access_key:
            errors.append("S3 access key is not set (S3_ACCESS_KEY)")
        if not self.secret_key:
            errors.append("S3 secret key is not set (S3_SECRET_KEY)")
        return errors


class S3File(RepositoryFile):
    """An object in an S3 bucket."""

    def __init__(self, repository: 'S3Repository', key: str, parent: str, route: str):
        super().__init__(file_id_for_route(combine_routes(parent, route)), parent, route)
        self.repository = repository
        self.key = key

    def mime_type(self) -> str:
        mime_type, _ = guess_type(self.key)
        if not mime_type:
            raise MediaTypeDetectionFailed(f"Unable to detect mime type for {self.key}")
        return mime_type

    def data(self, consumer: Callable[[BinaryIO], T]) -> T:
        with io.BytesIO(self.repository.download_object(self.key)) as content:
            return consumer(content)


class S3Repository(Repository):
    """
    Repository stored in an S3 bucket.

    Every common prefix directly below the configured prefix is an item and
    every object below it is one of its files.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 repository. The listing is built on the first reindex().

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        super().__init__(logger)
        self.config = config

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    @property
    def _root_prefix(self) -> str:
        prefix = normalize_route(self.config.prefix)
        return f"{prefix}/" if prefix else ''

    def list_item_routes(self) -> List[str]:
        """List the item routes directly below the repository prefix."""
        routes = []
        paginator = self._client.get_paginator('list_objects_v2')
        page_iterator = paginator.paginate(
            Bucket=self.config.bucket,
            Prefix=self._root_prefix,
            Delimiter='/'
        )

        for page in page_iterator:
            for common_prefix in page.get('CommonPrefixes', []):
                route = common_prefix['Prefix'][len(self._root_prefix):].rstrip('/')
                if route:
                    routes.append(route)

        return routes

    def list_objects(self, item_route: str) -> Generator[str, None, None]:
        """Yield the keys of all objects below an item."""
        paginator = self._client.get_paginator('list_objects_v2')
        page_iterator = paginator.paginate(
            Bucket=self.config.bucket,
            Prefix=f"{self._root_prefix}{item_route}/",
        )

        for page in page_iterator:
            for obj in page.get('Contents', []):
                key = obj['Key']
                if not key.endswith('/'):
                    yield key

    def download_object(self, key: str) -> bytes:
        """Download an object from S3."""
        response = self._client.get_object(Bucket=self.config.bucket, Key=key)
        return response['Body'].read()

    def _load_items(self) -> List[RepositoryItem]:
        items = []
        for item_route in self.list_item_routes():
            item_prefix = f"{self._root_prefix}{item_route}/"
            files = [
                S3File(self, key, item_route, key[len(item_prefix):])
                for key in self.list_objects(item_route)
            ]
            items.append(RepositoryItem(item_route, files))
        return items
