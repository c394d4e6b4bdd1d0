"""
S3 Storage - boto3-backed access to the report bucket
"""
import logging
from dataclasses import dataclass
from typing import Iterator, List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig
from ..errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageObject:
    """A listed object in the bucket."""

    key: str
    size: int = 0

    @property
    def basename(self) -> str:
        return self.key.rsplit("/", 1)[-1]

    @property
    def is_folder(self) -> bool:
        return self.key.endswith("/")


class S3Storage:
    """
    Thin wrapper over a boto3 S3 client bound to one bucket.
    Provides listing, whole-object reads and chunked streaming.
    """

    def __init__(self, bucket: str, client=None):
        """
        Args:
            bucket: Bucket name
            client: boto3 S3 client
        """
        self.bucket = bucket
        self.client = client

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3Storage":
        """Create a storage bound to the configured bucket."""
        client = boto3.client(
            "s3",
            region_name=config.region,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
        )
        return cls(config.bucket, client)

    def list_objects(self, prefix: str) -> List[StorageObject]:
        """
        List every object under a prefix, following pagination.

        Args:
            prefix: Key prefix, e.g. ``reports/<runId>/``

        Returns:
            Objects in listing order
        """
        objects = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    objects.append(StorageObject(key=item["Key"], size=item.get("Size", 0)))
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to list s3://{self.bucket}/{prefix}: {e}", prefix) from e

        logger.debug(f"Listed {len(objects)} objects under {prefix}")
        return objects

    def list_prefixes(self, prefix: str, delimiter: str = "/") -> List[str]:
        """
        List first-level "directories" under a prefix.

        Returns:
            Full common prefixes, e.g. ``reports/allure-results-1/``
        """
        prefixes = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(
                Bucket=self.bucket, Prefix=prefix, Delimiter=delimiter
            ):
                for item in page.get("CommonPrefixes", []):
                    prefixes.append(item["Prefix"])
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to list s3://{self.bucket}/{prefix}: {e}", prefix) from e

        return prefixes

    def read_bytes(self, key: str) -> bytes:
        """Read a whole object into memory."""
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to read s3://{self.bucket}/{key}: {e}", key) from e

    def iter_chunks(self, key: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        """
        Stream an object chunk by chunk without buffering it whole.

        The underlying body is closed when the iterator is exhausted or closed.
        """
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to open s3://{self.bucket}/{key}: {e}", key) from e

        body = response["Body"]
        try:
            for chunk in body.iter_chunks(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to read s3://{self.bucket}/{key}: {e}", key) from e
        finally:
            body.close()

    def __repr__(self):
        return f"<{self.__class__.__name__}(bucket='{self.bucket}')>"

