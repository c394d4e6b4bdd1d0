"""Shared fixtures: in-memory storage and test settings."""

import json
from typing import Dict, Iterator, List, Optional, Set

import pytest

from allure_dashboard.config import Settings
from allure_dashboard.errors import StorageError
from allure_dashboard.storage.s3_storage import StorageObject


class FakeStorage:
    """In-memory stand-in for S3Storage, keys kept in insertion order."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.failing_reads: Set[str] = set()
        self.failing_mid_stream: Set[str] = set()
        self.failing_lists: Set[str] = set()
        self.read_calls: List[str] = []

    def put(self, key: str, data) -> None:
        if not isinstance(data, bytes):
            data = json.dumps(data).encode("utf-8")
        self.objects[key] = data

    def list_objects(self, prefix: str) -> List[StorageObject]:
        if any(prefix.startswith(p) for p in self.failing_lists):
            raise StorageError(f"Failed to list {prefix}: AccessDenied", prefix)
        return [
            StorageObject(key=key, size=len(data))
            for key, data in self.objects.items()
            if key.startswith(prefix)
        ]

    def list_prefixes(self, prefix: str, delimiter: str = "/") -> List[str]:
        if prefix in self.failing_lists:
            raise StorageError(f"Failed to list {prefix}: AccessDenied", prefix)
        base = prefix.rsplit(delimiter, 1)[0] + delimiter if delimiter in prefix else ""
        prefixes = []
        for key in self.objects:
            if not key.startswith(prefix):
                continue
            rest = key[len(base):]
            if delimiter in rest:
                common = base + rest.split(delimiter, 1)[0] + delimiter
                if common not in prefixes:
                    prefixes.append(common)
        return prefixes

    def read_bytes(self, key: str) -> bytes:
        self.read_calls.append(key)
        if key in self.failing_reads or key not in self.objects:
            raise StorageError(f"Failed to read {key}: NoSuchKey", key)
        return self.objects[key]

    def iter_chunks(self, key: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        if key in self.failing_reads or key not in self.objects:
            raise StorageError(f"Failed to open {key}: NoSuchKey", key)
        data = self.objects[key]
        for offset in range(0, len(data), chunk_size):
            if key in self.failing_mid_stream and offset > 0:
                raise StorageError(f"Connection reset while reading {key}", key)
            yield data[offset:offset + chunk_size]


def result_file(name: str, status: str, start: Optional[int] = 1000, stop: Optional[int] = 2000, **extra):
    data = {"name": name, "status": status, **extra}
    if start is not None:
        data["start"] = start
    if stop is not None:
        data["stop"] = stop
    return data


def add_run(storage: FakeStorage, run_id: str, statuses: List[str], start: int = 1000) -> None:
    """Store one result file per status under reports/<run_id>/."""
    for index, status in enumerate(statuses):
        storage.put(
            f"reports/{run_id}/{run_id}-{index}-result.json",
            result_file(f"test_{index}", status, start=start + index, stop=start + index + 100),
        )


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        AWS_ACCESS_KEY="test-access",
        AWS_SECRET_KEY="test-secret",
        S3_BUCKET="test-bucket",
        JWT_SECRET_KEY="test-jwt-secret",
        AUTH_EMAIL="test@example.com",
        CATALOG_CONCURRENCY=4,
        READER_CONCURRENCY=4,
        ARCHIVE_CHUNK_SIZE=8,
    )
