"""Shared fixtures for bucketsync tests."""

import hashlib
from pathlib import Path

import pytest

from bucketsync.exceptions import StoreError
from bucketsync.utils import DELETE_BATCH_SIZE, ETAG_MULTIPART_THRESHOLD


class FakeObjectStore:
    """In-memory stand-in for ObjectStoreClient.

    Objects are kept per bucket as bytes; ETags are quoted MD5 digests like
    the ones S3 reports for single-part uploads. Setting ``part_size`` makes
    objects above the multipart threshold report multipart ETags instead.
    """

    def __init__(self):
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.uploads: list[str] = []
        self.delete_calls: list[list[str]] = []
        self.fail_upload = False
        self.part_size = None

    def etag(self, data: bytes) -> str:
        if self.part_size is None or len(data) <= ETAG_MULTIPART_THRESHOLD:
            return f'"{hashlib.md5(data).hexdigest()}"'
        digests = [
            hashlib.md5(data[i : i + self.part_size]).digest()
            for i in range(0, len(data), self.part_size)
        ]
        return f'"{hashlib.md5(b"".join(digests)).hexdigest()}-{len(digests)}"'

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.buckets.setdefault(bucket, {})[key] = data

    def list_objects(self, bucket, prefix=""):
        for key in sorted(self.buckets.get(bucket, {})):
            if key.startswith(prefix):
                data = self.buckets[bucket][key]
                yield {
                    "Key": key,
                    "Size": len(data),
                    "ETag": self.etag(data),
                }

    def head_object(self, bucket, key):
        try:
            data = self.buckets[bucket][key]
        except KeyError as e:
            raise StoreError(f"Not found: {key}") from e
        return len(data), self.etag(data)

    def upload_file(self, local_path, bucket, key):
        if self.fail_upload:
            raise StoreError(f"Upload to s3://{bucket}/{key} failed")
        self.uploads.append(key)
        self.put(bucket, key, Path(local_path).read_bytes())

    def download_file(self, bucket, key, local_path):
        path = Path(local_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.buckets[bucket][key])

    def copy_object(self, source_bucket, source_key, bucket, key):
        self.put(bucket, key, self.buckets[source_bucket][source_key])

    def delete_objects(self, bucket, keys):
        assert len(keys) <= DELETE_BATCH_SIZE
        self.delete_calls.append(list(keys))
        for key in keys:
            self.buckets.get(bucket, {}).pop(key, None)
        return 0


@pytest.fixture
def fake_store():
    """Provide an in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def source_tree(tmp_path):
    """Create a small website build directory."""
    root = tmp_path / "build"
    (root / "css").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"0123456789")
    (root / "index.html").write_text("<html></html>")
    (root / "css" / "site.css").write_text("body {}")
    return root
