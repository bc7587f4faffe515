"""Tests for the boto3-backed object store client."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from bucketsync.config import SyncConfig
from bucketsync.exceptions import StoreError
from bucketsync.store import ObjectStoreClient


def _client_error(code: str = "AccessDenied") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


@pytest.fixture
def boto_client():
    """Patch boto3.client and return the mock S3 client."""
    with patch("bucketsync.store.boto3.client") as factory:
        client = MagicMock()
        client.get_bucket_location.return_value = {"LocationConstraint": None}
        factory.return_value = client
        client.factory = factory
        yield client


class TestClientCreation:
    """Tests for lazy client initialization."""

    def test_static_credentials(self, boto_client):
        """Test that static keys are passed to boto3."""
        store = ObjectStoreClient(SyncConfig(access_key="AK", secret_key="SK"))
        store.client

        boto_client.factory.assert_called_once_with(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="AK",
            aws_secret_access_key="SK",
        )

    def test_partial_credentials_ignored(self, boto_client):
        """Test that a lone access key falls back to the default chain."""
        store = ObjectStoreClient(SyncConfig(access_key="AK"))
        store.client
        boto_client.factory.assert_called_once_with("s3", region_name="us-east-1")

    def test_bucket_region_lookup(self, boto_client):
        """Test that buckets outside the default region get their own client."""
        boto_client.get_bucket_location.return_value = {
            "LocationConstraint": "eu-west-1"
        }
        store = ObjectStoreClient(SyncConfig())

        store.client_for("b")
        store.client_for("b")

        boto_client.get_bucket_location.assert_called_once_with(Bucket="b")
        assert boto_client.factory.call_args_list[-1].kwargs["region_name"] == (
            "eu-west-1"
        )

    def test_custom_endpoint_skips_lookup(self, boto_client):
        """Test that S3-compatible endpoints use one client."""
        store = ObjectStoreClient(SyncConfig(endpoint_url="http://localhost:9000"))

        assert store.client_for("b") is store.client
        boto_client.get_bucket_location.assert_not_called()

    def test_lookup_failure(self, boto_client):
        """Test that an unreachable bucket raises StoreError."""
        boto_client.get_bucket_location.side_effect = _client_error("NoSuchBucket")
        with pytest.raises(StoreError, match="Unable to locate bucket"):
            ObjectStoreClient(SyncConfig()).client_for("missing")


class TestOperations:
    """Tests for the store operations."""

    def test_list_follows_pages(self, boto_client):
        """Test that listing yields objects from every page."""
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "a"}, {"Key": "b"}]},
            {"Contents": [{"Key": "c"}]},
            {},
        ]
        boto_client.get_paginator.return_value = paginator

        client = ObjectStoreClient(SyncConfig())
        keys = [o["Key"] for o in client.list_objects("b", "p")]

        assert keys == ["a", "b", "c"]
        boto_client.get_paginator.assert_called_once_with("list_objects_v2")
        assert paginator.paginate.call_args.kwargs["Prefix"] == "p"

    def test_list_failure(self, boto_client):
        """Test that listing errors raise StoreError."""
        paginator = MagicMock()
        paginator.paginate.side_effect = _client_error()
        boto_client.get_paginator.return_value = paginator

        with pytest.raises(StoreError, match="Unable to list"):
            list(ObjectStoreClient(SyncConfig()).list_objects("b"))

    def test_head_object(self, boto_client):
        """Test reading size and ETag."""
        boto_client.head_object.return_value = {"ContentLength": 5, "ETag": '"x"'}
        assert ObjectStoreClient(SyncConfig()).head_object("b", "k") == (5, '"x"')

    def test_upload_uses_storage_class(self, boto_client):
        """Test that uploads carry the configured storage class."""
        store = ObjectStoreClient(SyncConfig(storage_class="STANDARD_IA"))
        store.upload_file("/tmp/a.txt", "b", "www/a.txt")

        args, kwargs = boto_client.upload_file.call_args
        assert args == ("/tmp/a.txt", "b", "www/a.txt")
        assert kwargs["ExtraArgs"] == {"StorageClass": "STANDARD_IA"}
        assert kwargs["Config"].multipart_chunksize == 5 * 1024 * 1024

    def test_upload_part_size_hint(self, boto_client):
        """Test that the part size hint changes the chunk size."""
        store = ObjectStoreClient(SyncConfig(part_size=8))
        store.upload_file("/tmp/a.txt", "b", "a.txt")

        config = boto_client.upload_file.call_args.kwargs["Config"]
        assert config.multipart_chunksize == 8 * 1024 * 1024

    def test_upload_failure(self, boto_client):
        """Test that upload errors raise StoreError."""
        boto_client.upload_file.side_effect = _client_error()
        with pytest.raises(StoreError, match="Upload to s3://b/k failed"):
            ObjectStoreClient(SyncConfig()).upload_file("/tmp/a", "b", "k")

    def test_delete_objects(self, boto_client):
        """Test bulk delete request and per-key error reporting."""
        boto_client.delete_objects.return_value = {
            "Errors": [{"Key": "b", "Code": "AccessDenied", "Message": "denied"}]
        }

        failed = ObjectStoreClient(SyncConfig()).delete_objects("bucket", ["a", "b"])

        assert failed == 1
        boto_client.delete_objects.assert_called_once_with(
            Bucket="bucket",
            Delete={"Objects": [{"Key": "a"}, {"Key": "b"}], "Quiet": True},
        )

    def test_delete_batch_limit(self, boto_client):
        """Test that more than 500 keys are refused."""
        with pytest.raises(ValueError, match="At most 500"):
            ObjectStoreClient(SyncConfig()).delete_objects(
                "b", [str(i) for i in range(501)]
            )

    def test_delete_nothing(self, boto_client):
        """Test that an empty batch makes no request."""
        assert ObjectStoreClient(SyncConfig()).delete_objects("b", []) == 0
        boto_client.delete_objects.assert_not_called()
