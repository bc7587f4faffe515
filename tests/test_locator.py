"""Tests for ResourceLocator."""

import pytest

from bucketsync.exceptions import InvalidLocatorError
from bucketsync.locator import ResourceLocator, parse_destination


class TestParse:
    """Tests for parsing address strings."""

    def test_plain_path_is_local(self):
        """Test that a path without scheme defaults to the file scheme."""
        loc = ResourceLocator.parse("/tmp/site/")
        assert loc.scheme == "file"
        assert loc.path == "/tmp/site/"
        assert loc.bucket == ""
        assert loc.is_local

    def test_file_uri(self):
        """Test that file:// URIs become plain paths."""
        loc = ResourceLocator.parse("file:///tmp/site")
        assert loc.is_local
        assert loc.path == "/tmp/site"

    def test_s3_uri(self):
        """Test splitting an s3 URI into bucket and path."""
        loc = ResourceLocator.parse("s3://my-bucket/site/index.html")
        assert loc.scheme == "s3"
        assert loc.bucket == "my-bucket"
        assert loc.path == "/site/index.html"
        assert loc.key == "site/index.html"
        assert loc.is_remote

    def test_s3_bucket_only(self):
        """Test a bucket without key has an empty path."""
        loc = ResourceLocator.parse("s3://my-bucket")
        assert loc.bucket == "my-bucket"
        assert loc.path == ""
        assert loc.key == ""

    def test_s3_without_bucket_rejected(self):
        """Test that an s3 locator always requires a bucket."""
        with pytest.raises(InvalidLocatorError, match="missing bucket"):
            ResourceLocator.parse("s3:///key")

    def test_unknown_scheme_rejected(self):
        """Test that unsupported schemes are rejected."""
        with pytest.raises(InvalidLocatorError, match="unsupported scheme"):
            ResourceLocator.parse("ftp://host/path")

    def test_direct_construction_validates_bucket(self):
        """Test the bucket invariant also holds for direct construction."""
        with pytest.raises(InvalidLocatorError):
            ResourceLocator(scheme="s3", path="/a")


class TestDestinationDefaults:
    """Tests for destination normalization."""

    def test_empty_path_defaults_to_root(self):
        """Test that a bare bucket destination gets the root path."""
        loc = parse_destination("s3://my-bucket")
        assert loc.path == "/"
        assert loc.key == ""

    def test_path_kept(self):
        """Test that an explicit path is kept."""
        loc = parse_destination("s3://my-bucket/www")
        assert loc.path == "/www"


class TestDerivation:
    """Tests for deriving new locators."""

    def test_with_path_keeps_bucket(self):
        """Test substituting the path keeps scheme and bucket."""
        loc = ResourceLocator.parse("s3://b/www")
        other = loc.with_path("www/a.txt")
        assert other.bucket == "b"
        assert other.path == "/www/a.txt"
        assert other.key == "www/a.txt"

    def test_with_path_local(self):
        """Test substituting a local path."""
        loc = ResourceLocator.parse("/src/")
        assert loc.with_path("/src/a.txt").path == "/src/a.txt"

    def test_join(self):
        """Test joining a relative suffix."""
        loc = ResourceLocator.parse("s3://b/www/")
        assert loc.join("css/site.css").key == "www/css/site.css"
        assert ResourceLocator.parse("/dst").join("a.txt").path == "/dst/a.txt"

    def test_join_empty_suffix(self):
        """Test that joining nothing returns the same locator."""
        loc = ResourceLocator.parse("/dst")
        assert loc.join("") == loc

    def test_locators_are_immutable_values(self):
        """Test equality and hashing of locators."""
        a = ResourceLocator.parse("s3://b/k")
        b = ResourceLocator.parse("s3://b/k")
        assert a == b
        assert len({a, b}) == 1


class TestStringForm:
    """Tests for the canonical string form."""

    @pytest.mark.parametrize(
        "address",
        ["s3://bucket/site/index.html", "/tmp/site/a.txt", "relative/dir"],
    )
    def test_round_trip(self, address):
        """Test that parsing and formatting give back the address."""
        assert str(ResourceLocator.parse(address)) == address

    def test_bucket_root(self):
        """Test the string form of a bucket root."""
        assert str(parse_destination("s3://bucket")) == "s3://bucket/"
