"""
Tests for ImageInspector and declared environment parsing.
"""

import docker.errors
import pytest

from services.common.core.exceptions import (
    EngineCallError,
    ImageNotFoundError,
    MalformedMetadataError,
)
from services.common.images.inspector import (
    ImageInspector,
    ImageSelectionPolicy,
    parse_declared_env,
)


class TestParseDeclaredEnv:
    def test_parses_every_entry(self):
        env = parse_declared_env(["HTTP_PORT=8080", "HTTPS_PORT=8443", "SITE_DOMAIN="])

        assert env == {"HTTP_PORT": "8080", "HTTPS_PORT": "8443", "SITE_DOMAIN": ""}

    def test_value_may_contain_equals(self):
        env = parse_declared_env(["ConnectionStrings__Db=Host=db;Password=a=b"])

        assert env == {"ConnectionStrings__Db": "Host=db;Password=a=b"}

    def test_missing_env_is_empty(self):
        assert parse_declared_env(None) == {}
        assert parse_declared_env([]) == {}

    def test_entry_without_separator_is_rejected(self):
        with pytest.raises(MalformedMetadataError) as exc_info:
            parse_declared_env(["PATH=/usr/bin", "BROKEN"], image_id="sha256:abc")

        assert exc_info.value.entry == "BROKEN"
        assert exc_info.value.image_id == "sha256:abc"

    def test_entry_with_empty_key_is_rejected(self):
        with pytest.raises(MalformedMetadataError):
            parse_declared_env(["=value"])


class TestInspect:
    def test_inspect_filters_by_full_tag(self, mock_docker_client, make_image):
        """The reference filter receives the tag including the store marker."""
        mock_docker_client.images.list.return_value = [
            make_image(
                "sha256:a",
                tags=["store-a:stores"],
                env=["HTTP_PORT=8080", "HTTPS_PORT=8443", "SITE_DOMAIN="],
            )
        ]
        inspector = ImageInspector(mock_docker_client)

        metadata = inspector.inspect("store-a:stores")

        mock_docker_client.images.list.assert_called_once_with(
            filters={"reference": "store-a:stores"}
        )
        assert metadata.image_id == "sha256:a"
        assert metadata.repo_tags == ("store-a:stores",)
        assert metadata.declared_env == {
            "HTTP_PORT": "8080",
            "HTTPS_PORT": "8443",
            "SITE_DOMAIN": "",
        }

    def test_inspect_not_found(self, mock_docker_client):
        inspector = ImageInspector(mock_docker_client)

        with pytest.raises(ImageNotFoundError) as exc_info:
            inspector.inspect("missing:stores")

        assert exc_info.value.tag == "missing:stores"

    def test_most_recent_image_wins(self, mock_docker_client, make_image):
        """The newest creation time wins regardless of engine order."""
        first = make_image("sha256:first", created="2024-05-01T10:00:00.9Z")
        second = make_image("sha256:second", created="2024-05-01T10:00:00.123456789Z")
        newest = make_image("sha256:newest", created="2024-05-02T08:00:00Z")
        mock_docker_client.images.list.return_value = [first, newest, second]

        inspector = ImageInspector(mock_docker_client, ImageSelectionPolicy.MOST_RECENT)

        assert inspector.inspect("app:stores").image_id == "sha256:newest"

    def test_most_recent_compares_fractions_numerically(self, mock_docker_client, make_image):
        """Nanosecond timestamps are compared as times, not as strings."""
        first = make_image("sha256:one", created="2024-05-01T10:00:00.9Z")
        second = make_image("sha256:two", created="2024-05-01T10:00:00.950000001Z")
        mock_docker_client.images.list.return_value = [second, first]

        inspector = ImageInspector(mock_docker_client)

        assert inspector.inspect("app:stores").image_id == "sha256:two"

    def test_first_policy_keeps_engine_order(self, mock_docker_client, make_image):
        mock_docker_client.images.list.return_value = [
            make_image("sha256:old", created="2020-01-01T00:00:00Z"),
            make_image("sha256:new", created="2024-01-01T00:00:00Z"),
        ]
        inspector = ImageInspector(mock_docker_client, ImageSelectionPolicy.FIRST)

        assert inspector.inspect("app:stores").image_id == "sha256:old"

    def test_engine_failure_is_wrapped(self, mock_docker_client):
        mock_docker_client.images.list.side_effect = docker.errors.APIError("engine down")
        inspector = ImageInspector(mock_docker_client)

        with pytest.raises(EngineCallError) as exc_info:
            inspector.inspect("app:stores")

        assert exc_info.value.operation == "images.list"

    def test_malformed_env_fails_inspection(self, mock_docker_client, make_image):
        mock_docker_client.images.list.return_value = [
            make_image("sha256:bad", env=["HTTP_PORT=8080", "GARBAGE"])
        ]
        inspector = ImageInspector(mock_docker_client)

        with pytest.raises(MalformedMetadataError):
            inspector.inspect("bad:stores")


class TestListBySuffix:
    def test_suffix_match_is_case_insensitive(self, mock_docker_client, make_image):
        mock_docker_client.images.list.return_value = [
            make_image("sha256:a", tags=["store-a:stores"]),
            make_image("sha256:b", tags=["store-b:latest", "store-b:STORES"]),
            make_image("sha256:c", tags=["other:latest"]),
            make_image("sha256:d", tags=["mystores:latest"]),
            make_image("sha256:e", tags=[]),
        ]
        inspector = ImageInspector(mock_docker_client)

        images = inspector.list_by_suffix("stores")

        mock_docker_client.images.list.assert_called_once_with(all=True)
        assert [image.image_id for image in images] == ["sha256:a", "sha256:b"]

    def test_malformed_image_is_skipped(self, mock_docker_client, make_image):
        mock_docker_client.images.list.return_value = [
            make_image("sha256:bad", tags=["bad:stores"], env=["NOPE"]),
            make_image("sha256:good", tags=["good:stores"], env=["HTTP_PORT=1"]),
        ]
        inspector = ImageInspector(mock_docker_client)

        images = inspector.list_by_suffix("stores")

        assert [image.image_id for image in images] == ["sha256:good"]

    def test_engine_failure_is_wrapped(self, mock_docker_client):
        mock_docker_client.images.list.side_effect = docker.errors.DockerException("no socket")
        inspector = ImageInspector(mock_docker_client)

        with pytest.raises(EngineCallError):
            inspector.list_by_suffix("stores")
