import pytest

from services.common.core.config import BaseAppConfig


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1", True),
        (" 1 ", True),
        ("0", False),
        ("2", False),
        ("", False),
        ("true", False),
        ("yes", False),
    ],
)
def test_use_http_endpoints(monkeypatch, value, expected):
    """Only a value that parses as the integer 1 switches to http."""
    monkeypatch.setenv("ESHOP_USE_HTTP_ENDPOINTS", value)

    assert BaseAppConfig().use_http_endpoints is expected


def test_defaults(monkeypatch):
    for name in ("DOCKER_TIMEOUT", "STORE_TAG_SUFFIX", "CERTIFICATE_DIR"):
        monkeypatch.delenv(name, raising=False)

    config = BaseAppConfig()

    assert config.DOCKER_TIMEOUT == 60
    assert config.STORE_TAG_SUFFIX == "stores"
    assert config.tag_marker == ":stores"
    assert config.CERTIFICATE_DIR == "certs"


def test_tag_marker_follows_suffix(monkeypatch):
    monkeypatch.setenv("STORE_TAG_SUFFIX", "shops")

    assert BaseAppConfig().tag_marker == ":shops"
