import pytest

from services.apphost.config import AppHostConfig

STORE_ENV = ["HTTP_PORT=8080", "HTTPS_PORT=8443", "SITE_DOMAIN="]


@pytest.fixture
def apphost_config(monkeypatch):
    for name in ("ESHOP_USE_HTTP_ENDPOINTS", "STORE_TAG_SUFFIX", "CERTIFICATE_DIR"):
        monkeypatch.delenv(name, raising=False)
    return AppHostConfig()


@pytest.fixture
def http_config(monkeypatch, apphost_config):
    monkeypatch.setenv("ESHOP_USE_HTTP_ENDPOINTS", "1")
    return AppHostConfig()


@pytest.fixture
def store_images(mock_docker_client, make_image):
    """Two store images plus one unrelated image in the local store."""
    images = [
        make_image("sha256:a", tags=["store-a:stores"], env=list(STORE_ENV)),
        make_image(
            "sha256:b",
            tags=["vendor/store-b:stores"],
            env=["HTTP_PORT=9080", "HTTPS_PORT=9443", "SITE_DOMAIN=b.example.com"],
        ),
        make_image("sha256:c", tags=["redis:7.4"], env=["REDIS_VERSION=7.4"]),
    ]
    mock_docker_client.images.list.return_value = images
    return images
