"""
Image inspection against the local Docker engine.

Owns the read-only engine calls (image list / inspect) and turns the
image's declared environment into a mapping.
"""

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

import docker
import docker.errors
import requests.exceptions

from ..core.exceptions import EngineCallError, ImageNotFoundError, MalformedMetadataError
from ..models.images import ImageMetadata

logger = logging.getLogger("common.image_inspector")

# Engine timestamps carry nanoseconds; datetime only keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{1,9})")

ENGINE_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)


class ImageSelectionPolicy(str, Enum):
    """Tie-break applied when several images match one tag."""

    MOST_RECENT = "most_recent"
    FIRST = "first"


def parse_declared_env(entries: Optional[Iterable[str]], image_id: str = "") -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` entries into a mapping.

    Values may contain ``=``; only the first one separates the key.

    Raises:
        MalformedMetadataError: an entry has no ``=`` or an empty key
    """
    env: Dict[str, str] = {}
    for entry in entries or []:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise MalformedMetadataError(image_id, entry)
        env[key] = value
    return env


def _created_at(image) -> datetime:
    raw = (image.attrs or {}).get("Created") or ""
    if not raw:
        return datetime.min.replace(tzinfo=timezone.utc)
    normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw)
    normalized = normalized.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        logger.warning(f"Unparseable creation time on image {image.id}: {raw}")
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ImageInspector:
    """
    Read-only access to local image metadata.

    - inspect(): one image by tag, narrowed with the selection policy
    - list_by_suffix(): every image carrying a tag with the given suffix
    """

    def __init__(
        self,
        client: docker.DockerClient,
        selection_policy: ImageSelectionPolicy = ImageSelectionPolicy.MOST_RECENT,
    ):
        self.client = client
        self.selection_policy = ImageSelectionPolicy(selection_policy)

    def inspect(self, tag: str) -> ImageMetadata:
        """
        Inspect the image matching ``tag``.

        Raises:
            ImageNotFoundError: nothing matches the tag
            MalformedMetadataError: the image declares an invalid env entry
            EngineCallError: the engine call failed
        """
        try:
            images = self.client.images.list(filters={"reference": tag})
        except ENGINE_ERRORS as e:
            raise EngineCallError("images.list", e) from e

        if not images:
            raise ImageNotFoundError(tag)

        image = self._select(images)
        if len(images) > 1:
            logger.info(
                f"{len(images)} images match {tag}; selected {image.id}",
                extra={"image_tag": tag, "selection_policy": self.selection_policy.value},
            )
        return self.to_metadata(image)

    def list_by_suffix(self, suffix: str) -> List[ImageMetadata]:
        """
        List images having a repo tag ending with ``:<suffix>`` (case-insensitive).

        Images with malformed metadata are skipped with a warning.

        Raises:
            EngineCallError: the engine call failed
        """
        try:
            images = self.client.images.list(all=True)
        except ENGINE_ERRORS as e:
            raise EngineCallError("images.list", e) from e

        marker = f":{suffix}".lower()
        results: List[ImageMetadata] = []
        for image in images:
            tags = image.tags or []
            if not any(tag.lower().endswith(marker) for tag in tags):
                continue
            try:
                results.append(self.to_metadata(image))
            except MalformedMetadataError as e:
                logger.warning(f"Skipping image {image.id}: {e}")
        return results

    def to_metadata(self, image) -> ImageMetadata:
        attrs = image.attrs or {}
        config = attrs.get("Config") or {}
        return ImageMetadata(
            image_id=image.id,
            declared_env=parse_declared_env(config.get("Env"), image_id=image.id),
            repo_tags=tuple(image.tags or []),
            created=attrs.get("Created") or "",
        )

    def _select(self, images: list):
        if self.selection_policy is ImageSelectionPolicy.FIRST:
            return images[0]
        return max(images, key=lambda image: (_created_at(image), image.id))
