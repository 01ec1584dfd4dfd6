"""Image list normalization."""

from typing import Any

from property_editor.logging import get_logger
from property_editor.normalize.shapes import (
    KeyedSlots,
    StringArray,
    UrlObjectArray,
    UrlsWrapper,
    detect_image_shape,
)

logger = get_logger(__name__)

# Slot read first when images come keyed by slot
PRIMARY_SLOT = "main"


def _url_of(item: Any) -> list[str]:
    if isinstance(item, str):
        return [item]
    if isinstance(item, dict):
        return [item.get("url") or item.get("src") or ""]
    if isinstance(item, (list, tuple)):
        return [url for entry in item for url in _url_of(entry)]
    return []


def normalize_images(raw: Any) -> list[str]:
    """Reduce any stored image shape to an ordered list of unique URLs."""
    shape = detect_image_shape(raw)
    if shape is None:
        if raw not in (None, "", [], {}):
            logger.warning("Ignoring unrecognized images value of type %s", type(raw).__name__)
        return []

    if isinstance(shape, StringArray):
        urls = list(shape.urls)
    elif isinstance(shape, UrlObjectArray):
        urls = [url for item in shape.items for url in _url_of(item)]
    elif isinstance(shape, UrlsWrapper):
        urls = [url for item in shape.urls for url in _url_of(item)]
    elif isinstance(shape, KeyedSlots):
        ordered = sorted(shape.slots.items(), key=lambda kv: kv[0] != PRIMARY_SLOT)
        urls = [url for _, value in ordered for url in _url_of(value)]
    else:
        raise TypeError(f"Unhandled image shape: {shape!r}")

    seen: set[str] = set()
    result = []
    for url in urls:
        url = url.strip()
        if url and url not in seen:
            seen.add(url)
            result.append(url)
    return result


def images_payload(urls: list[str]) -> dict[str, list[str]]:
    """Backend shape: always an object, empty when there are no images."""
    return {"urls": list(urls)} if urls else {}
