"""Cached remote lookups: images, instance definitions and billing rates."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import httpx

from vs_tool.cache import CacheStore
from vs_tool.client import ResourceClient
from vs_tool.console import print_warning
from vs_tool.pricing import Catalog

logger = logging.getLogger("vs_tool.lookups")

IMAGES_KEY = "images"
DEFINITIONS_KEY = "definitions"
CATALOG_KEY = "options"

# The last "-<digits>-" segment of an image name is its build date
_DATE_SEGMENT = re.compile(r"-\d*-(?!.*-\d*-)")


def latest_images(images: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep only the newest dated build of each image family.

    ``ubuntu2004-docker-master-20210601-ord1`` and
    ``ubuntu2004-docker-master-20210722-ord1`` belong to the same family;
    the second one wins.
    """
    latest: dict[str, tuple[dict[str, Any], str]] = {}
    for image in images:
        name = image["metadata"]["name"]
        base = _DATE_SEGMENT.sub("-DATE-", name, count=1)
        match = _DATE_SEGMENT.search(name)
        date = match.group(0) if match else ""
        if base not in latest or date > latest[base][1]:
            latest[base] = (image, date)
    return [image for image, _ in latest.values()]


def load_images(client: ResourceClient, cache: CacheStore, namespace: str) -> list[dict[str, Any]]:
    """Images available as root filesystem sources; empty if they cannot be listed."""

    def fetch() -> list[dict[str, Any]] | None:
        try:
            return latest_images(client.list("images", namespace=namespace))
        except Exception as e:
            print_warning(f"Could not list images: {e.__class__.__name__}: {e}")
            return None

    return cache.cached_lookup(IMAGES_KEY, fetch) or []


def load_definitions(
    client: ResourceClient, cache: CacheStore, namespace: str
) -> list[dict[str, Any]] | None:
    """Instance-type definitions, or None if they cannot be listed."""

    def fetch() -> list[dict[str, Any]] | None:
        try:
            return client.list("definitions", namespace=namespace)
        except Exception as e:
            logger.debug("definitions unavailable: %s: %s", e.__class__.__name__, e)
            return None

    return cache.cached_lookup(DEFINITIONS_KEY, fetch) or None


def fetch_catalog_metadata(url: str, timeout: float = 30) -> list[dict[str, Any]]:
    """GET the instance metadata records from the pricing endpoint."""
    logger.info("Fetching instance metadata from %s", url)
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    data: list[dict[str, Any]] = response.json()
    return data


def load_catalog(cache: CacheStore, url: str) -> Catalog:
    """Billing catalog; empty (no estimates) if the endpoint is unreachable."""

    def fetch() -> list[dict[str, Any]] | None:
        try:
            return fetch_catalog_metadata(url)
        except (httpx.HTTPError, ValueError) as e:
            print_warning(f"Pricing metadata unavailable: {e.__class__.__name__}: {e}")
            return None

    records = cache.cached_lookup(CATALOG_KEY, fetch) or []
    try:
        return Catalog.from_metadata(records)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("discarding malformed pricing metadata: %s", e)
        cache.delete(CATALOG_KEY)
        return Catalog()
