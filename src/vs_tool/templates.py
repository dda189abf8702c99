"""Saved Virtual Server templates"""

from __future__ import annotations

from typing import Any

from vs_tool.cache import CacheStore
from vs_tool.descriptor import Descriptor
from vs_tool.errors import NameTaken, TemplateNotFound

TEMPLATES_KEY = "_templates"


class TemplateStore:
    """Named descriptors kept in the cache directory without a TTL.

    Every change is written through immediately.
    """

    def __init__(self, cache: CacheStore) -> None:
        self.cache: CacheStore = cache

    def _load(self) -> dict[str, dict[str, Any]]:
        return dict(self.cache.get(TEMPLATES_KEY) or {})

    def _write(self, templates: dict[str, dict[str, Any]]) -> None:
        self.cache.set(TEMPLATES_KEY, templates, ttl=None)

    def names(self) -> list[str]:
        return list(self._load())

    def __contains__(self, name: object) -> bool:
        return name in self._load()

    def save(self, name: str, descriptor: Descriptor) -> None:
        templates = self._load()
        if name in templates:
            raise NameTaken(name)
        templates[name] = descriptor.to_manifest()
        self._write(templates)

    def get(self, name: str) -> Descriptor:
        templates = self._load()
        if name not in templates:
            raise TemplateNotFound(name)
        return Descriptor.from_manifest(templates[name])

    def instantiate(
        self,
        template_name: str,
        name: str | None = None,
        namespace: str | None = None,
    ) -> Descriptor:
        """A fresh descriptor from the template, optionally renamed."""
        return self.get(template_name).with_identity(name=name, namespace=namespace)

    def delete(self, name: str) -> None:
        templates = self._load()
        if name not in templates:
            raise TemplateNotFound(name)
        del templates[name]
        self._write(templates)
