from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest

from vs_tool.cache import CacheStore
from vs_tool.config import Settings
from vs_tool.descriptor import Descriptor, build
from vs_tool.errors import FlowCancelled
from vs_tool.flow import FlowEngine, RenderedQuestion
from vs_tool.templates import TemplateStore

CANCEL = object()


class ScriptedPrompter:
    """Replays canned answers; CANCEL raises FlowCancelled."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.asked: list[RenderedQuestion] = []
        self.errors: list[str] = []

    def ask(self, question: RenderedQuestion) -> Any:
        self.asked.append(question)
        if not self.responses:
            raise AssertionError(f"no scripted answer for {question.key!r}")
        response = self.responses.pop(0)
        if response is CANCEL:
            raise FlowCancelled(question.key)
        return response

    def error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def keys(self) -> list[str]:
        return [q.key for q in self.asked]


class FakeClient:
    def __init__(
        self,
        images: list[dict[str, Any]] | None = None,
        definitions: list[dict[str, Any]] | None = None,
        services: list[dict[str, Any]] | None = None,
        statuses: list[Any] | None = None,
        default_namespace: str = "tenant-test",
    ) -> None:
        self.objects = {
            "images": images or [],
            "definitions": definitions,
            "services": services or [],
            "pvcs": [],
        }
        self.statuses = list(statuses or [201])
        self.created: list[dict[str, Any]] = []
        self.listed: list[tuple[str, str | None]] = []
        self._default_namespace = default_namespace

    @property
    def default_namespace(self) -> str:
        return self._default_namespace

    def list(self, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        self.listed.append((kind, namespace))
        items = self.objects[kind]
        if items is None:
            raise RuntimeError(f"{kind} not available")
        return items

    def create(self, manifest: dict[str, Any]) -> int:
        self.created.append(manifest)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, Exception):
            raise status
        return status


def make_image(name: str, namespace: str = "vd-images", size: str = "40Gi") -> dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {
            "resources": {"requests": {"storage": size}},
            "storageClassName": "block-nvme-ord1",
        },
    }


def make_service(name: str) -> dict[str, Any]:
    return {"metadata": {"name": name, "namespace": "tenant-test"}, "spec": {"type": "LoadBalancer"}}


CATALOG_RECORDS = [
    {"id": "cpu-a", "type": "cpu", "billingRate": 0.01, "memory": {"billingRate": 0.005}},
    {"id": "A100", "type": "gpu", "billingRate": 2.0, "memory": {"billingRate": 0.005}},
]


@pytest.fixture
def cache(tmp_path: Path) -> CacheStore:
    return CacheStore(tmp_path / "cache", default_ttl=timedelta(minutes=10))


@pytest.fixture
def template_store(cache: CacheStore) -> TemplateStore:
    return TemplateStore(cache)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=tmp_path / "cache", metadata_url="http://metadata.invalid/instances")


def engine_for(responses: list[Any]) -> tuple[FlowEngine, ScriptedPrompter]:
    prompter = ScriptedPrompter(responses)
    return FlowEngine(prompter), prompter


def make_descriptor(name: str = "vs-1", memory: str = "2Gi") -> Descriptor:
    return build(
        {
            "name": name,
            "namespace": "tenant-test",
            "region": "ORD1",
            "image": make_image("ubuntu2004-docker-master-20210722-ord1"),
            "os": "linux",
            "gpu_enabled": False,
            "cpu": "cpu-a",
            "cpu_count": 2,
            "memory": memory,
            "users": [{"username": "alice", "password": "pw"}],
            "direct_attach": False,
            "tcp_ports": (22,),
            "udp_ports": (),
        }
    )
